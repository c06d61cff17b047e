"""
Validation: transfer preconditions, edge integrity, cycle detection.
Failures are reported as message lists, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from flowbranch.branching.transfer import StepAnalysisResult
from flowbranch.graph.document import index_nodes
from flowbranch.graph.edges import WorkflowEdge
from flowbranch.graph.nodes import BranchNode, EndNode, WorkflowNode

SOURCE_NOT_FOUND = "Source node not found"
TARGET_NOT_FOUND = "Target node not found"
NO_DIRECT_CONNECTION = "No direct connection between source and target nodes"
CIRCULAR_DEPENDENCY = "Branch transfer would create circular dependency"
NOTHING_TO_TRANSFER = "No steps found to transfer to branch"


@dataclass(frozen=True)
class TransferValidation:
    """Outcome of validate_transfer; is_valid iff errors is empty."""

    is_valid: bool
    errors: tuple[str, ...]


@dataclass(frozen=True)
class EdgeValidation:
    """Outcome of validate_edge_connections."""

    valid: bool
    errors: tuple[str, ...]
    warnings: tuple[str, ...]


def validate_transfer(
    source_node_id: str,
    target_node_id: str,
    analysis: StepAnalysisResult,
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
) -> TransferValidation:
    """Check every transfer precondition and collect one message per failure."""
    errors: list[str] = []
    node_ids = {n.id for n in nodes}

    if source_node_id not in node_ids:
        errors.append(SOURCE_NOT_FOUND)
    if target_node_id not in node_ids:
        errors.append(TARGET_NOT_FOUND)

    if not any(e.source == source_node_id and e.target == target_node_id for e in edges):
        errors.append(NO_DIRECT_CONNECTION)

    if any(step.id == source_node_id for step in analysis.following_steps):
        errors.append(CIRCULAR_DEPENDENCY)

    if not analysis.following_steps:
        errors.append(NOTHING_TO_TRANSFER)

    return TransferValidation(is_valid=not errors, errors=tuple(errors))


def validate_edge_connections(
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
) -> EdgeValidation:
    """
    Structural checks over every edge: dangling endpoints, end nodes used as
    sources, self loops, and branch handles that name no arm of their source.
    An end node reached from more than one edge is a warning.
    """
    errors: list[str] = []
    warnings: list[str] = []
    by_id = index_nodes(nodes)

    incoming_count: dict[str, int] = {}
    for e in edges:
        incoming_count[e.target] = incoming_count.get(e.target, 0) + 1

    warned_ends: set[str] = set()
    for e in edges:
        source = by_id.get(e.source)
        target = by_id.get(e.target)
        if source is None:
            errors.append(f"Edge {e.id} references non-existent source node: {e.source}")
            continue
        if target is None:
            errors.append(f"Edge {e.id} references non-existent target node: {e.target}")
            continue

        if isinstance(source, EndNode):
            errors.append(f"End node {source.id} cannot be a source node")

        if (
            isinstance(target, EndNode)
            and incoming_count[target.id] > 1
            and target.id not in warned_ends
        ):
            warned_ends.add(target.id)
            warnings.append(f"End node {target.id} has multiple incoming connections")

        if e.source == e.target:
            errors.append(f"Self-loop detected in edge {e.id}")

        if e.source_handle and isinstance(source, BranchNode):
            if e.source_handle not in source.arm_ids():
                errors.append(f"Invalid branch handle {e.source_handle} on node {source.id}")

    return EdgeValidation(valid=not errors, errors=tuple(errors), warnings=tuple(warnings))


def _tarjan_scc(successors: dict[str, list[str]]) -> list[set[str]]:
    """Tarjan's algorithm over an adjacency map; returns strongly connected components."""
    index_counter = [0]
    stack: list[str] = []
    lowlink: dict[str, int] = {}
    index: dict[str, int] = {}
    on_stack: set[str] = set()
    sccs: list[set[str]] = []

    def strongconnect(v: str) -> None:
        index[v] = index_counter[0]
        lowlink[v] = index_counter[0]
        index_counter[0] += 1
        stack.append(v)
        on_stack.add(v)

        for w in successors.get(v, []):
            if w not in index:
                strongconnect(w)
                lowlink[v] = min(lowlink[v], lowlink[w])
            elif w in on_stack:
                lowlink[v] = min(lowlink[v], index[w])

        if lowlink[v] == index[v]:
            component: set[str] = set()
            while True:
                w = stack.pop()
                on_stack.discard(w)
                component.add(w)
                if w == v:
                    break
            sccs.append(component)

    for node in sorted(successors):
        if node not in index:
            strongconnect(node)
    return sccs


def find_cycles(
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
) -> list[tuple[str, ...]]:
    """
    Node sets of every cycle among existing nodes (multi-node components and
    self loops), each sorted, list sorted.
    """
    node_ids = {n.id for n in nodes}
    successors: dict[str, list[str]] = {n: [] for n in node_ids}
    for e in edges:
        if e.source in node_ids and e.target in node_ids:
            successors[e.source].append(e.target)

    cycles: list[tuple[str, ...]] = []
    for scc in _tarjan_scc(successors):
        if len(scc) == 1:
            node = next(iter(scc))
            if node not in successors[node]:
                continue
        cycles.append(tuple(sorted(scc)))
    cycles.sort()
    return cycles
