"""
Branch insertion points: edges where a new branch node may be spliced in.
Points are derived from the current graph and must be recomputed (or pruned) after every edit.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence

from flowbranch.graph.document import index_nodes
from flowbranch.graph.edges import WorkflowEdge
from flowbranch.graph.nodes import (
    BranchNode,
    EndNode,
    Position,
    WorkflowNode,
    midpoint,
)


@dataclass(frozen=True)
class BranchInsertionPoint:
    """Candidate edge for branch insertion, positioned at the midpoint of its endpoints."""

    id: str
    source_node_id: str
    target_node_id: str
    edge_id: str
    position: Position
    is_valid: bool = True


def insertion_point_id(source_node_id: str, target_node_id: str) -> str:
    return f"branch-insertion-{source_node_id}-{target_node_id}"


def accepts_branch(
    edge: WorkflowEdge,
    source: WorkflowNode,
    target: WorkflowNode,
) -> bool:
    # Edge already leaves a branch arm
    if edge.is_branch_arm:
        return False
    # No nested branches; end steps have no outgoing flow
    if isinstance(source, (BranchNode, EndNode)):
        return False
    if target.placeholder:
        return False
    if isinstance(target, BranchNode):
        return False
    return True


def detect_insertion_points(
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
) -> list[BranchInsertionPoint]:
    """
    One insertion point per edge where a branch may be inserted, in edge order.
    Edges with a missing endpoint are skipped.
    """
    by_id = index_nodes(nodes)
    points: list[BranchInsertionPoint] = []
    for e in edges:
        source = by_id.get(e.source)
        target = by_id.get(e.target)
        if source is None or target is None:
            continue
        if not accepts_branch(e, source, target):
            continue
        points.append(
            BranchInsertionPoint(
                id=insertion_point_id(e.source, e.target),
                source_node_id=e.source,
                target_node_id=e.target,
                edge_id=e.id,
                position=midpoint(source.position, target.position),
                is_valid=True,
            )
        )
    return points


def is_insertion_point_valid(
    point: BranchInsertionPoint,
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
) -> bool:
    """True if both endpoint nodes and the edge still exist."""
    node_ids = {n.id for n in nodes}
    if point.source_node_id not in node_ids or point.target_node_id not in node_ids:
        return False
    return any(e.id == point.edge_id for e in edges)


def prune_insertion_points(
    points: Sequence[BranchInsertionPoint],
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
) -> list[BranchInsertionPoint]:
    """Drop points invalidated by edits since they were detected."""
    return [p for p in points if is_insertion_point_valid(p, nodes, edges)]


def update_insertion_point_positions(
    points: Sequence[BranchInsertionPoint],
    nodes: Sequence[WorkflowNode],
) -> list[BranchInsertionPoint]:
    """
    Recompute midpoints after nodes moved. Points whose nodes no longer
    exist are returned unchanged.
    """
    by_id = index_nodes(nodes)
    updated: list[BranchInsertionPoint] = []
    for p in points:
        source = by_id.get(p.source_node_id)
        target = by_id.get(p.target_node_id)
        if source is None or target is None:
            updated.append(p)
            continue
        updated.append(replace(p, position=midpoint(source.position, target.position)))
    return updated


def insertion_point_to_dict(p: BranchInsertionPoint) -> dict:
    return {
        "id": p.id,
        "source_node_id": p.source_node_id,
        "target_node_id": p.target_node_id,
        "edge_id": p.edge_id,
        "position": {"x": p.position.x, "y": p.position.y},
        "is_valid": p.is_valid,
    }
