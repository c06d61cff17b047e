"""
Step-transfer analysis: which steps and edges move onto the first arm of a
branch inserted between a source and a target node.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Sequence

from flowbranch.graph.document import edge_to_dict, index_nodes
from flowbranch.graph.edges import WorkflowEdge
from flowbranch.graph.nodes import WorkflowNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepAnalysisResult:
    """
    Downstream of an insertion edge.

    following_steps: nodes reachable forward from the target, target first (BFS order).
    following_edges: edges leaving any of those nodes.
    affected_edges: edges entering those nodes from elsewhere, excluding the replaced edge.
    """

    following_steps: tuple[WorkflowNode, ...]
    following_edges: tuple[WorkflowEdge, ...]
    affected_edges: tuple[WorkflowEdge, ...]

    def step_ids(self) -> tuple[str, ...]:
        return tuple(n.id for n in self.following_steps)


def analyze_transfer(
    source_node_id: str,
    target_node_id: str,
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
) -> StepAnalysisResult:
    """
    BFS forward from target_node_id. Each node is visited at most once, so
    cycles terminate; ids with no matching node are skipped.
    """
    by_id = index_nodes(nodes)
    following_steps: list[WorkflowNode] = []
    following_edges: list[WorkflowEdge] = []
    incoming: list[WorkflowEdge] = []

    edges_from: dict[str, list[WorkflowEdge]] = {}
    edges_to: dict[str, list[WorkflowEdge]] = {}
    for e in edges:
        edges_from.setdefault(e.source, []).append(e)
        edges_to.setdefault(e.target, []).append(e)

    visited: set[str] = set()
    q: deque[str] = deque([target_node_id])
    while q:
        node_id = q.popleft()
        if node_id in visited:
            continue
        visited.add(node_id)

        node = by_id.get(node_id)
        if node is None:
            continue
        following_steps.append(node)

        outgoing = edges_from.get(node_id, [])
        following_edges.extend(outgoing)
        incoming.extend(edges_to.get(node_id, []))

        for e in outgoing:
            if e.target not in visited:
                q.append(e.target)

    # The source->target edge is replaced by the branch; edges between
    # visited nodes travel with the steps.
    affected_edges = [
        e
        for e in incoming
        if e.source != source_node_id and e.source not in visited
    ]

    logger.debug(
        "transfer %s->%s: %d steps, %d following edges, %d affected edges",
        source_node_id,
        target_node_id,
        len(following_steps),
        len(following_edges),
        len(affected_edges),
    )
    return StepAnalysisResult(
        following_steps=tuple(following_steps),
        following_edges=tuple(following_edges),
        affected_edges=tuple(affected_edges),
    )


def step_analysis_to_dict(result: StepAnalysisResult) -> dict:
    return {
        "following_steps": [n.id for n in result.following_steps],
        "following_edges": [edge_to_dict(e) for e in result.following_edges],
        "affected_edges": [edge_to_dict(e) for e in result.affected_edges],
    }
