"""
Workflow document: nodes plus edges, lookups, and deterministic dict serialization.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from flowbranch.graph.edges import WorkflowEdge
from flowbranch.graph.nodes import (
    NODE_TYPES,
    BranchArm,
    BranchNode,
    JumpNode,
    Position,
    WorkflowNode,
)

DEFAULT_SCHEMA_VERSION = "1.0"

# Older editor documents mark empty branch arms only through the node id.
LEGACY_PLACEHOLDER_MARKER = "-branch-pill-"

# Editor name for a plain step.
VARIANT_ALIASES = {"default": "step"}

_NODE_DATA_KEYS = {"variant", "label", "placeholder", "branches", "targetNodeId"}


def index_nodes(nodes: Iterable[WorkflowNode]) -> dict[str, WorkflowNode]:
    """Map node id -> node; the first node with a given id wins."""
    by_id: dict[str, WorkflowNode] = {}
    for n in nodes:
        by_id.setdefault(n.id, n)
    return by_id


@dataclass(frozen=True)
class WorkflowDocument:
    """The node/edge graph of one agent workflow."""

    nodes: tuple[WorkflowNode, ...]
    edges: tuple[WorkflowEdge, ...]
    name: str | None = None
    schema_version: str = DEFAULT_SCHEMA_VERSION

    def node(self, node_id: str) -> WorkflowNode | None:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def has_node(self, node_id: str) -> bool:
        return any(n.id == node_id for n in self.nodes)

    def has_edge(self, edge_id: str) -> bool:
        return any(e.id == edge_id for e in self.edges)

    def outgoing(self, node_id: str) -> list[WorkflowEdge]:
        return [e for e in self.edges if e.source == node_id]

    def incoming(self, node_id: str) -> list[WorkflowEdge]:
        return [e for e in self.edges if e.target == node_id]


def build_workflow_document(
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
    name: str | None = None,
    schema_version: str = DEFAULT_SCHEMA_VERSION,
) -> WorkflowDocument:
    """Build a WorkflowDocument from node and edge lists."""
    return WorkflowDocument(
        nodes=tuple(nodes),
        edges=tuple(edges),
        name=name,
        schema_version=schema_version,
    )


def _require_str(d: dict, key: str, where: str) -> str:
    value = d.get(key)
    if not isinstance(value, str) or not value:
        raise ValueError(f"{where}: '{key}' must be a non-empty string")
    return value


def _position_from_dict(d: object, where: str) -> Position:
    if d is None:
        return Position(0.0, 0.0)
    if not isinstance(d, dict):
        raise ValueError(f"{where}: 'position' must be a dict, got {type(d).__name__}")
    x = d.get("x", 0)
    y = d.get("y", 0)
    if not isinstance(x, (int, float)) or not isinstance(y, (int, float)):
        raise ValueError(f"{where}: position coordinates must be numbers")
    return Position(float(x), float(y))


def _node_from_dict(d: object, index: int) -> WorkflowNode:
    where = f"nodes[{index}]"
    if not isinstance(d, dict):
        raise ValueError(f"{where}: expected dict, got {type(d).__name__}")
    node_id = _require_str(d, "id", where)
    data = d.get("data") or {}
    if not isinstance(data, dict):
        raise ValueError(f"{where}: 'data' must be a dict")

    raw_variant = data.get("variant", "step")
    variant = VARIANT_ALIASES.get(raw_variant, raw_variant)
    node_cls = NODE_TYPES.get(variant)
    if node_cls is None:
        raise ValueError(f"{where}: unknown node variant {raw_variant!r}")

    label = data.get("label", "")
    if not isinstance(label, str):
        raise ValueError(f"{where}: 'label' must be a string")

    placeholder = bool(data.get("placeholder", False)) or LEGACY_PLACEHOLDER_MARKER in node_id
    attributes = {k: v for k, v in data.items() if k not in _NODE_DATA_KEYS}
    kwargs = dict(
        id=node_id,
        position=_position_from_dict(d.get("position"), where),
        label=label,
        placeholder=placeholder,
        attributes=attributes,
    )

    if node_cls is BranchNode:
        arms = []
        for j, b in enumerate(data.get("branches") or []):
            if not isinstance(b, dict):
                raise ValueError(f"{where}: branches[{j}] must be a dict")
            arms.append(
                BranchArm(
                    id=_require_str(b, "id", f"{where}.branches[{j}]"),
                    label=b.get("label", ""),
                    condition=b.get("condition") or "",
                )
            )
        kwargs["arms"] = tuple(arms)
    elif node_cls is JumpNode:
        kwargs["target_node_id"] = data.get("targetNodeId")

    return node_cls(**kwargs)


def _edge_from_dict(d: object, index: int) -> WorkflowEdge:
    where = f"edges[{index}]"
    if not isinstance(d, dict):
        raise ValueError(f"{where}: expected dict, got {type(d).__name__}")
    return WorkflowEdge(
        id=_require_str(d, "id", where),
        source=_require_str(d, "source", where),
        target=_require_str(d, "target", where),
        source_handle=d.get("sourceHandle") or None,
        target_handle=d.get("targetHandle") or None,
        label=d.get("label"),
    )


def workflow_from_dict(d: dict) -> WorkflowDocument:
    """
    Parse a workflow document dict (the shape the editor persists).

    Raises:
        ValueError: if the document or one of its nodes/edges is malformed.
    """
    if not isinstance(d, dict):
        raise ValueError(f"Workflow document must be a dict, got {type(d).__name__}")
    raw_nodes = d.get("nodes", [])
    raw_edges = d.get("edges", [])
    if not isinstance(raw_nodes, list) or not isinstance(raw_edges, list):
        raise ValueError("Workflow document: 'nodes' and 'edges' must be lists")
    return build_workflow_document(
        [_node_from_dict(n, i) for i, n in enumerate(raw_nodes)],
        [_edge_from_dict(e, i) for i, e in enumerate(raw_edges)],
        name=d.get("name"),
        schema_version=d.get("schema_version", DEFAULT_SCHEMA_VERSION),
    )


def node_to_dict(n: WorkflowNode) -> dict:
    data = dict(n.attributes)
    data["variant"] = n.variant
    data["label"] = n.label
    if n.placeholder:
        data["placeholder"] = True
    if isinstance(n, BranchNode):
        data["branches"] = [
            {"id": a.id, "label": a.label, "condition": a.condition} for a in n.arms
        ]
    elif isinstance(n, JumpNode) and n.target_node_id is not None:
        data["targetNodeId"] = n.target_node_id
    return {
        "id": n.id,
        "position": {"x": n.position.x, "y": n.position.y},
        "data": data,
    }


def edge_to_dict(e: WorkflowEdge) -> dict:
    d = {"id": e.id, "source": e.source, "target": e.target}
    if e.source_handle:
        d["sourceHandle"] = e.source_handle
    if e.target_handle:
        d["targetHandle"] = e.target_handle
    if e.label is not None:
        d["label"] = e.label
    return d


def workflow_to_dict(doc: WorkflowDocument) -> dict:
    """
    Return a JSON-serializable dict. Nodes and edges keep document order;
    same WorkflowDocument -> same dict.
    """
    d = {
        "schema_version": doc.schema_version,
        "nodes": [node_to_dict(n) for n in doc.nodes],
        "edges": [edge_to_dict(e) for e in doc.edges],
    }
    if doc.name is not None:
        d["name"] = doc.name
    return d
