"""Workflow graph data model."""

from flowbranch.graph.document import (
    LEGACY_PLACEHOLDER_MARKER,
    WorkflowDocument,
    build_workflow_document,
    edge_to_dict,
    index_nodes,
    node_to_dict,
    workflow_from_dict,
    workflow_to_dict,
)
from flowbranch.graph.edges import WorkflowEdge, edge_id_for
from flowbranch.graph.nodes import (
    BranchArm,
    BranchNode,
    EndNode,
    JumpNode,
    Position,
    StepNode,
    WorkflowNode,
    midpoint,
)

__all__ = [
    "BranchArm",
    "BranchNode",
    "EndNode",
    "JumpNode",
    "LEGACY_PLACEHOLDER_MARKER",
    "Position",
    "StepNode",
    "WorkflowDocument",
    "WorkflowEdge",
    "WorkflowNode",
    "build_workflow_document",
    "edge_id_for",
    "edge_to_dict",
    "index_nodes",
    "midpoint",
    "node_to_dict",
    "workflow_from_dict",
    "workflow_to_dict",
]
