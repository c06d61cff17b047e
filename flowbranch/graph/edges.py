"""Edge types for workflow graph."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class WorkflowEdge:
    """A directed transition between two nodes, optionally leaving a specific branch arm."""

    id: str
    source: str
    target: str
    source_handle: str | None = None
    target_handle: str | None = None
    label: str | None = None

    @property
    def is_branch_arm(self) -> bool:
        return bool(self.source_handle)


def edge_id_for(source: str, target: str, source_handle: str | None = None) -> str:
    """Edge id convention used by the editor."""
    if source_handle:
        return f"edge-{source}-{source_handle}-{target}"
    return f"edge-{source}-{target}"
