"""Node types for workflow graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping, Union


@dataclass(frozen=True)
class Position:
    """Canvas coordinate of a node."""

    x: float
    y: float

    def offset(self, dx: float, dy: float) -> Position:
        return Position(self.x + dx, self.y + dy)


def midpoint(a: Position, b: Position) -> Position:
    """Arithmetic midpoint of two positions."""
    return Position((a.x + b.x) / 2, (a.y + b.y) / 2)


@dataclass(frozen=True)
class BranchArm:
    """One labeled arm of a branch node; edges leaving the arm use its id as source handle."""

    id: str
    label: str
    condition: str = ""


@dataclass(frozen=True)
class StepNode:
    """A regular workflow step."""

    variant: ClassVar[str] = "step"

    id: str
    position: Position
    label: str = ""
    placeholder: bool = False
    attributes: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class BranchNode:
    """A node that forks control flow into labeled arms."""

    variant: ClassVar[str] = "branch"

    id: str
    position: Position
    label: str = ""
    arms: tuple[BranchArm, ...] = ()
    placeholder: bool = False
    attributes: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def arm_ids(self) -> tuple[str, ...]:
        return tuple(a.id for a in self.arms)


@dataclass(frozen=True)
class EndNode:
    """Terminal step; never the source of an edge."""

    variant: ClassVar[str] = "end"

    id: str
    position: Position
    label: str = ""
    placeholder: bool = False
    attributes: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class JumpNode:
    """Step that hands control to another node by id."""

    variant: ClassVar[str] = "jump"

    id: str
    position: Position
    label: str = ""
    target_node_id: str | None = None
    placeholder: bool = False
    attributes: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)


WorkflowNode = Union[StepNode, BranchNode, EndNode, JumpNode]

NODE_TYPES: dict[str, type] = {
    StepNode.variant: StepNode,
    BranchNode.variant: BranchNode,
    EndNode.variant: EndNode,
    JumpNode.variant: JumpNode,
}
