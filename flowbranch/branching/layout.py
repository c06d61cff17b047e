"""
Positions for steps transferred onto a branch arm: a single vertical chain
beside the branch node.
"""

from __future__ import annotations

import logging
from typing import Sequence

from flowbranch.config import DEFAULT_HORIZONTAL_OFFSET, DEFAULT_VERTICAL_SPACING
from flowbranch.graph.nodes import Position, WorkflowNode

# Vertical distance from the branch node to the first transferred step
BRANCH_ARM_DROP = 100.0

logger = logging.getLogger(__name__)


def calculate_transfer_positions(
    branch_node: WorkflowNode,
    following_steps: Sequence[WorkflowNode],
    *,
    branch_id: str,
    vertical_spacing: float = DEFAULT_VERTICAL_SPACING,
    horizontal_offset: float = DEFAULT_HORIZONTAL_OFFSET,
) -> dict[str, Position]:
    """
    Map node id -> new position for each step, in order, stacked under the
    arm branch_id of branch_node. No collision handling with other nodes.
    """
    logger.debug(
        "laying out %d steps under arm %s of %s",
        len(following_steps),
        branch_id,
        branch_node.id,
    )
    base = branch_node.position.offset(horizontal_offset, BRANCH_ARM_DROP)
    return {
        step.id: Position(base.x, base.y + i * vertical_spacing)
        for i, step in enumerate(following_steps)
    }
