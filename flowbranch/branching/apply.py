"""
BranchInserter: analyze, validate, lay out and rewire -> new WorkflowDocument.
The input document is never modified; a rejected insertion raises before anything is built.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from typing import Callable

from flowbranch.branching.insertion import accepts_branch
from flowbranch.branching.layout import BRANCH_ARM_DROP, calculate_transfer_positions
from flowbranch.branching.transfer import StepAnalysisResult, analyze_transfer
from flowbranch.branching.validation import validate_edge_connections, validate_transfer
from flowbranch.config import LayoutOptions, load_layout_options
from flowbranch.graph.document import WorkflowDocument, edge_to_dict, workflow_to_dict
from flowbranch.graph.edges import WorkflowEdge, edge_id_for
from flowbranch.graph.nodes import BranchArm, BranchNode, StepNode, midpoint

logger = logging.getLogger(__name__)

BRANCH_LABEL = "Branch"
ARM_LABELS = ("Branch 1", "Branch 2")


class BranchInsertionError(ValueError):
    """Raised when a branch cannot be inserted; errors lists every reason."""

    def __init__(self, errors: tuple[str, ...] | list[str]):
        self.errors = tuple(errors)
        super().__init__("; ".join(self.errors))


@dataclass(frozen=True)
class InsertionResult:
    """New document plus what changed relative to the input."""

    document: WorkflowDocument
    branch_node: BranchNode
    placeholder_node: StepNode
    analysis: StepAnalysisResult
    transferred_step_ids: tuple[str, ...]
    removed_edges: tuple[WorkflowEdge, ...]
    added_edges: tuple[WorkflowEdge, ...]


def _short_id() -> str:
    return uuid.uuid4().hex[:8]


class BranchInserter:
    """Insert a branch node on the edge source -> target and move the downstream steps onto its first arm."""

    def __init__(
        self,
        options: LayoutOptions | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        self.options = options or LayoutOptions()
        self.id_factory = id_factory or _short_id

    def insert(
        self,
        document: WorkflowDocument,
        source_node_id: str,
        target_node_id: str,
    ) -> InsertionResult:
        nodes = document.nodes
        edges = document.edges

        analysis = analyze_transfer(source_node_id, target_node_id, nodes, edges)
        validation = validate_transfer(
            source_node_id, target_node_id, analysis, nodes, edges
        )
        if not validation.is_valid:
            logger.warning(
                "branch insertion %s->%s rejected: %s",
                source_node_id,
                target_node_id,
                "; ".join(validation.errors),
            )
            raise BranchInsertionError(validation.errors)

        source = document.node(source_node_id)
        target = document.node(target_node_id)

        rejected = [
            e
            for e in edges
            if e.source == source_node_id
            and e.target == target_node_id
            and not accepts_branch(e, source, target)
        ]
        if rejected:
            errors = tuple(
                f"Edge {e.id} is not a branch insertion point" for e in rejected
            )
            logger.warning(
                "branch insertion %s->%s rejected: %s",
                source_node_id,
                target_node_id,
                "; ".join(errors),
            )
            raise BranchInsertionError(errors)

        branch_id = f"branch-{self.id_factory()}"
        arm1 = BranchArm(id=f"{branch_id}-arm-1", label=ARM_LABELS[0])
        arm2 = BranchArm(id=f"{branch_id}-arm-2", label=ARM_LABELS[1])
        branch_node = BranchNode(
            id=branch_id,
            position=midpoint(source.position, target.position),
            label=BRANCH_LABEL,
            arms=(arm1, arm2),
        )
        placeholder = StepNode(
            id=f"{branch_id}-branch-pill-2",
            position=branch_node.position.offset(
                self.options.horizontal_offset - self.options.arm_spacing,
                BRANCH_ARM_DROP,
            ),
            label=arm2.label,
            placeholder=True,
        )

        positions = calculate_transfer_positions(
            branch_node,
            analysis.following_steps,
            branch_id=arm1.id,
            vertical_spacing=self.options.vertical_spacing,
            horizontal_offset=self.options.horizontal_offset,
        )
        # Output nodes never share attribute mappings with the input
        new_nodes = [
            replace(
                n,
                position=positions.get(n.id, n.position),
                attributes=dict(n.attributes),
            )
            for n in nodes
        ]
        new_nodes.extend([branch_node, placeholder])

        removed_ids = {
            e.id
            for e in edges
            if e.source == source_node_id and e.target == target_node_id
        }
        if not self.options.keep_affected_edges:
            removed_ids |= {e.id for e in analysis.affected_edges}
        removed = tuple(e for e in edges if e.id in removed_ids)

        added = (
            WorkflowEdge(
                id=edge_id_for(source_node_id, branch_id),
                source=source_node_id,
                target=branch_id,
            ),
            WorkflowEdge(
                id=edge_id_for(branch_id, target_node_id, arm1.id),
                source=branch_id,
                target=target_node_id,
                source_handle=arm1.id,
            ),
            WorkflowEdge(
                id=edge_id_for(branch_id, placeholder.id, arm2.id),
                source=branch_id,
                target=placeholder.id,
                source_handle=arm2.id,
            ),
        )
        new_edges = [e for e in edges if e.id not in removed_ids]
        new_edges.extend(added)

        new_document = replace(document, nodes=tuple(new_nodes), edges=tuple(new_edges))

        # Problems that already existed in the input are not ours to report
        before = validate_edge_connections(nodes, edges)
        after = validate_edge_connections(new_document.nodes, new_document.edges)
        introduced = [err for err in after.errors if err not in before.errors]
        if introduced:
            raise BranchInsertionError(introduced)

        logger.debug(
            "inserted %s between %s and %s: moved %d steps, removed %d edges",
            branch_id,
            source_node_id,
            target_node_id,
            len(analysis.following_steps),
            len(removed),
        )
        return InsertionResult(
            document=new_document,
            branch_node=branch_node,
            placeholder_node=placeholder,
            analysis=analysis,
            transferred_step_ids=analysis.step_ids(),
            removed_edges=removed,
            added_edges=added,
        )


def insert_branch(
    document: WorkflowDocument,
    source_node_id: str,
    target_node_id: str,
    *,
    options: LayoutOptions | str | dict | None = None,
    id_factory: Callable[[], str] | None = None,
) -> InsertionResult:
    """Convenience: run BranchInserter(...).insert(document, source_node_id, target_node_id)."""
    inserter = BranchInserter(load_layout_options(options), id_factory=id_factory)
    return inserter.insert(document, source_node_id, target_node_id)


def insertion_result_to_dict(result: InsertionResult) -> dict:
    return {
        "document": workflow_to_dict(result.document),
        "branch_node_id": result.branch_node.id,
        "placeholder_node_id": result.placeholder_node.id,
        "transferred_step_ids": list(result.transferred_step_ids),
        "removed_edges": [edge_to_dict(e) for e in result.removed_edges],
        "added_edges": [edge_to_dict(e) for e in result.added_edges],
    }
