"""Tests for transfer validation, edge integrity checks and cycle detection."""

from flowbranch.branching import (
    StepAnalysisResult,
    analyze_transfer,
    find_cycles,
    validate_edge_connections,
    validate_transfer,
)
from flowbranch.branching.validation import (
    CIRCULAR_DEPENDENCY,
    NO_DIRECT_CONNECTION,
    NOTHING_TO_TRANSFER,
    SOURCE_NOT_FOUND,
    TARGET_NOT_FOUND,
)
from flowbranch.graph import (
    BranchArm,
    BranchNode,
    EndNode,
    Position,
    StepNode,
    WorkflowEdge,
)


def _ab():
    nodes = [StepNode("A", Position(0, 0)), StepNode("B", Position(0, 100))]
    edges = [WorkflowEdge("e1", "A", "B")]
    return nodes, edges


def test_valid_transfer():
    nodes, edges = _ab()
    result = analyze_transfer("A", "B", nodes, edges)
    validation = validate_transfer("A", "B", result, nodes, edges)
    assert validation.is_valid
    assert validation.errors == ()


def test_target_only_transfer_is_accepted():
    """A target with nothing downstream still transfers itself."""
    nodes, edges = _ab()
    result = analyze_transfer("A", "B", nodes, edges)
    assert result.step_ids() == ("B",)
    assert validate_transfer("A", "B", result, nodes, edges).is_valid


def test_empty_result_rejected():
    nodes, edges = _ab()
    empty = StepAnalysisResult((), (), ())
    validation = validate_transfer("A", "B", empty, nodes, edges)
    assert not validation.is_valid
    assert validation.errors == (NOTHING_TO_TRANSFER,)


def test_circular_dependency_rejected():
    nodes, edges = _ab()
    looping = StepAnalysisResult((nodes[1], nodes[0]), (), ())
    validation = validate_transfer("A", "B", looping, nodes, edges)
    assert not validation.is_valid
    assert CIRCULAR_DEPENDENCY in validation.errors


def test_cycle_through_source_detected_end_to_end():
    nodes, edges = _ab()
    edges = edges + [WorkflowEdge("back", "B", "A")]
    result = analyze_transfer("A", "B", nodes, edges)
    validation = validate_transfer("A", "B", result, nodes, edges)
    assert validation.errors == (CIRCULAR_DEPENDENCY,)


def test_no_direct_connection():
    nodes = [StepNode("A", Position(0, 0)), StepNode("B", Position(0, 100)), StepNode("C", Position(0, 200))]
    edges = [WorkflowEdge("e1", "A", "B"), WorkflowEdge("e2", "B", "C")]
    result = analyze_transfer("A", "C", nodes, edges)
    validation = validate_transfer("A", "C", result, nodes, edges)
    assert validation.errors == (NO_DIRECT_CONNECTION,)


def test_all_errors_reported_together():
    """Missing nodes and an empty result are all listed, in check order."""
    validation = validate_transfer("X", "Y", StepAnalysisResult((), (), ()), [], [])
    assert not validation.is_valid
    assert validation.errors == (
        SOURCE_NOT_FOUND,
        TARGET_NOT_FOUND,
        NO_DIRECT_CONNECTION,
        NOTHING_TO_TRANSFER,
    )


def test_validation_messages():
    assert SOURCE_NOT_FOUND == "Source node not found"
    assert TARGET_NOT_FOUND == "Target node not found"
    assert CIRCULAR_DEPENDENCY == "Branch transfer would create circular dependency"


# --- edge integrity ---


def test_edge_connections_clean_graph():
    nodes, edges = _ab()
    report = validate_edge_connections(nodes, edges)
    assert report.valid
    assert report.errors == ()
    assert report.warnings == ()


def test_edge_connections_dangling():
    nodes, _ = _ab()
    edges = [WorkflowEdge("e1", "A", "ghost"), WorkflowEdge("e2", "ghost", "B")]
    report = validate_edge_connections(nodes, edges)
    assert not report.valid
    assert report.errors == (
        "Edge e1 references non-existent target node: ghost",
        "Edge e2 references non-existent source node: ghost",
    )


def test_edge_connections_end_source_and_self_loop():
    nodes = [EndNode("Z", Position(0, 0)), StepNode("A", Position(0, 100))]
    edges = [WorkflowEdge("e1", "Z", "A"), WorkflowEdge("e2", "A", "A")]
    report = validate_edge_connections(nodes, edges)
    assert "End node Z cannot be a source node" in report.errors
    assert "Self-loop detected in edge e2" in report.errors


def test_edge_connections_branch_handle():
    branch = BranchNode("X", Position(0, 0), arms=(BranchArm("x1", "Branch 1"),))
    nodes = [branch, StepNode("A", Position(0, 100)), StepNode("B", Position(100, 100))]
    edges = [
        WorkflowEdge("ok", "X", "A", source_handle="x1"),
        WorkflowEdge("bad", "X", "B", source_handle="x9"),
    ]
    report = validate_edge_connections(nodes, edges)
    assert report.errors == ("Invalid branch handle x9 on node X",)


def test_edge_connections_end_with_many_inputs_warns_once():
    nodes = [StepNode("A", Position(0, 0)), StepNode("B", Position(0, 0)), EndNode("Z", Position(0, 100))]
    edges = [WorkflowEdge("e1", "A", "Z"), WorkflowEdge("e2", "B", "Z")]
    report = validate_edge_connections(nodes, edges)
    assert report.valid
    assert report.warnings == ("End node Z has multiple incoming connections",)


# --- cycles ---


def test_find_cycles_none():
    nodes, edges = _ab()
    assert find_cycles(nodes, edges) == []


def test_find_cycles_multi_node_and_self_loop():
    nodes = [StepNode(i, Position(0, 0)) for i in ("A", "B", "C", "D")]
    edges = [
        WorkflowEdge("e1", "A", "B"),
        WorkflowEdge("e2", "B", "C"),
        WorkflowEdge("e3", "C", "A"),
        WorkflowEdge("e4", "D", "D"),
    ]
    assert find_cycles(nodes, edges) == [("A", "B", "C"), ("D",)]


def test_find_cycles_ignores_dangling_edges():
    nodes = [StepNode("A", Position(0, 0))]
    edges = [WorkflowEdge("e1", "A", "ghost"), WorkflowEdge("e2", "ghost", "A")]
    assert find_cycles(nodes, edges) == []
