"""Tests for workflow document model and dict serialization."""

import json

import pytest

from flowbranch.graph import (
    BranchArm,
    BranchNode,
    EndNode,
    JumpNode,
    Position,
    StepNode,
    WorkflowDocument,
    WorkflowEdge,
    build_workflow_document,
    edge_id_for,
    index_nodes,
    midpoint,
    workflow_from_dict,
    workflow_to_dict,
)


def _editor_dict() -> dict:
    return {
        "name": "support flow",
        "nodes": [
            {
                "id": "a",
                "position": {"x": 0, "y": 0},
                "data": {"variant": "default", "label": "Greet", "instructions": "Say hi"},
            },
            {
                "id": "b",
                "position": {"x": 100, "y": 50},
                "data": {
                    "variant": "branch",
                    "label": "Route",
                    "branches": [
                        {"id": "arm-1", "label": "Sales"},
                        {"id": "arm-2", "label": "Support", "condition": "needs help"},
                    ],
                },
            },
            {
                "id": "b-branch-pill-2",
                "position": {"x": 150, "y": 150},
                "data": {"variant": "default", "label": ""},
            },
            {
                "id": "j",
                "position": {"x": 0, "y": 300},
                "data": {"variant": "jump", "label": "Back", "targetNodeId": "a"},
            },
            {"id": "z", "position": {"x": 0, "y": 400}, "data": {"variant": "end", "label": "Bye"}},
        ],
        "edges": [
            {"id": "e1", "source": "a", "target": "b"},
            {"id": "e2", "source": "b", "target": "b-branch-pill-2", "sourceHandle": "arm-2"},
            {"id": "e3", "source": "j", "target": "z", "label": "done"},
        ],
    }


def test_workflow_from_dict_variants():
    """Each editor variant maps to its node class; 'default' is a step."""
    doc = workflow_from_dict(_editor_dict())
    kinds = [type(n) for n in doc.nodes]
    assert kinds == [StepNode, BranchNode, StepNode, JumpNode, EndNode]
    assert doc.name == "support flow"
    assert doc.node("a").variant == "step"
    assert doc.node("a").position == Position(0.0, 0.0)
    assert doc.node("j").target_node_id == "a"


def test_branch_arms_parsed():
    doc = workflow_from_dict(_editor_dict())
    branch = doc.node("b")
    assert branch.arms == (
        BranchArm("arm-1", "Sales", ""),
        BranchArm("arm-2", "Support", "needs help"),
    )
    assert branch.arm_ids() == ("arm-1", "arm-2")


def test_legacy_pill_id_marks_placeholder():
    """Older documents mark branch pills only through the id."""
    doc = workflow_from_dict(_editor_dict())
    assert doc.node("b-branch-pill-2").placeholder is True
    assert doc.node("a").placeholder is False


def test_explicit_placeholder_flag():
    d = {
        "nodes": [{"id": "p", "position": {"x": 0, "y": 0}, "data": {"variant": "step", "placeholder": True}}],
        "edges": [],
    }
    assert workflow_from_dict(d).node("p").placeholder is True


def test_edge_fields_parsed():
    doc = workflow_from_dict(_editor_dict())
    e2 = doc.edges[1]
    assert e2 == WorkflowEdge("e2", "b", "b-branch-pill-2", source_handle="arm-2")
    assert e2.is_branch_arm
    assert not doc.edges[0].is_branch_arm
    assert doc.edges[2].label == "done"


def test_opaque_attributes_preserved():
    """Step-specific data the algorithms ignore survives a round trip."""
    doc = workflow_from_dict(_editor_dict())
    assert doc.node("a").attributes == {"instructions": "Say hi"}
    d = workflow_to_dict(doc)
    assert d["nodes"][0]["data"]["instructions"] == "Say hi"


def test_workflow_to_dict_structure():
    doc = build_workflow_document(
        [StepNode("a", Position(1, 2), "A"), EndNode("z", Position(3, 4), "Z")],
        [WorkflowEdge("e1", "a", "z")],
    )
    d = workflow_to_dict(doc)
    assert d["schema_version"] == "1.0"
    assert "name" not in d
    assert d["nodes"][0] == {
        "id": "a",
        "position": {"x": 1, "y": 2},
        "data": {"variant": "step", "label": "A"},
    }
    assert d["edges"] == [{"id": "e1", "source": "a", "target": "z"}]


def test_round_trip_is_stable():
    """dict -> document -> dict -> document gives equal documents and identical JSON."""
    doc1 = workflow_from_dict(_editor_dict())
    d1 = workflow_to_dict(doc1)
    doc2 = workflow_from_dict(d1)
    d2 = workflow_to_dict(doc2)
    assert doc1 == doc2
    assert json.dumps(d1, sort_keys=True) == json.dumps(d2, sort_keys=True)


def test_document_lookups():
    doc = workflow_from_dict(_editor_dict())
    assert doc.has_node("z")
    assert not doc.has_node("missing")
    assert doc.has_edge("e3")
    assert [e.id for e in doc.outgoing("b")] == ["e2"]
    assert [e.id for e in doc.incoming("b")] == ["e1"]
    assert doc.node("missing") is None


def test_index_nodes_first_wins():
    first = StepNode("a", Position(0, 0), "first")
    second = StepNode("a", Position(9, 9), "second")
    assert index_nodes([first, second])["a"] is first


def test_nodes_are_frozen():
    node = StepNode("a", Position(0, 0))
    with pytest.raises(Exception):  # dataclasses.FrozenInstanceError
        node.label = "changed"


def test_midpoint_and_offset():
    assert midpoint(Position(0, 0), Position(100, 50)) == Position(50, 25)
    assert Position(1, 1).offset(2, -1) == Position(3, 0)


def test_edge_id_convention():
    assert edge_id_for("a", "b") == "edge-a-b"
    assert edge_id_for("a", "b", "arm-1") == "edge-a-arm-1-b"


@pytest.mark.parametrize(
    "bad, message",
    [
        ([], "must be a dict"),
        ({"nodes": {}, "edges": []}, "must be lists"),
        ({"nodes": [{"position": {"x": 0, "y": 0}}], "edges": []}, "'id'"),
        ({"nodes": [{"id": "a", "data": {"variant": "teleport"}}], "edges": []}, "unknown node variant"),
        ({"nodes": [{"id": "a", "position": {"x": "left", "y": 0}}], "edges": []}, "numbers"),
        ({"nodes": [], "edges": [{"id": "e", "source": "a"}]}, "'target'"),
    ],
)
def test_workflow_from_dict_rejects_malformed(bad, message):
    with pytest.raises(ValueError, match=message):
        workflow_from_dict(bad)


def test_missing_position_defaults_to_origin():
    doc = workflow_from_dict({"nodes": [{"id": "a"}], "edges": []})
    assert doc.node("a").position == Position(0.0, 0.0)
    assert isinstance(doc, WorkflowDocument)
