import json
from datetime import datetime, timezone

import pytest

from mindmapx.errors import DocumentError, GraphReferenceError, InvariantViolation
from mindmapx.export import (
    default_document_name, dumps_document, parse_document, read_document,
    to_document, write_document
)


@pytest.fixture
def grown(controller):
    root = controller.graph.root.id
    controller.select_node(root)
    a = controller.add_child_node("Feature 1")
    controller.add_child_node("User Benefits", "#7B61FF")
    controller.select_node(a)
    controller.add_child_node("Drag & Drop")
    return controller


def test_document_schema(grown):
    doc = to_document(grown.graph.snapshot())
    assert set(doc) == {"nodes", "edges", "metadata"}
    assert doc["metadata"]["nodeCount"] == 4
    assert doc["metadata"]["edgeCount"] == 3
    assert "timestamp" in doc["metadata"]

    root = doc["nodes"][0]
    assert root == {
        "id": "1",
        "label": "Central Idea",
        "position": {"x": 400.0, "y": 300.0},
        "isRoot": True,
        "color": None,
    }
    assert set(doc["edges"][0]) == {"id", "sourceId", "targetId"}


def test_document_is_deterministic_except_timestamp(grown):
    snap = grown.graph.snapshot()
    first = to_document(snap, datetime(2024, 1, 1, tzinfo=timezone.utc))
    second = to_document(snap, datetime(2025, 6, 1, tzinfo=timezone.utc))
    assert first["metadata"].pop("timestamp") != second["metadata"].pop("timestamp")
    assert first == second


def test_round_trip(grown):
    snap = grown.graph.snapshot()
    parsed = parse_document(dumps_document(snap))
    assert parsed.nodes == snap.nodes
    assert parsed.edges == snap.edges


def test_file_round_trip(grown, tmp_path):
    path = write_document(grown.graph.snapshot(), tmp_path / "map.json")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["metadata"]["nodeCount"] == 4
    assert read_document(path) == grown.graph.snapshot()


def test_controller_import(grown):
    doc = grown.export_document()
    grown.reset_session()
    assert grown.import_document(doc)
    assert len(grown.graph) == 4
    assert grown.graph.root.label == "Central Idea"

    grown.select_node(grown.graph.root.id)
    new_id = grown.add_child_node("More")
    assert new_id not in {n["id"] for n in doc["nodes"]}


def test_controller_rejects_bad_import(grown):
    before = grown.graph.snapshot()
    assert not grown.import_document("{not json")
    assert not grown.import_document({"nodes": [], "edges": []})
    assert grown.graph.snapshot() == before


def test_parse_errors():
    with pytest.raises(DocumentError):
        parse_document("{oops")
    with pytest.raises(DocumentError):
        parse_document("[]")
    with pytest.raises(DocumentError):
        parse_document({"nodes": [{"id": "1"}], "edges": []})

    root = {"id": "1", "label": "r", "position": {"x": 0, "y": 0}, "isRoot": True}
    with pytest.raises(GraphReferenceError):
        parse_document({"nodes": [root], "edges": [{"id": "e", "sourceId": "1", "targetId": "2"}]})
    with pytest.raises(InvariantViolation):
        parse_document({"nodes": [root, dict(root, id="2")], "edges": []})


def test_parse_rejects_wrongly_typed_fields():
    root = {"id": "1", "label": "r", "position": {"x": 0, "y": 0}, "isRoot": True}
    for bad in (dict(root, isRoot="false"), dict(root, label=None),
                dict(root, color="red"), dict(root, color=123)):
        with pytest.raises(DocumentError):
            parse_document({"nodes": [bad], "edges": []})

    parsed = parse_document({"nodes": [dict(root, color="#abc")], "edges": []})
    assert parsed.root.color == "#abc"


def test_controller_rejects_import_with_bad_color(grown):
    doc = grown.export_document()
    doc["nodes"][1]["color"] = 123
    before = grown.graph.snapshot()
    assert not grown.import_document(doc)
    assert grown.graph.snapshot() == before


def test_default_document_name():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert default_document_name(now) == "mindmap-1704067200000.json"
