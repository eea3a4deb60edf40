"""Tests for the JSON boundary (text, files, validate-then-place)."""

import json
from decimal import Decimal

import pytest
from PySide6.QtCore import QPointF
from PySide6.QtGui import QColor

from ghjson.errors import DocumentFormatError
from ghjson.geometry import Point3d
from ghjson.memoryhost import MemoryCanvas
from ghjson.serializer import (GhJsonSerializer, _GhJsonEncoder, capture, from_json,
                               load_from_file, put_objects_on_canvas, save_to_file, to_json)


@pytest.fixture
def serializer(registry):
    return GhJsonSerializer(registry, registry)


def test_encoder_handles_qt_and_codec_types():
    """Stray Qt, decimal and geometry values are encoded."""
    data = json.loads(json.dumps({
        "p": QPointF(1, 2), "d": Decimal("1.5"), "c": QColor(0, 0, 0), "pt": Point3d(1, 2, 3),
    }, cls=_GhJsonEncoder))
    assert data == {"p": {"X": 1.0, "Y": 2.0}, "d": 1.5, "c": "argb:255,0,0,0",
                    "pt": "pointXYZ:1,2,3"}


def test_encoder_rejects_unknown():
    """Unknown objects still raise."""
    with pytest.raises(TypeError):
        json.dumps({"x": object()}, cls=_GhJsonEncoder)


def test_text_round_trip(chain_graph):
    """to_json/from_json are inverse on captured documents."""
    document = capture(chain_graph.values())
    text = to_json(document)
    assert json.loads(text)["components"][0]["name"] == "Number Slider"
    assert from_json(text) == document


def test_from_json_rejects_garbage():
    """Malformed text raises DocumentFormatError."""
    with pytest.raises(DocumentFormatError):
        from_json("{nope")
    with pytest.raises(DocumentFormatError):
        from_json("[]")


def test_file_round_trip(chain_graph, tmp_path, ghjson_logs):
    """Documents survive a trip through a file."""
    document = capture(chain_graph.values())
    path = tmp_path / "graph.ghjson"
    assert save_to_file(document, path)
    assert load_from_file(path) == document
    assert "Saved to:" in ghjson_logs.text


def test_load_missing_and_corrupt(tmp_path, ghjson_logs):
    """Missing or corrupt files come back as None with a log entry."""
    assert load_from_file(tmp_path / "missing.json") is None
    assert "File not found" in ghjson_logs.text
    corrupt = tmp_path / "bad.json"
    corrupt.write_text("{", encoding="utf-8")
    assert load_from_file(corrupt) is None


def test_save_failure(chain_graph, tmp_path):
    """Writing into a missing directory reports False."""
    assert not save_to_file(capture(chain_graph.values()), tmp_path / "no" / "dir" / "x.json")


def test_put_objects_on_canvas(chain_graph, registry):
    """Returns the distinct names of the placed components."""
    canvas = MemoryCanvas()
    names = put_objects_on_canvas(capture(chain_graph.values()), registry, registry, canvas)
    assert names == ["Number Slider", "Addition", "Panel"]
    assert len(canvas.nodes) == 3


class TestGhJsonSerializer:
    """Bound serializer facade."""

    def test_serialize_deserialize(self, serializer, chain_graph):
        text = serializer.serialize(chain_graph.values())
        canvas = MemoryCanvas()
        result = serializer.deserialize(canvas, text)
        assert result is not None
        assert result.connections_made == 2
        assert len(canvas.nodes) == 3

    def test_invalid_document_rejected(self, serializer, ghjson_logs):
        canvas = MemoryCanvas()
        text = json.dumps({"components": [{"name": "Teapot", "componentGuid": "x", "instanceGuid": "y"}],
                           "connections": []})
        assert serializer.deserialize(canvas, text) is None
        assert canvas.nodes == []
        assert "Document rejected" in ghjson_logs.text

    def test_validation_can_be_skipped(self, serializer):
        canvas = MemoryCanvas()
        text = json.dumps({"components": [{"name": "Teapot", "componentGuid": "x", "instanceGuid": "y"}],
                           "connections": []})
        result = serializer.deserialize(canvas, text, validate=False)
        assert result.skipped_components == ["y"]

    def test_unparsable_without_validation(self, serializer):
        assert serializer.deserialize(MemoryCanvas(), "{", validate=False) is None

    def test_validate(self, serializer):
        assert not serializer.validate("").is_valid

    def test_files(self, serializer, chain_graph, tmp_path):
        path = tmp_path / "g.json"
        assert serializer.save_to_file(path, chain_graph.values())
        canvas = MemoryCanvas()
        result = serializer.load_from_file(path, canvas)
        assert result.placed_names == ["Number Slider", "Addition", "Panel"]
        assert serializer.load_from_file(tmp_path / "missing.json", canvas) is None
