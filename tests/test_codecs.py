"""Tests for the value codec registry (prefixes, strict parsing, number formatting)."""

import math

import numpy as np
import pytest
from PySide6.QtGui import QColor

from ghjson.codecs import CodecRegistry, format_number, parse_number
from ghjson.errors import CodecArgumentError, CodecFormatError, UnknownCodecError
from ghjson.geometry import (Arc, BoundingBox, Circle, Interval, Line, Plane, Point3d,
                             Rectangle3d, Size, Vector3d, almost_equal)


class TestNumberFormatting:
    """Locale-independent shortest formatting."""

    @pytest.mark.parametrize("value, text", [
        (1.5, "1.5"),
        (-2.0, "-2"),
        (-0.0, "0"),
        (0.1, "0.1"),
        (1e-07, "1e-07"),
        (3, "3"),
    ])
    def test_format(self, value, text):
        assert format_number(value) == text

    def test_format_rejects_non_finite(self):
        with pytest.raises(ValueError):
            format_number(math.inf)
        with pytest.raises(ValueError):
            format_number(math.nan)

    @pytest.mark.parametrize("text", ["", " ", "nan", "inf", "1,5", "1.2.3", "abc"])
    def test_parse_rejects(self, text):
        with pytest.raises(ValueError):
            parse_number(text)

    def test_parse_accepts_exponent_and_sign(self):
        assert parse_number("-1e3") == -1000.0
        assert parse_number("+.5") == 0.5


class TestRegistryLookup:
    """Name, alias and prefix lookup."""

    def test_builtin_names(self):
        names = CodecRegistry.names()
        for expected in ("Number", "Integer", "Boolean", "Text", "Point3d", "Vector3d",
                         "Line", "Plane", "Circle", "Arc", "Rectangle", "BoundingBox",
                         "Domain", "Bounds", "Color"):
            assert expected in names

    def test_alias_and_case_insensitive(self):
        assert CodecRegistry.get("colour") is CodecRegistry.get("Color")
        assert CodecRegistry.get("point").type_name == "Point3d"

    def test_unknown_name_raises(self):
        with pytest.raises(UnknownCodecError):
            CodecRegistry.get("Teapot")

    def test_duplicate_registration_rejected(self):
        with pytest.raises(ValueError):
            CodecRegistry.register("Number", "numberz", float, str, float)
        with pytest.raises(ValueError):
            CodecRegistry.register("Fresh", "pointXYZ", float, str, float)

    def test_find_for_value_prefers_boolean_over_integer(self):
        assert CodecRegistry.type_name_of(True) == "Boolean"
        assert CodecRegistry.type_name_of(3) == "Integer"
        assert CodecRegistry.type_name_of(np.float64(1.0)) == "Number"
        assert CodecRegistry.type_name_of(object()) is None


class TestTokens:
    """Serialize/deserialize for each value kind."""

    def test_point(self):
        token = CodecRegistry.serialize(Point3d(1.5, -2, 0))
        assert token == "pointXYZ:1.5,-2,0"
        assert CodecRegistry.deserialize("Point3d", token) == Point3d(1.5, -2.0, 0.0)

    def test_scalars(self):
        assert CodecRegistry.serialize(2.5) == "number:2.5"
        assert CodecRegistry.serialize(7) == "integer:7"
        assert CodecRegistry.serialize(False) == "boolean:false"
        assert CodecRegistry.serialize("a:b") == "text:a:b"
        assert CodecRegistry.deserialize("Text", "text:a:b") == "a:b"
        assert CodecRegistry.deserialize("Boolean", "boolean:TRUE") is True

    def test_color(self):
        token = CodecRegistry.serialize(QColor(10, 20, 30, 128))
        assert token == "argb:128,10,20,30"
        color = CodecRegistry.deserialize("Color", token)
        assert (color.alpha(), color.red(), color.green(), color.blue()) == (128, 10, 20, 30)

    @pytest.mark.parametrize("token", ["argb:255,0", "argb:256,0,0,0", "argb:a,b,c,d", "rgb:1,2,3,4"])
    def test_color_rejects(self, token):
        assert not CodecRegistry.validate("Color", token)
        with pytest.raises(CodecFormatError):
            CodecRegistry.deserialize("Color", token)

    def test_line_and_box(self):
        line = Line(Point3d(0, 0, 0), Point3d(1, 2, 3))
        assert CodecRegistry.serialize(line) == "line2p:0,0,0;1,2,3"
        box = BoundingBox(Point3d(-1, -1, -1), Point3d(1, 1, 1))
        assert CodecRegistry.deserialize("Box", CodecRegistry.serialize(box)) == box

    def test_plane(self):
        plane = Plane.world_xy()
        assert CodecRegistry.serialize(plane) == "planeOXY:0,0,0;1,0,0;0,1,0"
        assert CodecRegistry.deserialize("Plane", "planeOXY:0,0,0;1,0,0;0,1,0") == plane

    def test_degenerate_plane_rejected(self):
        assert not CodecRegistry.validate("Plane", "planeOXY:0,0,0;0,0,0;0,1,0")

    def test_circle_keeps_seam(self):
        circle = Circle.from_center_normal_start(Point3d(1, 1, 0), Vector3d(0, 0, 1), 2.0,
                                                 Point3d(1, 3, 0))
        decoded = CodecRegistry.deserialize("Circle", CodecRegistry.serialize(circle))
        assert almost_equal(decoded.start_point, Point3d(1, 3, 0), 1e-9)
        assert decoded.radius == 2.0

    def test_zero_radius_rejected(self):
        assert not CodecRegistry.validate("Circle", "circleCNRS:0,0,0;0,0,1;0;1,0,0")
        assert not CodecRegistry.validate("Arc", "arcCNRAB:0,0,0;0,0,1;0;0;1")

    def test_arc(self):
        arc = Arc.from_center_normal(Point3d(0, 0, 0), Vector3d(0, 0, 1), 1.0, 0.0, math.pi / 2)
        decoded = CodecRegistry.deserialize("Arc", CodecRegistry.serialize(arc))
        assert almost_equal(decoded, arc, 1e-12)

    def test_rectangle(self):
        rect = Rectangle3d(Plane.world_xy(), 4.0, 2.5)
        token = CodecRegistry.serialize(rect)
        assert token == "rectangleOXY:0,0,0;1,0,0;0,1,0;4,2.5"
        assert CodecRegistry.deserialize("Rectangle", token) == rect

    def test_domain_and_bounds(self):
        assert CodecRegistry.serialize(Interval(0, 1.5)) == "domain:0<1.5"
        assert CodecRegistry.deserialize("Domain", "domain:-1<1") == Interval(-1.0, 1.0)
        assert CodecRegistry.serialize(Size(10, 20)) == "bounds:10,20"

    def test_wrong_prefix_for_type(self):
        with pytest.raises(CodecFormatError):
            CodecRegistry.deserialize("Point3d", "vectorXYZ:1,2,3")

    def test_missing_fields(self):
        assert not CodecRegistry.validate("Point3d", "pointXYZ:1,2")
        assert not CodecRegistry.validate("Point3d", "pointXYZ:1,2,nan")

    def test_validate_unknown_type_is_false(self):
        assert CodecRegistry.validate("Teapot", "teapot:1") is False

    def test_serialize_wrong_value_type(self):
        with pytest.raises(CodecArgumentError):
            CodecRegistry.get("Point3d").serialize(Vector3d(1, 0, 0))
        with pytest.raises(CodecArgumentError):
            CodecRegistry.serialize(object())

    def test_non_finite_number_not_serializable(self):
        with pytest.raises(CodecFormatError):
            CodecRegistry.serialize(math.inf)


def test_try_deserialize_from_prefix():
    """Prefix dispatch succeeds only for registered, well-formed tokens."""
    assert CodecRegistry.try_deserialize_from_prefix("vectorXYZ:0,0,1") == (True, Vector3d(0, 0, 1))
    assert CodecRegistry.try_deserialize_from_prefix("hello") == (False, "hello")
    assert CodecRegistry.try_deserialize_from_prefix("nope:1,2") == (False, "nope:1,2")
    assert CodecRegistry.try_deserialize_from_prefix("pointXYZ:1") == (False, "pointXYZ:1")
    assert CodecRegistry.try_deserialize_from_prefix(42) == (False, 42)
