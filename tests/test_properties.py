"""Tests for the property descriptor table (capture/apply, filters, encoding)."""

import pytest
from PySide6.QtGui import QColor

from ghjson.config import PropertyFilter, SerializationContext
from ghjson.geometry import Point3d
from ghjson.host import NodeKind
from ghjson.models import ComponentProperty
from ghjson.properties import (DEFAULT_PROPERTY_TABLE, PropertyDescriptor, PropertyTable,
                               ValueListItem, attr_property, encode_value)


@pytest.fixture
def full():
    return PropertyFilter(SerializationContext.FULL)


class TestEncodeValue:
    """Document records for raw values."""

    def test_primitives_pass_through(self):
        assert encode_value("abc") == ComponentProperty("abc", "String")
        assert encode_value(True) == ComponentProperty(True, "Boolean")
        assert encode_value([1]) == ComponentProperty([1], "List")

    def test_codec_values(self):
        prop = encode_value(Point3d(1, 2, 3))
        assert prop.value == "pointXYZ:1,2,3"
        assert prop.type == "Point3d"
        assert prop.human_readable is not None

    def test_named_codec_and_colour_text(self):
        prop = encode_value(QColor(255, 0, 0), "Color")
        assert prop == ComponentProperty("argb:255,255,0,0", "Color", "#ffff0000")

    def test_unknown_object_uses_text(self):
        class Thing:
            def __str__(self):
                return "a thing"

        assert encode_value(Thing()) == ComponentProperty("a thing", "Thing", "a thing")


class TestTable:
    """Registration and per-kind lookup."""

    def test_duplicate_rejected(self):
        table = PropertyTable()
        table.register(attr_property("NickName", "nick_name"))
        with pytest.raises(ValueError):
            table.register(attr_property("NickName", "nick_name"))

    def test_kinds(self):
        names = [d.name for d in DEFAULT_PROPERTY_TABLE.for_kind(NodeKind.SLIDER)]
        assert names[:3] == ["NickName", "Locked", "Hidden"]
        assert names.index("CurrentValue") < names.index("Rounding")
        assert "UserText" not in names

    def test_read_only_descriptor(self):
        descriptor = PropertyDescriptor("Area", lambda n: 1.0)
        assert descriptor.read_only
        assert descriptor.applies_to(NodeKind.PANEL)


class TestCapture:
    """Reading properties from live nodes."""

    def test_panel(self, make_node, full):
        panel = make_node("Panel")
        panel.user_text = "hello"
        props = DEFAULT_PROPERTY_TABLE.capture(panel, full)
        assert props["UserText"] == ComponentProperty("hello", "String")
        assert props["NickName"].value == "Panel"
        assert props["Hidden"].value is False
        assert "PersistentData" not in props

    def test_slider(self, make_node, full):
        slider = make_node("Number Slider")
        props = DEFAULT_PROPERTY_TABLE.capture(slider, full)
        assert props["CurrentValue"].value == "0.250<0,1>"
        assert props["Rounding"].value == "R"

    def test_value_list(self, make_node, full):
        props = DEFAULT_PROPERTY_TABLE.capture(make_node("Value List"), full)
        assert props["ListMode"].value == "DropDown"
        assert props["ListItems"].value[0] == {"Name": "One", "Expression": "1", "Selected": True}

    def test_swatch_without_human_readable(self, make_node, full):
        swatch = make_node("Colour Swatch")
        props = DEFAULT_PROPERTY_TABLE.capture(swatch, full, include_human_readable=False)
        assert props["Color"] == ComponentProperty("argb:255,255,255,255", "Color")

    def test_persistent_data(self, make_node, full):
        number = make_node("Number")
        number.persistent_data = {(0,): [2.0]}
        props = DEFAULT_PROPERTY_TABLE.capture(number, full)
        assert props["PersistentData"].value == {"{0}": {"{0}(0)": {"type": "Number", "value": "number:2"}}}

    def test_compact_drops_ui_kinds(self, make_node):
        toggle = make_node("Boolean Toggle")
        props = DEFAULT_PROPERTY_TABLE.capture(toggle, PropertyFilter(SerializationContext.COMPACT))
        assert "Value" not in props
        assert "Hidden" not in props
        assert "NickName" in props

    def test_failing_getter_is_skipped(self, make_node, full, ghjson_logs):
        table = PropertyTable()
        table.register(PropertyDescriptor("NickName", lambda n: n.missing))
        table.register(attr_property("Locked", "locked"))
        props = table.capture(make_node("Panel"), full)
        assert list(props) == ["Locked"]
        assert "Skipped property NickName" in ghjson_logs.text


class TestApply:
    """Writing document properties onto live nodes."""

    def test_applies_allowed_in_order(self, make_node, full):
        slider = make_node("Number Slider")
        applied = DEFAULT_PROPERTY_TABLE.apply(slider, {
            "Rounding": ComponentProperty("E", "String"),
            "CurrentValue": ComponentProperty("4<0,10>", "String"),
            "NickName": ComponentProperty("count", "String"),
        }, full)
        assert applied == ["NickName", "CurrentValue", "Rounding"]
        assert slider.nick_name == "count"
        assert slider.maximum == 10
        # Rounding applies after CurrentValue and wins
        assert slider.rounding.value == "E"

    def test_unknown_and_foreign_ignored(self, make_node, full):
        panel = make_node("Panel")
        applied = DEFAULT_PROPERTY_TABLE.apply(panel, {
            "Bogus": ComponentProperty(1, "Int32"),
            "Script": ComponentProperty("x", "String"),
        }, full)
        assert applied == []

    def test_exclude(self, make_node, full):
        panel = make_node("Panel")
        applied = DEFAULT_PROPERTY_TABLE.apply(
            panel, {"UserText": ComponentProperty("t", "String")}, full,
            exclude=frozenset({"UserText"}))
        assert applied == []
        assert panel.user_text == ""

    def test_colour_decoded(self, make_node, full):
        swatch = make_node("Colour Swatch")
        DEFAULT_PROPERTY_TABLE.apply(swatch, {"Color": ComponentProperty("argb:255,0,128,0", "Color")}, full)
        assert swatch.color == QColor(0, 128, 0)

    def test_bad_value_logged_and_skipped(self, make_node, full, ghjson_logs):
        swatch = make_node("Colour Swatch")
        applied = DEFAULT_PROPERTY_TABLE.apply(swatch, {
            "Color": ComponentProperty("argb:1,2", "Color"),
            "Locked": ComponentProperty(True, "Boolean"),
        }, full)
        assert applied == ["Locked"]
        assert swatch.color == QColor(255, 255, 255)
        assert "Could not apply Color" in ghjson_logs.text

    def test_list_items(self, make_node, full):
        values = make_node("Value List")
        DEFAULT_PROPERTY_TABLE.apply(values, {"ListItems": ComponentProperty(
            [{"Name": "Red", "Expression": "\"r\""}, {"name": "Blue", "selected": True}], "List")}, full)
        assert values.list_items == [ValueListItem("Red", "\"r\"", False),
                                     ValueListItem("Blue", "Blue", True)]

    def test_persistent_data(self, make_node, full):
        number = make_node("Number")
        DEFAULT_PROPERTY_TABLE.apply(number, {"PersistentData": ComponentProperty(
            {"{0}": {"{0}(0)": {"type": "Number", "value": "number:2.5"}}}, "Dictionary")}, full)
        assert number.persistent_data == {(0,): [2.5]}
