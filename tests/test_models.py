"""Tests for the document model (parsing, writing, queries)."""

import pytest
from PySide6.QtCore import QPointF

from ghjson.errors import DocumentFormatError
from ghjson.host import DataMapping, ParamAccess
from ghjson.models import (AdditionalParameterSettings, Component, ComponentProperty,
                           Connection, Document, Endpoint, ParameterSettings, parse_pivot)

A = "11111111-1111-1111-1111-111111111111"
B = "22222222-2222-2222-2222-222222222222"
C = "33333333-3333-3333-3333-333333333333"


@pytest.fixture
def document():
    return Document.from_dict({
        "components": [
            {"name": "Number Slider", "componentGuid": "57da07bd-ecab-415d-9d86-af36d7073abc",
             "instanceGuid": A, "pivot": {"X": 10, "Y": 20},
             "properties": {"CurrentValue": {"value": "5.00<0,10>", "type": "String"}}},
            {"name": "Addition", "componentGuid": "a0d62394-a118-422d-abb3-6af115c75b25",
             "instanceGuid": B, "warnings": ["Input parameter B failed to collect data"]},
            {"name": "Panel", "componentGuid": "59e0b89a-e487-49f8-bab8-b5bab16be14c",
             "instanceGuid": C, "selected": True},
        ],
        "connections": [
            {"from": {"instanceId": A, "name": "Number"}, "to": {"instanceId": B, "name": "A"}},
            {"from": {"instanceId": B, "name": "Result"}, "to": {"instanceId": C, "name": "Input"}},
        ],
    })


class TestPivot:
    """Pivot spellings."""

    @pytest.mark.parametrize("raw", [{"X": 1, "Y": 2}, {"x": 1, "y": 2}, "1,2", [1, 2]])
    def test_accepted_forms(self, raw):
        assert parse_pivot(raw) == QPointF(1, 2)

    @pytest.mark.parametrize("raw", [None, {"X": 1}, "1;2", "a,b", 7])
    def test_rejected_forms(self, raw):
        assert parse_pivot(raw) is None


class TestParameterSettings:
    """Non-default-only writing."""

    def test_minimal(self):
        assert ParameterSettings("A").to_dict() == {"parameterName": "A"}
        assert ParameterSettings("A", variable_name="A", nick_name="A").is_default

    def test_full(self):
        settings = ParameterSettings(
            "Max Radius", variable_name="@__Max_20Radius", type_hint="double",
            access=ParamAccess.LIST, description="radius", nick_name="R", required=True,
            is_principal=True, data_mapping=DataMapping.FLATTEN, expression="x*2",
            additional=AdditionalParameterSettings(reverse=True))
        data = settings.to_dict()
        assert data == {
            "parameterName": "Max Radius", "variableName": "@__Max_20Radius",
            "typeHint": "double", "access": "list", "description": "radius",
            "nickName": "R", "required": True, "isPrincipal": True,
            "dataMapping": "Flatten", "expression": "x*2",
            "additionalSettings": {"reverse": True},
        }
        assert ParameterSettings.from_dict(data) == settings

    def test_data_mapping_none_omitted(self):
        assert "dataMapping" not in ParameterSettings("A", data_mapping=DataMapping.NONE).to_dict()

    def test_legacy_nested_principal(self):
        settings = ParameterSettings.from_dict(
            {"parameterName": "x", "additionalSettings": {"isPrincipal": True}})
        assert settings.is_principal
        assert settings.additional is None

    def test_numeric_mapping_and_access(self):
        settings = ParameterSettings.from_dict({"parameterName": "x", "dataMapping": 2, "access": 1})
        assert settings.data_mapping is DataMapping.GRAFT
        assert settings.access is ParamAccess.LIST

    def test_missing_name(self):
        with pytest.raises(DocumentFormatError):
            ParameterSettings.from_dict({"typeHint": "double"})


class TestDocument:
    """Parsing and the query helpers."""

    def test_parse(self, document):
        assert len(document.components) == 3
        assert document.components[0].pivot == QPointF(10, 20)
        assert document.components[0].property_value("CurrentValue") == "5.00<0,10>"
        assert document.components[2].selected

    def test_round_trip_dict(self, document):
        assert Document.from_dict(document.to_dict()) == document

    def test_queries(self, document):
        assert document.get_component(B).name == "Addition"
        assert document.get_component("nope") is None
        assert [c.name for c in document.get_components_with_issues()] == ["Addition"]
        assert len(document.get_component_connections(B)) == 2
        assert document.get_component_inputs(B)[0].source.instance_id == A
        assert document.get_component_outputs(B)[0].target.name == "Input"
        assert document.get_id_to_guid_mapping()[C] == "59e0b89a-e487-49f8-bab8-b5bab16be14c"

    def test_without_pivots(self, document):
        assert all(c.pivot is None for c in document.without_pivots().components)
        assert document.components[0].pivot is not None

    def test_legacy_endpoint_keys(self):
        conn = Connection.from_dict({"from": {"id": A, "paramName": "N"},
                                     "to": {"instanceId": B, "name": "A"}})
        assert conn.source == Endpoint(A, "N")
        assert conn.is_valid()
        assert not Connection(Endpoint("", "N"), Endpoint(B, "A")).is_valid()

    @pytest.mark.parametrize("payload, path", [
        ([], None),
        ({"components": {}}, None),
        ({"components": [1]}, "components[0]"),
        ({"components": [], "connections": [{"from": 1, "to": {}}]}, "connections[0]"),
    ])
    def test_malformed(self, payload, path):
        with pytest.raises(DocumentFormatError) as info:
            Document.from_dict(payload)
        assert info.value.path == path


def test_component_to_dict_minimal():
    """Properties are always written; empty settings and messages are not."""
    comp = Component("Panel", "g", A)
    assert comp.to_dict() == {"name": "Panel", "componentGuid": "g", "instanceGuid": A,
                              "selected": False, "properties": {}}


def test_property_from_bare_value():
    """A bare value is wrapped with its JSON type."""
    assert ComponentProperty.from_dict(3) == ComponentProperty(3, "Int32")
    assert ComponentProperty.from_dict({"value": True}).type == "Boolean"
    prop = ComponentProperty("argb:255,0,0,0", "Color", "#ff000000")
    assert ComponentProperty.from_dict(prop.to_dict()) == prop
