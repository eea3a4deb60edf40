# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

models.py - Document Model
--------------------------
Value records shared by the extractor, the validator and the reconstruction
engine. Records hold no references to live nodes; ids are plain strings.

JSON shape::

    {
        "components": [
            {
                "name": "Number Slider",
                "componentGuid": "57da07bd-...",
                "instanceGuid": "0b6c4b5e-...",
                "pivot": {"X": 120.0, "Y": 40.0},          # optional
                "selected": false,
                "properties": {"CurrentValue": {"value": "5.00<0,10>", "type": "String"}},
                "inputSettings": [ ... ],                    # optional
                "outputSettings": [ ... ],                   # optional
                "warnings": [ ... ], "errors": [ ... ]       # optional
            }
        ],
        "connections": [
            {"from": {"instanceId": "...", "name": "N"},
             "to":   {"instanceId": "...", "name": "A"}}
        ]
    }

Parsing is lenient about missing optional fields and legacy spellings
(compact ``"x,y"`` pivots, ``paramName`` / ``componentId`` / ``id`` endpoint keys); checking
a payload is the validator's job.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from PySide6.QtCore import QPointF

from ghjson.errors import DocumentFormatError
from ghjson.host import DataMapping, ParamAccess


# ==============================================================================
# PIVOTS
# ==============================================================================

def pivot_to_dict(pivot: QPointF) -> Dict[str, float]:
    return {"X": float(pivot.x()), "Y": float(pivot.y())}


def parse_pivot(value: Any) -> Optional[QPointF]:
    """
    ``{"X": 1, "Y": 2}``, ``{"x": 1, "y": 2}`` or ``"1,2"`` to a QPointF.

    Returns None for a missing or unreadable pivot.
    """
    if value is None:
        return None
    try:
        if isinstance(value, str):
            x_text, y_text = value.split(",")
            return QPointF(float(x_text), float(y_text))
        if isinstance(value, dict):
            x = value.get("X", value.get("x"))
            y = value.get("Y", value.get("y"))
            if x is None or y is None:
                return None
            return QPointF(float(x), float(y))
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return QPointF(float(value[0]), float(value[1]))
    except (TypeError, ValueError):
        return None
    return None


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value]


# ==============================================================================
# PROPERTIES & PARAMETER SETTINGS
# ==============================================================================

@dataclass(frozen=True)
class ComponentProperty:
    """A captured property: JSON-ready value, its type name, optional display text."""
    value: Any
    type: str = "Object"
    human_readable: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"value": self.value, "type": self.type}
        if self.human_readable is not None:
            data["humanReadable"] = self.human_readable
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "ComponentProperty":
        # Bare values are accepted for hand-written documents
        if not isinstance(data, dict) or "value" not in data:
            return cls(value=data, type=json_type_name(data))
        return cls(value=data.get("value"),
                   type=str(data.get("type") or json_type_name(data.get("value"))),
                   human_readable=data.get("humanReadable"))


def json_type_name(value: Any) -> str:
    """Type label for plain JSON values."""
    if value is None:
        return "Null"
    if isinstance(value, bool):
        return "Boolean"
    if isinstance(value, int):
        return "Int32"
    if isinstance(value, float):
        return "Double"
    if isinstance(value, str):
        return "String"
    if isinstance(value, list):
        return "List"
    if isinstance(value, dict):
        return "Dictionary"
    return type(value).__name__


@dataclass(frozen=True)
class AdditionalParameterSettings:
    """Modifier flags; None means "not recorded"."""
    reverse: Optional[bool] = None
    simplify: Optional[bool] = None
    locked: Optional[bool] = None
    invert: Optional[bool] = None

    _KEYS = ("reverse", "simplify", "locked", "invert")

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, k) is None for k in self._KEYS)

    def to_dict(self) -> Dict[str, bool]:
        return {k: getattr(self, k) for k in self._KEYS if getattr(self, k) is not None}

    @classmethod
    def from_dict(cls, data: Any) -> Optional["AdditionalParameterSettings"]:
        if not isinstance(data, dict):
            return None
        values = {k: bool(data[k]) for k in cls._KEYS if data.get(k) is not None}
        settings = cls(**values)
        return None if settings.is_empty else settings


@dataclass(frozen=True)
class ParameterSettings:
    """
    Per-parameter metadata of a component input or output.

    Only non-default fields are written; ``variable_name`` is omitted when it
    equals ``parameter_name``.
    """
    parameter_name: str
    variable_name: Optional[str] = None
    type_hint: Optional[str] = None
    access: Optional[ParamAccess] = None
    description: Optional[str] = None
    nick_name: Optional[str] = None
    required: bool = False
    is_principal: bool = False
    data_mapping: Optional[DataMapping] = None
    expression: Optional[str] = None
    additional: Optional[AdditionalParameterSettings] = None

    @property
    def effective_variable_name(self) -> str:
        return self.variable_name or self.parameter_name

    @property
    def is_default(self) -> bool:
        """True when nothing beyond the name would be written."""
        return len(self.to_dict()) == 1

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"parameterName": self.parameter_name}
        if self.variable_name and self.variable_name != self.parameter_name:
            data["variableName"] = self.variable_name
        if self.type_hint:
            data["typeHint"] = self.type_hint
        if self.access is not None:
            data["access"] = self.access.value
        if self.description:
            data["description"] = self.description
        if self.nick_name and self.nick_name != self.parameter_name:
            data["nickName"] = self.nick_name
        if self.required:
            data["required"] = True
        if self.is_principal:
            data["isPrincipal"] = True
        if self.data_mapping is not None and self.data_mapping is not DataMapping.NONE:
            data["dataMapping"] = self.data_mapping.value
        if self.expression:
            data["expression"] = self.expression
        if self.additional is not None and not self.additional.is_empty:
            data["additionalSettings"] = self.additional.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParameterSettings":
        if not isinstance(data, dict):
            raise DocumentFormatError("parameter settings must be an object")
        name = data.get("parameterName") or data.get("name") or data.get("variableName")
        if not name:
            raise DocumentFormatError("parameter settings need a parameterName")
        access = data.get("access")
        mapping = data.get("dataMapping")
        additional = AdditionalParameterSettings.from_dict(data.get("additionalSettings"))
        # The principal flag also appears nested in older documents
        nested = data.get("additionalSettings") or {}
        return cls(
            parameter_name=str(name),
            variable_name=data.get("variableName"),
            type_hint=data.get("typeHint"),
            access=ParamAccess.parse(access) if access is not None else None,
            description=data.get("description"),
            nick_name=data.get("nickName"),
            required=bool(data.get("required", False)),
            is_principal=bool(data.get("isPrincipal", nested.get("isPrincipal", False))),
            data_mapping=DataMapping.parse(mapping) if mapping is not None else None,
            expression=data.get("expression"),
            additional=additional,
        )


# ==============================================================================
# COMPONENTS & CONNECTIONS
# ==============================================================================

@dataclass(frozen=True)
class Component:
    """One node of the document."""
    name: str
    component_guid: str
    instance_guid: str
    pivot: Optional[QPointF] = None
    selected: bool = False
    properties: Dict[str, ComponentProperty] = field(default_factory=dict)
    input_settings: List[ParameterSettings] = field(default_factory=list)
    output_settings: List[ParameterSettings] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(self.warnings or self.errors)

    def property_value(self, name: str, default: Any = None) -> Any:
        prop = self.properties.get(name)
        return prop.value if prop is not None else default

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "componentGuid": self.component_guid,
            "instanceGuid": self.instance_guid,
        }
        if self.pivot is not None:
            data["pivot"] = pivot_to_dict(self.pivot)
        data["selected"] = self.selected
        data["properties"] = {k: p.to_dict() for k, p in self.properties.items()}
        if self.input_settings:
            data["inputSettings"] = [s.to_dict() for s in self.input_settings]
        if self.output_settings:
            data["outputSettings"] = [s.to_dict() for s in self.output_settings]
        if self.warnings:
            data["warnings"] = list(self.warnings)
        if self.errors:
            data["errors"] = list(self.errors)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Component":
        if not isinstance(data, dict):
            raise DocumentFormatError("component must be an object")
        properties = data.get("properties") or {}
        if not isinstance(properties, dict):
            raise DocumentFormatError("properties must be an object")
        return cls(
            name=str(data.get("name") or ""),
            component_guid=str(data.get("componentGuid") or ""),
            instance_guid=str(data.get("instanceGuid") or ""),
            pivot=parse_pivot(data.get("pivot")),
            selected=bool(data.get("selected", False)),
            properties={str(k): ComponentProperty.from_dict(v) for k, v in properties.items()},
            input_settings=[ParameterSettings.from_dict(s) for s in data.get("inputSettings") or []],
            output_settings=[ParameterSettings.from_dict(s) for s in data.get("outputSettings") or []],
            warnings=_string_list(data.get("warnings")),
            errors=_string_list(data.get("errors")),
        )


@dataclass(frozen=True)
class Endpoint:
    """One side of a connection: component instance id plus parameter name."""
    instance_id: str
    name: str

    @property
    def is_valid(self) -> bool:
        return bool(self.instance_id) and bool(self.name)

    def to_dict(self) -> Dict[str, str]:
        return {"instanceId": self.instance_id, "name": self.name}

    @classmethod
    def from_dict(cls, data: Any) -> "Endpoint":
        if not isinstance(data, dict):
            raise DocumentFormatError("connection endpoint must be an object")
        instance_id = data.get("instanceId", data.get("componentId", data.get("id")))
        name = data.get("name", data.get("paramName"))
        return cls(instance_id=str(instance_id) if instance_id is not None else "",
                   name=str(name) if name is not None else "")


@dataclass(frozen=True)
class Connection:
    """Output ``source.name`` of one component feeds input ``target.name`` of another."""
    source: Endpoint
    target: Endpoint

    def is_valid(self) -> bool:
        return self.source.is_valid and self.target.is_valid

    def to_dict(self) -> Dict[str, Any]:
        return {"from": self.source.to_dict(), "to": self.target.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Connection":
        if not isinstance(data, dict):
            raise DocumentFormatError("connection must be an object")
        return cls(source=Endpoint.from_dict(data.get("from")),
                   target=Endpoint.from_dict(data.get("to")))


# ==============================================================================
# DOCUMENT
# ==============================================================================

@dataclass(frozen=True)
class Document:
    """Components plus connections; the contract between all stages."""
    components: List[Component] = field(default_factory=list)
    connections: List[Connection] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "components": [c.to_dict() for c in self.components],
            "connections": [c.to_dict() for c in self.connections],
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Document":
        if not isinstance(data, dict):
            raise DocumentFormatError("document must be a JSON object")
        components = data.get("components", [])
        connections = data.get("connections", [])
        if not isinstance(components, list):
            raise DocumentFormatError("'components' must be an array")
        if not isinstance(connections, list):
            raise DocumentFormatError("'connections' must be an array")

        parsed_components = []
        for i, item in enumerate(components):
            try:
                parsed_components.append(Component.from_dict(item))
            except DocumentFormatError as exc:
                raise DocumentFormatError(str(exc), f"components[{i}]") from exc

        parsed_connections = []
        for i, item in enumerate(connections):
            try:
                parsed_connections.append(Connection.from_dict(item))
            except DocumentFormatError as exc:
                raise DocumentFormatError(str(exc), f"connections[{i}]") from exc

        return cls(components=parsed_components, connections=parsed_connections)

    # --------------------------------------------------------------------------
    # Queries
    # --------------------------------------------------------------------------

    def get_component(self, instance_id: str) -> Optional[Component]:
        return next((c for c in self.components if c.instance_guid == instance_id), None)

    def get_components_with_issues(self) -> List[Component]:
        return [c for c in self.components if c.has_issues]

    def get_component_connections(self, instance_id: str) -> List[Connection]:
        return [c for c in self.connections
                if c.source.instance_id == instance_id or c.target.instance_id == instance_id]

    def get_component_inputs(self, instance_id: str) -> List[Connection]:
        """Connections feeding into the component."""
        return [c for c in self.connections if c.target.instance_id == instance_id]

    def get_component_outputs(self, instance_id: str) -> List[Connection]:
        """Connections leaving the component."""
        return [c for c in self.connections if c.source.instance_id == instance_id]

    def get_id_to_guid_mapping(self) -> Dict[str, str]:
        """Instance id to component type key."""
        return {c.instance_guid: c.component_guid for c in self.components}

    def without_pivots(self) -> "Document":
        return replace(self, components=[replace(c, pivot=None) for c in self.components])
