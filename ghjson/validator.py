# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

validator.py - Document Validation
----------------------------------
Two passes over an incoming document:

    structural   JSON shape, required fields, endpoint references
    semantic     component types against the live type lookup service,
                 connection data types against a coarse compatibility table

Findings are collected into one ``ValidationReport`` rather than raised.
Errors mean the document should not be used; warnings and information are
advisory. Type mismatches are only ever warnings, since the host converts
many values implicitly.
"""

import json
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union

from ghjson.errors import DocumentFormatError
from ghjson.host import NodeKind, TypeDescriptor, TypeResolver
from ghjson.logger import get_logger
from ghjson.models import Component, Document
from ghjson.typehints import TypeHintMapper

log = get_logger("Validator")


# ==============================================================================
# PARAMETER TYPES
# ==============================================================================

class TypeCategory(Enum):
    GENERIC = "generic"
    NUMERIC = "numeric"
    GEOMETRY = "geometry"
    TEXT = "text"
    OTHER = "other"


@dataclass(frozen=True)
class ParamType:
    """A named parameter data type with an optional parent type."""
    name: str
    category: TypeCategory
    base: Optional[str] = None


class ParamTypeTable:
    """
    Parameter data types and the compatibility rules between them.

    A source type can feed a target type when any of these holds:

        1. same type
        2. the target is one of the source's ancestors
        3. both are numeric
        4. both are geometry
        5. the target is text (everything formats to text)
        6. the target is generic

    Types the table does not know are not judged.
    """

    _by_name: ClassVar[Dict[str, ParamType]] = {}
    _aliases: ClassVar[Dict[str, str]] = {}

    @classmethod
    def register(cls, name: str, category: TypeCategory, base: Optional[str] = None,
                 aliases: Tuple[str, ...] = ()) -> ParamType:
        key = name.lower()
        if key in cls._by_name or key in cls._aliases:
            raise ValueError(f"Parameter type '{name}' already registered")
        param_type = ParamType(name, category, base)
        cls._by_name[key] = param_type
        for alias in aliases:
            cls.add_alias(alias, name)
        return param_type

    @classmethod
    def add_alias(cls, alias: str, name: str) -> None:
        key = alias.lower()
        if key in cls._by_name:
            raise ValueError(f"Alias '{alias}' shadows a registered type")
        cls._aliases[key] = name.lower()

    @classmethod
    def get(cls, name: Optional[str]) -> Optional[ParamType]:
        if not name:
            return None
        key = name.strip().lower()
        key = cls._aliases.get(key, key)
        return cls._by_name.get(key)

    @classmethod
    def from_type_hint(cls, hint: Optional[str]) -> Optional[ParamType]:
        """``List<Point3d>`` resolves like ``Point3d``."""
        if not hint:
            return None
        return cls.get(TypeHintMapper.extract_base_type(hint))

    @classmethod
    def ancestors(cls, param_type: ParamType) -> List[ParamType]:
        chain: List[ParamType] = []
        current = cls.get(param_type.base)
        while current is not None and current not in chain:
            chain.append(current)
            current = cls.get(current.base)
        return chain

    @classmethod
    def is_compatible(cls, source: Optional[ParamType], target: Optional[ParamType]) -> bool:
        if source is None or target is None:
            return True

        if source == target:
            return True
        if target in cls.ancestors(source):
            return True
        if source.category is target.category and source.category in (
                TypeCategory.NUMERIC, TypeCategory.GEOMETRY):
            return True
        if target.category in (TypeCategory.TEXT, TypeCategory.GENERIC):
            return True
        # Generic outputs carry anything; their runtime content is unknown here
        if source.category is TypeCategory.GENERIC:
            return True
        return False


def setup_default_param_types() -> None:
    """Register the built-in parameter types. Called once on import."""
    reg = ParamTypeTable.register
    G, N, GEO, T, O = (TypeCategory.GENERIC, TypeCategory.NUMERIC, TypeCategory.GEOMETRY,
                       TypeCategory.TEXT, TypeCategory.OTHER)

    # --- Primitives ---
    reg("Generic", G, aliases=("object", "system.object", "dynamic"))
    reg("Number", N, aliases=("double", "float", "system.double", "decimal"))
    reg("Integer", N, base="Number", aliases=("int", "int32", "long", "system.int32"))
    reg("Boolean", O, aliases=("bool", "system.boolean"))
    reg("Text", T, aliases=("string", "str", "system.string", "char"))
    reg("Colour", O, aliases=("color", "system.drawing.color"))
    reg("Domain", O, aliases=("interval",))
    reg("Time", O, aliases=("datetime",))

    # --- Geometry ---
    reg("Geometry", GEO, aliases=("geometrybase",))
    reg("Point", GEO, base="Geometry", aliases=("point3d",))
    reg("Vector", GEO, base="Geometry", aliases=("vector3d",))
    reg("Plane", GEO, base="Geometry")
    reg("Curve", GEO, base="Geometry", aliases=("polyline", "nurbscurve"))
    reg("Line", GEO, base="Curve")
    reg("Circle", GEO, base="Curve")
    reg("Arc", GEO, base="Curve")
    reg("Rectangle", GEO, base="Curve", aliases=("rectangle3d",))
    reg("Surface", GEO, base="Geometry")
    reg("Brep", GEO, base="Geometry")
    reg("Box", GEO, base="Brep", aliases=("boundingbox",))
    reg("Mesh", GEO, base="Geometry")
    reg("Transform", O)


setup_default_param_types()


# ==============================================================================
# REPORT
# ==============================================================================

@dataclass
class ValidationReport:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    information: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def extend(self, other: "ValidationReport") -> "ValidationReport":
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.information.extend(other.information)
        return self

    def format(self) -> str:
        """
        Readable report, one section per non-empty severity::

            Errors:
            - components[0].name is missing or null.

            Warnings:
            - ...
        """
        sections = []
        for title, items in (("Errors", self.errors),
                             ("Warnings", self.warnings),
                             ("Information", self.information)):
            if items:
                sections.append("\n".join([f"{title}:"] + [f"- {item}" for item in items]))
        return "\n\n".join(sections)

    def __str__(self) -> str:
        return self.format()


def _is_guid(value: Any) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def _missing(obj: Dict[str, Any], key: str) -> bool:
    return obj.get(key) is None


# ==============================================================================
# VALIDATOR
# ==============================================================================

class GhJsonValidator:
    """
    Structural and semantic checks for GhJSON documents.

    Usage:
        validator = GhJsonValidator(resolver=registry)
        report = validator.validate(json_text)
        if not report.is_valid:
            print(report.format())

    Args:
        resolver: Type lookup service for the semantic pass. Without one,
                  only the structure is checked.
    """

    def __init__(self, resolver: Optional[TypeResolver] = None) -> None:
        self.resolver = resolver

    def validate(self, payload: Union[str, Dict[str, Any]]) -> ValidationReport:
        report = ValidationReport()
        data = self._parse(payload, report)
        if data is None:
            return report

        report.extend(self.validate_structure(data))
        if not report.is_valid:
            return report

        try:
            document = Document.from_dict(data)
        except DocumentFormatError as exc:
            report.errors.append(str(exc))
            return report

        report.extend(self.validate_semantics(document))
        log.debug("Validation finished: %d errors, %d warnings",
                  len(report.errors), len(report.warnings))
        return report

    @staticmethod
    def _parse(payload: Union[str, Dict[str, Any]], report: ValidationReport) -> Optional[Dict[str, Any]]:
        if isinstance(payload, dict):
            return payload
        if payload is None or (isinstance(payload, str) and not payload.strip()):
            report.errors.append("JSON input is null or empty.")
            return None
        if not isinstance(payload, str):
            report.errors.append("Document root is not a JSON object.")
            return None
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            report.errors.append(f"Invalid JSON: {exc}")
            return None
        if not isinstance(data, dict):
            report.errors.append("Document root is not a JSON object.")
            return None
        return data

    # --------------------------------------------------------------------------
    # Structure
    # --------------------------------------------------------------------------

    def validate_structure(self, data: Dict[str, Any]) -> ValidationReport:
        report = ValidationReport()
        components = data.get("components")
        connections = data.get("connections")

        if not isinstance(components, list):
            report.errors.append("'components' property is missing or not an array.")
            components = None
        if not isinstance(connections, list):
            report.errors.append("'connections' property is missing or not an array.")
            connections = None

        defined_ids = set()
        for i, comp in enumerate(components or []):
            if not isinstance(comp, dict):
                report.errors.append(f"components[{i}] is not a JSON object.")
                continue
            if _missing(comp, "name"):
                report.errors.append(f"components[{i}].name is missing or null.")
            for key in ("componentGuid", "instanceGuid"):
                if _missing(comp, key):
                    report.errors.append(f"components[{i}].{key} is missing or null.")
                elif not _is_guid(comp[key]):
                    report.warnings.append(f"components[{i}].{key} '{comp[key]}' is not a valid GUID.")
            if not _missing(comp, "instanceGuid"):
                instance_id = str(comp["instanceGuid"])
                if instance_id in defined_ids:
                    report.errors.append(f"components[{i}].instanceGuid '{instance_id}' is duplicated.")
                defined_ids.add(instance_id)
            if _missing(comp, "pivot"):
                report.information.append(f"components[{i}].pivot is missing or null.")
            if "properties" in comp and not isinstance(comp["properties"], dict):
                report.errors.append(f"components[{i}].properties is not an object.")

        for i, conn in enumerate(connections or []):
            if not isinstance(conn, dict):
                report.errors.append(f"connections[{i}] is not a JSON object.")
                continue
            for end in ("from", "to"):
                endpoint = conn.get(end)
                where = f"connections[{i}].{end}"
                if not isinstance(endpoint, dict):
                    report.errors.append(f"{where} is missing or not an object.")
                    continue
                instance_id = endpoint.get("instanceId", endpoint.get("componentId"))
                if instance_id is None:
                    report.errors.append(f"{where}.instanceId is missing or null.")
                else:
                    if not _is_guid(instance_id):
                        report.warnings.append(f"{where}.instanceId '{instance_id}' is not a valid GUID.")
                    if components is not None and str(instance_id) not in defined_ids:
                        report.errors.append(
                            f"{where}.instanceId '{instance_id}' is not defined in components[].instanceGuid.")
                if _missing(endpoint, "name") and _missing(endpoint, "paramName"):
                    report.errors.append(f"{where}.name is missing or null.")

        return report

    # --------------------------------------------------------------------------
    # Semantics
    # --------------------------------------------------------------------------

    def validate_semantics(self, document: Document) -> ValidationReport:
        report = ValidationReport()
        if self.resolver is None:
            log.debug("No type resolver, semantic checks skipped")
            return report

        descriptors: Dict[str, Optional[TypeDescriptor]] = {}
        for i, comp in enumerate(document.components):
            descriptor = self.resolver.resolve_guid(comp.component_guid)
            descriptors[comp.instance_guid] = descriptor
            if descriptor is None:
                # Name lookup only types the wires; the key itself must resolve
                descriptors[comp.instance_guid] = self.resolver.resolve_name(comp.name)
                report.errors.append(
                    f"components[{i}] '{comp.name}' has unknown componentGuid '{comp.component_guid}'.")

        for i, conn in enumerate(document.connections):
            source = document.get_component(conn.source.instance_id)
            target = document.get_component(conn.target.instance_id)
            if source is None or target is None:
                continue
            source_desc = descriptors.get(source.instance_guid)
            target_desc = descriptors.get(target.instance_guid)

            source_type, found_source = self._endpoint_type(source, source_desc, conn.source.name, True)
            target_type, found_target = self._endpoint_type(target, target_desc, conn.target.name, False)
            if not found_source:
                report.warnings.append(
                    f"connections[{i}]: '{source.name}' has no output '{conn.source.name}'.")
            if not found_target:
                report.warnings.append(
                    f"connections[{i}]: '{target.name}' has no input '{conn.target.name}'.")

            if not ParamTypeTable.is_compatible(source_type, target_type):
                report.warnings.append(
                    f"connections[{i}]: {source_type.name} output '{source.name}.{conn.source.name}' "
                    f"may not convert to {target_type.name} input '{target.name}.{conn.target.name}'.")
        return report

    @staticmethod
    def _endpoint_type(component: Component, descriptor: Optional[TypeDescriptor],
                       name: str, output: bool) -> Tuple[Optional[ParamType], bool]:
        """
        Data type of a connection endpoint and whether the parameter exists.

        Script parameters are declared in the document itself, so their
        settings are consulted first; everything else comes from the type
        descriptor. Unresolvable types come back as None.
        """
        settings = component.output_settings if output else component.input_settings
        for s in settings:
            if s.parameter_name == name or s.nick_name == name:
                if s.type_hint:
                    return ParamTypeTable.from_type_hint(s.type_hint), True
                break

        if descriptor is None:
            return None, True
        spec = descriptor.output_spec(name) if output else descriptor.input_spec(name)
        if spec is None:
            # Script parameters are not part of the static descriptor
            return None, descriptor.kind is NodeKind.SCRIPT or any(
                s.parameter_name == name for s in settings)
        return ParamTypeTable.get(spec.type_name), True


def analyze(payload: Union[str, Dict[str, Any]],
            resolver: Optional[TypeResolver] = None) -> Tuple[bool, Optional[str]]:
    """
    One-call validation.

    Returns:
        ``(is_valid, message)``; the message is None when there is nothing
        to report.
    """
    report = GhJsonValidator(resolver).validate(payload)
    return report.is_valid, report.format() or None
