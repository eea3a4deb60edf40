# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

host.py - Host Collaborator Interfaces
--------------------------------------
The live object model, the type lookup service, the node factory and the
canvas belong to the host application. This module declares the surface the
core calls on them and nothing more.

Node and parameter attributes are a plain-attribute contract (documented on
each class) so hosts can back them with properties or slots as they like.
Node behaviour is selected once through ``HostNode.kind``; the extractor and
the reconstruction engine dispatch on that tag instead of probing types.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple

from PySide6.QtCore import QPointF, QRectF

from ghjson.logger import get_logger

log = get_logger("Host")


# ==============================================================================
# ENUMERATIONS
# ==============================================================================

class NodeKind(Enum):
    """Behavioural tag of a node, fixed when the node is created."""
    GENERIC = "generic"
    PARAMETER = "parameter"
    SLIDER = "slider"
    PANEL = "panel"
    SCRIPT = "script"
    VALUE_LIST = "valueList"
    TOGGLE = "toggle"
    SWATCH = "swatch"
    SCRIBBLE = "scribble"


class ParamAccess(Enum):
    ITEM = "item"
    LIST = "list"
    TREE = "tree"

    @classmethod
    def parse(cls, value: Any, default: "ParamAccess" = None) -> "ParamAccess":
        """Accepts enum members, names/values in any case, or 0/1/2."""
        default = default or cls.ITEM
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            members = list(cls)
            return members[value] if 0 <= value < len(members) else default
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if lowered in (member.value, member.name.lower()):
                    return member
        return default


class DataMapping(Enum):
    NONE = "None"
    FLATTEN = "Flatten"
    GRAFT = "Graft"

    @classmethod
    def parse(cls, value: Any) -> "DataMapping":
        """Name in any case, numeric code or numeric string; anything else is NONE."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = value.strip()
            for member in cls:
                if text.lower() == member.value.lower():
                    return member
            if text.lstrip("-").isdigit():
                value = int(text)
        if isinstance(value, int) and not isinstance(value, bool):
            members = list(cls)
            return members[value] if 0 <= value < len(members) else cls.NONE
        return cls.NONE


class ScriptLanguage(Enum):
    CSHARP = "csharp"
    PYTHON = "python"
    VB = "vb"


# ==============================================================================
# TYPE DESCRIPTORS
# ==============================================================================

@dataclass(frozen=True)
class ParamSpec:
    """Declared parameter of a node type."""
    name: str
    type_name: str = "Generic"
    access: ParamAccess = ParamAccess.ITEM
    optional: bool = False
    description: str = ""


@dataclass(frozen=True)
class TypeDescriptor:
    """What the type lookup service returns for a component type key."""
    guid: str
    name: str
    kind: NodeKind = NodeKind.GENERIC
    inputs: Tuple[ParamSpec, ...] = ()
    outputs: Tuple[ParamSpec, ...] = ()
    language: Optional[ScriptLanguage] = None
    category: str = "Uncategorized"

    def input_spec(self, name: str) -> Optional[ParamSpec]:
        return next((p for p in self.inputs if p.name == name), None)

    def output_spec(self, name: str) -> Optional[ParamSpec]:
        return next((p for p in self.outputs if p.name == name), None)


# ==============================================================================
# LIVE OBJECT MODEL
# ==============================================================================

class HostParam(ABC):
    """
    A live input or output parameter.

    Attribute contract (read/write unless noted):
        name, nick_name, description, variable_name (script params),
        access (ParamAccess), data_mapping (DataMapping), simplify, reverse,
        locked, invert, expression (Optional[str]), optional,
        type_name (read-only), converter (read-only, may be None),
        persistent_data (Dict[path tuple, list] or None),
        type_hint (script params; Optional[str], hosts without hint
        tracking may omit it).
    """

    @property
    @abstractmethod
    def owner(self) -> "HostNode":
        ...

    @property
    @abstractmethod
    def sources(self) -> List["HostParam"]:
        ...

    @property
    @abstractmethod
    def recipients(self) -> List["HostParam"]:
        ...

    @abstractmethod
    def add_source(self, source: "HostParam") -> None:
        """Wire ``source`` (an output) into this parameter."""


class HostNode(ABC):
    """
    A live node.

    Attribute contract:
        instance_id (read-only, host assigned), type_guid, name, nick_name,
        kind (NodeKind), pivot (QPointF), selected, locked, hidden,
        warnings / errors (lists of runtime messages),
        principal_parameter_index (-1 for none).

    Kind-specific attributes:
        SLIDER     value (Decimal), minimum, maximum, decimals, rounding,
                   instance_description (read-only)
        PANEL      user_text
        VALUE_LIST list_mode, list_items
        TOGGLE     value (bool)
        SWATCH     color (QColor)
        SCRIBBLE   text
        PARAMETER  persistent_data
        SCRIPT     see ``ScriptHostNode``
    """

    @property
    @abstractmethod
    def inputs(self) -> List[HostParam]:
        ...

    @property
    @abstractmethod
    def outputs(self) -> List[HostParam]:
        ...

    def find_input(self, name: str) -> Optional[HostParam]:
        return _find_param(self.inputs, name)

    def find_output(self, name: str) -> Optional[HostParam]:
        return _find_param(self.outputs, name)


class ScriptHostNode(HostNode):
    """
    A node whose behaviour is defined by embedded source text.

    Extra attributes: script_text, language (ScriptLanguage),
    marsh_inputs, marsh_outputs.
    """

    @abstractmethod
    def create_parameter(self, variable_name: str) -> HostParam:
        """A detached script parameter, ready to be registered."""

    @abstractmethod
    def register_input(self, param: HostParam) -> None:
        ...

    @abstractmethod
    def register_output(self, param: HostParam) -> None:
        ...

    @abstractmethod
    def unregister_input(self, param: HostParam) -> None:
        ...

    @abstractmethod
    def unregister_output(self, param: HostParam) -> None:
        ...

    @abstractmethod
    def variable_parameter_maintenance(self) -> None:
        """Let the node refresh its own bookkeeping after parameter edits."""


def _find_param(params: List[HostParam], name: str) -> Optional[HostParam]:
    for p in params:
        if p.name == name:
            return p
    for p in params:
        if getattr(p, "nick_name", None) == name:
            return p
    return None


# ==============================================================================
# SERVICES
# ==============================================================================

class TypeResolver(ABC):
    """Type lookup service: component type key or display name to descriptor."""

    @abstractmethod
    def resolve_guid(self, guid: str) -> Optional[TypeDescriptor]:
        ...

    @abstractmethod
    def resolve_name(self, name: str) -> Optional[TypeDescriptor]:
        ...

    def resolve(self, guid: Optional[str], name: Optional[str] = None) -> Optional[TypeDescriptor]:
        """By type key first, display name second."""
        descriptor = self.resolve_guid(guid) if guid else None
        if descriptor is None and name:
            descriptor = self.resolve_name(name)
            if descriptor is not None:
                log.debug("Resolved '%s' by name (type key %s unknown)", name, guid)
        return descriptor


class NodeFactory(ABC):

    @abstractmethod
    def instantiate(self, descriptor: TypeDescriptor) -> HostNode:
        """A blank node of the described type, not yet on any canvas."""


class HostCanvas(ABC):
    """The document the reconstruction engine places nodes into."""

    @property
    @abstractmethod
    def nodes(self) -> List[HostNode]:
        ...

    @abstractmethod
    def add_node(self, node: HostNode, position: QPointF) -> None:
        ...

    @abstractmethod
    def find_node(self, instance_id: str) -> Optional[HostNode]:
        ...

    @abstractmethod
    def content_bounds(self) -> Optional[QRectF]:
        """Bounding rectangle of existing content, None for an empty canvas."""
