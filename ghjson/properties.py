# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

properties.py - Property Descriptor Table
-----------------------------------------
Each exported property is registered once, with the node kinds it applies
to, how to read it from a live node, how to write it back, and (for typed
values) which codec carries it. Capture and reconstruction both walk this
table, filtered by the context's allow-list, so a property is either fully
supported in both directions or not touched at all.

Descriptors without a setter are computed-only: they are captured but
skipped on apply.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional

from PySide6.QtGui import QColor

from ghjson.codecs import CodecRegistry
from ghjson.config import PropertyFilter
from ghjson.datatree import expand_tree, flatten_tree
from ghjson.errors import CodecError
from ghjson.host import HostNode, NodeKind
from ghjson.logger import get_logger
from ghjson.models import ComponentProperty, json_type_name
from ghjson.slider import SliderRounding, apply_slider_value, capture_slider_value

log = get_logger("Properties")

Getter = Callable[[HostNode], Any]
Setter = Callable[[HostNode, Any], None]

_PRIMITIVES = (str, bool, int, float, list, dict)


# ==============================================================================
# VALUE LIST ITEMS
# ==============================================================================

@dataclass
class ValueListItem:
    name: str
    expression: str
    selected: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"Name": self.name, "Expression": self.expression, "Selected": self.selected}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValueListItem":
        name = data.get("Name", data.get("name", ""))
        expression = data.get("Expression", data.get("expression", name))
        selected = data.get("Selected", data.get("selected", False))
        return cls(str(name), str(expression), bool(selected))


# ==============================================================================
# DESCRIPTORS
# ==============================================================================

@dataclass(frozen=True)
class PropertyDescriptor:
    name: str
    getter: Getter
    setter: Optional[Setter] = None
    kinds: Optional[FrozenSet[NodeKind]] = None
    codec: Optional[str] = None

    @property
    def read_only(self) -> bool:
        return self.setter is None

    def applies_to(self, kind: NodeKind) -> bool:
        return self.kinds is None or kind in self.kinds


def attr_property(name: str, attr: str,
                  kinds: Optional[Iterable[NodeKind]] = None,
                  codec: Optional[str] = None,
                  read_only: bool = False) -> PropertyDescriptor:
    """Descriptor backed by a plain attribute of the live node."""
    def getter(node: HostNode) -> Any:
        return getattr(node, attr, None)

    def setter(node: HostNode, value: Any) -> None:
        setattr(node, attr, value)

    return PropertyDescriptor(
        name=name,
        getter=getter,
        setter=None if read_only else setter,
        kinds=frozenset(kinds) if kinds is not None else None,
        codec=codec,
    )


def display_text(value: Any) -> str:
    if isinstance(value, QColor):
        return value.name(QColor.NameFormat.HexArgb)
    return str(value)


def encode_value(value: Any, codec_name: Optional[str] = None) -> ComponentProperty:
    """
    JSON-ready property record for a raw value.

    Typed values become codec tokens; primitives and JSON containers pass
    through. ``humanReadable`` is set only for non-primitive values whose
    text differs from their type's name.
    """
    if codec_name is not None:
        codec = CodecRegistry.get(codec_name)
        encoded, type_name = codec.serialize(value), codec.type_name
    elif value is None or isinstance(value, _PRIMITIVES):
        encoded, type_name = value, json_type_name(value)
    elif CodecRegistry.is_supported(value):
        encoded, type_name = CodecRegistry.serialize(value), CodecRegistry.type_name_of(value)
    else:
        encoded, type_name = str(value), type(value).__name__

    human = None
    if value is not None and not isinstance(value, _PRIMITIVES):
        text = display_text(value)
        if text not in (type(value).__name__, type_name):
            human = text
    return ComponentProperty(value=encoded, type=type_name, human_readable=human)


def decode_value(value: Any, codec_name: Optional[str] = None) -> Any:
    if codec_name is not None and isinstance(value, str):
        return CodecRegistry.get(codec_name).deserialize(value)
    return value


# ==============================================================================
# TABLE
# ==============================================================================

class PropertyTable:
    """Registration-ordered descriptors, looked up by name or node kind."""

    def __init__(self) -> None:
        self._descriptors: Dict[str, PropertyDescriptor] = {}

    def register(self, descriptor: PropertyDescriptor) -> PropertyDescriptor:
        if descriptor.name in self._descriptors:
            raise ValueError(f"Property '{descriptor.name}' already registered")
        self._descriptors[descriptor.name] = descriptor
        return descriptor

    def get(self, name: str) -> Optional[PropertyDescriptor]:
        return self._descriptors.get(name)

    def for_kind(self, kind: NodeKind) -> List[PropertyDescriptor]:
        return [d for d in self._descriptors.values() if d.applies_to(kind)]

    def capture(self, node: HostNode, prop_filter: PropertyFilter,
                include_human_readable: bool = True,
                exclude: FrozenSet[str] = frozenset()) -> Dict[str, ComponentProperty]:
        """Allowed, non-None properties of ``node`` as document records."""
        allowed = prop_filter.allowed_names(node.kind)
        captured: Dict[str, ComponentProperty] = {}
        for descriptor in self.for_kind(node.kind):
            if descriptor.name not in allowed or descriptor.name in exclude:
                continue
            try:
                raw = descriptor.getter(node)
                if raw is None:
                    continue
                prop = encode_value(raw, descriptor.codec)
            except (AttributeError, TypeError, ValueError, CodecError) as exc:
                log.warning("Skipped property %s of '%s': %s", descriptor.name, node.name, exc)
                continue
            if not include_human_readable and prop.human_readable is not None:
                prop = ComponentProperty(prop.value, prop.type)
            captured[descriptor.name] = prop
        return captured

    def apply(self, node: HostNode, properties: Dict[str, ComponentProperty],
              prop_filter: PropertyFilter,
              exclude: FrozenSet[str] = frozenset()) -> List[str]:
        """
        Write document properties onto a live node.

        Descriptors are visited in registration order, so dependent
        properties (a slider's rounding after its value) apply in sequence.

        Returns:
            Names of the properties that were applied.
        """
        allowed = prop_filter.allowed_names(node.kind)
        applied: List[str] = []

        for name in properties:
            descriptor = self._descriptors.get(name)
            if name in exclude:
                continue
            if descriptor is None or not descriptor.applies_to(node.kind) or name not in allowed:
                log.debug("Ignored property %s on '%s' (not exported for %s)",
                          name, node.name, node.kind.value)
            elif descriptor.read_only:
                log.debug("Ignored computed property %s on '%s'", name, node.name)

        for descriptor in self.for_kind(node.kind):
            prop = properties.get(descriptor.name)
            if (prop is None or descriptor.read_only or descriptor.name in exclude
                    or descriptor.name not in allowed):
                continue
            try:
                descriptor.setter(node, decode_value(prop.value, descriptor.codec))
            except (AttributeError, TypeError, ValueError, CodecError) as exc:
                log.warning("Could not apply %s to '%s': %s", descriptor.name, node.name, exc)
                continue
            applied.append(descriptor.name)
        return applied


# ==============================================================================
# BUILT-IN DESCRIPTORS
# ==============================================================================

def _get_persistent_data(node: HostNode) -> Any:
    tree = getattr(node, "persistent_data", None)
    return flatten_tree(tree) if tree else None


def _set_persistent_data(node: HostNode, value: Any) -> None:
    node.persistent_data = expand_tree(value)


def _get_list_items(node: HostNode) -> Any:
    return [item.to_dict() for item in node.list_items]


def _set_list_items(node: HostNode, value: Any) -> None:
    if not isinstance(value, list):
        raise TypeError(f"ListItems must be a list, got {type(value).__name__}")
    node.list_items = [ValueListItem.from_dict(v) for v in value if isinstance(v, dict)]


def _get_rounding(node: HostNode) -> Any:
    return SliderRounding.parse(node.rounding).value


def _set_rounding(node: HostNode, value: Any) -> None:
    node.rounding = SliderRounding.parse(value)


def build_default_table() -> PropertyTable:
    table = PropertyTable()
    _reg = table.register

    # --- Core (every kind) ---
    _reg(attr_property("NickName", "nick_name"))
    _reg(attr_property("Locked", "locked"))
    _reg(attr_property("Hidden", "hidden"))
    _reg(PropertyDescriptor("PersistentData", _get_persistent_data, _set_persistent_data,
                            kinds=frozenset({NodeKind.PARAMETER})))

    # --- Per kind ---
    _reg(attr_property("UserText", "user_text", kinds={NodeKind.PANEL}))
    _reg(attr_property("Text", "text", kinds={NodeKind.SCRIBBLE}))

    _reg(PropertyDescriptor("CurrentValue", capture_slider_value, apply_slider_value,
                            kinds=frozenset({NodeKind.SLIDER})))
    _reg(PropertyDescriptor("Rounding", _get_rounding, _set_rounding,
                            kinds=frozenset({NodeKind.SLIDER})))

    _reg(attr_property("ListMode", "list_mode", kinds={NodeKind.VALUE_LIST}))
    _reg(PropertyDescriptor("ListItems", _get_list_items, _set_list_items,
                            kinds=frozenset({NodeKind.VALUE_LIST})))

    _reg(attr_property("Script", "script_text", kinds={NodeKind.SCRIPT}))
    _reg(attr_property("MarshInputs", "marsh_inputs", kinds={NodeKind.SCRIPT}))
    _reg(attr_property("MarshOutputs", "marsh_outputs", kinds={NodeKind.SCRIPT}))

    _reg(attr_property("Value", "value", kinds={NodeKind.TOGGLE}))
    _reg(attr_property("Color", "color", kinds={NodeKind.SWATCH}, codec="Color"))

    return table


DEFAULT_PROPERTY_TABLE = build_default_table()
