# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

config.py - Options and Property Filters
----------------------------------------
Every tunable of capture, placement and reconstruction lives here as a plain
dataclass, together with the property allow-lists that keep exported
documents stable across host versions.

The allow-list is the gate for both directions: a property the extractor
would not write is a property the reconstruction engine will not apply.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, FrozenSet, Tuple

from ghjson.host import NodeKind


class SerializationContext(Enum):
    """How much of a node's property surface ends up in the document."""
    FULL = "full"
    COMPACT = "compact"
    AI_OPTIMIZED = "ai"
    PARAMETERS_ONLY = "parameters"


@dataclass(frozen=True)
class PropertyFilterRule:
    include_core: bool = True
    include_parameters: bool = True
    include_components: bool = True
    include_kinds: FrozenSet[NodeKind] = frozenset(NodeKind)


# ==============================================================================
# PROPERTY ALLOW-LISTS
# ==============================================================================

class PropertyFilterConfig:
    """Static allow-lists; see ``PropertyFilter`` for the combined view."""

    # Runtime-only, redundant or self-referential; never exported
    GLOBAL_DENYLIST: ClassVar[FrozenSet[str]] = frozenset({
        "VolatileData",
        "IsValid",
        "IsValidWhyNot",
        "TypeDescription",
        "TypeName",
        "Boundingbox",
        "ClippingBox",
        "ReferenceID",
        "IsReferencedGeometry",
        "IsGeometryLoaded",
        "QC_Type",
        "humanReadable",
        "Properties",
        "Params",
        "Attributes",
    })

    CORE_PROPERTIES: ClassVar[FrozenSet[str]] = frozenset({
        "NickName",
        "Locked",
        "PersistentData",
    })

    # Carried per parameter in ParameterSettings
    PARAMETER_PROPERTIES: ClassVar[FrozenSet[str]] = frozenset({
        "DataMapping",
        "Simplify",
        "Reverse",
        "Expression",
        "Invert",
    })

    COMPONENT_PROPERTIES: ClassVar[FrozenSet[str]] = frozenset({
        "Hidden",
    })

    CATEGORY_PROPERTIES: ClassVar[Dict[NodeKind, FrozenSet[str]]] = {
        NodeKind.PANEL: frozenset({"UserText"}),
        NodeKind.SCRIBBLE: frozenset({"Text"}),
        NodeKind.SLIDER: frozenset({"CurrentValue", "Rounding"}),
        NodeKind.VALUE_LIST: frozenset({"ListMode", "ListItems"}),
        NodeKind.SCRIPT: frozenset({"Script", "MarshInputs", "MarshOutputs"}),
        NodeKind.TOGGLE: frozenset({"Value"}),
        NodeKind.SWATCH: frozenset({"Color"}),
    }

    ESSENTIAL_KINDS: ClassVar[FrozenSet[NodeKind]] = frozenset({
        NodeKind.PANEL, NodeKind.SLIDER, NodeKind.VALUE_LIST, NodeKind.SCRIPT,
    })

    UI_KINDS: ClassVar[FrozenSet[NodeKind]] = frozenset({
        NodeKind.TOGGLE, NodeKind.SWATCH, NodeKind.SCRIBBLE,
    })

    CONTEXT_RULES: ClassVar[Dict[SerializationContext, PropertyFilterRule]] = {
        SerializationContext.FULL: PropertyFilterRule(),
        SerializationContext.COMPACT: PropertyFilterRule(
            include_components=False,
            include_kinds=ESSENTIAL_KINDS,
        ),
        SerializationContext.AI_OPTIMIZED: PropertyFilterRule(
            include_kinds=ESSENTIAL_KINDS | UI_KINDS,
        ),
        SerializationContext.PARAMETERS_ONLY: PropertyFilterRule(
            include_components=False,
            include_kinds=frozenset(),
        ),
    }


class PropertyFilter:
    """
    Allowed property names per node kind for one serialization context.

    Args:
        context: Which ``CONTEXT_RULES`` entry to apply.
    """

    def __init__(self, context: SerializationContext = SerializationContext.FULL) -> None:
        self.context = context
        self.rule = PropertyFilterConfig.CONTEXT_RULES[context]
        self._cache: Dict[NodeKind, FrozenSet[str]] = {}

    @property
    def include_parameter_settings(self) -> bool:
        return self.rule.include_parameters

    def allowed_names(self, kind: NodeKind) -> FrozenSet[str]:
        cached = self._cache.get(kind)
        if cached is not None:
            return cached

        names = set()
        if self.rule.include_core:
            names |= PropertyFilterConfig.CORE_PROPERTIES
        if self.rule.include_components:
            names |= PropertyFilterConfig.COMPONENT_PROPERTIES
        if kind in self.rule.include_kinds:
            names |= PropertyFilterConfig.CATEGORY_PROPERTIES.get(kind, frozenset())
        names -= PropertyFilterConfig.GLOBAL_DENYLIST

        result = frozenset(names)
        self._cache[kind] = result
        return result

    def is_allowed(self, name: str, kind: NodeKind) -> bool:
        return name in self.allowed_names(kind)


# ==============================================================================
# OPTIONS
# ==============================================================================

@dataclass
class PlacementSettings:
    """Grid spacing for computed layouts and the gap below existing content."""
    spacing_x: float = 200.0
    spacing_y: float = 100.0
    span: float = 100.0
    origin: Tuple[float, float] = (0.0, 0.0)


@dataclass
class SerializationOptions:
    context: SerializationContext = SerializationContext.FULL
    include_persistent_data: bool = True
    include_parameter_settings: bool = True
    include_human_readable: bool = True
    include_runtime_messages: bool = True
    include_pivots: bool = True
    include_selection: bool = True

    @classmethod
    def ai_optimized(cls) -> "SerializationOptions":
        """Lean documents for language-model consumption."""
        return cls(context=SerializationContext.AI_OPTIMIZED,
                   include_human_readable=False,
                   include_selection=False)


@dataclass
class DeserializationOptions:
    fix_instance_ids: bool = True
    drop_incomplete_pivots: bool = True
    apply_properties: bool = True
    apply_parameter_settings: bool = True
    create_connections: bool = True
    placement: PlacementSettings = field(default_factory=PlacementSettings)
