# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

typehints.py - Type Hint Mapping
--------------------------------
Formatting helpers that move between a bare hint (``Curve``) and the
declared form for an access mode (``List<Curve>``), plus the fallback
inference used when a script signature yields nothing.

The fallback is a provider chain rather than one fixed table: which
converter maps to which hint is host metadata, so hosts register their own
providers ahead of (or instead of) the defaults. The chain always ends in
``"object"``.
"""

import re
from typing import Callable, ClassVar, Dict, List, Optional

from ghjson.host import HostParam, ParamAccess
from ghjson.logger import get_logger

log = get_logger("TypeHints")

TypeHintProvider = Callable[[HostParam], Optional[str]]

DEFAULT_HINT = "object"

_WRAPPER_RE = re.compile(r"^\s*(?:System\.Collections\.Generic\.)?"
                         r"(DataTree|GH_Structure|List|IList|IEnumerable|IReadOnlyList)"
                         r"\s*<\s*(.+?)\s*>\s*$")

_TREE_WRAPPERS = ("DataTree", "GH_Structure")


class TypeHintMapper:
    """Stateless helpers plus the registered fallback providers."""

    CONVERTER_HINTS: ClassVar[Dict[str, str]] = {
        "generic": "object",
        "number": "double",
        "integer": "int",
        "boolean": "bool",
        "text": "string",
        "string": "string",
        "point": "Point3d",
        "vector": "Vector3d",
        "line": "Line",
        "plane": "Plane",
        "circle": "Circle",
        "arc": "Arc",
        "rectangle": "Rectangle3d",
        "box": "Box",
        "curve": "Curve",
        "surface": "Surface",
        "brep": "Brep",
        "mesh": "Mesh",
        "geometry": "GeometryBase",
        "colour": "Color",
        "color": "Color",
        "domain": "Interval",
        "interval": "Interval",
    }

    _providers: ClassVar[List[TypeHintProvider]] = []

    # --------------------------------------------------------------------------
    # Formatting
    # --------------------------------------------------------------------------

    @staticmethod
    def format_type_hint(hint: str, access: ParamAccess) -> str:
        """
        Declared type for ``hint`` under ``access``.

        Args:
            hint:   Bare (``Curve``) or already wrapped (``List<Curve>``) hint.
            access: Access mode of the parameter.

        Returns:
            ``DataTree<T>`` for trees, ``List<T>`` for lists, ``T`` for items.
            Hints that already carry a collection wrapper are returned as-is.
        """
        if not hint or TypeHintMapper.is_collection_type(hint):
            return hint
        if access is ParamAccess.TREE:
            return f"DataTree<{hint}>"
        if access is ParamAccess.LIST:
            return f"List<{hint}>"
        return hint

    @staticmethod
    def extract_base_type(hint: str) -> str:
        """``List<Curve>`` -> ``Curve``; bare hints are returned stripped."""
        match = _WRAPPER_RE.match(hint or "")
        return match.group(2) if match else (hint or "").strip()

    @staticmethod
    def is_collection_type(hint: str) -> bool:
        return bool(_WRAPPER_RE.match(hint or ""))

    @staticmethod
    def infer_access_mode(hint: str) -> ParamAccess:
        match = _WRAPPER_RE.match(hint or "")
        if match is None:
            return ParamAccess.ITEM
        return ParamAccess.TREE if match.group(1) in _TREE_WRAPPERS else ParamAccess.LIST

    # --------------------------------------------------------------------------
    # Fallback providers
    # --------------------------------------------------------------------------

    @classmethod
    def register_provider(cls, provider: TypeHintProvider, first: bool = False) -> None:
        if provider in cls._providers:
            return
        if first:
            cls._providers.insert(0, provider)
        else:
            cls._providers.append(provider)

    @classmethod
    def unregister_provider(cls, provider: TypeHintProvider) -> None:
        if provider in cls._providers:
            cls._providers.remove(provider)

    @classmethod
    def providers(cls) -> List[TypeHintProvider]:
        return list(cls._providers)

    @classmethod
    def infer_from_parameter(cls, param: HostParam) -> str:
        """First non-empty answer of the provider chain, else ``"object"``."""
        for provider in cls._providers:
            try:
                hint = provider(param)
            except Exception as exc:
                log.warning("Type hint provider %s failed: %s",
                            getattr(provider, "__name__", provider), exc)
                continue
            if hint:
                return hint
        return DEFAULT_HINT


# ==============================================================================
# DEFAULT PROVIDERS
# ==============================================================================

def declared_hint_provider(param: HostParam) -> Optional[str]:
    """Hint the host itself tracks on the parameter, if any."""
    return getattr(param, "type_hint", None) or None


def converter_hint_provider(param: HostParam) -> Optional[str]:
    """Hint from the name of the parameter's value converter."""
    converter = getattr(param, "converter", None)
    if converter is None:
        return None
    key = converter if isinstance(converter, str) else getattr(converter, "name", type(converter).__name__)
    return TypeHintMapper.CONVERTER_HINTS.get(str(key).lower())


def setup_default_providers() -> None:
    """Register the built-in providers. Called once on import."""
    TypeHintMapper.register_provider(declared_hint_provider)
    TypeHintMapper.register_provider(converter_hint_provider)


setup_default_providers()
