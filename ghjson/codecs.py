# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

codecs.py - Data-Type Codec Registry
------------------------------------
Encodes typed values as self-describing ``prefix:payload`` text tokens and
decodes them back. Tokens are the one wire format that externally produced
documents must match byte for byte, so every float is written with
``format_number`` (shortest round-trip form, ``.`` separator, no grouping,
integral values without a fractional part) regardless of locale.

Payload separators:
    ``,``  between the fields of one point / vector
    ``;``  between points, vectors and scalar groups
    ``<``  between interval bounds

Usage::

    token = CodecRegistry.serialize(Point3d(1.5, -2.0, 0.0))   # "pointXYZ:1.5,-2,0"
    ok, value = CodecRegistry.try_deserialize_from_prefix(token)
    CodecRegistry.validate("Color", "argb:255,0")               # False
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple, Type, Union

import numpy as np
from PySide6.QtGui import QColor

from ghjson.errors import CodecArgumentError, CodecFormatError, UnknownCodecError
from ghjson.geometry import (
    Arc, BoundingBox, Circle, Interval, Line, Plane, Point3d, Rectangle3d,
    Size, Vector3d,
)
from ghjson.logger import get_logger

log = get_logger("Codecs")

# --- Type Definitions ---
EncoderFunc = Callable[[Any], str]
DecoderFunc = Callable[[str], Any]
ValidatorFunc = Callable[[Any], bool]

_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")


# ==============================================================================
# NUMBER FORMATTING
# ==============================================================================

def format_number(value: float) -> str:
    """
    Locale-independent shortest text for a finite float.

    ``1.5 -> "1.5"``, ``-2.0 -> "-2"``, ``-0.0 -> "0"``, ``1e-07 -> "1e-07"``.
    """
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"Non-finite number: {value!r}")
    if value == 0.0:
        return "0"
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def parse_number(text: str) -> float:
    """Strict inverse of ``format_number``; rejects blanks, ``nan`` and ``inf``."""
    text = text.strip()
    if not _NUMBER_RE.match(text):
        raise ValueError(f"Not a number: {text!r}")
    return float(text)


def parse_integer(text: str) -> int:
    text = text.strip()
    if not _INTEGER_RE.match(text):
        raise ValueError(f"Not an integer: {text!r}")
    return int(text)


def _fields(text: str, count: int, sep: str = ",") -> List[float]:
    parts = text.split(sep)
    if len(parts) != count:
        raise ValueError(f"Expected {count} fields, got {len(parts)}")
    return [parse_number(p) for p in parts]


def _groups(payload: str, count: int) -> List[str]:
    groups = payload.split(";")
    if len(groups) != count:
        raise ValueError(f"Expected {count} groups, got {len(groups)}")
    return groups


def _xyz(value: Union[Point3d, Vector3d]) -> str:
    return f"{format_number(value.x)},{format_number(value.y)},{format_number(value.z)}"


def _point(text: str) -> Point3d:
    return Point3d(*_fields(text, 3))


def _vector(text: str) -> Vector3d:
    return Vector3d(*_fields(text, 3))


# ==============================================================================
# CODEC DEFINITION
# ==============================================================================

@dataclass(frozen=True)
class DataTypeCodec:
    """
    One registered value kind.

    ``encoder``/``decoder`` work on the payload only; the prefix is added and
    checked here. ``validator`` receives the decoded value and rejects
    degenerate instances (zero radius, zero axes, ...).
    """
    type_name: str
    prefix: str
    value_types: Tuple[Type, ...]
    encoder: EncoderFunc = field(compare=False, hash=False)
    decoder: DecoderFunc = field(compare=False, hash=False)
    format_hint: str = field(default="", compare=False, hash=False)
    validator: ValidatorFunc = field(default=lambda v: True, compare=False, hash=False)

    def accepts(self, value: Any) -> bool:
        if isinstance(value, bool) and bool not in self.value_types:
            return False
        return isinstance(value, self.value_types)

    def serialize(self, value: Any) -> str:
        if not self.accepts(value):
            raise CodecArgumentError(self.type_name, type(value).__name__)
        if not self.validator(value):
            raise CodecFormatError(self.type_name, str(value), self.format_hint)
        return f"{self.prefix}:{self.encoder(value)}"

    def deserialize(self, token: str) -> Any:
        if not isinstance(token, str):
            raise CodecFormatError(self.type_name, repr(token), self.format_hint)
        prefix, sep, payload = token.partition(":")
        if not sep or prefix != self.prefix:
            raise CodecFormatError(self.type_name, token, self.format_hint)
        try:
            value = self.decoder(payload)
        except (ValueError, TypeError, IndexError) as exc:
            raise CodecFormatError(self.type_name, token, self.format_hint) from exc
        if not self.validator(value):
            raise CodecFormatError(self.type_name, token, self.format_hint)
        return value

    def validate(self, token: str) -> bool:
        """Non-throwing pre-check: does ``token`` decode to a valid value?"""
        try:
            self.deserialize(token)
        except CodecFormatError:
            return False
        return True


# ==============================================================================
# REGISTRY
# ==============================================================================

class CodecRegistry:
    """
    Central manager for value codecs, indexed by type name, prefix and
    runtime type.
    """
    _by_name: ClassVar[Dict[str, DataTypeCodec]] = {}
    _by_prefix: ClassVar[Dict[str, DataTypeCodec]] = {}
    _by_type: ClassVar[Dict[Type, DataTypeCodec]] = {}

    @classmethod
    def register(cls,
                 type_name: str,
                 prefix: str,
                 value_types: Union[Type, Tuple[Type, ...]],
                 encoder: EncoderFunc,
                 decoder: DecoderFunc,
                 format_hint: str = "",
                 validator: Optional[ValidatorFunc] = None,
                 aliases: Tuple[str, ...] = ()) -> DataTypeCodec:

        if not isinstance(value_types, tuple):
            value_types = (value_types,)

        names = [type_name, *aliases]

        # Collision guards
        for name in names:
            if name.lower() in cls._by_name:
                raise ValueError(f"Codec name '{name}' already registered")
        if prefix in cls._by_prefix:
            raise ValueError(f"Prefix '{prefix}' already registered to "
                             f"'{cls._by_prefix[prefix].type_name}'")

        codec = DataTypeCodec(
            type_name=type_name,
            prefix=prefix,
            value_types=value_types,
            encoder=encoder,
            decoder=decoder,
            format_hint=format_hint or f"{prefix}:...",
            validator=validator or (lambda v: True),
        )

        for name in names:
            cls._by_name[name.lower()] = codec
        cls._by_prefix[prefix] = codec
        for vt in value_types:
            cls._by_type.setdefault(vt, codec)

        return codec

    @classmethod
    def get(cls, type_name: str) -> DataTypeCodec:
        """Codec by type name or alias (case-insensitive)."""
        codec = cls._by_name.get(str(type_name).lower())
        if codec is None:
            raise UnknownCodecError(type_name)
        return codec

    @classmethod
    def get_by_prefix(cls, prefix: str) -> DataTypeCodec:
        codec = cls._by_prefix.get(prefix)
        if codec is None:
            raise UnknownCodecError(prefix)
        return codec

    @classmethod
    def find_for_value(cls, value: Any) -> Optional[DataTypeCodec]:
        """Most specific codec for the runtime type of ``value``, or None."""
        vt = value if isinstance(value, type) else type(value)
        for base in vt.__mro__:
            codec = cls._by_type.get(base)
            if codec is not None:
                return codec
        return None

    @classmethod
    def is_supported(cls, value_or_type: Any) -> bool:
        return cls.find_for_value(value_or_type) is not None

    @classmethod
    def names(cls) -> List[str]:
        return sorted({c.type_name for c in cls._by_name.values()})

    @classmethod
    def prefixes(cls) -> List[str]:
        return sorted(cls._by_prefix)

    @classmethod
    def serialize(cls, value: Any) -> str:
        codec = cls.find_for_value(value)
        if codec is None:
            raise CodecArgumentError("a registered data type", type(value).__name__)
        return codec.serialize(value)

    @classmethod
    def deserialize(cls, type_name: str, token: str) -> Any:
        return cls.get(type_name).deserialize(token)

    @classmethod
    def validate(cls, type_name: str, token: str) -> bool:
        codec = cls._by_name.get(str(type_name).lower())
        return codec is not None and codec.validate(token)

    @classmethod
    def type_name_of(cls, value: Any) -> Optional[str]:
        codec = cls.find_for_value(value)
        return codec.type_name if codec else None

    @classmethod
    def try_deserialize_from_prefix(cls, token: Any) -> Tuple[bool, Any]:
        """
        Decode a token by its own prefix.

        Returns ``(True, value)`` on success, ``(False, token)`` when the
        input is not a string, has no registered prefix, or is malformed.
        """
        if not isinstance(token, str):
            return False, token
        prefix, sep, _ = token.partition(":")
        codec = cls._by_prefix.get(prefix) if sep else None
        if codec is None:
            return False, token
        try:
            return True, codec.deserialize(token)
        except CodecFormatError as exc:
            log.debug("Token with known prefix failed to decode: %s", exc)
            return False, token


# ============================================================================
# BUILT-IN CODECS
# ============================================================================
#
#  SCALARS        number, integer, boolean, text
#  POINT-LIKE     pointXYZ, vectorXYZ
#  CURVES         line2p, circleCNRS, arcCNRAB, rectangleOXY
#  FRAMES         planeOXY
#  EXTENTS        box2p, domain, bounds
#  COLOR          argb (QColor)
#
# ============================================================================

def _encode_bool(value: bool) -> str:
    return "true" if value else "false"


def _decode_bool(payload: str) -> bool:
    lowered = payload.strip().lower()
    if lowered not in ("true", "false"):
        raise ValueError(f"Not a boolean: {payload!r}")
    return lowered == "true"


def _encode_color(value: QColor) -> str:
    return f"{value.alpha()},{value.red()},{value.green()},{value.blue()}"


def _decode_color(payload: str) -> QColor:
    parts = payload.split(",")
    if len(parts) != 4:
        raise ValueError(f"Expected 4 color channels, got {len(parts)}")
    a, r, g, b = (parse_integer(p) for p in parts)
    if not all(0 <= c <= 255 for c in (a, r, g, b)):
        raise ValueError("Color channel outside 0-255")
    return QColor(r, g, b, a)


def _encode_plane(p: Plane) -> str:
    return f"{_xyz(p.origin)};{_xyz(p.x_axis)};{_xyz(p.y_axis)}"


def _decode_plane(payload: str) -> Plane:
    o, x, y = _groups(payload, 3)
    return Plane(_point(o), _vector(x), _vector(y))


def _encode_circle(c: Circle) -> str:
    return (f"{_xyz(c.center)};{_xyz(c.normal)};"
            f"{format_number(c.radius)};{_xyz(c.start_point)}")


def _decode_circle(payload: str) -> Circle:
    center, normal, radius, start = _groups(payload, 4)
    r = parse_number(radius)
    if r <= 0:
        raise ValueError("Radius must be positive")
    return Circle.from_center_normal_start(_point(center), _vector(normal), r, _point(start))


def _encode_arc(a: Arc) -> str:
    return (f"{_xyz(a.center)};{_xyz(a.normal)};{format_number(a.radius)};"
            f"{format_number(a.start_angle)};{format_number(a.end_angle)}")


def _decode_arc(payload: str) -> Arc:
    center, normal, radius, a0, a1 = _groups(payload, 5)
    r = parse_number(radius)
    if r <= 0:
        raise ValueError("Radius must be positive")
    return Arc.from_center_normal(_point(center), _vector(normal), r,
                                  parse_number(a0), parse_number(a1))


def _encode_rectangle(r: Rectangle3d) -> str:
    return f"{_encode_plane(r.plane)};{format_number(r.width)},{format_number(r.height)}"


def _decode_rectangle(payload: str) -> Rectangle3d:
    o, x, y, wh = _groups(payload, 4)
    w, h = _fields(wh, 2)
    plane = Plane(_point(o), _vector(x).unitized(), _vector(y).unitized())
    return Rectangle3d(plane, w, h)


def _decode_interval(payload: str) -> Interval:
    return Interval(*_fields(payload, 2, sep="<"))


def setup_default_codecs() -> None:
    """Register all built-in codecs. Called once on import."""

    _reg = CodecRegistry.register

    # --- Scalars ---
    _reg("Number", "number", (float, np.floating),
         encoder=format_number,
         decoder=parse_number,
         format_hint="number:x",
         validator=lambda v: math.isfinite(float(v)),
         aliases=("Double",))

    _reg("Integer", "integer", (int, np.integer),
         encoder=lambda v: str(int(v)),
         decoder=parse_integer,
         format_hint="integer:n",
         aliases=("Int32",))

    _reg("Boolean", "boolean", (bool, np.bool_),
         encoder=_encode_bool,
         decoder=_decode_bool,
         format_hint="boolean:true|false",
         aliases=("Bool",))

    _reg("Text", "text", str,
         encoder=lambda v: v,
         decoder=lambda p: p,
         format_hint="text:<any>",
         aliases=("String",))

    # --- Point-like ---
    _reg("Point3d", "pointXYZ", Point3d,
         encoder=_xyz,
         decoder=_point,
         format_hint="pointXYZ:x,y,z",
         aliases=("Point",))

    _reg("Vector3d", "vectorXYZ", Vector3d,
         encoder=_xyz,
         decoder=_vector,
         format_hint="vectorXYZ:x,y,z",
         aliases=("Vector",))

    # --- Curves & frames ---
    _reg("Line", "line2p", Line,
         encoder=lambda ln: f"{_xyz(ln.start)};{_xyz(ln.end)}",
         decoder=lambda p: Line(*(_point(g) for g in _groups(p, 2))),
         format_hint="line2p:x1,y1,z1;x2,y2,z2")

    _reg("Plane", "planeOXY", Plane,
         encoder=_encode_plane,
         decoder=_decode_plane,
         format_hint="planeOXY:ox,oy,oz;xx,xy,xz;yx,yy,yz",
         validator=lambda p: p.is_valid)

    _reg("Circle", "circleCNRS", Circle,
         encoder=_encode_circle,
         decoder=_decode_circle,
         format_hint="circleCNRS:cx,cy,cz;nx,ny,nz;r;sx,sy,sz",
         validator=lambda c: c.radius > 0 and c.plane.is_valid)

    _reg("Arc", "arcCNRAB", Arc,
         encoder=_encode_arc,
         decoder=_decode_arc,
         format_hint="arcCNRAB:cx,cy,cz;nx,ny,nz;r;a0;a1",
         validator=lambda a: a.radius > 0 and a.plane.is_valid)

    _reg("Rectangle", "rectangleOXY", Rectangle3d,
         encoder=_encode_rectangle,
         decoder=_decode_rectangle,
         format_hint="rectangleOXY:ox,oy,oz;xx,xy,xz;yx,yy,yz;w,h",
         validator=lambda r: r.plane.is_valid,
         aliases=("Rectangle3d",))

    # --- Extents ---
    _reg("BoundingBox", "box2p", BoundingBox,
         encoder=lambda b: f"{_xyz(b.min)};{_xyz(b.max)}",
         decoder=lambda p: BoundingBox(*(_point(g) for g in _groups(p, 2))),
         format_hint="box2p:x1,y1,z1;x2,y2,z2",
         aliases=("Box",))

    _reg("Domain", "domain", Interval,
         encoder=lambda i: f"{format_number(i.t0)}<{format_number(i.t1)}",
         decoder=_decode_interval,
         format_hint="domain:t0<t1",
         aliases=("Interval",))

    _reg("Bounds", "bounds", Size,
         encoder=lambda s: f"{format_number(s.width)},{format_number(s.height)}",
         decoder=lambda p: Size(*_fields(p, 2)),
         format_hint="bounds:w,h",
         aliases=("Size",))

    # --- Color ---
    _reg("Color", "argb", QColor,
         encoder=_encode_color,
         decoder=_decode_color,
         format_hint="argb:a,r,g,b",
         validator=lambda c: c.isValid(),
         aliases=("Colour",))


# Run setup immediately on import so codecs exist
setup_default_codecs()
