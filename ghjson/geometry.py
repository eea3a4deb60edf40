# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

geometry.py - Geometric Value Types
-----------------------------------
Immutable value records for the geometric kinds that travel through the
codec registry. Components are plain ``float`` so records compare and hash
like any dataclass; ``numpy`` is used for the vector algebra (unitizing,
cross products, frame construction).

Planes are stored as an origin with two axes. Circles and arcs carry a plane
plus a radius; the codecs rebuild that plane from the minimum data they
store (see ``Circle.from_center_normal_start`` and ``Arc.from_center_normal``).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields, is_dataclass
from typing import Any, Iterator, Tuple

import numpy as np

# Below this length a vector is treated as zero.
ZERO_TOLERANCE = 1e-12


def _as_array(x: float, y: float, z: float) -> np.ndarray:
    return np.array([x, y, z], dtype=np.float64)


def _fmt(value: float) -> str:
    return f"{value:g}"


# ==============================================================================
# POINTS & VECTORS
# ==============================================================================

@dataclass(frozen=True)
class Point3d:
    """A location in 3-D space."""
    x: float
    y: float
    z: float = 0.0

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "Point3d":
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    @classmethod
    def origin(cls) -> "Point3d":
        return cls(0.0, 0.0, 0.0)

    def as_array(self) -> np.ndarray:
        return _as_array(self.x, self.y, self.z)

    def distance_to(self, other: "Point3d") -> float:
        return float(np.linalg.norm(self.as_array() - other.as_array()))

    def __add__(self, other: "Vector3d") -> "Point3d":
        if not isinstance(other, Vector3d):
            return NotImplemented
        return Point3d.from_array(self.as_array() + other.as_array())

    def __sub__(self, other):
        if isinstance(other, Point3d):
            return Vector3d.from_array(self.as_array() - other.as_array())
        if isinstance(other, Vector3d):
            return Point3d.from_array(self.as_array() - other.as_array())
        return NotImplemented

    def __str__(self) -> str:
        return f"{_fmt(self.x)},{_fmt(self.y)},{_fmt(self.z)}"


@dataclass(frozen=True)
class Vector3d:
    """A direction and magnitude in 3-D space."""
    x: float
    y: float
    z: float = 0.0

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "Vector3d":
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    @classmethod
    def x_axis(cls) -> "Vector3d":
        return cls(1.0, 0.0, 0.0)

    @classmethod
    def y_axis(cls) -> "Vector3d":
        return cls(0.0, 1.0, 0.0)

    @classmethod
    def z_axis(cls) -> "Vector3d":
        return cls(0.0, 0.0, 1.0)

    def as_array(self) -> np.ndarray:
        return _as_array(self.x, self.y, self.z)

    @property
    def length(self) -> float:
        return float(np.linalg.norm(self.as_array()))

    @property
    def is_zero(self) -> bool:
        return self.length <= ZERO_TOLERANCE

    def unitized(self) -> "Vector3d":
        """Return a unit-length copy. Raises ``ValueError`` for a zero vector."""
        length = self.length
        if length <= ZERO_TOLERANCE:
            raise ValueError("Cannot unitize a zero-length vector")
        return Vector3d.from_array(self.as_array() / length)

    def cross(self, other: "Vector3d") -> "Vector3d":
        return Vector3d.from_array(np.cross(self.as_array(), other.as_array()))

    def dot(self, other: "Vector3d") -> float:
        return float(np.dot(self.as_array(), other.as_array()))

    def perpendicular(self) -> "Vector3d":
        """
        A unit vector perpendicular to this one.

        Crosses with the world axis this vector is least aligned with, so
        the result is fully determined by the input.
        """
        arr = self.as_array()
        if np.linalg.norm(arr) <= ZERO_TOLERANCE:
            raise ValueError("Zero-length vector has no perpendicular")
        axis = np.zeros(3)
        axis[int(np.argmin(np.abs(arr)))] = 1.0
        return Vector3d.from_array(np.cross(arr, axis)).unitized()

    def __mul__(self, factor: float) -> "Vector3d":
        return Vector3d.from_array(self.as_array() * float(factor))

    __rmul__ = __mul__

    def __add__(self, other: "Vector3d") -> "Vector3d":
        if not isinstance(other, Vector3d):
            return NotImplemented
        return Vector3d.from_array(self.as_array() + other.as_array())

    def __neg__(self) -> "Vector3d":
        return Vector3d(-self.x, -self.y, -self.z)

    def __str__(self) -> str:
        return f"{_fmt(self.x)},{_fmt(self.y)},{_fmt(self.z)}"


# ==============================================================================
# CURVES & FRAMES
# ==============================================================================

@dataclass(frozen=True)
class Line:
    """A straight segment between two points."""
    start: Point3d
    end: Point3d

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def direction(self) -> Vector3d:
        return self.end - self.start

    def __str__(self) -> str:
        return f"Line (L:{_fmt(self.length)})"


@dataclass(frozen=True)
class Plane:
    """An oriented frame: origin plus two orthonormal in-plane axes."""
    origin: Point3d
    x_axis: Vector3d
    y_axis: Vector3d

    @classmethod
    def world_xy(cls) -> "Plane":
        return cls(Point3d.origin(), Vector3d.x_axis(), Vector3d.y_axis())

    @classmethod
    def from_frame(cls, origin: Point3d, x_dir: Vector3d, y_dir: Vector3d) -> "Plane":
        """
        Build an orthonormal plane from two non-parallel in-plane directions.

        ``x_dir`` keeps its direction; ``y_dir`` is only used to fix the
        side of the plane and is re-orthogonalized against ``x_dir``.
        """
        x = x_dir.unitized()
        normal = x.cross(y_dir)
        if normal.is_zero:
            raise ValueError("Plane axes are parallel")
        normal = normal.unitized()
        return cls(origin, x, normal.cross(x))

    @classmethod
    def from_normal(cls, origin: Point3d, normal: Vector3d) -> "Plane":
        """Plane through ``origin`` with a deterministic x-axis."""
        n = normal.unitized()
        x = n.perpendicular()
        return cls(origin, x, n.cross(x))

    @property
    def normal(self) -> Vector3d:
        n = self.x_axis.cross(self.y_axis)
        return n.unitized() if not n.is_zero else n

    @property
    def is_valid(self) -> bool:
        return not self.x_axis.is_zero and not self.y_axis.is_zero and not self.normal.is_zero

    def point_at(self, u: float, v: float) -> Point3d:
        arr = (self.origin.as_array()
               + self.x_axis.as_array() * u
               + self.y_axis.as_array() * v)
        return Point3d.from_array(arr)

    def __str__(self) -> str:
        return f"O({self.origin}) Z({self.normal})"


@dataclass(frozen=True)
class Circle:
    """A full circle in its plane; the plane origin is the center."""
    plane: Plane
    radius: float

    @classmethod
    def from_center_normal_start(cls, center: Point3d, normal: Vector3d,
                                 radius: float, start: Point3d) -> "Circle":
        """
        Rebuild a circle whose seam (parameter 0) sits at ``start``.

        The x-axis of the frame points from the center to ``start``; the
        y-axis completes a right-handed frame with ``normal``.
        """
        x = (start - center).unitized()
        n = normal.unitized()
        return cls(Plane.from_frame(center, x, n.cross(x)), float(radius))

    @property
    def center(self) -> Point3d:
        return self.plane.origin

    @property
    def normal(self) -> Vector3d:
        return self.plane.normal

    @property
    def circumference(self) -> float:
        return 2.0 * math.pi * self.radius

    @property
    def start_point(self) -> Point3d:
        return self.point_at(0.0)

    def point_at(self, angle: float) -> Point3d:
        return self.plane.point_at(self.radius * math.cos(angle),
                                   self.radius * math.sin(angle))

    def __str__(self) -> str:
        return f"Circle (R:{_fmt(self.radius)})"


@dataclass(frozen=True)
class Arc:
    """A circular arc spanning ``start_angle`` to ``end_angle`` radians."""
    plane: Plane
    radius: float
    start_angle: float
    end_angle: float

    @classmethod
    def from_center_normal(cls, center: Point3d, normal: Vector3d, radius: float,
                           start_angle: float, end_angle: float) -> "Arc":
        return cls(Plane.from_normal(center, normal), float(radius),
                   float(start_angle), float(end_angle))

    @property
    def center(self) -> Point3d:
        return self.plane.origin

    @property
    def normal(self) -> Vector3d:
        return self.plane.normal

    @property
    def angle(self) -> float:
        return self.end_angle - self.start_angle

    @property
    def length(self) -> float:
        return abs(self.angle) * self.radius

    def __str__(self) -> str:
        return f"Arc (L:{_fmt(self.length)})"


@dataclass(frozen=True)
class Rectangle3d:
    """A rectangle on a plane, spanning ``width`` along x and ``height`` along y."""
    plane: Plane
    width: float
    height: float

    @property
    def area(self) -> float:
        return abs(self.width * self.height)

    def corner(self, index: int) -> Point3d:
        u, v = [(0.0, 0.0), (self.width, 0.0),
                (self.width, self.height), (0.0, self.height)][index % 4]
        return self.plane.point_at(u, v)

    def __str__(self) -> str:
        return f"Rectangle (W:{_fmt(self.width)} H:{_fmt(self.height)})"


# ==============================================================================
# BOXES, DOMAINS & SIZES
# ==============================================================================

@dataclass(frozen=True)
class BoundingBox:
    """World-aligned box spanned by two corners."""
    min: Point3d
    max: Point3d

    @property
    def is_valid(self) -> bool:
        return self.min.x <= self.max.x and self.min.y <= self.max.y and self.min.z <= self.max.z

    @property
    def diagonal(self) -> Vector3d:
        return self.max - self.min

    def __str__(self) -> str:
        return f"Box ({self.min}) to ({self.max})"


@dataclass(frozen=True)
class Interval:
    """A numeric domain ``t0`` to ``t1``; may be decreasing."""
    t0: float
    t1: float

    @property
    def length(self) -> float:
        return self.t1 - self.t0

    @property
    def is_increasing(self) -> bool:
        return self.t0 < self.t1

    def __str__(self) -> str:
        return f"{_fmt(self.t0)} To {_fmt(self.t1)}"


@dataclass(frozen=True)
class Size:
    """A width/height pair."""
    width: float
    height: float

    def __str__(self) -> str:
        return f"{_fmt(self.width)}, {_fmt(self.height)}"


# ==============================================================================
# COMPARISON
# ==============================================================================

def _flatten(value: Any) -> Iterator[float]:
    if is_dataclass(value):
        for f in fields(value):
            yield from _flatten(getattr(value, f.name))
    else:
        yield float(value)


def almost_equal(a: Any, b: Any, tolerance: float = 1e-9) -> bool:
    """
    Component-wise comparison of two geometry records within ``tolerance``.

    Records of different types never compare equal.
    """
    if type(a) is not type(b):
        return False
    left: Tuple[float, ...] = tuple(_flatten(a))
    right: Tuple[float, ...] = tuple(_flatten(b))
    return len(left) == len(right) and bool(np.allclose(left, right, rtol=0.0, atol=tolerance))
