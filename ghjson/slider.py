# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

slider.py - Number Slider Values
--------------------------------
A slider is captured as one packed string, ``value<min,max>``, where the
value is padded to the slider's decimal places and the limits are written
without padding::

    5.00<0,10>     two decimals, range 0 to 10
    3<-5,5>        integer slider

The precision lives in that padding, which is why capture reads limits and
accuracy from the slider's instance description rather than from the raw
numeric value alone.
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from ghjson.logger import get_logger

log = get_logger("Slider")

_PACKED_RE = re.compile(r"^(.+)<(.+),(.+)>$")


class SliderRounding(Enum):
    FLOAT = "R"
    INTEGER = "N"
    EVEN = "E"
    ODD = "O"

    @classmethod
    def parse(cls, value: Any) -> "SliderRounding":
        """Single-letter code or member name, any case; unknown values are FLOAT."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        for member in cls:
            if text.upper() == member.value or text.upper() == member.name:
                return member
        return cls.FLOAT

    @property
    def is_integral(self) -> bool:
        return self is not SliderRounding.FLOAT


@dataclass(frozen=True)
class SliderValue:
    value: Decimal
    minimum: Decimal
    maximum: Decimal
    decimals: int

    def format(self) -> str:
        return format_slider_value(self.value, self.minimum, self.maximum, self.decimals)


@dataclass(frozen=True)
class SliderDescription:
    accuracy: int = 0
    lower: Decimal = Decimal(0)
    upper: Decimal = Decimal(100)
    rounding: SliderRounding = SliderRounding.FLOAT


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(str(value).strip())


def _padded(value: Any, decimals: int) -> str:
    quantum = Decimal(1).scaleb(-max(decimals, 0))
    try:
        return format(to_decimal(value).quantize(quantum), "f")
    except InvalidOperation as exc:
        raise ValueError(f"Slider value {value!r} cannot be written with {decimals} decimals") from exc


def _plain(value: Any) -> str:
    d = to_decimal(value)
    if d == 0:
        return "0"
    return format(d.normalize(), "f")


# ==============================================================================
# PACKED VALUE
# ==============================================================================

def format_slider_value(value: Any, minimum: Any, maximum: Any, decimals: int) -> str:
    return f"{_padded(value, decimals)}<{_plain(minimum)},{_plain(maximum)}>"


def parse_slider_value(text: str) -> SliderValue:
    """
    Parse ``value<min,max>``.

    The number of digits after ``.`` in the value sets the decimals. A value
    outside the range is clamped; reversed limits are swapped.

    Raises:
        ValueError: The text does not match the packed form.
    """
    match = _PACKED_RE.match(str(text).strip())
    if match is None:
        raise ValueError(f"Invalid slider value '{text}'. Expected value<min,max>")
    value_text, min_text, max_text = (g.strip() for g in match.groups())
    try:
        value, minimum, maximum = (Decimal(t) for t in (value_text, min_text, max_text))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid number in slider value '{text}'") from exc
    if not all(d.is_finite() for d in (value, minimum, maximum)):
        raise ValueError(f"Slider value '{text}' is not finite")

    decimals = len(value_text.split(".", 1)[1]) if "." in value_text else 0
    if minimum > maximum:
        minimum, maximum = maximum, minimum
    value = min(max(value, minimum), maximum)
    return SliderValue(value=value, minimum=minimum, maximum=maximum, decimals=decimals)


# ==============================================================================
# INSTANCE DESCRIPTION
# ==============================================================================

def describe_slider(rounding: SliderRounding, decimals: int, minimum: Any, maximum: Any) -> str:
    """Text block in the form ``parse_instance_description`` reads."""
    return (f"Rounding: {rounding.value}\n"
            f"Accuracy: {decimals}\n"
            f"Lower limit: {_plain(minimum)}\n"
            f"Upper limit: {_plain(maximum)}")


def parse_instance_description(text: Optional[str]) -> SliderDescription:
    """Accuracy and limits from a slider's description; defaults ``(0, 0, 100)``."""
    accuracy, lower, upper = 0, Decimal(0), Decimal(100)
    rounding = SliderRounding.FLOAT
    if not text:
        return SliderDescription(accuracy, lower, upper, rounding)

    try:
        for line in str(text).splitlines():
            key, sep, value = line.strip().partition(":")
            if not sep:
                continue
            key, value = key.strip().lower(), value.strip()
            if key == "accuracy":
                accuracy = int(value)
            elif key == "lower limit":
                lower = Decimal(value)
            elif key == "upper limit":
                upper = Decimal(value)
            elif key == "rounding":
                rounding = SliderRounding.parse(value)
    except (ValueError, InvalidOperation) as exc:
        log.warning("Unreadable slider description, using defaults: %s", exc)
        return SliderDescription()
    if not (lower.is_finite() and upper.is_finite()):
        log.warning("Slider description has non-finite limits, using defaults")
        return SliderDescription()

    return SliderDescription(accuracy, lower, upper, rounding)


# ==============================================================================
# LIVE SLIDERS
# ==============================================================================

def capture_slider_value(node: Any) -> str:
    """Packed value of a live slider node."""
    description = parse_instance_description(node.instance_description)
    return format_slider_value(node.value, description.lower, description.upper,
                               description.accuracy)


def apply_slider_value(node: Any, text: str) -> None:
    """Configure a live slider from its packed value."""
    parsed = parse_slider_value(text)
    node.minimum = parsed.minimum
    node.maximum = parsed.maximum
    node.decimals = parsed.decimals
    node.rounding = SliderRounding.FLOAT if parsed.decimals else SliderRounding.INTEGER
    node.value = parsed.value
