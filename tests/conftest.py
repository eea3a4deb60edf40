"""Pytest configuration and fixtures for GhJSON tests."""

import logging
from typing import Callable, Dict

import pytest
from PySide6.QtCore import QPointF

from ghjson.host import ParamAccess
from ghjson.memoryhost import MemoryCanvas, MemoryNode, MemoryTypeRegistry, setup_default_types

SCRIPT_CS = """\
using System;
using Rhino.Geometry;

public class Script_Instance : GH_ScriptInstance
{
  private void RunScript(List<Curve> curves, double t, ref object points)
  {
    points = curves;
  }
}
"""


@pytest.fixture
def registry() -> MemoryTypeRegistry:
    """Fresh type registry with the default component types."""
    return setup_default_types(MemoryTypeRegistry())


@pytest.fixture
def canvas() -> MemoryCanvas:
    return MemoryCanvas()


@pytest.fixture
def make_node(registry, canvas) -> Callable[..., MemoryNode]:
    """Factory placing a node of the named type on the canvas."""

    def _make(type_name: str, x: float = 0.0, y: float = 0.0) -> MemoryNode:
        descriptor = registry.resolve_name(type_name)
        assert descriptor is not None, f"unknown test type {type_name}"
        node = registry.instantiate(descriptor)
        canvas.add_node(node, QPointF(x, y))
        return node

    return _make


def wire(source: MemoryNode, output: str, target: MemoryNode, input_name: str) -> None:
    """Connect ``source.output`` into ``target.input_name``."""
    target.find_input(input_name).add_source(source.find_output(output))


@pytest.fixture
def chain_graph(make_node) -> Dict[str, MemoryNode]:
    """Slider -> Addition -> Panel."""
    slider = make_node("Number Slider", 0, 0)
    add = make_node("Addition", 200, 0)
    panel = make_node("Panel", 400, 0)
    wire(slider, "Number", add, "A")
    wire(add, "Result", panel, "Input")
    return {"slider": slider, "add": add, "panel": panel}


@pytest.fixture
def sample_graph(make_node) -> Dict[str, MemoryNode]:
    """
    One node of most kinds, partly wired:

        slider_a --\\
                    Addition -- Panel
        slider_b --/
        toggle, swatch, value list, number param, C# script
    """
    slider_a = make_node("Number Slider", 0, 0)
    slider_a.minimum, slider_a.maximum, slider_a.decimals = 0, 10, 2
    slider_a.value = 5
    slider_b = make_node("Number Slider", 0, 100)
    add = make_node("Addition", 200, 50)
    add.find_input("B").reverse = True
    panel = make_node("Panel", 400, 50)
    panel.user_text = "sum"
    toggle = make_node("Boolean Toggle", 0, 300)
    toggle.value = True
    swatch = make_node("Colour Swatch", 0, 400)
    values = make_node("Value List", 0, 500)
    number = make_node("Number", 200, 500)
    number.persistent_data = {(0,): [1.5, 2.5], (1,): [4.0]}

    script = make_node("C# Script", 200, 300)
    script.script_text = SCRIPT_CS
    _set_script_params(script, ["curves", "t"], ["points"])
    script.inputs[0].access = ParamAccess.LIST

    wire(slider_a, "Number", add, "A")
    wire(slider_b, "Number", add, "B")
    wire(add, "Result", panel, "Input")
    wire(slider_a, "Number", script, "t")
    return {
        "slider_a": slider_a, "slider_b": slider_b, "add": add, "panel": panel,
        "toggle": toggle, "swatch": swatch, "values": values, "number": number,
        "script": script,
    }


def _set_script_params(node, inputs, outputs) -> None:
    for param in node.inputs:
        node.unregister_input(param)
    for param in node.outputs:
        node.unregister_output(param)
    for name in inputs:
        node.register_input(node.create_parameter(name))
    for name in outputs:
        node.register_output(node.create_parameter(name))
    node.variable_parameter_maintenance()


@pytest.fixture
def ghjson_logs(caplog):
    """caplog capturing everything the package logs."""
    caplog.set_level(logging.DEBUG, logger="GhJSON")
    return caplog
