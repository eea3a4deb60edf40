# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

memoryhost.py - In-Memory Reference Host
----------------------------------------
A small, complete implementation of the host collaborators: live nodes and
parameters per node kind, a type registry that doubles as the node factory,
and a canvas that assigns fresh instance ids on insertion.

It carries no rendering or solving. Its job is to let the extractor and the
reconstruction engine run end to end, in tests and in scripts, without the
real host application.

Usage::

    registry = MemoryTypeRegistry()
    setup_default_types(registry)
    canvas = MemoryCanvas()

    slider = registry.instantiate(registry.resolve_name("Number Slider"))
    canvas.add_node(slider, QPointF(0, 0))
"""

import uuid
from decimal import Decimal
from typing import ClassVar, Dict, List, Optional, Type

from PySide6.QtCore import QPointF, QRectF
from PySide6.QtGui import QColor

from ghjson.host import (DataMapping, HostCanvas, HostNode, HostParam, NodeFactory,
                         NodeKind, ParamAccess, ParamSpec, ScriptHostNode,
                         ScriptLanguage, TypeDescriptor, TypeResolver)
from ghjson.logger import get_logger
from ghjson.properties import ValueListItem
from ghjson.slider import SliderRounding, describe_slider

log = get_logger("MemoryHost")


# ==============================================================================
# PARAMETERS
# ==============================================================================

class MemoryParam(HostParam):
    """Plain-attribute parameter; wiring is kept symmetric on both ends."""

    def __init__(self, name: str, owner: Optional[HostNode] = None,
                 type_name: str = "Generic",
                 access: ParamAccess = ParamAccess.ITEM,
                 optional: bool = False,
                 description: str = "") -> None:
        self.name = name
        self.nick_name = name
        self.variable_name = name
        self.description = description
        self.type_name = type_name
        self.access = access
        self.optional = optional
        self.data_mapping = DataMapping.NONE
        self.simplify = False
        self.reverse = False
        self.locked = False
        self.invert = False
        self.expression: Optional[str] = None
        self.converter: Optional[str] = type_name
        self.persistent_data = None
        self.type_hint: Optional[str] = None

        self._owner = owner
        self._sources: List["MemoryParam"] = []
        self._recipients: List["MemoryParam"] = []

    @classmethod
    def from_spec(cls, spec: ParamSpec, owner: HostNode) -> "MemoryParam":
        return cls(spec.name, owner, spec.type_name, spec.access, spec.optional, spec.description)

    def __repr__(self) -> str:
        return f"MemoryParam({self.name!r}, {self.type_name})"

    @property
    def owner(self) -> Optional[HostNode]:
        return self._owner

    @owner.setter
    def owner(self, node: HostNode) -> None:
        self._owner = node

    @property
    def sources(self) -> List["MemoryParam"]:
        return list(self._sources)

    @property
    def recipients(self) -> List["MemoryParam"]:
        return list(self._recipients)

    def add_source(self, source: "MemoryParam") -> None:
        if source is self:
            raise ValueError(f"Parameter '{self.name}' cannot feed itself")
        if source in self._sources:
            return
        self._sources.append(source)
        source._recipients.append(self)

    def remove_source(self, source: "MemoryParam") -> None:
        if source in self._sources:
            self._sources.remove(source)
            source._recipients.remove(self)

    def disconnect_all(self) -> None:
        for source in list(self._sources):
            self.remove_source(source)
        for recipient in list(self._recipients):
            recipient.remove_source(self)


# ==============================================================================
# NODES
# ==============================================================================

class MemoryNode(HostNode):
    """Generic component: named inputs and outputs, no extra state."""

    kind: ClassVar[NodeKind] = NodeKind.GENERIC

    def __init__(self, descriptor: TypeDescriptor) -> None:
        self._instance_id = ""
        self.type_guid = descriptor.guid
        self.name = descriptor.name
        self.nick_name = descriptor.name
        self.pivot = QPointF()
        self.selected = False
        self.locked = False
        self.hidden = False
        self.warnings: List[str] = []
        self.errors: List[str] = []
        self.principal_parameter_index = -1

        self._inputs: List[MemoryParam] = [MemoryParam.from_spec(s, self) for s in descriptor.inputs]
        self._outputs: List[MemoryParam] = [MemoryParam.from_spec(s, self) for s in descriptor.outputs]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, id={self._instance_id or '-'})"

    @property
    def instance_id(self) -> str:
        return self._instance_id

    @property
    def inputs(self) -> List[MemoryParam]:
        return list(self._inputs)

    @property
    def outputs(self) -> List[MemoryParam]:
        return list(self._outputs)

    def disconnect_all(self) -> None:
        for param in self._inputs + self._outputs:
            param.disconnect_all()


class MemoryParameterNode(MemoryNode):
    """Floating parameter; may hold internalised data."""
    kind = NodeKind.PARAMETER

    def __init__(self, descriptor: TypeDescriptor) -> None:
        super().__init__(descriptor)
        self.persistent_data: Dict[tuple, list] = {}


class MemorySliderNode(MemoryNode):
    kind = NodeKind.SLIDER

    def __init__(self, descriptor: TypeDescriptor) -> None:
        super().__init__(descriptor)
        self.value = Decimal("0.250")
        self.minimum = Decimal(0)
        self.maximum = Decimal(1)
        self.decimals = 3
        self.rounding = SliderRounding.FLOAT

    @property
    def instance_description(self) -> str:
        return describe_slider(SliderRounding.parse(self.rounding), self.decimals,
                               self.minimum, self.maximum)


class MemoryPanelNode(MemoryNode):
    kind = NodeKind.PANEL

    def __init__(self, descriptor: TypeDescriptor) -> None:
        super().__init__(descriptor)
        self.user_text = ""


class MemoryValueListNode(MemoryNode):
    kind = NodeKind.VALUE_LIST

    def __init__(self, descriptor: TypeDescriptor) -> None:
        super().__init__(descriptor)
        self.list_mode = "DropDown"
        self.list_items: List[ValueListItem] = [
            ValueListItem("One", "1", True),
            ValueListItem("Two", "2"),
            ValueListItem("Three", "3"),
            ValueListItem("Four", "4"),
        ]


class MemoryToggleNode(MemoryNode):
    kind = NodeKind.TOGGLE

    def __init__(self, descriptor: TypeDescriptor) -> None:
        super().__init__(descriptor)
        self.value = False


class MemorySwatchNode(MemoryNode):
    kind = NodeKind.SWATCH

    def __init__(self, descriptor: TypeDescriptor) -> None:
        super().__init__(descriptor)
        self.color = QColor(255, 255, 255)


class MemoryScribbleNode(MemoryNode):
    kind = NodeKind.SCRIBBLE

    def __init__(self, descriptor: TypeDescriptor) -> None:
        super().__init__(descriptor)
        self.text = "Double click to edit scribble text"


CSHARP_TEMPLATE = """\
using System;
using Rhino.Geometry;

public class Script_Instance : GH_ScriptInstance
{
  private void RunScript(object x, object y, ref object a)
  {
  }
}
"""

PYTHON_TEMPLATE = """\
class MyComponent(component):
    def RunScript(self, x, y):
        return
"""

VB_TEMPLATE = """\
Private Sub RunScript(ByVal x As Object, ByVal y As Object, ByRef A As Object)
End Sub
"""

_TEMPLATES = {
    ScriptLanguage.CSHARP: CSHARP_TEMPLATE,
    ScriptLanguage.PYTHON: PYTHON_TEMPLATE,
    ScriptLanguage.VB: VB_TEMPLATE,
}


class MemoryScriptNode(MemoryNode, ScriptHostNode):
    """Script component with variable parameters."""
    kind = NodeKind.SCRIPT

    def __init__(self, descriptor: TypeDescriptor) -> None:
        super().__init__(descriptor)
        self.language = descriptor.language or ScriptLanguage.CSHARP
        self.script_text = _TEMPLATES[self.language]
        self.marsh_inputs = True
        self.marsh_outputs = True
        self.maintenance_runs = 0

    def create_parameter(self, variable_name: str) -> MemoryParam:
        param = MemoryParam(variable_name, None, "Generic", optional=True)
        param.converter = None
        return param

    def register_input(self, param: MemoryParam) -> None:
        param.owner = self
        if param not in self._inputs:
            self._inputs.append(param)

    def register_output(self, param: MemoryParam) -> None:
        param.owner = self
        if param not in self._outputs:
            self._outputs.append(param)

    def unregister_input(self, param: MemoryParam) -> None:
        if param in self._inputs:
            param.disconnect_all()
            self._inputs.remove(param)

    def unregister_output(self, param: MemoryParam) -> None:
        if param in self._outputs:
            param.disconnect_all()
            self._outputs.remove(param)

    def variable_parameter_maintenance(self) -> None:
        for param in self._inputs + self._outputs:
            if not param.nick_name:
                param.nick_name = param.name
        if not 0 <= self.principal_parameter_index < len(self._inputs):
            self.principal_parameter_index = -1
        self.maintenance_runs += 1


NODE_CLASSES: Dict[NodeKind, Type[MemoryNode]] = {
    NodeKind.GENERIC: MemoryNode,
    NodeKind.PARAMETER: MemoryParameterNode,
    NodeKind.SLIDER: MemorySliderNode,
    NodeKind.PANEL: MemoryPanelNode,
    NodeKind.SCRIPT: MemoryScriptNode,
    NodeKind.VALUE_LIST: MemoryValueListNode,
    NodeKind.TOGGLE: MemoryToggleNode,
    NodeKind.SWATCH: MemorySwatchNode,
    NodeKind.SCRIBBLE: MemoryScribbleNode,
}


# ==============================================================================
# TYPE REGISTRY
# ==============================================================================

class MemoryTypeRegistry(TypeResolver, NodeFactory):
    """
    Type descriptors by GUID and by case-insensitive display name.

    Registering a GUID twice replaces the earlier descriptor with a warning.
    """

    def __init__(self) -> None:
        self._by_guid: Dict[str, TypeDescriptor] = {}
        self._by_name: Dict[str, TypeDescriptor] = {}

    def __len__(self) -> int:
        return len(self._by_guid)

    def __contains__(self, guid: str) -> bool:
        return str(guid).lower() in self._by_guid

    def register(self, descriptor: TypeDescriptor) -> TypeDescriptor:
        key = descriptor.guid.lower()
        if key in self._by_guid:
            log.warning("Overwriting component type '%s' (%s)", descriptor.name, descriptor.guid)
            previous = self._by_guid[key]
            self._by_name.pop(previous.name.lower(), None)
        self._by_guid[key] = descriptor
        self._by_name[descriptor.name.lower()] = descriptor
        return descriptor

    def unregister(self, guid: str) -> None:
        descriptor = self._by_guid.pop(str(guid).lower(), None)
        if descriptor is not None:
            self._by_name.pop(descriptor.name.lower(), None)

    def descriptors(self) -> List[TypeDescriptor]:
        return list(self._by_guid.values())

    def resolve_guid(self, guid: str) -> Optional[TypeDescriptor]:
        return self._by_guid.get(str(guid).strip().lower())

    def resolve_name(self, name: str) -> Optional[TypeDescriptor]:
        return self._by_name.get(str(name).strip().lower())

    def instantiate(self, descriptor: TypeDescriptor) -> MemoryNode:
        cls = NODE_CLASSES.get(descriptor.kind, MemoryNode)
        return cls(descriptor)


def _number(name: str, optional: bool = False) -> ParamSpec:
    return ParamSpec(name, "Number", optional=optional)


def setup_default_types(registry: MemoryTypeRegistry) -> MemoryTypeRegistry:
    """
    Register a representative set of component types.

    Covers every node kind, a few plain components, and one floating
    parameter per common data type.
    """
    r = registry.register

    # --- Inputs ---
    r(TypeDescriptor("57da07bd-ecab-415d-9d86-af36d7073abc", "Number Slider", NodeKind.SLIDER,
                     outputs=(ParamSpec("Number", "Number"),), category="Params"))
    r(TypeDescriptor("2e78987b-9dfb-42a2-8b76-3923ac8bd91a", "Boolean Toggle", NodeKind.TOGGLE,
                     outputs=(ParamSpec("Boolean", "Boolean"),), category="Params"))
    r(TypeDescriptor("9c53bac0-ba66-40bd-8154-ce9829b9db1a", "Colour Swatch", NodeKind.SWATCH,
                     outputs=(ParamSpec("Colour", "Colour"),), category="Params"))
    r(TypeDescriptor("00027467-0d24-4fa7-b178-8dc0ac5f42ec", "Value List", NodeKind.VALUE_LIST,
                     outputs=(ParamSpec("Values", "Generic"),), category="Params"))
    r(TypeDescriptor("59e0b89a-e487-49f8-bab8-b5bab16be14c", "Panel", NodeKind.PANEL,
                     inputs=(ParamSpec("Input", "Text", ParamAccess.TREE, optional=True),),
                     outputs=(ParamSpec("Output", "Text", ParamAccess.TREE),),
                     category="Params"))
    r(TypeDescriptor("7f5c6c55-f846-4a08-9c9a-cfdc285cc6fe", "Scribble", NodeKind.SCRIBBLE,
                     category="Params"))

    # --- Floating parameters ---
    for guid, name in (("3e8ca6be-fda8-4aaf-b5c0-3c54c8bb7312", "Number"),
                       ("fbac3e32-f100-4292-8692-77240a42fd1a", "Point"),
                       ("3ede854e-c753-40eb-84cb-b48008f14fd4", "Text"),
                       ("d5967b9f-e8ee-436b-a8ad-29fdcecf32d5", "Curve")):
        r(TypeDescriptor(guid, name, NodeKind.PARAMETER,
                         inputs=(ParamSpec(name, name, ParamAccess.TREE, optional=True),),
                         outputs=(ParamSpec(name, name, ParamAccess.TREE),),
                         category="Params"))

    # --- Components ---
    r(TypeDescriptor("a0d62394-a118-422d-abb3-6af115c75b25", "Addition",
                     inputs=(_number("A", True), _number("B", True)),
                     outputs=(_number("Result"),), category="Maths"))
    r(TypeDescriptor("3581f42a-9592-4549-bd6b-1c0fc39d067b", "Construct Point",
                     inputs=(_number("X coordinate", True), _number("Y coordinate", True),
                             _number("Z coordinate", True)),
                     outputs=(ParamSpec("Point", "Point"),), category="Vector"))
    r(TypeDescriptor("4c4e56eb-2f04-43f9-95a3-cc46a14f495a", "Line",
                     inputs=(ParamSpec("Start Point", "Point"), ParamSpec("End Point", "Point")),
                     outputs=(ParamSpec("Line", "Line"),), category="Curve"))
    r(TypeDescriptor("01cbd6e3-ccbe-4c24-baeb-46e10553e18b", "Concatenate",
                     inputs=(ParamSpec("A", "Text", optional=True), ParamSpec("B", "Text", optional=True)),
                     outputs=(ParamSpec("Result", "Text"),), category="Sets"))

    # --- Scripts ---
    script_inputs = (ParamSpec("x", optional=True), ParamSpec("y", optional=True))
    script_outputs = (ParamSpec("a"),)
    r(TypeDescriptor("b6ba1144-02d6-4a2d-b53c-ec62e290eeb7", "C# Script", NodeKind.SCRIPT,
                     script_inputs, script_outputs, ScriptLanguage.CSHARP, category="Maths"))
    r(TypeDescriptor("719467e6-7cf5-4848-99b0-c5dd57e5442c", "Python Script", NodeKind.SCRIPT,
                     script_inputs, script_outputs, ScriptLanguage.PYTHON, category="Maths"))
    r(TypeDescriptor("079bd9bd-54a0-41d4-98af-db999015f63d", "VB Script", NodeKind.SCRIPT,
                     script_inputs, script_outputs, ScriptLanguage.VB, category="Maths"))
    return registry


# --- Global Singleton ---
TYPE_REGISTRY = setup_default_types(MemoryTypeRegistry())


def register_type(descriptor: TypeDescriptor) -> TypeDescriptor:
    """Add a descriptor to the shared registry."""
    return TYPE_REGISTRY.register(descriptor)


# ==============================================================================
# CANVAS
# ==============================================================================

class MemoryCanvas(HostCanvas):
    """
    Holds strong references to its nodes and hands out fresh ids.

    Every node gets a new instance id when it is added, whatever id it may
    have carried before, the same way the real host never lets callers
    choose ids.
    """

    NODE_WIDTH: float = 160.0
    NODE_HEIGHT: float = 80.0

    def __init__(self) -> None:
        self._nodes: List[MemoryNode] = []

    @property
    def nodes(self) -> List[MemoryNode]:
        return list(self._nodes)

    def add_node(self, node: MemoryNode, position: QPointF) -> None:
        node._instance_id = str(uuid.uuid4())
        node.pivot = QPointF(position)
        if node not in self._nodes:
            self._nodes.append(node)

    def remove_node(self, node: MemoryNode) -> None:
        if node in self._nodes:
            node.disconnect_all()
            self._nodes.remove(node)

    def clear(self) -> None:
        for node in list(self._nodes):
            self.remove_node(node)

    def find_node(self, instance_id: str) -> Optional[MemoryNode]:
        return next((n for n in self._nodes if n.instance_id == instance_id), None)

    def node_rect(self, node: MemoryNode) -> QRectF:
        return QRectF(node.pivot.x(), node.pivot.y(), self.NODE_WIDTH, self.NODE_HEIGHT)

    def content_bounds(self) -> Optional[QRectF]:
        bounds: Optional[QRectF] = None
        for node in self._nodes:
            rect = self.node_rect(node)
            bounds = rect if bounds is None else bounds.united(rect)
        return bounds
