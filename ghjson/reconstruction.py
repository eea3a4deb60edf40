# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

reconstruction.py - Reconstruction Engine
-----------------------------------------
Materialises a live graph from a ``Document``.

Sequence:
    1. Repair ids that are not GUIDs (optional) and drop partial pivots
       (optional).
    2. Compute positions for every component.
    3. Resolve, instantiate, configure and place each component, recording
       ``document id -> live id``. The host always assigns fresh ids.
    4. Wire connections once every component exists.

Nothing here raises for a single bad component, property or connection:
the item is logged and skipped, and the rest of the batch proceeds.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from ghjson.config import DeserializationOptions, PropertyFilter
from ghjson.fixer import fix_component_instance_guids, remove_pivots_if_incomplete
from ghjson.host import (HostCanvas, HostNode, HostParam, NodeFactory, NodeKind,
                         ParamAccess, ScriptHostNode, ScriptLanguage, TypeResolver)
from ghjson.identifiers import IdentifierMapper
from ghjson.logger import get_logger
from ghjson.models import Component, Document, ParameterSettings
from ghjson.placement import compute_placement
from ghjson.properties import DEFAULT_PROPERTY_TABLE, PropertyTable
from ghjson.signatures import ScriptSignatureSynchronizer
from ghjson.slider import apply_slider_value
from ghjson.typehints import TypeHintMapper

log = get_logger("Reconstruction")


@dataclass
class ReconstructionResult:
    """
    Outcome of one reconstruction.

    Attributes:
        placed_names:        Distinct display names of the placed components.
        id_map:              Document instance id to live instance id.
        nodes:               Document instance id to live node.
        skipped_components:  Document ids that could not be placed.
        connections_made:    Wires created.
        connections_skipped: Wires dropped (dangling, invalid, unknown parameter).
    """
    placed_names: List[str] = field(default_factory=list)
    id_map: Dict[str, str] = field(default_factory=dict)
    nodes: Dict[str, HostNode] = field(default_factory=dict)
    skipped_components: List[str] = field(default_factory=list)
    connections_made: int = 0
    connections_skipped: int = 0


class ReconstructionEngine:
    """
    Builds live nodes on a canvas from a document.

    Usage:
        engine = ReconstructionEngine(registry, registry, canvas)
        result = engine.reconstruct(document)
        live_id = result.id_map[old_id]

    Args:
        resolver:     Type lookup service.
        factory:      Creates blank nodes from type descriptors.
        canvas:       Target document; assigns ids and reports existing bounds.
        options:      Repair, property and placement switches.
        table:        Property descriptors to apply.
        synchronizer: Signature writer for script nodes.
    """

    def __init__(self, resolver: TypeResolver, factory: NodeFactory, canvas: HostCanvas,
                 options: Optional[DeserializationOptions] = None,
                 table: PropertyTable = DEFAULT_PROPERTY_TABLE,
                 synchronizer: Optional[ScriptSignatureSynchronizer] = None) -> None:
        self.resolver = resolver
        self.factory = factory
        self.canvas = canvas
        self.options = options or DeserializationOptions()
        self.table = table
        self.synchronizer = synchronizer or ScriptSignatureSynchronizer()
        # Reconstruction accepts everything the fullest capture can write
        self.filter = PropertyFilter()

        self._handlers: Dict[NodeKind, Callable[[HostNode, Component], None]] = {
            NodeKind.SLIDER: self._configure_slider,
            NodeKind.SCRIPT: self._configure_script,
        }

    # ==========================================================================
    # ENTRY POINT
    # ==========================================================================

    def reconstruct(self, document: Document) -> ReconstructionResult:
        result = ReconstructionResult()
        source_ids: Dict[str, str] = {}

        if self.options.fix_instance_ids:
            document, fixed = fix_component_instance_guids(document)
            source_ids = {new: old for old, new in fixed.items()}
        if self.options.drop_incomplete_pivots:
            document = remove_pivots_if_incomplete(document)

        positions = compute_placement(document, self.options.placement, self.canvas.content_bounds())

        for comp in document.components:
            node = self.instantiate_component(comp)
            if node is None:
                result.skipped_components.append(source_ids.get(comp.instance_guid, comp.instance_guid))
                continue
            self.canvas.add_node(node, positions[comp.instance_guid])
            result.nodes[comp.instance_guid] = node
            result.id_map[comp.instance_guid] = node.instance_id
            if comp.name not in result.placed_names:
                result.placed_names.append(comp.name)

        if self.options.create_connections:
            self.connect(document, result)

        # Report mappings against the ids the caller actually supplied
        for new_id, old_id in source_ids.items():
            if new_id in result.id_map:
                result.id_map[old_id] = result.id_map.pop(new_id)
                result.nodes[old_id] = result.nodes.pop(new_id)

        log.info("Placed %d components, %d connections (%d skipped)",
                 len(result.nodes), result.connections_made, result.connections_skipped)
        return result

    # ==========================================================================
    # COMPONENTS
    # ==========================================================================

    def instantiate_component(self, comp: Component) -> Optional[HostNode]:
        """Resolve, create and configure one component; None when it cannot be built."""
        descriptor = self.resolver.resolve(comp.component_guid, comp.name)
        if descriptor is None:
            log.warning("Unknown component type '%s' (%s), skipped", comp.name, comp.component_guid)
            return None

        try:
            node = self.factory.instantiate(descriptor)
        except (TypeError, ValueError, KeyError, RuntimeError) as exc:
            log.warning("Could not create '%s': %s", comp.name, exc)
            return None

        handler = self._handlers.get(node.kind, self._configure_generic)
        handler(node, comp)
        node.selected = comp.selected
        return node

    def _configure_generic(self, node: HostNode, comp: Component) -> None:
        if self.options.apply_properties:
            self.table.apply(node, comp.properties, self.filter)
        if self.options.apply_parameter_settings:
            self.apply_parameter_settings(node, comp)

    def _configure_slider(self, node: HostNode, comp: Component) -> None:
        packed = comp.property_value("CurrentValue")
        if packed is not None:
            try:
                apply_slider_value(node, str(packed))
            except ValueError as exc:
                log.warning("Slider '%s' keeps its default value: %s", comp.name, exc)
        if self.options.apply_properties:
            self.table.apply(node, comp.properties, self.filter, exclude=frozenset({"CurrentValue"}))
        if self.options.apply_parameter_settings:
            self.apply_parameter_settings(node, comp)

    def _configure_script(self, node: ScriptHostNode, comp: Component) -> None:
        script = comp.property_value("Script")
        if isinstance(script, str):
            node.script_text = script

        if self.options.apply_parameter_settings:
            self.rebuild_script_parameters(node, comp)
        if self.options.apply_properties:
            self.table.apply(node, comp.properties, self.filter, exclude=frozenset({"Script"}))
        node.variable_parameter_maintenance()

    # ==========================================================================
    # PARAMETERS
    # ==========================================================================

    def apply_parameter_settings(self, node: HostNode, comp: Component) -> None:
        """Settings onto the existing parameters of a non-script node."""
        for settings in comp.input_settings:
            param = node.find_input(settings.parameter_name)
            if param is None:
                log.debug("'%s' has no input '%s'", comp.name, settings.parameter_name)
                continue
            _apply_settings(param, settings)
            if settings.is_principal:
                node.principal_parameter_index = node.inputs.index(param)

        for settings in comp.output_settings:
            param = node.find_output(settings.parameter_name)
            if param is None:
                log.debug("'%s' has no output '%s'", comp.name, settings.parameter_name)
                continue
            _apply_settings(param, settings)

    def rebuild_script_parameters(self, node: ScriptHostNode, comp: Component) -> None:
        """
        Replace the node's parameters with the ones the document declares.

        Parameters that already exist under the same variable are updated in
        place and re-registered; the rest are created. For dialects with
        static types the entry-point signature is re-typed to match.
        """
        language = getattr(node, "language", ScriptLanguage.CSHARP)
        mapper = IdentifierMapper(language)

        old_inputs, old_outputs = node.inputs, node.outputs
        for param in old_inputs:
            node.unregister_input(param)
        for param in old_outputs:
            node.unregister_output(param)

        for settings in comp.input_settings:
            param = self._script_param(node, settings, old_inputs, mapper)
            node.register_input(param)
            if settings.is_principal:
                node.principal_parameter_index = node.inputs.index(param)
        for settings in comp.output_settings:
            node.register_output(self._script_param(node, settings, old_outputs, mapper))

        input_hints = [_declared_hint(s) for s in comp.input_settings]
        output_hints = [_declared_hint(s) for s in comp.output_settings]
        if any(input_hints) or any(output_hints):
            node.script_text = self.synchronizer.inject(node.script_text, input_hints,
                                                        output_hints, language)

    @staticmethod
    def _script_param(node: ScriptHostNode, settings: ParameterSettings,
                      existing: List[HostParam], mapper: IdentifierMapper) -> HostParam:
        identifier = mapper.sanitize(settings.effective_variable_name)
        param = next((p for p in existing
                      if mapper.same_variable(getattr(p, "variable_name", p.name), identifier)), None)
        if param is None:
            param = node.create_parameter(identifier)

        param.name = settings.parameter_name
        param.variable_name = identifier
        param.nick_name = settings.nick_name or settings.parameter_name
        _apply_settings(param, settings, script=True)
        return param

    # ==========================================================================
    # WIRING
    # ==========================================================================

    def connect(self, document: Document, result: ReconstructionResult) -> None:
        """Create every resolvable connection of ``document`` between placed nodes."""
        for conn in document.connections:
            if not conn.is_valid():
                log.warning("Skipped incomplete connection %s", conn.to_dict())
                result.connections_skipped += 1
                continue

            source_node = result.nodes.get(conn.source.instance_id)
            target_node = result.nodes.get(conn.target.instance_id)
            if source_node is None or target_node is None:
                log.warning("Dropped connection %s.%s -> %s.%s (component not placed)",
                            conn.source.instance_id, conn.source.name,
                            conn.target.instance_id, conn.target.name)
                result.connections_skipped += 1
                continue

            source = _find_endpoint_param(source_node, conn.source.name, output=True)
            target = _find_endpoint_param(target_node, conn.target.name, output=False)
            if source is None or target is None:
                log.warning("Dropped connection '%s'.%s -> '%s'.%s (parameter not found)",
                            source_node.name, conn.source.name, target_node.name, conn.target.name)
                result.connections_skipped += 1
                continue

            try:
                target.add_source(source)
            except (ValueError, TypeError, RuntimeError) as exc:
                log.warning("Host refused connection '%s' -> '%s': %s",
                            conn.source.name, conn.target.name, exc)
                result.connections_skipped += 1
                continue
            result.connections_made += 1


# ==============================================================================
# HELPERS
# ==============================================================================

def _find_endpoint_param(node: HostNode, name: str, output: bool) -> Optional[HostParam]:
    param = node.find_output(name) if output else node.find_input(name)
    if param is None and node.kind is NodeKind.PARAMETER:
        # A floating parameter is its own endpoint whatever name the document uses
        params = node.outputs if output else node.inputs
        if len(params) == 1:
            return params[0]
    return param


def _declared_hint(settings: ParameterSettings) -> Optional[str]:
    if not settings.type_hint:
        return None
    return TypeHintMapper.format_type_hint(settings.type_hint, settings.access or ParamAccess.ITEM)


def _apply_settings(param: HostParam, settings: ParameterSettings, script: bool = False) -> None:
    if settings.nick_name:
        param.nick_name = settings.nick_name
    if settings.data_mapping is not None:
        param.data_mapping = settings.data_mapping
    if settings.expression is not None:
        param.expression = settings.expression
    if settings.additional is not None:
        for key, value in settings.additional.to_dict().items():
            setattr(param, key, value)

    if not script:
        return
    if settings.access is not None:
        param.access = settings.access
    if settings.description is not None:
        param.description = settings.description
    param.optional = not settings.required
    if settings.type_hint:
        param.type_hint = settings.type_hint
