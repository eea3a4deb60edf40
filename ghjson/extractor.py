# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

extractor.py - Document Capture
-------------------------------
Builds a ``Document`` from live host nodes.

Ownership boundary:
    The property table owns which node properties are read and how they are
    encoded. The extractor adds the graph-level record (type key, instance
    id, pivot, selection, runtime messages), per-parameter settings and the
    connection list.

Connections are read from the output side only (each output's recipients),
and only between nodes in the captured set, so every wire appears once.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from PySide6.QtCore import QPointF

from ghjson.config import PropertyFilter, SerializationOptions
from ghjson.host import DataMapping, HostNode, HostParam, NodeKind, ScriptLanguage
from ghjson.identifiers import IdentifierMapper
from ghjson.logger import get_logger
from ghjson.models import (AdditionalParameterSettings, Component, Connection, Document,
                           Endpoint, ParameterSettings)
from ghjson.properties import DEFAULT_PROPERTY_TABLE, PropertyTable
from ghjson.signatures import ScriptSignatureSynchronizer
from ghjson.typehints import TypeHintMapper

log = get_logger("Extractor")


class DocumentExtractor:
    """
    Live nodes in, ``Document`` out.

    Usage:
        extractor = DocumentExtractor(SerializationOptions.ai_optimized())
        document = extractor.extract(canvas.nodes)

    Args:
        options:       What to include; defaults to a full capture.
        table:         Property descriptors to read.
        synchronizer:  Signature reader for script nodes.
    """

    def __init__(self, options: Optional[SerializationOptions] = None,
                 table: PropertyTable = DEFAULT_PROPERTY_TABLE,
                 synchronizer: Optional[ScriptSignatureSynchronizer] = None) -> None:
        self.options = options or SerializationOptions()
        self.table = table
        self.synchronizer = synchronizer or ScriptSignatureSynchronizer()
        self.filter = PropertyFilter(self.options.context)

    # ==========================================================================
    # DOCUMENT
    # ==========================================================================

    def extract(self, nodes: Iterable[HostNode]) -> Document:
        unique: Dict[str, HostNode] = {}
        for node in nodes:
            unique.setdefault(node.instance_id, node)
        captured = list(unique.values())

        components = [self.extract_component(node) for node in captured]
        connections = self.extract_connections(captured)
        log.info("Extracted %d components, %d connections", len(components), len(connections))
        return Document(components=components, connections=connections)

    def extract_component(self, node: HostNode) -> Component:
        exclude = frozenset() if self.options.include_persistent_data else frozenset({"PersistentData"})
        properties = self.table.capture(node, self.filter,
                                        include_human_readable=self.options.include_human_readable,
                                        exclude=exclude)

        input_settings: List[ParameterSettings] = []
        output_settings: List[ParameterSettings] = []
        if self.options.include_parameter_settings and self.filter.include_parameter_settings:
            input_settings, output_settings = self.extract_parameter_settings(node)

        messages = self.options.include_runtime_messages
        return Component(
            name=node.name,
            component_guid=node.type_guid,
            instance_guid=node.instance_id,
            pivot=QPointF(node.pivot) if self.options.include_pivots else None,
            selected=bool(node.selected) if self.options.include_selection else False,
            properties=properties,
            input_settings=input_settings,
            output_settings=output_settings,
            warnings=list(node.warnings) if messages else [],
            errors=list(node.errors) if messages else [],
        )

    def extract_connections(self, nodes: Iterable[HostNode]) -> List[Connection]:
        nodes = list(nodes)
        ids = {n.instance_id for n in nodes}
        connections: List[Connection] = []
        for node in nodes:
            for output in node.outputs:
                for recipient in output.recipients:
                    target = recipient.owner
                    if target is None or target.instance_id not in ids:
                        continue
                    connections.append(Connection(
                        source=Endpoint(node.instance_id, output.name),
                        target=Endpoint(target.instance_id, recipient.name),
                    ))
        return connections

    # ==========================================================================
    # PARAMETER SETTINGS
    # ==========================================================================

    def extract_parameter_settings(
        self, node: HostNode
    ) -> Tuple[List[ParameterSettings], List[ParameterSettings]]:
        """
        Settings for the inputs and outputs of ``node``.

        Script parameters are always recorded, since the node cannot be
        rebuilt without them. Other parameters only when something differs
        from the defaults.
        """
        principal = getattr(node, "principal_parameter_index", -1)
        if node.kind is NodeKind.SCRIPT:
            language = getattr(node, "language", ScriptLanguage.CSHARP)
            script = getattr(node, "script_text", "") or ""
            inputs = [self._script_settings(p, script, language, i == principal)
                      for i, p in enumerate(node.inputs)]
            outputs = [self._script_settings(p, script, language, False) for p in node.outputs]
            return inputs, outputs

        inputs = [self._plain_settings(p, i == principal) for i, p in enumerate(node.inputs)]
        outputs = [self._plain_settings(p, False) for p in node.outputs]
        return ([s for s in inputs if not s.is_default],
                [s for s in outputs if not s.is_default])

    def _script_settings(self, param: HostParam, script: str,
                         language: ScriptLanguage, is_principal: bool) -> ParameterSettings:
        mapper = IdentifierMapper(language)
        identifier = getattr(param, "variable_name", None) or param.name

        hint = self.synchronizer.extract(script, identifier, language)
        if hint:
            log.debug("Type hint for '%s' read from signature: %s", param.name, hint)
        else:
            hint = TypeHintMapper.infer_from_parameter(param)
            log.debug("Type hint for '%s' inferred: %s", param.name, hint)

        return ParameterSettings(
            parameter_name=param.name,
            variable_name=mapper.unsanitize(identifier),
            type_hint=hint,
            access=param.access,
            description=getattr(param, "description", None) or None,
            nick_name=getattr(param, "nick_name", None),
            required=not getattr(param, "optional", True),
            is_principal=is_principal,
            data_mapping=getattr(param, "data_mapping", DataMapping.NONE),
            expression=getattr(param, "expression", None),
            additional=_modifiers(param),
        )

    def _plain_settings(self, param: HostParam, is_principal: bool) -> ParameterSettings:
        return ParameterSettings(
            parameter_name=param.name,
            nick_name=getattr(param, "nick_name", None),
            is_principal=is_principal,
            data_mapping=getattr(param, "data_mapping", DataMapping.NONE),
            expression=getattr(param, "expression", None),
            additional=_modifiers(param),
        )


def _modifiers(param: HostParam) -> Optional[AdditionalParameterSettings]:
    """Set modifier flags only; unset flags are not recorded."""
    flags = {k: True for k in ("reverse", "simplify", "locked", "invert") if getattr(param, k, False)}
    return AdditionalParameterSettings(**flags) if flags else None


def extract_document(nodes: Iterable[HostNode],
                     options: Optional[SerializationOptions] = None) -> Document:
    """Shorthand for ``DocumentExtractor(options).extract(nodes)``."""
    return DocumentExtractor(options).extract(nodes)
