# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

fixer.py - Document Repair
--------------------------
Small repairs applied to hand-written or generated documents before they
are reconstructed. Both helpers return new documents; the input is left
untouched.
"""

import uuid
from dataclasses import replace
from typing import Dict, Optional, Tuple

from ghjson.logger import get_logger
from ghjson.models import Connection, Document, Endpoint

log = get_logger("Fixer")


def is_guid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def fix_component_instance_guids(
    document: Document,
    id_mapping: Optional[Dict[str, str]] = None,
) -> Tuple[Document, Dict[str, str]]:
    """
    Replace instance ids that are not GUIDs with fresh ones.

    Generated documents often use readable ids (``"slider1"``). Connections
    referring to a replaced id are rewritten to the new one.

    Args:
        document:   Source document.
        id_mapping: Mapping to extend; a new one is created when omitted.

    Returns:
        The repaired document and the ``old id -> new id`` mapping.
    """
    mapping: Dict[str, str] = {} if id_mapping is None else id_mapping

    components = []
    for comp in document.components:
        if is_guid(comp.instance_guid):
            components.append(comp)
            continue
        new_id = mapping.get(comp.instance_guid)
        if new_id is None:
            new_id = str(uuid.uuid4())
            mapping[comp.instance_guid] = new_id
        components.append(replace(comp, instance_guid=new_id))

    def _remap(endpoint: Endpoint) -> Endpoint:
        new_id = mapping.get(endpoint.instance_id)
        return endpoint if new_id is None else replace(endpoint, instance_id=new_id)

    connections = [Connection(_remap(c.source), _remap(c.target)) for c in document.connections]

    if mapping:
        log.debug("Replaced %d non-GUID instance ids", len(mapping))
    return Document(components=components, connections=connections), mapping


def remove_pivots_if_incomplete(document: Document) -> Document:
    """Drop every pivot unless all components carry one."""
    if all(c.pivot is not None for c in document.components):
        return document
    log.debug("Pivots incomplete, using computed layout for all components")
    return document.without_pivots()
