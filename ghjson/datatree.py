# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

datatree.py - Persistent Data Trees
-----------------------------------
A host data tree is a mapping ``path tuple -> list of items``. In the
document it is flattened to one dictionary per branch, keyed by the textual
path plus item index::

    {"{0;1}": {"{0;1}(0)": {"type": "Point3d", "value": "pointXYZ:1,2,0"},
               "{0;1}(1)": {"type": "Point3d", "value": "pointXYZ:4,2,0"}}}

Items are encoded with the codec registry when their type is registered;
expansion decodes any string carrying a registered prefix.
"""

import re
from typing import Any, Dict, List, Tuple

from ghjson.codecs import CodecRegistry
from ghjson.errors import CodecError
from ghjson.logger import get_logger
from ghjson.models import json_type_name

log = get_logger("DataTree")

GhPath = Tuple[int, ...]
DataTree = Dict[GhPath, List[Any]]

_INDEX_RE = re.compile(r"\(\d+\)")


def format_path(path: GhPath) -> str:
    return "{" + ";".join(str(i) for i in path) + "}"


def parse_path(key: str) -> GhPath:
    """``"{0;1}(2)"`` -> ``(0, 1)``; non-numeric elements are skipped."""
    cleaned = _INDEX_RE.sub("", key).strip().strip("{}")
    indices = []
    for element in cleaned.split(";"):
        element = element.strip()
        if element.lstrip("-").isdigit():
            indices.append(int(element))
    return tuple(indices)


def encode_item(value: Any) -> Dict[str, Any]:
    if value is None:
        return {"type": "Null", "value": None}
    codec = CodecRegistry.find_for_value(value)
    if codec is not None:
        try:
            return {"type": codec.type_name, "value": codec.serialize(value)}
        except CodecError as exc:
            log.warning("Could not encode %s item: %s", codec.type_name, exc)
    if isinstance(value, (list, dict)):
        return {"type": json_type_name(value), "value": value}
    return {"type": type(value).__name__, "value": str(value)}


def decode_item(value: Any) -> Any:
    _, decoded = CodecRegistry.try_deserialize_from_prefix(value)
    return decoded


def flatten_tree(tree: DataTree) -> Dict[str, Dict[str, Dict[str, Any]]]:
    result: Dict[str, Dict[str, Dict[str, Any]]] = {}
    for path in sorted(tree):
        key = format_path(path)
        result[key] = {f"{key}({i})": encode_item(item) for i, item in enumerate(tree[path])}
    return result


def expand_tree(data: Any) -> DataTree:
    """
    Inverse of ``flatten_tree``.

    Also accepts a bare list (one branch at ``{0}``), a branch given as a
    list instead of an indexed dictionary, and a single value.
    """
    if data is None:
        return {}
    if isinstance(data, list):
        return {(0,): [decode_item(v) for v in data]}
    if not isinstance(data, dict):
        return {(0,): [decode_item(data)]}

    tree: DataTree = {}
    for key, items in data.items():
        path = parse_path(str(key))
        branch = tree.setdefault(path, [])
        if isinstance(items, dict):
            values = items.values()
        elif isinstance(items, list):
            values = items
        else:
            values = [items]
        for item in values:
            if isinstance(item, dict) and ("value" in item or "Value" in item):
                item = item.get("value", item.get("Value"))
            branch.append(decode_item(item))
    return tree
