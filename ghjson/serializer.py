# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

serializer.py - JSON Boundary
-----------------------------
Text and file I/O for documents, plus the two one-call operations callers
usually want:

    capture(nodes)                    live nodes  -> Document
    put_objects_on_canvas(document)   Document    -> live nodes on a canvas

State ownership:
    Extractor             -> component records, parameter settings, wires
    ReconstructionEngine  -> live nodes, ids, placement
    GhJsonSerializer      -> JSON text, files, validation before placing

Format:
{
    "components": [ { "name", "componentGuid", "instanceGuid", "pivot",
                      "selected", "properties", "inputSettings",
                      "outputSettings", "warnings", "errors" }, ... ],
    "connections": [ { "from": {...}, "to": {...} }, ... ]
}
"""

import json
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from PySide6.QtCore import QPointF, QRectF
from PySide6.QtGui import QColor

from ghjson.codecs import CodecRegistry
from ghjson.config import DeserializationOptions, SerializationOptions
from ghjson.errors import CodecError, DocumentFormatError
from ghjson.extractor import DocumentExtractor
from ghjson.host import HostCanvas, HostNode, NodeFactory, TypeResolver
from ghjson.logger import get_logger
from ghjson.models import Document, pivot_to_dict
from ghjson.reconstruction import ReconstructionEngine, ReconstructionResult
from ghjson.validator import GhJsonValidator, ValidationReport

log = get_logger("Serializer")

PathLike = Union[str, Path]


# ---------------------------------------------------------------------------
# Custom JSON encoder for Qt and codec types
# ---------------------------------------------------------------------------

class _GhJsonEncoder(json.JSONEncoder):
    """
    Encoder for values that reach ``json.dumps`` without being pre-encoded.

    Pivots use the document's ``{"X", "Y"}`` form, colours and geometry
    become codec tokens, decimals become floats.
    """
    def default(self, obj):
        if isinstance(obj, QPointF):
            return pivot_to_dict(obj)
        if isinstance(obj, QRectF):
            return {"X": obj.x(), "Y": obj.y(), "Width": obj.width(), "Height": obj.height()}
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, QColor) or CodecRegistry.is_supported(obj):
            try:
                return CodecRegistry.serialize(obj)
            except CodecError as exc:
                raise TypeError(f"Cannot encode {type(obj).__name__}: {exc}") from exc
        # Let the base class raise TypeError for truly unknown types
        return super().default(obj)


def to_json(document: Document, indent: Optional[int] = 2) -> str:
    return json.dumps(document.to_dict(), indent=indent, ensure_ascii=False, cls=_GhJsonEncoder)


def from_json(text: str) -> Document:
    """
    Parse a document.

    Raises:
        DocumentFormatError: The text is not JSON or not shaped like a document.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DocumentFormatError(f"Invalid JSON: {exc}") from exc
    return Document.from_dict(data)


def save_to_file(document: Document, filepath: PathLike, indent: Optional[int] = 2) -> bool:
    """Write ``document`` as UTF-8 JSON; False (logged) on I/O failure."""
    try:
        Path(filepath).write_text(to_json(document, indent), encoding="utf-8")
    except OSError as exc:
        log.error("Save failed: %s", exc)
        return False
    log.info("Saved to: %s", filepath)
    return True


def load_from_file(filepath: PathLike) -> Optional[Document]:
    """Read a document; None (logged) when the file is missing or unreadable."""
    try:
        text = Path(filepath).read_text(encoding="utf-8")
    except FileNotFoundError:
        log.warning("File not found: %s", filepath)
        return None
    except OSError as exc:
        log.error("Load failed: %s", exc)
        return None
    try:
        return from_json(text)
    except DocumentFormatError as exc:
        log.error("Load failed: %s", exc)
        return None


# ---------------------------------------------------------------------------
# One-call operations
# ---------------------------------------------------------------------------

def capture(nodes: Iterable[HostNode], options: Optional[SerializationOptions] = None) -> Document:
    return DocumentExtractor(options).extract(nodes)


def put_objects_on_canvas(document: Document,
                          resolver: TypeResolver,
                          factory: NodeFactory,
                          canvas: HostCanvas,
                          options: Optional[DeserializationOptions] = None) -> List[str]:
    """
    Place a document on ``canvas``.

    Returns:
        Distinct display names of the components that were placed.
    """
    return ReconstructionEngine(resolver, factory, canvas, options).reconstruct(document).placed_names


class GhJsonSerializer:
    """
    Capture and placement bound to one host.

    Usage:
        serializer = GhJsonSerializer(registry, registry)

        # Save
        json_str = serializer.serialize(canvas.nodes)

        # Load
        result = serializer.deserialize(canvas, json_str)
    """

    def __init__(self, resolver: TypeResolver, factory: NodeFactory,
                 serialization: Optional[SerializationOptions] = None,
                 deserialization: Optional[DeserializationOptions] = None) -> None:
        self.resolver = resolver
        self.factory = factory
        self.serialization = serialization or SerializationOptions()
        self.deserialization = deserialization or DeserializationOptions()

    # =======================================================================
    # SERIALIZE (Save)
    # =======================================================================

    def serialize(self, nodes: Iterable[HostNode], indent: Optional[int] = 2) -> str:
        return to_json(capture(nodes, self.serialization), indent)

    def save_to_file(self, filepath: PathLike, nodes: Iterable[HostNode]) -> bool:
        return save_to_file(capture(nodes, self.serialization), filepath)

    # =======================================================================
    # DESERIALIZE (Load)
    # =======================================================================

    def validate(self, payload: Union[str, dict]) -> ValidationReport:
        return GhJsonValidator(self.resolver).validate(payload)

    def deserialize(self, canvas: HostCanvas, json_str: str,
                    validate: bool = True) -> Optional[ReconstructionResult]:
        """
        Validate, parse and place a document.

        Returns:
            The reconstruction result, or None when validation reported
            errors or the text could not be parsed.
        """
        if validate:
            report = self.validate(json_str)
            if not report.is_valid:
                log.warning("Document rejected:\n%s", report.format())
                return None
            for warning in report.warnings:
                log.debug("Validation warning: %s", warning)
        try:
            document = from_json(json_str)
        except DocumentFormatError as exc:
            log.error("Cannot parse document: %s", exc)
            return None
        return self.place(canvas, document)

    def place(self, canvas: HostCanvas, document: Document) -> ReconstructionResult:
        engine = ReconstructionEngine(self.resolver, self.factory, canvas, self.deserialization)
        return engine.reconstruct(document)

    def load_from_file(self, filepath: PathLike, canvas: HostCanvas,
                       validate: bool = True) -> Optional[ReconstructionResult]:
        try:
            json_str = Path(filepath).read_text(encoding="utf-8")
        except FileNotFoundError:
            log.warning("File not found: %s", filepath)
            return None
        except OSError as exc:
            log.error("Load failed: %s", exc)
            return None
        return self.deserialize(canvas, json_str, validate=validate)
