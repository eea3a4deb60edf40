# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0
"""

from ghjson.__about__ import __version__, __format_version__
from ghjson.codecs import CodecRegistry, DataTypeCodec
from ghjson.config import (DeserializationOptions, PlacementSettings, PropertyFilter,
                           SerializationContext, SerializationOptions)
from ghjson.errors import (CodecArgumentError, CodecError, CodecFormatError,
                           DocumentFormatError, GhJsonError, UnknownCodecError)
from ghjson.extractor import DocumentExtractor, extract_document
from ghjson.fixer import fix_component_instance_guids, remove_pivots_if_incomplete
from ghjson.host import (HostCanvas, HostNode, HostParam, NodeFactory, NodeKind,
                         ParamAccess, ScriptHostNode, ScriptLanguage, TypeDescriptor,
                         TypeResolver)
from ghjson.identifiers import IdentifierMapper
from ghjson.logger import get_logger, set_log_level, setup_logging
from ghjson.models import (AdditionalParameterSettings, Component, ComponentProperty,
                           Connection, Document, Endpoint, ParameterSettings)
from ghjson.placement import compute_layers, compute_placement
from ghjson.reconstruction import ReconstructionEngine, ReconstructionResult
from ghjson.serializer import (GhJsonSerializer, capture, from_json, load_from_file,
                               put_objects_on_canvas, save_to_file, to_json)
from ghjson.signatures import ScriptSignatureSynchronizer
from ghjson.typehints import TypeHintMapper
from ghjson.validator import GhJsonValidator, ParamTypeTable, ValidationReport, analyze

__all__ = [
    "__version__", "__format_version__",
    "CodecRegistry", "DataTypeCodec",
    "DeserializationOptions", "PlacementSettings", "PropertyFilter",
    "SerializationContext", "SerializationOptions",
    "CodecArgumentError", "CodecError", "CodecFormatError",
    "DocumentFormatError", "GhJsonError", "UnknownCodecError",
    "DocumentExtractor", "extract_document",
    "fix_component_instance_guids", "remove_pivots_if_incomplete",
    "HostCanvas", "HostNode", "HostParam", "NodeFactory", "NodeKind",
    "ParamAccess", "ScriptHostNode", "ScriptLanguage", "TypeDescriptor", "TypeResolver",
    "IdentifierMapper",
    "get_logger", "set_log_level", "setup_logging",
    "AdditionalParameterSettings", "Component", "ComponentProperty",
    "Connection", "Document", "Endpoint", "ParameterSettings",
    "compute_layers", "compute_placement",
    "ReconstructionEngine", "ReconstructionResult",
    "GhJsonSerializer", "capture", "from_json", "load_from_file",
    "put_objects_on_canvas", "save_to_file", "to_json",
    "ScriptSignatureSynchronizer",
    "TypeHintMapper",
    "GhJsonValidator", "ParamTypeTable", "ValidationReport", "analyze",
]
