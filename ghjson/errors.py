# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

errors.py - Exception Taxonomy
------------------------------
Codec failures derive from the builtin they describe (``ValueError`` for
malformed tokens, ``TypeError`` for values of the wrong kind) so callers
that only know the builtins still catch them.
"""

from typing import Optional


class GhJsonError(Exception):
    """Base class for all errors raised by this package."""


class CodecError(GhJsonError):
    """Base class for data-type codec failures."""


class CodecFormatError(CodecError, ValueError):
    """A token does not match the grammar of its codec."""

    def __init__(self, type_name: str, token: str, expected: str) -> None:
        self.type_name = type_name
        self.token = token
        self.expected = expected
        super().__init__(
            f"Invalid {type_name} format: '{token}'. Expected format: {expected}"
        )


class CodecArgumentError(CodecError, TypeError):
    """A codec was asked to serialize a value of the wrong runtime kind."""

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Value must be of type {expected}, got {actual}")


class UnknownCodecError(CodecError, KeyError):
    """No codec is registered under the requested type name or prefix."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"No codec registered for '{self.key}'"


class DocumentFormatError(GhJsonError, ValueError):
    """A JSON payload cannot be converted into the document model."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)
