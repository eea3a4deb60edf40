# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

identifiers.py - Identifier Mapper
----------------------------------
Maps a parameter's display name to a script variable identifier and back.

C# scheme:
    ``radius``        -> ``radius``          valid identifiers are unchanged
    ``class``         -> ``@class``          reserved words take the verbatim marker
    ``Max Radius``    -> ``@__Max_20Radius`` everything else is hex-escaped

In the escaped form every character that is not an ASCII letter or digit
(``_`` included) becomes ``_XX`` (code point below 0x100), ``_uXXXX``
(rest of the BMP) or ``_UXXXXXXXX`` (astral planes), so any display name,
the empty string included, survives ``unsanitize(sanitize(name))``.

Python scheme: keywords and non-identifiers are escaped the same way behind
the ``__gh_`` prefix. A display name that is itself a valid identifier
starting with ``__gh_`` is escaped too, so it is the one valid identifier
that ``sanitize`` changes.

VB scheme: names pass through unchanged (no escaping is applied; callers
must supply valid names).
"""

import keyword
import re
from typing import FrozenSet

from ghjson.host import ScriptLanguage

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_ESCAPE_RE = re.compile(r"_(?:u([0-9A-F]{4})|U([0-9A-F]{8})|([0-9A-F]{2}))")

VERBATIM_MARKER = "@"
CSHARP_ESCAPE_PREFIX = "@__"
PYTHON_ESCAPE_PREFIX = "__gh_"

CSHARP_RESERVED: FrozenSet[str] = frozenset({
    "abstract", "as", "base", "bool", "break", "byte", "case", "catch",
    "char", "checked", "class", "const", "continue", "decimal", "default",
    "delegate", "do", "double", "else", "enum", "event", "explicit",
    "extern", "false", "finally", "fixed", "float", "for", "foreach",
    "goto", "if", "implicit", "in", "int", "interface", "internal", "is",
    "lock", "long", "namespace", "new", "null", "object", "operator", "out",
    "override", "params", "private", "protected", "public", "readonly",
    "ref", "return", "sbyte", "sealed", "short", "sizeof", "stackalloc",
    "static", "string", "struct", "switch", "this", "throw", "true", "try",
    "typeof", "uint", "ulong", "unchecked", "unsafe", "ushort", "using",
    "var", "virtual", "void", "volatile", "while",
})


def is_valid_identifier(text: str) -> bool:
    """ASCII identifier check shared by all dialects."""
    return bool(_IDENTIFIER_RE.match(text))


def strip_verbatim(identifier: str) -> str:
    """Drop a single leading ``@`` marker, if any."""
    return identifier[1:] if identifier.startswith(VERBATIM_MARKER) else identifier


def _escape(name: str) -> str:
    out = []
    for ch in name:
        code = ord(ch)
        if ch.isascii() and ch.isalnum():
            out.append(ch)
        elif code < 0x100:
            out.append(f"_{code:02X}")
        elif code <= 0xFFFF:
            out.append(f"_u{code:04X}")
        else:
            out.append(f"_U{code:08X}")
    return "".join(out)


def _unescape(body: str) -> str:
    """Inverse of ``_escape``; raises ValueError on a stray ``_``."""
    out = []
    pos = 0
    while pos < len(body):
        ch = body[pos]
        if ch != "_":
            out.append(ch)
            pos += 1
            continue
        match = _ESCAPE_RE.match(body, pos)
        if match is None:
            raise ValueError(f"Malformed escape at {pos} in {body!r}")
        out.append(chr(int(next(g for g in match.groups() if g), 16)))
        pos = match.end()
    return "".join(out)


class IdentifierMapper:
    """
    Bidirectional display-name / identifier translation for one dialect.

    Args:
        language: Scripting dialect whose identifier rules apply.
    """

    def __init__(self, language: ScriptLanguage = ScriptLanguage.CSHARP) -> None:
        self.language = language

    def sanitize(self, name: str) -> str:
        """Valid identifier for ``name`` in this dialect."""
        if self.language is ScriptLanguage.CSHARP:
            if is_valid_identifier(name):
                return VERBATIM_MARKER + name if name in CSHARP_RESERVED else name
            return CSHARP_ESCAPE_PREFIX + _escape(name)

        if self.language is ScriptLanguage.PYTHON:
            if (is_valid_identifier(name) and not keyword.iskeyword(name)
                    and not name.startswith(PYTHON_ESCAPE_PREFIX)):
                return name
            return PYTHON_ESCAPE_PREFIX + _escape(name)

        return name

    def unsanitize(self, identifier: str) -> str:
        """Best-effort display name for ``identifier``."""
        if self.language is ScriptLanguage.CSHARP:
            if identifier.startswith(CSHARP_ESCAPE_PREFIX):
                try:
                    return _unescape(identifier[len(CSHARP_ESCAPE_PREFIX):])
                except ValueError:
                    return strip_verbatim(identifier)
            return strip_verbatim(identifier)

        if self.language is ScriptLanguage.PYTHON:
            if identifier.startswith(PYTHON_ESCAPE_PREFIX):
                try:
                    return _unescape(identifier[len(PYTHON_ESCAPE_PREFIX):])
                except ValueError:
                    return identifier
            return identifier

        return identifier

    def same_variable(self, left: str, right: str) -> bool:
        """Whether two identifiers name the same variable (``@x`` is ``x`` in C#)."""
        if self.language is ScriptLanguage.CSHARP:
            return strip_verbatim(left) == strip_verbatim(right)
        return left == right
