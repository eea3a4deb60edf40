# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

signatures.py - Script Signature Synchronizer
---------------------------------------------
For script nodes the entry point's formal parameter list is the only place
parameter types live. This module reads a type hint for one parameter out
of that list and writes updated hints back into it.

Each dialect keeps its grammar behind two calls, ``extract_type_hint`` and
``inject_type_hints``:

    C#      ``private void RunScript(List<Curve> crv, double t, ref object A)``
            ``ref`` / ``out`` mark outputs.
    Python  ``def RunScript(self, crv, t):`` carries no static types.
    VB      ``Sub RunScript(ByVal crv As Object, ...)`` is recognised but
            not typed; hints are never read or written.

``ScriptSignatureSynchronizer`` wraps the dialects and turns any failure into
"no hint" / "text unchanged", so one unparsable script never breaks a capture
or reconstruction batch.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Pattern, Sequence

from ghjson.host import ScriptLanguage
from ghjson.identifiers import strip_verbatim
from ghjson.logger import get_logger

log = get_logger("Signatures")

OUTPUT_QUALIFIERS = ("ref", "out")

_OPENERS = {"<": ">", "(": ")", "[": "]", "{": "}"}
_CLOSERS = {v: k for k, v in _OPENERS.items()}


# ==============================================================================
# PARAMETER LIST PARSING
# ==============================================================================

@dataclass(frozen=True)
class SignatureParameter:
    """One formal parameter as written in the source text."""
    name: str
    type_text: str = ""
    qualifier: str = ""
    default: str = ""
    source: str = ""

    @property
    def is_output(self) -> bool:
        return self.qualifier in OUTPUT_QUALIFIERS

    def render(self, type_text: Optional[str] = None) -> str:
        if self.source and (not type_text or type_text == self.type_text):
            return self.source
        parts = [self.qualifier, type_text if type_text else self.type_text, self.name]
        text = " ".join(p for p in parts if p)
        return f"{text} = {self.default}" if self.default else text


def split_parameters(text: str) -> List[str]:
    """
    Split a parameter list on top-level commas.

    Commas inside ``<...>`` generics (and any bracketed default value) do
    not split. Empty fragments are dropped.
    """
    fragments: List[str] = []
    stack: List[str] = []
    current: List[str] = []
    for ch in text:
        if ch in _OPENERS:
            stack.append(ch)
        elif ch in _CLOSERS:
            if not stack or stack[-1] != _CLOSERS[ch]:
                raise ValueError(f"Unbalanced '{ch}' in parameter list")
            stack.pop()
        elif ch == "," and not stack:
            fragments.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    if stack:
        raise ValueError("Unclosed bracket in parameter list")
    fragments.append("".join(current).strip())
    return [f for f in fragments if f]


def parse_parameter(fragment: str) -> SignatureParameter:
    """
    ``ref List<Curve> crv = null`` -> qualifier ``ref``, type ``List<Curve>``,
    name ``crv``, default ``null``.
    """
    declaration, _, default = fragment.partition("=")
    declaration = declaration.strip()
    tokens = declaration.split()
    if not tokens:
        raise ValueError(f"Empty parameter declaration: {fragment!r}")
    name = tokens[-1]
    type_text = declaration[: declaration.rfind(name)].strip()
    qualifier = ""
    parts = type_text.split(None, 1)
    if parts and parts[0] in OUTPUT_QUALIFIERS + ("in", "params"):
        qualifier = parts[0]
        type_text = parts[1].strip() if len(parts) > 1 else ""
    return SignatureParameter(name=name, type_text=type_text, qualifier=qualifier,
                              default=default.strip(), source=fragment.strip())


# ==============================================================================
# DIALECTS
# ==============================================================================

class SignatureDialect(ABC):
    """Grammar of one scripting language's entry point."""

    language: ScriptLanguage
    pattern: Pattern[str]

    def find_signature(self, script: str) -> Optional[re.Match]:
        return self.pattern.search(script or "")

    def parameters(self, script: str) -> List[SignatureParameter]:
        match = self.find_signature(script)
        if match is None:
            return []
        return [parse_parameter(f) for f in split_parameters(match.group(1))]

    @abstractmethod
    def extract_type_hint(self, script: str, variable_name: str) -> Optional[str]:
        ...

    @abstractmethod
    def inject_type_hints(self, script: str,
                          input_hints: Sequence[Optional[str]],
                          output_hints: Sequence[Optional[str]]) -> str:
        ...


class CSharpDialect(SignatureDialect):
    language = ScriptLanguage.CSHARP
    pattern = re.compile(r"private\s+void\s+RunScript\s*\((.*?)\)\s*(?=\{|$)",
                         re.DOTALL | re.MULTILINE)

    def extract_type_hint(self, script: str, variable_name: str) -> Optional[str]:
        wanted = strip_verbatim(variable_name)
        for param in self.parameters(script):
            if strip_verbatim(param.name) == wanted:
                return param.type_text or None
        return None

    def inject_type_hints(self, script: str,
                          input_hints: Sequence[Optional[str]],
                          output_hints: Sequence[Optional[str]]) -> str:
        match = self.find_signature(script)
        if match is None:
            return script

        inputs: Iterator[Optional[str]] = iter(input_hints)
        outputs: Iterator[Optional[str]] = iter(output_hints)
        rendered = []
        changed = False
        for param in (parse_parameter(f) for f in split_parameters(match.group(1))):
            hint = next(outputs if param.is_output else inputs, None)
            changed = changed or bool(hint and hint != param.type_text)
            rendered.append(param.render(hint))
        if not changed:
            return script

        start, end = match.span(1)
        return script[:start] + ", ".join(rendered) + script[end:]


class PythonDialect(SignatureDialect):
    language = ScriptLanguage.PYTHON
    pattern = re.compile(r"def\s+RunScript\s*\(\s*self\s*,\s*(.*?)\s*\)\s*:", re.DOTALL)

    def extract_type_hint(self, script: str, variable_name: str) -> Optional[str]:
        return None

    def inject_type_hints(self, script, input_hints, output_hints) -> str:
        return script


class VBDialect(SignatureDialect):
    language = ScriptLanguage.VB
    pattern = re.compile(r"Sub\s+RunScript\s*\((.*?)\)", re.DOTALL | re.IGNORECASE)

    def extract_type_hint(self, script: str, variable_name: str) -> Optional[str]:
        return None

    def inject_type_hints(self, script, input_hints, output_hints) -> str:
        return script


# ==============================================================================
# FACADE
# ==============================================================================

class ScriptSignatureSynchronizer:
    """
    Dialect dispatch plus the never-raise policy.

    Usage::

        sync = ScriptSignatureSynchronizer()
        hint = sync.extract(script, "crv", ScriptLanguage.CSHARP)   # "List<Curve>"
        script = sync.inject(script, ["Curve", None], ["string"], ScriptLanguage.CSHARP)
    """

    def __init__(self) -> None:
        self._dialects: Dict[ScriptLanguage, SignatureDialect] = {}
        for dialect in (CSharpDialect(), PythonDialect(), VBDialect()):
            self.register_dialect(dialect)

    def register_dialect(self, dialect: SignatureDialect) -> None:
        self._dialects[dialect.language] = dialect

    def dialect(self, language: ScriptLanguage) -> Optional[SignatureDialect]:
        return self._dialects.get(language)

    def extract(self, script: str, variable_name: str,
                language: ScriptLanguage = ScriptLanguage.CSHARP) -> Optional[str]:
        """Declared type of ``variable_name``, or None when it cannot be read."""
        dialect = self._dialects.get(language)
        if dialect is None or not script:
            return None
        try:
            return dialect.extract_type_hint(script, variable_name)
        except Exception as exc:
            log.warning("Could not read type hint for '%s' (%s): %s",
                        variable_name, language.value, exc)
            return None

    def inject(self, script: str,
               input_hints: Sequence[Optional[str]],
               output_hints: Sequence[Optional[str]],
               language: ScriptLanguage = ScriptLanguage.CSHARP) -> str:
        """``script`` with its entry point re-typed; unchanged on any failure."""
        dialect = self._dialects.get(language)
        if dialect is None or not script:
            return script
        try:
            return dialect.inject_type_hints(script, input_hints, output_hints)
        except Exception as exc:
            log.warning("Could not update script signature (%s): %s", language.value, exc)
            return script
