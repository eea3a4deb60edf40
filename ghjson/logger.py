# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

logger.py - Package Logging
---------------------------
Every module logs through ``get_logger(tag)``, a child of the ``"GhJSON"``
logger. Records carry the tag so output reads ``[Tag] LEVEL message``:

    [Extractor] INFO  Extracted 12 components, 9 connections
    [Reconstruction] WARNING Unknown component type 'Teapot' (...), skipped

Nothing is printed until ``setup_logging()`` attaches a console handler.
The ``GhJSON`` logger still propagates, so an application's own root
configuration (and pytest's ``caplog``) sees every record.

A host UI can subscribe to messages with ``add_log_callback(fn)``, where
``fn(level, tag, message)`` receives the formatted line.

Levels:
    DEBUG    - per-item decisions (type lookups, hint sources, id remaps)
    INFO     - finished batch operations (extracted, placed, wired)
    WARNING  - skipped items (unknown type, missing parameter, bad token)
    ERROR    - failed file I/O or an aborted batch step
"""

from __future__ import annotations

import logging
import sys
from typing import Callable, List, Optional, TextIO

ROOT_LOGGER_NAME = "GhJSON"

LogCallback = Callable[[str, str, str], None]

_DATE_FMT = "%Y-%m-%d %H:%M:%S"


def _tag_of(record: logging.LogRecord) -> str:
    """``GhJSON.Codecs`` -> ``Codecs``."""
    return record.name.rpartition(".")[2]


# ==============================================================================
# FORMATTING
# ==============================================================================

class GhJsonFormatter(logging.Formatter):
    """``[Tag] LEVEL message``, optionally prefixed with a timestamp."""

    LINE = "[%(module_tag)s] %(levelname)-5s %(message)s"

    def __init__(self, use_timestamp: bool = False) -> None:
        fmt = "%(asctime)s " + self.LINE if use_timestamp else self.LINE
        super().__init__(fmt=fmt, datefmt=_DATE_FMT)

    def format(self, record: logging.LogRecord) -> str:
        record.module_tag = _tag_of(record)
        return super().format(record)


# ==============================================================================
# CALLBACKS
# ==============================================================================

class _CallbackHandler(logging.Handler):
    """Fans formatted records out to subscriber functions."""

    def __init__(self) -> None:
        super().__init__()
        self.subscribers: List[LogCallback] = []
        self.setFormatter(GhJsonFormatter())

    def emit(self, record: logging.LogRecord) -> None:
        if not self.subscribers:
            return
        line = self.format(record)
        for subscriber in tuple(self.subscribers):
            try:
                subscriber(record.levelname, _tag_of(record), line)
            except Exception:
                # Report through logging's own error hook and keep notifying
                self.handleError(record)


_bridge: Optional[_CallbackHandler] = None


def _package_root() -> logging.Logger:
    return logging.getLogger(ROOT_LOGGER_NAME)


# ==============================================================================
# PUBLIC API
# ==============================================================================

def get_logger(module_tag: str) -> logging.Logger:
    """
    Logger for one module.

    Args:
        module_tag: Short name shown in brackets, e.g. ``"Codecs"``.
    """
    return _package_root().getChild(module_tag)


def setup_logging(level: int = logging.INFO,
                  stream: Optional[TextIO] = None,
                  log_file: Optional[str] = None) -> logging.Logger:
    """
    Attach output handlers to the ``GhJSON`` logger.

    Repeated calls only adjust the level; handlers are added on the first
    call that finds none.

    Args:
        level:    Minimum level for the logger and the new handlers.
        stream:   Console stream, ``sys.stdout`` by default.
        log_file: Also write timestamped lines to this file.

    Returns:
        The ``GhJSON`` logger.
    """
    root = _package_root()
    root.setLevel(level)
    if any(not isinstance(h, _CallbackHandler) for h in root.handlers):
        return root

    targets = [(logging.StreamHandler(stream or sys.stdout), False)]
    if log_file:
        targets.append((logging.FileHandler(log_file, encoding="utf-8"), True))
    for handler, stamped in targets:
        handler.setLevel(level)
        handler.setFormatter(GhJsonFormatter(use_timestamp=stamped))
        root.addHandler(handler)
    return root


def set_log_level(level: int) -> None:
    """Apply ``level`` to the ``GhJSON`` logger and all of its handlers."""
    root = _package_root()
    root.setLevel(level)
    for handler in root.handlers:
        handler.setLevel(level)


def add_log_callback(fn: LogCallback) -> None:
    """Subscribe ``fn(level, tag, message)`` to every package record."""
    global _bridge
    if _bridge is None:
        _bridge = _CallbackHandler()
        _package_root().addHandler(_bridge)
    if fn not in _bridge.subscribers:
        _bridge.subscribers.append(fn)


def remove_log_callback(fn: LogCallback) -> None:
    if _bridge is not None and fn in _bridge.subscribers:
        _bridge.subscribers.remove(fn)
