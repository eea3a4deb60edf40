# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

Project metadata for GhJSON.
"""

from typing import Final

# Metadata Definitions
__title__: Final[str] = "GhJSON"
__description__: Final[str] = (
    "Captures node-graph documents into portable JSON and rebuilds "
    "live graphs from it."
)
__version__: Final[str] = "0.1.0"
__format_version__: Final[str] = "1.0"
__author__: Final[str] = "opticsWolf"
__license__: Final[str] = "Apache-2.0"
__copyright__: Final[str] = "Copyright (c) 2026 opticsWolf"

def metadata_summary() -> dict[str, str]:
    """Returns a dictionary of project metadata for introspection."""
    return {
        "title": __title__,
        "version": __version__,
        "format_version": __format_version__,
        "license": __license__,
        "description": __description__,
    }
