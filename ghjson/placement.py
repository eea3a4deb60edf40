# -*- coding: utf-8 -*-
"""
GhJSON: Bidirectional JSON capture and reconstruction
of node-graph documents.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

placement.py - Layout Computation
---------------------------------
Positions for the components of a document that is about to be placed.

Layers follow the data flow: a component sits one column to the right of
its right-most upstream component, sources sit in column 0. Inside a column,
components keep their document order. Cycles are broken at the first
unplaced component in document order, which keeps the result deterministic.

Supplied pivots win over computed cells. When only some components carry a
pivot, the computed cells move below the supplied ones (``span`` under the
lowest pivot) so the two groups never share a spot. The whole set is then
shifted by one global offset: below existing canvas content when there is any,
otherwise onto the configured origin.
"""

from collections import deque
from typing import Deque, Dict, List, Optional, Tuple

from PySide6.QtCore import QPointF, QRectF

from ghjson.config import PlacementSettings
from ghjson.logger import get_logger
from ghjson.models import Document

log = get_logger("Placement")

Edge = Tuple[str, str]


def document_edges(document: Document) -> List[Edge]:
    """``source id -> target id`` pairs between components of the document."""
    ids = {c.instance_guid for c in document.components}
    return [(c.source.instance_id, c.target.instance_id) for c in document.connections
            if c.source.instance_id in ids and c.target.instance_id in ids]


def compute_layers(ids: List[str], edges: List[Edge]) -> Dict[str, int]:
    """
    Longest-path layering.

    Args:
        ids:   Node ids in document order.
        edges: Directed ``(upstream, downstream)`` pairs; self loops ignored.

    Returns:
        Layer index per id, 0 for sources.
    """
    ids = list(dict.fromkeys(ids))
    successors: Dict[str, List[str]] = {i: [] for i in ids}
    indegree: Dict[str, int] = {i: 0 for i in ids}
    for src, dst in edges:
        if src == dst or src not in successors or dst not in indegree:
            continue
        successors[src].append(dst)
        indegree[dst] += 1

    layers: Dict[str, int] = {i: 0 for i in ids}
    done = set()
    ready: Deque[str] = deque(i for i in ids if indegree[i] == 0)

    while len(done) < len(ids):
        if not ready:
            # Cycle: release the first waiting node in document order
            forced = next(i for i in ids if i not in done)
            log.debug("Cycle detected, breaking at %s", forced)
            ready.append(forced)

        node = ready.popleft()
        if node in done:
            continue
        done.add(node)

        for succ in successors[node]:
            if succ in done:
                continue
            layers[succ] = max(layers[succ], layers[node] + 1)
            indegree[succ] -= 1
            if indegree[succ] == 0:
                ready.append(succ)

    return layers


def compute_grid(document: Document, settings: PlacementSettings) -> Dict[str, QPointF]:
    """Grid cell per component, before any pivot or offset is applied."""
    ids = [c.instance_guid for c in document.components]
    layers = compute_layers(ids, document_edges(document))

    next_row: Dict[int, int] = {}
    grid: Dict[str, QPointF] = {}
    for instance_id in ids:
        layer = layers[instance_id]
        row = next_row.get(layer, 0)
        next_row[layer] = row + 1
        grid[instance_id] = QPointF(layer * settings.spacing_x, row * settings.spacing_y)
    return grid


def start_point(settings: PlacementSettings, bounds: Optional[QRectF]) -> QPointF:
    """Top-left corner for new content: ``span`` below existing content."""
    if bounds is None or bounds.isNull():
        return QPointF(*settings.origin)
    return QPointF(bounds.left(), bounds.bottom() + settings.span)


def compute_placement(document: Document,
                      settings: Optional[PlacementSettings] = None,
                      bounds: Optional[QRectF] = None) -> Dict[str, QPointF]:
    """
    Final canvas position per component instance id.

    Args:
        document: Components and connections to lay out.
        settings: Spacing, span and origin.
        bounds:   Existing canvas content, None for an empty canvas.

    Returns:
        Positions for every component of the document. If the layout cannot
        be computed, components without a pivot land on the start point.
    """
    settings = settings or PlacementSettings()
    try:
        grid = compute_grid(document, settings)
    except (KeyError, ValueError, StopIteration) as exc:
        log.warning("Layout failed, placing components at the origin: %s", exc)
        grid = {}

    pivots = [c.pivot for c in document.components if c.pivot is not None]
    cell_offset = QPointF(0, 0)
    if pivots and len(pivots) < len(document.components):
        cell_offset = QPointF(min(p.x() for p in pivots), max(p.y() for p in pivots) + settings.span)

    positions: Dict[str, QPointF] = {}
    for comp in document.components:
        if comp.pivot is not None:
            positions[comp.instance_guid] = QPointF(comp.pivot)
        else:
            positions[comp.instance_guid] = grid.get(comp.instance_guid, QPointF(0, 0)) + cell_offset

    if not positions:
        return positions

    start = start_point(settings, bounds)
    if bounds is None or bounds.isNull():
        offset = start
    else:
        # Normalise so nothing ends up above or left of the start point
        min_x = min(p.x() for p in positions.values())
        min_y = min(p.y() for p in positions.values())
        offset = QPointF(start.x() - min_x, start.y() - min_y)

    placed = {k: p + offset for k, p in positions.items()}
    log.debug("Computed positions for %d components", len(placed))
    return placed
