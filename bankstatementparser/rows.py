# -*- coding: utf-8 -*-
"""rows.py
Cluster a page's positioned fragments into physical rows.

The vertical tolerance is derived from the page itself: the median of the
non-trivial gaps between consecutive baselines is taken as the line pitch,
and a fraction of that pitch (clamped) decides whether two fragments share a
line. A fixed tolerance either merges tightly spaced lines or splits
loosely set ones, depending on the statement template.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import numpy as np

from .config import ParserConfig
from .models import PositionedFragment, Row

logger = logging.getLogger(__name__)


def row_tolerance(ys: Sequence[float], config: ParserConfig) -> float:
    """Grouping tolerance for a page whose fragment baselines are *ys*."""
    if len(ys) < 2:
        return config.min_row_tolerance
    ordered = np.sort(np.asarray(ys, dtype=float))[::-1]
    gaps = -np.diff(ordered)
    gaps = gaps[gaps > config.noise_floor]
    if gaps.size == 0:
        return config.min_row_tolerance
    pitch = float(np.median(gaps))
    return float(np.clip(pitch * config.pitch_factor, config.min_row_tolerance, config.max_row_tolerance))


class RowBuilder:
    """Turns one page of unordered fragments into ordered rows."""

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or ParserConfig()

    def build(self, fragments: Sequence[PositionedFragment]) -> List[Row]:
        if not fragments:
            return []

        # Sorting on every field makes the result independent of input order
        ordered = sorted(fragments, key=PositionedFragment.sort_key)
        tol = row_tolerance([f.y for f in ordered], self.config)

        rows: List[Row] = []
        current: List[PositionedFragment] = []
        anchor = ordered[0].y
        for frag in ordered:
            if current and anchor - frag.y > tol:
                rows.append(self._make_row(current, anchor))
                current = []
                anchor = frag.y
            current.append(frag)
        if current:
            rows.append(self._make_row(current, anchor))

        logger.debug(f"Clustered {len(fragments)} fragments into {len(rows)} rows (tolerance {tol:.2f})")
        return rows

    @staticmethod
    def _make_row(fragments: List[PositionedFragment], anchor: float) -> Row:
        return Row(
            fragments=sorted(fragments, key=lambda f: (f.x, f.text, f.width, -f.y, f.height)),
            y=anchor,
        )
