"""Column model: partitions the horizontal axis into labelled, typed ranges."""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import ParserConfig
from .models import ColumnRange, ColumnType, PositionedFragment, Row, Transaction
from .patterns import VALUE_TYPE_RATIO, infer_column_type, is_amount, is_date, normalize_header_label

logger = logging.getLogger(__name__)


def merge_header_fragments(row: Row, merge_gap: float) -> List[Tuple[str, float]]:
  """Join header words that belong to one label ("Value" + "Date").

  Returns ``(label, anchor_x)`` pairs in x order. Fragments without a known
  width are never merged.
  """
  anchors: List[Tuple[str, float]] = []
  parts: List[str] = []
  anchor_x = 0.0
  prev: Optional[PositionedFragment] = None
  for frag in row.fragments:
    text = " ".join(frag.text.split())
    if not text:
      continue
    joinable = (
      prev is not None and prev.width > 0 and frag.width > 0
      and frag.x - prev.right <= merge_gap
    )
    if joinable:
      parts.append(text)
    else:
      if parts:
        anchors.append((" ".join(parts), anchor_x))
      parts = [text]
      anchor_x = frag.x
    prev = frag
  if parts:
    anchors.append((" ".join(parts), anchor_x))
  return anchors


def unique_labels(labels: Iterable[str]) -> List[str]:
  counts = {}
  result = []
  for label in labels:
    counts[label] = counts.get(label, 0) + 1
    result.append(label if counts[label] == 1 else f"{label} ({counts[label]})")
  return result


def midpoint_boundaries(xs: Sequence[float]) -> List[float]:
  return [(a + b) / 2 for a, b in zip(xs, xs[1:])]


def _free_gaps(intervals: Sequence[Tuple[float, float]], left: float, right: float) -> List[Tuple[float, float]]:
  """Stretches of ``[left, right]`` that no interval covers."""
  clipped = sorted(
    (max(a, left), min(b, right)) for a, b in intervals if b >= left and a <= right
  )
  gaps = []
  cursor = left
  for a, b in clipped:
    if a > cursor:
      gaps.append((cursor, a))
    cursor = max(cursor, b)
  if right > cursor:
    gaps.append((cursor, right))
  return gaps


def refine_boundaries(xs: Sequence[float], sample_rows: Sequence[Row], min_gap: float) -> List[float]:
  """Midpoint boundaries, moved into a real content gap where the midpoint cuts through data.

  A boundary only moves when some gap of at least *min_gap* exists between
  the two header anchors and the raw midpoint is not already inside one.
  """
  boundaries = midpoint_boundaries(xs)
  if not sample_rows:
    return boundaries
  intervals = [(f.x, f.right) for row in sample_rows for f in row.fragments]
  refined = []
  for i, (left, right) in enumerate(zip(xs, xs[1:])):
    mid = boundaries[i]
    genuine = [g for g in _free_gaps(intervals, left, right) if g[1] - g[0] >= min_gap]
    if not genuine or any(lo <= mid <= hi for lo, hi in genuine):
      refined.append(mid)
      continue
    lo, hi = max(genuine, key=lambda g: (g[1] - g[0], -g[0]))
    logger.debug(f"Boundary between anchors {left:.1f} and {right:.1f} moved from {mid:.1f} to {(lo + hi) / 2:.1f}")
    refined.append((lo + hi) / 2)
  return refined


def build_column_ranges(
  labels: Sequence[str],
  xs: Sequence[float],
  boundaries: Optional[Sequence[float]] = None,
  types: Optional[Sequence[ColumnType]] = None,
) -> List[ColumnRange]:
  """Sorted, non-overlapping ranges covering the whole real line."""
  order = sorted(range(len(xs)), key=lambda i: (xs[i], i))
  labels = [labels[i] for i in order]
  xs = [xs[i] for i in order]
  if types is not None:
    types = [types[i] for i in order]
  if boundaries is None:
    boundaries = midpoint_boundaries(xs)

  edges = [-math.inf]
  for b in boundaries:
    edges.append(max(b, edges[-1]))
  edges.append(math.inf)

  return [
    ColumnRange(
      label=label,
      start_x=edges[i],
      end_x=edges[i + 1],
      type=types[i] if types is not None else infer_column_type(label),
      anchor=xs[i],
    )
    for i, label in enumerate(labels)
  ]


def assign_column(fragment: PositionedFragment, columns: Sequence[ColumnRange]) -> int:
  """Index of the column owning the fragment's x; ties go to the nearest center."""
  x = fragment.x
  hits = [i for i, c in enumerate(columns) if c.contains(x)]
  if len(hits) == 1:
    return hits[0]
  candidates = hits or range(len(columns))
  return min(candidates, key=lambda i: (abs(columns[i].center - x), i))


def map_row(row: Row, columns: Sequence[ColumnRange]) -> Transaction:
  """Cell text per column label; fragments sharing a column are space-joined in x order."""
  parts = {c.label: [] for c in columns}
  for frag in row.fragments:
    text = " ".join(frag.text.split())
    if not text:
      continue
    parts[columns[assign_column(frag, columns)].label].append(text)
  return {label: " ".join(values) for label, values in parts.items()}


def infer_types_from_values(columns: Sequence[ColumnRange], rows: Sequence[Row]) -> List[ColumnType]:
  cells = [map_row(row, columns) for row in rows]
  types = []
  for col in columns:
    values = [c[col.label] for c in cells if c[col.label]]
    if not values:
      types.append(ColumnType.TEXT)
      continue
    dates = sum(1 for v in values if is_date(v))
    amounts = sum(1 for v in values if is_amount(v))
    if dates / len(values) >= VALUE_TYPE_RATIO:
      types.append(ColumnType.DATE)
    elif amounts / len(values) >= VALUE_TYPE_RATIO:
      types.append(ColumnType.AMOUNT)
    else:
      types.append(ColumnType.TEXT)
  return types


class ColumnModel:
  """Builds the document's column ranges from a header row or from inferred centers."""

  def __init__(self, config: Optional[ParserConfig] = None):
    self.config = config or ParserConfig()

  def from_header(self, header_row: Row, sample_rows: Sequence[Row] = ()) -> List[ColumnRange]:
    anchors = merge_header_fragments(header_row, self.config.header_merge_gap)
    labels = [label for label, _ in anchors]
    if self.config.normalize_headers:
      labels = [normalize_header_label(label) for label in labels]
    labels = unique_labels(labels)
    xs = [x for _, x in anchors]
    boundaries = refine_boundaries(xs, sample_rows, self.config.boundary_min_gap)
    columns = build_column_ranges(labels, xs, boundaries)
    logger.info(f"Columns from header: {[(c.label, c.type.value) for c in columns]}")
    return columns

  def from_centers(self, centers: Sequence[float], sample_rows: Sequence[Row] = ()) -> List[ColumnRange]:
    labels = [f"Column {i + 1}" for i in range(len(centers))]
    columns = build_column_ranges(labels, sorted(centers), types=[ColumnType.TEXT] * len(centers))
    types = infer_types_from_values(columns, sample_rows)
    columns = [replace(c, type=t) for c, t in zip(columns, types)]
    logger.info(f"Columns inferred from data: {[(c.label, c.type.value) for c in columns]}")
    return columns
