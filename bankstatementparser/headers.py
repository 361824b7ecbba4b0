"""Header row detection with a data-driven fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .columns import assign_column
from .config import ParserConfig
from .models import ColumnRange, Row
from .patterns import has_data_token, header_keyword_hit, is_terminal_footer

logger = logging.getLogger(__name__)


@dataclass
class HeaderMatch:
  index: int
  row: Row
  score: int


@dataclass
class InferredColumns:
  """Column centers recovered from data rows when no header row was found."""
  centers: List[float]
  sample_rows: List[Row]
  start_index: int


def detect_columns_from_data(rows: Sequence[Row], config: ParserConfig) -> Optional[InferredColumns]:
  """Cluster the x positions of data-looking rows into column centers.

  Clusters that show up in fewer than ``fallback_min_support`` of the sampled
  rows are treated as noise (wrapped narration words, stray references).
  """
  candidates = [
    (i, row) for i, row in enumerate(rows)
    if len(row) >= 2
    and any(has_data_token(f.text) for f in row.fragments)
    and not is_terminal_footer(row.text)
  ]
  sample = candidates[:config.fallback_sample_rows]
  if len(sample) < 2:
    logger.info(f"Column fallback: only {len(sample)} data-like rows, giving up")
    return None

  points = sorted((f.x, k) for k, (_, row) in enumerate(sample) for f in row.fragments)
  clusters = []
  for x, k in points:
    if clusters and x - clusters[-1][-1][0] <= config.fallback_cluster_gap:
      clusters[-1].append((x, k))
    else:
      clusters.append([(x, k)])

  needed = config.fallback_min_support * len(sample)
  centers = [
    float(np.mean([x for x, _ in cluster]))
    for cluster in clusters
    if len({k for _, k in cluster}) >= needed
  ]
  if len(centers) < 2:
    logger.info(f"Column fallback: {len(centers)} stable column(s) in {len(sample)} rows, giving up")
    return None

  logger.info(f"Column fallback: {len(centers)} columns from {len(sample)} sampled rows")
  return InferredColumns(centers=centers, sample_rows=[row for _, row in sample], start_index=sample[0][0])


class HeaderDetector:
  """Scores rows for "looks like the column header line"."""

  def __init__(self, config: Optional[ParserConfig] = None):
    self.config = config or ParserConfig()

  def keyword_matches(self, row: Row) -> int:
    return sum(1 for f in row.fragments if header_keyword_hit(f.text))

  def score_row(self, row: Row) -> int:
    score = 2 * self.keyword_matches(row)
    # A header row should not look like data
    if any(has_data_token(f.text) for f in row.fragments):
      score -= self.config.data_penalty
    if len(row) >= 5:
      score += 2
    elif len(row) >= 3:
      score += 1
    return score

  def detect(self, rows: Sequence[Row]) -> Optional[HeaderMatch]:
    """Highest-scoring row in the scan window, if it clears the threshold."""
    best = None
    for i, row in enumerate(rows[:self.config.header_scan_rows]):
      score = self.score_row(row)
      if score >= self.config.header_threshold and (best is None or score > best.score):
        best = HeaderMatch(index=i, row=row, score=score)
    if best:
      logger.info(f"Header row at index {best.index} (score {best.score}): {best.row.text}")
    return best

  def is_repeated_header(self, row: Row, columns: Optional[Sequence[ColumnRange]] = None) -> bool:
    if self.keyword_matches(row) < 2 or self.score_row(row) < self.config.header_threshold:
      return False
    if not columns:
      return True
    # Keyword hits must spread over columns; a wrapped narration keeps them in one
    hit_columns = {assign_column(f, columns) for f in row.fragments if header_keyword_hit(f.text)}
    return len(hit_columns) >= 2

  def locate_data_start(self, rows: Sequence[Row], columns: Optional[Sequence[ColumnRange]] = None) -> int:
    """First row after a re-printed header on a later page, else 0."""
    for i, row in enumerate(rows[:self.config.header_scan_rows]):
      if self.is_repeated_header(row, columns):
        logger.debug(f"Repeated header at row {i}; data starts at {i + 1}")
        return i + 1
    return 0

  def detect_columns_from_data(self, rows: Sequence[Row]) -> Optional[InferredColumns]:
    return detect_columns_from_data(rows, self.config)
