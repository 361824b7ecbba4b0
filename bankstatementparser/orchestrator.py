"""Document-level driver: header state across pages, per-page assembly, final result."""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Sequence

from .assembler import TransactionAssembler
from .classifier import RowClassifier
from .columns import ColumnModel
from .config import ParserConfig
from .dedup import Deduplicator
from .direction import BalanceDeltaDirection, NoDirection
from .errors import NoHeaderDetected, NoTransactionsFound
from .headers import HeaderDetector
from .models import ConversionResult, DocumentParseState, Page, PositionedFragment, Row, Transaction
from .patterns import is_terminal_footer
from .rows import RowBuilder

logger = logging.getLogger(__name__)


class ParseStage(Enum):
  SEEK_HEADER = "seek_header"
  COLLECTING = "collecting"
  DONE = "done"


class PageOrchestrator:
  """Runs the whole pipeline over the pages of one document.

  Every strategy can be swapped through the constructor. The orchestrator
  itself keeps no per-document state: the parse stage and the
  ``DocumentParseState`` are locals of each ``convert`` call, so one
  instance can serve concurrent requests.
  """

  def __init__(
    self,
    config: Optional[ParserConfig] = None,
    row_builder: Optional[RowBuilder] = None,
    header_detector: Optional[HeaderDetector] = None,
    column_model: Optional[ColumnModel] = None,
    classifier: Optional[RowClassifier] = None,
    assembler: Optional[TransactionAssembler] = None,
    deduplicator: Optional[Deduplicator] = None,
    direction=None,
  ):
    self.config = (config or ParserConfig()).validate()
    self.row_builder = row_builder or RowBuilder(self.config)
    self.header_detector = header_detector or HeaderDetector(self.config)
    self.column_model = column_model or ColumnModel(self.config)
    self.classifier = classifier or RowClassifier(self.config, self.header_detector)
    self.assembler = assembler or TransactionAssembler(self.config, self.classifier)
    self.deduplicator = deduplicator or Deduplicator()
    if direction is None:
      direction = BalanceDeltaDirection() if self.config.infer_direction else NoDirection()
    self.direction = direction

  def convert(self, pages: Sequence[Sequence[PositionedFragment]], filename: str = "") -> ConversionResult:
    state = DocumentParseState()
    stage = ParseStage.SEEK_HEADER
    result_pages: List[Page] = []
    transactions: List[Transaction] = []
    balance = None

    for page_number, fragments in enumerate(pages, start=1):
      rows = self.row_builder.build(fragments)
      logger.info(f"Page {page_number}: {len(fragments)} fragments, {len(rows)} rows")

      if stage is ParseStage.SEEK_HEADER:
        start = self._establish_columns(rows, state, page_number)
        if start is None:
          result_pages.append(Page(page_number))
          continue
        stage = ParseStage.COLLECTING
      else:
        start = self.header_detector.locate_data_start(rows, state.columns)

      page_txns = self.assembler.assemble(rows, state.columns, start)
      page_txns = self.deduplicator.filter(page_txns, state)
      balance = self.direction.apply(page_txns, state.columns, balance)
      transactions.extend(page_txns)
      result_pages.append(Page(page_number, page_txns))
      logger.info(f"Page {page_number}: {len(page_txns)} transactions")

    stage = ParseStage.DONE
    logger.debug(f"{filename or 'document'}: {stage.value} after {len(result_pages)} pages")

    if not state.established:
      error = NoHeaderDetected()
      logger.warning(str(error))
      return ConversionResult.failure(error, filename, pages=result_pages)

    common = dict(
      headers=state.headers,
      column_types=state.column_types,
      pages=result_pages,
      filename=filename,
    )
    if not transactions:
      error = NoTransactionsFound()
      logger.warning(str(error))
      return ConversionResult(success=False, error=str(error), **common)

    logger.info(f"Extracted {len(transactions)} transactions from {len(result_pages)} pages")
    return ConversionResult(transactions=transactions, success=True, **common)

  # ------------------------------------------------------------------
  # Helpers
  # ------------------------------------------------------------------

  def _establish_columns(self, rows: Sequence[Row], state: DocumentParseState, page_number: int) -> Optional[int]:
    """Fix the document's columns from this page; returns the first data row index."""
    match = self.header_detector.detect(rows)
    if match:
      sample = self._boundary_sample(rows, match.index + 1)
      columns = self.column_model.from_header(match.row, sample)
      if len(columns) >= 2:
        state.establish(columns, page_number)
        return match.index + 1
      logger.info(f"Header row on page {page_number} yields a single column, trying the data fallback")

    inferred = self.header_detector.detect_columns_from_data(rows)
    if inferred:
      columns = self.column_model.from_centers(inferred.centers, inferred.sample_rows)
      state.establish(columns, page_number)
      return inferred.start_index

    logger.info(f"No table layout found on page {page_number}")
    return None

  def _boundary_sample(self, rows: Sequence[Row], start: int) -> List[Row]:
    sample = []
    for row in rows[start:start + self.config.boundary_sample_rows]:
      if is_terminal_footer(row.text):
        break
      sample.append(row)
    return sample
