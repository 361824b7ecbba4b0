"""Row classification: transaction start, continuation, header, footer or boilerplate."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .columns import map_row
from .config import ParserConfig
from .headers import HeaderDetector
from .models import ColumnRange, ColumnType, Row, Transaction
from .patterns import is_amount, is_date, is_soft_boilerplate, is_terminal_footer, leading_date


class RowKind(Enum):
  START = "start"
  CONTINUATION = "continuation"
  HEADER = "header"
  FOOTER = "footer"
  BOILERPLATE = "boilerplate"


def _columns_of(columns: Sequence[ColumnRange], col_type: ColumnType) -> List[ColumnRange]:
  return [c for c in columns if c.type is col_type]


class RowClassifier:
  """Decides what a physical row means once columns are known.

  Precedence: footer, repeated header, transaction start, boilerplate,
  continuation. A dated entry that happens to mention "branch" therefore
  stays a transaction.
  """

  def __init__(self, config: Optional[ParserConfig] = None, header_detector: Optional[HeaderDetector] = None):
    self.config = config or ParserConfig()
    self.header_detector = header_detector or HeaderDetector(self.config)

  def classify(self, row: Row, columns: Sequence[ColumnRange]) -> Tuple[RowKind, Transaction]:
    cells = map_row(row, columns)
    text = row.text
    if is_terminal_footer(text):
      return RowKind.FOOTER, cells
    if self.header_detector.is_repeated_header(row, columns):
      return RowKind.HEADER, cells
    if self.is_transaction_start(cells, columns):
      return RowKind.START, cells
    if is_soft_boilerplate(text):
      return RowKind.BOILERPLATE, cells
    return RowKind.CONTINUATION, cells

  def has_date(self, cells: Transaction, columns: Sequence[ColumnRange]) -> bool:
    return any(
      is_date(cells.get(c.label, "")) or leading_date(cells.get(c.label, "")) is not None
      for c in _columns_of(columns, ColumnType.DATE)
    )

  def amount_count(self, cells: Transaction, columns: Sequence[ColumnRange]) -> int:
    return sum(1 for c in _columns_of(columns, ColumnType.AMOUNT) if is_amount(cells.get(c.label, "")))

  def is_transaction_start(self, cells: Transaction, columns: Sequence[ColumnRange]) -> bool:
    non_empty = sum(1 for v in cells.values() if v)
    if non_empty < 2:
      return False
    return self.has_date(cells, columns) or self.amount_count(cells, columns) > 0

  def starts_new_transaction(self, cells: Transaction, columns: Sequence[ColumnRange], current: Transaction,
                             absorbed: int = 0) -> bool:
    """Boundary rule between "this entry wraps" and "this is the next entry".

    *absorbed* is the number of continuation rows already merged into *current*.
    """
    dated = self.has_date(cells, columns)
    amounts = self.amount_count(cells, columns)
    if dated and amounts >= 1:
      return True
    if amounts >= 2:
      # Cheque/transfer layouts print "date narration" on one line and the
      # amount with its balance directly below; only that next line qualifies
      if not dated and absorbed == 0 and self.amount_count(current, columns) == 0:
        return False
      return True
    return False
