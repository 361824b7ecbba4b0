"""Money-in / money-out guess from the running balance.

Only used where the layout itself does not say which way the money went: a
single amount column whose label carries no debit/credit keyword (``Amount``,
or a data-inferred ``Column N``) next to a running balance. When the balance
went down the amount is taken to be a withdrawal and gets a leading minus;
when it went up it is left as printed. Explicitly labelled withdrawal and
deposit columns are never touched.

This is a guess, not an accounting rule. It misfires on statements listed
newest first, so it is off by default (``infer_direction``).
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from .models import ColumnRange, ColumnType, Transaction
from .patterns import (
  BALANCE_LABEL_RE,
  INCOMING_LABEL_RE,
  OUTGOING_LABEL_RE,
  has_direction_marker,
  is_amount,
  parse_amount,
)

logger = logging.getLogger(__name__)


class NoDirection:
  """Leaves amounts exactly as printed."""

  def apply(self, transactions: Sequence[Transaction], columns: Sequence[ColumnRange],
            previous_balance: Optional[float] = None) -> Optional[float]:
    return previous_balance


class BalanceDeltaDirection:
  """Signs unlabelled amounts by the direction of the balance delta."""

  def _find_columns(self, columns: Sequence[ColumnRange]) -> Tuple[List[ColumnRange], Optional[ColumnRange]]:
    amount_cols = [c for c in columns if c.type is ColumnType.AMOUNT]
    if any(OUTGOING_LABEL_RE.search(c.label) or INCOMING_LABEL_RE.search(c.label) for c in amount_cols):
      return [], None
    balance = next((c for c in amount_cols if BALANCE_LABEL_RE.search(c.label)), None)
    if balance is None and len(amount_cols) >= 2:
      # Unlabelled layouts print the running balance rightmost
      balance = max(amount_cols, key=lambda c: c.start_x)
    if balance is None:
      return [], None
    return [c for c in amount_cols if c is not balance], balance

  def apply(self, transactions: Sequence[Transaction], columns: Sequence[ColumnRange],
            previous_balance: Optional[float] = None) -> Optional[float]:
    """Sign amounts in *transactions* in place; returns the last balance seen for the next page."""
    amount_cols, balance = self._find_columns(columns)
    if balance is None:
      return previous_balance

    for txn in transactions:
      bal_val = parse_amount(txn.get(balance.label, ""))
      filled = [c.label for c in amount_cols if is_amount(txn.get(c.label, ""))]
      # Exactly two amount-like tokens: the movement and the balance
      if len(filled) == 1 and bal_val is not None and previous_balance is not None:
        self._sign(txn, filled[0], bal_val - previous_balance)
      if bal_val is not None:
        previous_balance = bal_val
    return previous_balance

  @staticmethod
  def _sign(txn: Transaction, label: str, delta: float):
    value = txn[label]
    if delta < 0 and not has_direction_marker(value):
      logger.debug(f"Marking {value} in {label!r} as a withdrawal (balance down {-delta:.2f})")
      txn[label] = f"-{value}"
