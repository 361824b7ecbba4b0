"""Cross-page deduplication of assembled transactions."""

from __future__ import annotations

import json
import logging
from typing import Callable, List, Optional, Sequence

from .models import ColumnRange, ColumnType, DocumentParseState, Transaction

logger = logging.getLogger(__name__)


def canonical_key(txn: Transaction, columns: Sequence[ColumnRange]) -> str:
  """``date|first amount`` in lower case; the whole record when either is missing."""
  date = next((txn.get(c.label, "") for c in columns if c.type is ColumnType.DATE and txn.get(c.label)), "")
  amount = next((txn.get(c.label, "") for c in columns if c.type is ColumnType.AMOUNT and txn.get(c.label)), "")
  if date and amount:
    return f"{date}|{amount}".lower()
  return json.dumps([txn.get(c.label, "") for c in columns], ensure_ascii=False).lower()


class Deduplicator:
  """Drops rows a statement re-prints at the top of the next page.

  A page is only compared against keys of earlier pages, so two genuine
  same-day, same-amount entries on one page are both kept.
  """

  def __init__(self, key_func: Optional[Callable[[Transaction, Sequence[ColumnRange]], str]] = None):
    self.key_func = key_func or canonical_key

  def filter(self, transactions: Sequence[Transaction], state: DocumentParseState) -> List[Transaction]:
    kept = []
    page_keys = set()
    for txn in transactions:
      key = self.key_func(txn, state.columns)
      if key in state.seen_keys:
        logger.info(f"Dropping transaction repeated from an earlier page: {key}")
        continue
      kept.append(txn)
      page_keys.add(key)
    state.seen_keys.update(page_keys)
    return kept
