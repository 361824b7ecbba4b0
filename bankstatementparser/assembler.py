# -*- coding: utf-8 -*-
"""assembler.py
Multi-line transaction assembly.

Walks the rows of one page, opens a record at every transaction-start row
and folds the following rows into it until the next entry begins. The merge
is type-aware: narration columns accumulate text, while date and amount
columns are only ever filled, never overwritten.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .classifier import RowClassifier, RowKind
from .config import ParserConfig
from .models import ColumnRange, ColumnType, Row, Transaction
from .patterns import ANY_DATE_RE, LEADING_DATE_RE, is_amount, is_boilerplate_text, is_date

logger = logging.getLogger(__name__)

__all__ = [
    "DraftTransaction",
    "TransactionAssembler",
    "repair_date_cells",
]

# Rows that end the continuation scan; the outer loop decides what to do with them
_SCAN_STOPPERS = (RowKind.FOOTER, RowKind.HEADER, RowKind.BOILERPLATE)


@dataclass
class DraftTransaction:
    """A record still open for continuation rows."""

    cells: Dict[str, str]
    continuations: int = 0

    def merge(self, cells: Transaction, columns: Sequence[ColumnRange]):
        for col in columns:
            value = cells.get(col.label, "")
            if not value:
                continue
            target = self.cells.get(col.label, "")
            if col.type is ColumnType.TEXT:
                if not target:
                    self.cells[col.label] = value
                elif value not in target:
                    self.cells[col.label] = f"{target} {value}"
            elif not target:
                # Dates and amounts are filled once and then left alone
                self.cells[col.label] = value
        self.continuations += 1


def repair_date_cells(cells: Transaction, columns: Sequence[ColumnRange]) -> Transaction:
    """Keep only a real date in DATE columns; spill any other text into the narration."""
    text_cols = [c for c in columns if c.type is ColumnType.TEXT]
    for col in columns:
        if col.type is not ColumnType.DATE:
            continue
        value = cells.get(col.label, "").strip()
        if not value or is_date(value):
            continue
        m = LEADING_DATE_RE.match(value)
        if m:
            date = m.group(1)
            rest = value[m.end():].lstrip(" -/").strip()
        else:
            # "Ref 01/02/2024": keep the date, narrate the rest
            m = ANY_DATE_RE.search(value)
            date = m.group(0) if m else ""
            rest = " ".join(f"{value[:m.start()]} {value[m.end():]}".split()) if m else value
        cells[col.label] = date
        if rest and text_cols:
            target = text_cols[0].label
            cells[target] = f"{rest} {cells.get(target, '')}".strip()
        elif rest:
            logger.debug(f"Dropping non-date text {rest!r} from column {col.label!r}")
    return cells


class TransactionAssembler:
    """Turns classified rows into accepted transactions for one page."""

    def __init__(self, config: Optional[ParserConfig] = None, classifier: Optional[RowClassifier] = None):
        self.config = config or ParserConfig()
        self.classifier = classifier or RowClassifier(self.config)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def assemble(self, rows: Sequence[Row], columns: Sequence[ColumnRange], start: int = 0) -> List[Transaction]:
        """Transactions found in ``rows[start:]``, stopping at the first footer row."""
        transactions: List[Transaction] = []
        i = start
        while i < len(rows):
            kind, cells = self.classifier.classify(rows[i], columns)
            if kind is RowKind.FOOTER:
                logger.info(f"Footer row reached, ignoring the rest of the page: {rows[i].text}")
                break
            if kind is not RowKind.START:
                logger.debug(f"Skipping {kind.value} row: {rows[i].text}")
                i += 1
                continue

            draft = DraftTransaction(cells=cells)
            i += 1
            while i < len(rows) and draft.continuations < self.config.max_continuation_rows:
                next_kind, next_cells = self.classifier.classify(rows[i], columns)
                if next_kind in _SCAN_STOPPERS:
                    break
                if self.classifier.starts_new_transaction(next_cells, columns, draft.cells, draft.continuations):
                    break
                self.merge_continuation(draft, next_cells, columns)
                i += 1

            txn = self.finish(draft, columns)
            if self.is_valid_transaction(txn, columns):
                transactions.append(txn)
            else:
                logger.debug(f"Rejected candidate transaction: {txn}")
        return transactions

    def merge_continuation(self, draft: DraftTransaction, cells: Transaction, columns: Sequence[ColumnRange]):
        draft.merge(cells, columns)

    def finish(self, draft: DraftTransaction, columns: Sequence[ColumnRange]) -> Transaction:
        cells = repair_date_cells(dict(draft.cells), columns)
        return {c.label: cells.get(c.label, "") for c in columns}

    def is_valid_transaction(self, txn: Transaction, columns: Sequence[ColumnRange]) -> bool:
        values = [v for v in txn.values() if v.strip()]
        if len(values) < 2:
            return False
        if is_boilerplate_text(" ".join(values)):
            return False
        has_date = any(is_date(txn[c.label]) for c in columns if c.type is ColumnType.DATE)
        has_amount = any(is_amount(txn[c.label]) for c in columns if c.type is ColumnType.AMOUNT)
        return has_date or has_amount
