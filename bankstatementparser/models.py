"""Data model shared by the table reconstruction engine."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

import pandas as pd

from .errors import StateAlreadyEstablished

# Header label -> cell text
Transaction = Dict[str, str]


@dataclass(frozen=True)
class PositionedFragment:
  """One glyph run from the PDF text layer. Larger y is higher on the page."""

  text: str
  x: float
  y: float
  width: float = 0.0
  height: float = 0.0

  @property
  def right(self) -> float:
    return self.x + self.width

  @property
  def center_x(self) -> float:
    return self.x + self.width / 2

  def sort_key(self) -> Tuple[float, float, str, float, float]:
    """Total order that only depends on the fragment's values."""
    return (-self.y, self.x, self.text, self.width, self.height)


@dataclass
class Row:
  """Fragments judged to share one text line, sorted left to right."""

  fragments: List[PositionedFragment]
  y: float

  @property
  def texts(self) -> List[str]:
    return [f.text for f in self.fragments]

  @property
  def text(self) -> str:
    return " ".join(t.strip() for t in self.texts if t.strip())

  def __len__(self) -> int:
    return len(self.fragments)


class ColumnType(Enum):
  DATE = "date"
  AMOUNT = "amount"
  TEXT = "text"


@dataclass(frozen=True)
class ColumnRange:
  """Half-open horizontal interval ``[start_x, end_x)`` owned by one column."""

  label: str
  start_x: float
  end_x: float
  type: ColumnType = ColumnType.TEXT
  anchor: Optional[float] = None

  def contains(self, x: float) -> bool:
    return self.start_x <= x < self.end_x

  @property
  def center(self) -> float:
    if self.anchor is not None:
      return self.anchor
    if math.isinf(self.start_x):
      return self.end_x
    if math.isinf(self.end_x):
      return self.start_x
    return (self.start_x + self.end_x) / 2


@dataclass
class Page:
  page_number: int
  transactions: List[Transaction] = field(default_factory=list)

  def to_dict(self) -> Dict:
    return {"pageNumber": self.page_number, "transactions": [dict(t) for t in self.transactions]}


class DocumentParseState:
  """Cross-page state of one document parse.

  Headers and columns are written once, by whichever page first yields a
  usable table layout, and are read-only afterwards. ``seen_keys`` collects
  deduplication keys of pages already emitted.
  """

  def __init__(self):
    self._headers: Tuple[str, ...] = ()
    self._columns: Tuple[ColumnRange, ...] = ()
    self.header_page: Optional[int] = None
    self.seen_keys: Set[str] = set()

  @property
  def established(self) -> bool:
    return bool(self._columns)

  @property
  def headers(self) -> List[str]:
    return list(self._headers)

  @property
  def columns(self) -> List[ColumnRange]:
    return list(self._columns)

  @property
  def column_types(self) -> Dict[str, ColumnType]:
    return {c.label: c.type for c in self._columns}

  def establish(self, columns: List[ColumnRange], page_number: int) -> None:
    if self.established:
      raise StateAlreadyEstablished(
        f"Columns already established on page {self.header_page}; refusing to redefine on page {page_number}"
      )
    if not columns:
      raise ValueError("Cannot establish a document with no columns")
    self._columns = tuple(columns)
    self._headers = tuple(c.label for c in columns)
    self.header_page = page_number


@dataclass
class ConversionResult:
  transactions: List[Transaction] = field(default_factory=list)
  headers: List[str] = field(default_factory=list)
  column_types: Dict[str, ColumnType] = field(default_factory=dict)
  pages: List[Page] = field(default_factory=list)
  success: bool = True
  error: Optional[str] = None
  filename: str = ""

  @classmethod
  def failure(cls, error: Exception, filename: str = "", **kwargs) -> "ConversionResult":
    return cls(success=False, error=str(error), filename=filename, **kwargs)

  def to_dict(self) -> Dict:
    """JSON-ready dict in the shape the UI and export layers consume."""
    payload = {
      "success": self.success,
      "data": [dict(t) for t in self.transactions],
      "pages": [p.to_dict() for p in self.pages],
      "headers": list(self.headers),
      "columnTypes": {label: t.value for label, t in self.column_types.items()},
      "filename": self.filename,
    }
    if self.error:
      payload["error"] = self.error
    return payload

  def to_dataframe(self) -> pd.DataFrame:
    if not self.transactions:
      return pd.DataFrame(columns=self.headers)
    return pd.DataFrame(self.transactions, columns=self.headers).fillna("")
