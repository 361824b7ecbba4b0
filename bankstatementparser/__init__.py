"""
Bank Statement Parser Package

Rebuilds the transaction table of a bank statement PDF from the positions
of its text fragments.
"""

from .config import ParserConfig, load_config
from .converter import StatementConverter
from .errors import (
  ConversionError,
  ExtractionFailure,
  NoHeaderDetected,
  NoTransactionsFound,
  StateAlreadyEstablished,
)
from .models import ColumnRange, ColumnType, ConversionResult, Page, PositionedFragment, Row
from .orchestrator import PageOrchestrator

__version__ = "3.0.0"

__all__ = [
  "ColumnRange",
  "ColumnType",
  "ConversionError",
  "ConversionResult",
  "ExtractionFailure",
  "NoHeaderDetected",
  "NoTransactionsFound",
  "Page",
  "PageOrchestrator",
  "ParserConfig",
  "PositionedFragment",
  "Row",
  "StateAlreadyEstablished",
  "StatementConverter",
  "load_config",
]
