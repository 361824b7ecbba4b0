"""High level entry points: PDF path or bytes in, ``ConversionResult`` out."""

from __future__ import annotations

import logging
import os
from typing import Callable, List, Optional, Sequence

from .config import ParserConfig
from .errors import ExtractionFailure
from .extraction import BACKENDS, extract_fragments
from .models import ConversionResult, PositionedFragment
from .orchestrator import PageOrchestrator

logger = logging.getLogger(__name__)


class StatementConverter:
  """Reconstructs the transaction table of bank statement PDFs."""

  def __init__(self, config: Optional[ParserConfig] = None, backend: str = "pymupdf",
               orchestrator: Optional[PageOrchestrator] = None):
    if backend not in BACKENDS:
      raise ValueError(f"Unknown extraction backend {backend!r}")
    self.config = (config or ParserConfig()).validate()
    self.backend = backend
    self.orchestrator = orchestrator or PageOrchestrator(self.config)

  def convert_fragments(self, pages: Sequence[Sequence[PositionedFragment]], filename: str = "") -> ConversionResult:
    return self.orchestrator.convert(pages, filename)

  def convert_file(self, pdf_path: str) -> ConversionResult:
    filename = os.path.basename(pdf_path)
    logger.info(f"Converting {filename} with {self.backend}")
    try:
      pages = extract_fragments(pdf_path, self.backend)
    except ExtractionFailure as e:
      logger.error(f"Extraction failed for {filename}: {e}")
      return ConversionResult.failure(e, filename)
    return self.convert_fragments(pages, filename)

  def convert_bytes(self, data: bytes, filename: str = "") -> ConversionResult:
    try:
      pages = extract_fragments(data, self.backend)
    except ExtractionFailure as e:
      logger.error(f"Extraction failed for {filename or 'upload'}: {e}")
      return ConversionResult.failure(e, filename)
    return self.convert_fragments(pages, filename)

  def convert_multiple(self, pdf_paths: List[str], progress_callback: Optional[Callable] = None) -> List[ConversionResult]:
    """Convert each file independently; ``progress_callback(percent, message)`` is called per file."""
    results = []
    total_files = len(pdf_paths)
    for i, path in enumerate(pdf_paths):
      if progress_callback:
        progress_callback(i * 100 // max(total_files, 1), f'Processing {os.path.basename(path)}...')
      results.append(self.convert_file(path))
    if progress_callback:
      progress_callback(100, 'Processing complete!')
    return results
