# -*- coding: utf-8 -*-
"""extraction.py
Turn a PDF's text layer into positioned fragments, one list per page.

Two backends are available: PyMuPDF (``page.get_text('words')``) and
pdfplumber (``page.extract_words()``). Both report top-down coordinates; they
are flipped here so that a larger ``y`` is higher on the page, which is what
the row builder expects.
"""
from __future__ import annotations

import io
import logging
import os
from typing import List, Union

import fitz  # PyMuPDF
import pdfplumber

from .errors import ExtractionFailure
from .models import PositionedFragment

logger = logging.getLogger(__name__)

# pdfminer is very chatty about malformed fonts
logging.getLogger("pdfminer").setLevel(logging.ERROR)

BACKENDS = ("pymupdf", "pdfplumber")

PdfSource = Union[str, os.PathLike, bytes]


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------

def _open_fitz(source: PdfSource):
    if isinstance(source, (bytes, bytearray)):
        return fitz.open(stream=bytes(source), filetype="pdf")
    return fitz.open(os.fspath(source))


def _extract_pymupdf(source: PdfSource) -> List[List[PositionedFragment]]:
    doc = _open_fitz(source)
    try:
        if doc.needs_pass:
            raise ExtractionFailure("PDF is password protected")
        pages = []
        for page in doc:
            height = page.rect.height
            fragments = []
            for x0, y0, x1, y1, text, *_ in page.get_text("words"):
                if not text.strip():
                    continue
                fragments.append(
                    PositionedFragment(text=text, x=x0, y=height - y1, width=x1 - x0, height=y1 - y0)
                )
            pages.append(fragments)
        return pages
    finally:
        doc.close()


def _extract_pdfplumber(source: PdfSource) -> List[List[PositionedFragment]]:
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(bytes(source))
    pages = []
    with pdfplumber.open(source) as pdf:
        for page in pdf.pages:
            fragments = []
            for word in page.extract_words(keep_blank_chars=False, use_text_flow=False):
                text = word["text"]
                if not text.strip():
                    continue
                fragments.append(
                    PositionedFragment(
                        text=text,
                        x=float(word["x0"]),
                        y=float(page.height - word["bottom"]),
                        width=float(word["x1"] - word["x0"]),
                        height=float(word["bottom"] - word["top"]),
                    )
                )
            pages.append(fragments)
    return pages


_EXTRACTORS = {
    "pymupdf": _extract_pymupdf,
    "pdfplumber": _extract_pdfplumber,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_fragments(source: PdfSource, backend: str = "pymupdf") -> List[List[PositionedFragment]]:
    """Positioned fragments of every page of *source* (a path or raw PDF bytes)."""
    if backend not in _EXTRACTORS:
        raise ValueError(f"Unknown extraction backend {backend!r}; expected one of {', '.join(BACKENDS)}")
    try:
        pages = _EXTRACTORS[backend](source)
    except ExtractionFailure:
        raise
    except Exception as e:
        raise ExtractionFailure(f"Could not read PDF text layer: {e}") from e
    logger.info(f"{backend}: extracted {sum(len(p) for p in pages)} fragments from {len(pages)} pages")
    return pages
