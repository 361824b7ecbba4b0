# -*- coding: utf-8 -*-
"""patterns.py
Table-driven lexical predicates shared by every stage of the engine.

Nothing in here knows about geometry. Supporting a new bank layout should
mean extending one of the tables below, not touching control flow.
"""
from __future__ import annotations

import re
from typing import Optional

from .models import ColumnType

# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------
MONTHS_FULL = r"January|February|March|April|May|June|July|August|September|October|November|December"
MONTHS_ABBR = r"Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sept|Sep|Oct|Nov|Dec"
MONTHS_RE = f"{MONTHS_FULL}|{MONTHS_ABBR}"

_DAY = r"(?:0?[1-9]|[12]\d|3[01])"
_MONTH = r"(?:0?[1-9]|1[0-2])"
_YEAR = r"\d{4}"

# (name, pattern) - order only matters for readability
DATE_GRAMMARS = (
    ("d-m-y", rf"{_DAY}-{_MONTH}-{_YEAR}"),
    ("d/m/y", rf"{_DAY}/{_MONTH}/{_YEAR}"),
    ("y-m-d", rf"{_YEAR}[-/]{_MONTH}[-/]{_DAY}"),
    ("d mon y", rf"{_DAY}(?:\s+|[-/])(?:{MONTHS_RE})(?:\s+|[-/]){_YEAR}"),
)
_DATE_ALT = "|".join(f"(?:{pattern})" for _, pattern in DATE_GRAMMARS)

DATE_RE = re.compile(rf"(?:{_DATE_ALT})", re.IGNORECASE)
# Date at the very start of a cell, e.g. "01/02/2024 UPI/SALARY" or "01/02/2024-UPI"
LEADING_DATE_RE = re.compile(rf"^\s*({_DATE_ALT})(?![\d/]|-\d)", re.IGNORECASE)
# Date anywhere in free text
ANY_DATE_RE = re.compile(rf"(?<![\d/-])(?:{_DATE_ALT})(?![\d/-])", re.IGNORECASE)

# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------
CURRENCY_SYMBOLS = "£$€₹"
DIRECTION_SUFFIXES = ("cr", "dr")

AMOUNT_RE = re.compile(
    rf"^-?[{CURRENCY_SYMBOLS}]?\s?\d+(?:,\d{{2,3}})*(?:\.\d{{2}})?(?:\s*(?:{'|'.join(DIRECTION_SUFFIXES)})\.?)?$",
    re.IGNORECASE,
)

# ---------------------------------------------------------------------------
# Header keywords
# ---------------------------------------------------------------------------
HEADER_KEYWORDS = (
    "date",
    "description",
    "particulars",
    "narration",
    "details",
    "debit",
    "credit",
    "withdrawal",
    "deposit",
    "balance",
    "amount",
    "reference",
    "cheque",
    "transaction",
    "txn",
    "memo",
    "remarks",
)
# Short header words that only count as an exact token ("dr" would otherwise hit "address")
HEADER_TOKENS = {"dr", "cr", "ref", "chq", "dt", "ref.", "dr.", "cr."}

# ---------------------------------------------------------------------------
# Footer / boilerplate
# ---------------------------------------------------------------------------
# A row containing one of these ends the transaction table on its page
FOOTER_KEYWORDS = (
    "end of statement",
    "closing balance",
    "total debit",
    "total credit",
    "carried forward",
    "thank you",
    "regards",
    "signature",
    "terms and conditions",
)
# Skipped, but the table may continue below them
SOFT_BOILERPLATE_KEYWORDS = (
    "opening balance",
    "brought forward",
    "continued",
    "account summary",
    "ifsc",
    "branch",
    "customer",
    "address",
)
PAGE_NUMBER_RE = re.compile(r"\bpage\s*(?:no\.?\s*)?\d+", re.IGNORECASE)

# Records built from these are statement furniture, not transactions
BOILERPLATE_RECORD_KEYWORDS = (
    "opening balance",
    "closing balance",
    "brought forward",
    "carried forward",
    "balance b/f",
    "balance c/f",
    "statement period",
    "statement date",
    "statement of account",
    "account number",
    "account no",
    "a/c no",
    "account summary",
    "total debit",
    "total credit",
)

# ---------------------------------------------------------------------------
# Column typing
# ---------------------------------------------------------------------------
DATE_LABEL_RE = re.compile(r"\b(?:txn date|value date|date|dt)\b", re.IGNORECASE)
AMOUNT_LABEL_RE = re.compile(r"\b(?:debit|credit|withdrawal|deposit|balance|amount)s?\b|\b(?:dr|cr)\b", re.IGNORECASE)
TEXT_LABEL_HINTS = ("narration", "description", "particulars", "details", "remarks")

OUTGOING_LABEL_RE = re.compile(r"\b(?:debit|withdrawal|paid out|money out)s?\b|\bdr\b", re.IGNORECASE)
INCOMING_LABEL_RE = re.compile(r"\b(?:credit|deposit|paid in|money in)s?\b|\bcr\b", re.IGNORECASE)
BALANCE_LABEL_RE = re.compile(r"\bbalance\b", re.IGNORECASE)

HEADER_ALIASES = {
    "date": "Date",
    "description": "Description",
    "particulars": "Particulars",
    "debit": "Withdrawal",
    "withdrawal": "Withdrawal",
    "credit": "Deposit",
    "deposit": "Deposit",
    "balance": "Balance",
    "amount": "Amount",
    "memo": "Description",
    "reference": "Reference",
    "cheque": "Cheque",
}

# Share of sampled cells that must match before a fallback column is typed
VALUE_TYPE_RATIO = 0.5


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def is_date(text: str) -> bool:
    """True when the whole cell is one of the accepted date forms."""
    return bool(text) and DATE_RE.fullmatch(text.strip()) is not None


def leading_date(text: str) -> Optional[str]:
    m = LEADING_DATE_RE.match(text or "")
    return m.group(1) if m else None


def is_amount(text: str) -> bool:
    tok = (text or "").strip()
    if not tok or is_date(tok):
        return False
    return AMOUNT_RE.fullmatch(tok) is not None


def parse_amount(text: str) -> Optional[float]:
    """Numeric value of an amount cell; a trailing ``Dr`` makes it negative."""
    if not is_amount(text):
        return None
    tok = text.strip().lower().rstrip(".")
    negative = tok.startswith("-")
    if tok.endswith("dr"):
        negative = True
    tok = tok.removesuffix("cr").removesuffix("dr")
    digits = re.sub(r"[^\d.]", "", tok)
    try:
        value = float(digits)
    except ValueError:
        return None
    return -value if negative else value


def has_direction_marker(text: str) -> bool:
    """True when an amount already says which way it went (leading minus, Cr/Dr)."""
    tok = (text or "").strip().lower().rstrip(".")
    return tok.startswith("-") or tok.endswith(DIRECTION_SUFFIXES)


def has_data_token(text: str) -> bool:
    """True when *text* carries something date- or amount-shaped."""
    if not text:
        return False
    if ANY_DATE_RE.search(text):
        return True
    return any(is_amount(tok) for tok in text.split())


def header_keyword_hit(text: str) -> bool:
    low = (text or "").lower()
    if any(kw in low for kw in HEADER_KEYWORDS):
        return True
    return any(tok in HEADER_TOKENS for tok in low.split())


def is_terminal_footer(text: str) -> bool:
    low = (text or "").lower()
    return any(kw in low for kw in FOOTER_KEYWORDS)


def is_soft_boilerplate(text: str) -> bool:
    low = (text or "").lower()
    return any(kw in low for kw in SOFT_BOILERPLATE_KEYWORDS) or PAGE_NUMBER_RE.search(low) is not None


def is_boilerplate_text(text: str) -> bool:
    low = (text or "").lower()
    return any(kw in low for kw in BOILERPLATE_RECORD_KEYWORDS)


def infer_column_type(label: str) -> ColumnType:
    if DATE_LABEL_RE.search(label or ""):
        return ColumnType.DATE
    if AMOUNT_LABEL_RE.search(label or ""):
        return ColumnType.AMOUNT
    return ColumnType.TEXT


def normalize_header_label(label: str) -> str:
    return HEADER_ALIASES.get(label.strip().lower(), label)
