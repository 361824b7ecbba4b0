"""Synthetic statement pages built from positioned fragments."""

from bankstatementparser.columns import build_column_ranges
from bankstatementparser.models import PositionedFragment, Row

HEADERS = ["Date", "Description", "Withdrawal", "Deposit", "Balance"]
HEADER_X = [0, 80, 220, 300, 380]


def frag(text, x, y, width=None):
  # roughly 5 units per character at a 10pt font
  return PositionedFragment(text=text, x=x, y=y, width=5.0 * len(text) if width is None else width, height=10.0)


def line(y, *cells):
  """``line(700, ("Date", 0), ("Salary", 80))`` -> fragments on one baseline."""
  return [frag(text, x, y) for text, x in cells]


def row(y, *cells):
  return Row(fragments=line(y, *cells), y=y)


def header_line(y):
  return line(y, *zip(HEADERS, HEADER_X))


def statement_columns():
  return build_column_ranges(HEADERS, HEADER_X)


def first_page():
  return (
    line(780, ("Statement", 0), ("of", 50), ("Account", 70))
    + header_line(740)
    + line(720, ("01/02/2024", 0), ("Salary", 80), ("5,000.00", 300), ("15,000.00", 380))
    + line(710, ("credit", 80))
    + line(700, ("02/02/2024", 0), ("ATM", 80), ("500.00", 220), ("14,500.00", 380))
  )


def second_page():
  # repeats the last entry of the first page under a re-printed header
  return (
    header_line(760)
    + line(740, ("02/02/2024", 0), ("ATM", 80), ("500.00", 220), ("14,500.00", 380))
    + line(730, ("03/02/2024", 0), ("Rent", 80), ("4,000.00", 220), ("10,500.00", 380))
    + line(720, ("Closing", 80), ("Balance", 120), ("10,500.00", 380))
    + line(710, ("04/02/2024", 0), ("Ignored", 80), ("1.00", 220), ("10,499.00", 380))
  )
