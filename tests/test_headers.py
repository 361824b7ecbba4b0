import unittest

from bankstatementparser.config import ParserConfig
from bankstatementparser.headers import HeaderDetector
from bankstatementparser.models import Row
from bankstatementparser.rows import RowBuilder

from tests.fixtures import first_page, header_line, row, statement_columns


class HeaderDetectorTest(unittest.TestCase):
  def setUp(self):
    self.config = ParserConfig()
    self.detector = HeaderDetector(self.config)

  def test_detects_header_row(self):
    rows = RowBuilder(self.config).build(first_page())
    match = self.detector.detect(rows)
    self.assertIsNotNone(match)
    self.assertEqual(match.index, 1)
    self.assertEqual(match.row.texts[0], "Date")

  def test_data_rows_are_penalised(self):
    data = row(700, ("01/02/2024", 0), ("Credit", 80), ("Balance", 150), ("5,000.00", 300))
    self.assertLess(self.detector.score_row(data), self.config.header_threshold)
    self.assertIsNone(self.detector.detect([data]))

  def test_earliest_row_wins_a_tie(self):
    rows = [Row(fragments=header_line(760), y=760), Row(fragments=header_line(700), y=700)]
    self.assertEqual(self.detector.detect(rows).index, 0)

  def test_scan_window(self):
    rows = [row(800 - 10 * i, ("filler", 0)) for i in range(self.config.header_scan_rows)]
    rows.append(Row(fragments=header_line(300), y=300))
    self.assertIsNone(self.detector.detect(rows))

  def test_repeated_header_needs_spread_keywords(self):
    columns = statement_columns()
    wrapped = row(700, ("Transfer", 80), ("credit", 100), ("debit", 120))
    self.assertTrue(self.detector.is_repeated_header(wrapped))
    self.assertFalse(self.detector.is_repeated_header(wrapped, columns))
    self.assertTrue(self.detector.is_repeated_header(Row(fragments=header_line(700), y=700), columns))

  def test_locate_data_start(self):
    columns = statement_columns()
    rows = [
      row(780, ("Page", 0), ("2", 30)),
      Row(fragments=header_line(760), y=760),
      row(740, ("03/02/2024", 0), ("Rent", 80), ("4,000.00", 220)),
    ]
    self.assertEqual(self.detector.locate_data_start(rows, columns), 2)
    self.assertEqual(self.detector.locate_data_start(rows[2:], columns), 0)


class ColumnFallbackTest(unittest.TestCase):
  def setUp(self):
    self.detector = HeaderDetector(ParserConfig())

  def test_centers_from_data_rows(self):
    rows = [
      row(800, ("Mr", 0), ("J", 20), ("Smith", 30)),
      row(700, ("01/02/2024", 0), ("Salary", 102), ("5,000.00", 300)),
      row(690, ("02/02/2024", 2), ("ATM", 100), ("500.00", 298)),
      row(680, ("03/02/2024", 1), ("Rent", 98), ("4,000.00", 302)),
      row(670, ("04/02/2024", 0), ("Coffee", 100), ("3.50", 300), ("ref", 200)),
    ]
    inferred = self.detector.detect_columns_from_data(rows)
    self.assertIsNotNone(inferred)
    self.assertEqual(inferred.start_index, 1)
    self.assertEqual([round(c) for c in inferred.centers], [1, 100, 300])
    self.assertEqual(len(inferred.sample_rows), 4)

  def test_gives_up_without_data(self):
    rows = [row(800, ("Dear", 0), ("customer", 40)), row(790, ("Welcome", 0), ("back", 60))]
    self.assertIsNone(self.detector.detect_columns_from_data(rows))


if __name__ == '__main__':
  unittest.main()
