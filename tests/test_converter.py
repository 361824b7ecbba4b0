import io
import json
import os
import tempfile
import unittest

import pandas as pd
from fpdf import FPDF

from bankstatementparser.__main__ import main
from bankstatementparser.converter import StatementConverter
from bankstatementparser.extraction import extract_fragments
from bankstatementparser.errors import ExtractionFailure

# (text, x) per line, top to bottom; every cell is a single word
STATEMENT_LINES = [
  [("Statement", 40), ("of", 100), ("Account", 125)],
  [("Date", 40), ("Description", 120), ("Withdrawal", 260), ("Deposit", 340), ("Balance", 420)],
  [("01/02/2024", 40), ("Salary", 120), ("5,000.00", 340), ("15,000.00", 420)],
  [("credit", 120)],
  [("02/02/2024", 40), ("ATM", 120), ("500.00", 260), ("14,500.00", 420)],
  [("03/02/2024", 40), ("Rent", 120), ("4,000.00", 260), ("10,500.00", 420)],
  [("Closing", 120), ("Balance", 175), ("10,500.00", 420)],
]


def make_statement_pdf():
  pdf = FPDF(unit='pt')
  pdf.add_page()
  pdf.set_font('Helvetica', size=10)
  y = 80
  for cells in STATEMENT_LINES:
    for text, x in cells:
      pdf.text(x, y, text)
    y += 18
  return bytes(pdf.output())


class ConverterTest(unittest.TestCase):
  def setUp(self):
    self.pdf_bytes = make_statement_pdf()
    self.tmp = tempfile.TemporaryDirectory()
    self.pdf_path = os.path.join(self.tmp.name, 'sample.pdf')
    with open(self.pdf_path, 'wb') as f:
      f.write(self.pdf_bytes)

  def tearDown(self):
    self.tmp.cleanup()

  def check_statement(self, result):
    self.assertTrue(result.success, result.error)
    self.assertEqual(result.headers, ['Date', 'Description', 'Withdrawal', 'Deposit', 'Balance'])
    self.assertEqual([t['Date'] for t in result.transactions], ['01/02/2024', '02/02/2024', '03/02/2024'])
    self.assertEqual(result.transactions[0]['Description'], 'Salary credit')
    self.assertEqual(result.transactions[0]['Deposit'], '5,000.00')
    self.assertEqual(result.transactions[1]['Withdrawal'], '500.00')

  def test_convert_file(self):
    result = StatementConverter().convert_file(self.pdf_path)
    self.check_statement(result)
    self.assertEqual(result.filename, 'sample.pdf')

  def test_pdfplumber_backend(self):
    self.check_statement(StatementConverter(backend='pdfplumber').convert_bytes(self.pdf_bytes, 'sample.pdf'))

  def test_fragments_use_bottom_up_coordinates(self):
    pages = extract_fragments(self.pdf_bytes)
    self.assertEqual(len(pages), 1)
    by_text = {f.text: f for f in pages[0]}
    self.assertGreater(by_text['Statement'].y, by_text['Rent'].y)
    self.assertLess(by_text['Date'].x, by_text['Description'].x)

  def test_corrupt_pdf_is_a_failed_result(self):
    for backend in ('pymupdf', 'pdfplumber'):
      result = StatementConverter(backend=backend).convert_bytes(b'not a pdf', 'broken.pdf')
      self.assertFalse(result.success)
      self.assertTrue(result.error)
      self.assertEqual(result.transactions, [])

  def test_password_protected_pdf(self):
    pdf = FPDF(unit='pt')
    pdf.set_encryption(owner_password='owner', user_password='secret')
    pdf.add_page()
    pdf.set_font('Helvetica', size=10)
    pdf.text(40, 80, 'Date')
    result = StatementConverter().convert_bytes(bytes(pdf.output()), 'locked.pdf')
    self.assertFalse(result.success)
    self.assertIn('password', result.error)
    self.assertEqual(result.transactions, [])

  def test_extraction_failure_raised_directly(self):
    with self.assertRaises(ExtractionFailure):
      extract_fragments(b'not a pdf')

  def test_unknown_backend(self):
    with self.assertRaises(ValueError):
      StatementConverter(backend='tabula')

  def test_convert_multiple_reports_progress(self):
    calls = []
    results = StatementConverter().convert_multiple(
      [self.pdf_path, self.pdf_path], progress_callback=lambda p, m: calls.append(p))
    self.assertEqual(len(results), 2)
    self.assertEqual(calls, [0, 50, 100])

  def test_cli_writes_json_and_csv(self):
    out = os.path.join(self.tmp.name, 'out.json')
    csv_path = os.path.join(self.tmp.name, 'out.csv')
    self.assertEqual(main([self.pdf_path, '--output', out, '--csv', csv_path]), 0)
    with open(out, encoding='utf-8') as f:
      payload = json.load(f)
    self.assertTrue(payload['success'])
    self.assertEqual(len(payload['data']), 3)
    self.assertEqual(payload['columnTypes']['Balance'], 'amount')
    df = pd.read_csv(csv_path, dtype=str)
    self.assertEqual(list(df.columns), payload['headers'])
    self.assertEqual(len(df), 3)


class AppTest(unittest.TestCase):
  def setUp(self):
    from app import app
    app.config['TESTING'] = True
    self.client = app.test_client()

  def test_health(self):
    self.assertEqual(self.client.get('/health').get_json(), {'status': 'ok'})

  def test_missing_file(self):
    resp = self.client.post('/convert', data={}, content_type='multipart/form-data')
    self.assertEqual(resp.status_code, 400)

  def test_not_a_pdf(self):
    data = {'file': (io.BytesIO(b'a,b'), 'statement.csv')}
    resp = self.client.post('/convert', data=data, content_type='multipart/form-data')
    self.assertEqual(resp.status_code, 400)

  def test_convert(self):
    data = {'file': (io.BytesIO(make_statement_pdf()), 'my statement.pdf')}
    resp = self.client.post('/convert', data=data, content_type='multipart/form-data')
    self.assertEqual(resp.status_code, 200)
    body = resp.get_json()
    self.assertEqual(body['filename'], 'my_statement.pdf')
    self.assertEqual(len(body['data']), 3)
    self.assertEqual(body['pages'][0]['pageNumber'], 1)

  def test_unreadable_pdf(self):
    data = {'file': (io.BytesIO(b'junk'), 'broken.pdf')}
    resp = self.client.post('/convert', data=data, content_type='multipart/form-data')
    self.assertEqual(resp.status_code, 422)
    self.assertFalse(resp.get_json()['success'])


if __name__ == '__main__':
  unittest.main()
