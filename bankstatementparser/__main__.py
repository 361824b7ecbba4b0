import argparse
import json
import logging
import sys

import pandas as pd

from .config import load_config
from .converter import StatementConverter
from .extraction import BACKENDS


def main(argv=None):
  parser = argparse.ArgumentParser(description='Reconstruct transaction tables from bank statement PDFs')
  parser.add_argument('pdfs', nargs='+', help='Input PDF files')
  parser.add_argument('--output', help='Write the JSON result here instead of stdout')
  parser.add_argument('--csv', help='Also write all transactions to this CSV file')
  parser.add_argument('--backend', choices=BACKENDS, default='pymupdf', help='PDF text extraction backend')
  parser.add_argument('--log-level', default=None, help='Logging level (default: BSP_LOG_LEVEL or INFO)')
  args = parser.parse_args(argv)

  config = load_config()
  logging.basicConfig(level=(args.log_level or config.log_level).upper(), format="%(levelname)s | %(message)s")

  converter = StatementConverter(config, backend=args.backend)
  results = converter.convert_multiple(args.pdfs)

  payload = [r.to_dict() for r in results]
  text = json.dumps(payload[0] if len(payload) == 1 else payload, indent=2, ensure_ascii=False)
  if args.output:
    with open(args.output, 'w', encoding='utf-8') as f:
      f.write(text)
  else:
    print(text)

  if args.csv:
    frames = []
    for result in results:
      df = result.to_dataframe()
      if len(results) > 1:
        df.insert(0, 'source_file', result.filename)
      frames.append(df)
    pd.concat(frames, ignore_index=True).to_csv(args.csv, index=False)

  return 0 if all(r.success for r in results) else 1


if __name__ == '__main__':
  sys.exit(main())
