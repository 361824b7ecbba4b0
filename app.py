import logging
import os

from flask import Flask, jsonify, request
from werkzeug.utils import secure_filename

from bankstatementparser import StatementConverter, load_config

config = load_config()
logging.basicConfig(level=config.log_level, format="%(levelname)s | %(message)s")
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = int(os.getenv('BSP_MAX_UPLOAD_MB', '100')) * 1024 * 1024

converter = StatementConverter(config, backend=os.getenv('BSP_BACKEND', 'pymupdf'))


@app.route('/health')
def health():
  return jsonify({'status': 'ok'})


@app.route('/convert', methods=['POST'])
def convert():
  """Convert one uploaded statement PDF and return the JSON result."""
  if 'file' not in request.files:
    return jsonify({'success': False, 'error': 'No file uploaded'}), 400

  file = request.files['file']
  if not file or file.filename == '':
    return jsonify({'success': False, 'error': 'No file selected'}), 400
  if not file.filename.lower().endswith('.pdf'):
    return jsonify({'success': False, 'error': 'Please upload a PDF file'}), 400

  filename = secure_filename(file.filename)
  try:
    result = converter.convert_bytes(file.read(), filename)
  except Exception as e:
    logger.exception(f"Conversion of {filename} crashed")
    return jsonify({'success': False, 'error': f'Conversion failed: {str(e)}', 'filename': filename}), 500

  return jsonify(result.to_dict()), (200 if result.success else 422)


if __name__ == '__main__':
  app.run(debug=True, host='0.0.0.0', port=8080)
