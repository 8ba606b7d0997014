#!/usr/bin/env python3
"""
Travel Ledger Extractor - Web Interface

A Flask application that accepts ledger uploads and returns the extracted
travel bookings, opening balance and summary as JSON. Nothing is stored;
persisting the result is left to the caller.
"""
import logging
import os
from datetime import datetime

from flask import Flask, request, jsonify

from config import APP_NAME, APP_VERSION, get_log_level, get_max_upload_bytes
from parsers.base_parser import (
    LedgerExtractionError,
    MalformedInputError,
    NoDataAfterHeaderError,
)
from parsers.ledger_parser import LedgerParser
from parsers.upload_validator import (
    FileTooLargeError,
    UnsupportedFileError,
    validate_upload,
)


# =============================================================================
# Application Configuration
# =============================================================================

app = Flask(__name__)

logging.basicConfig(
    level=get_log_level(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app.config['MAX_CONTENT_LENGTH'] = get_max_upload_bytes()


# =============================================================================
# Routes
# =============================================================================

@app.route('/upload', methods=['POST'])
def upload_file():
    """Handle ledger upload and extraction."""
    if 'file' not in request.files:
        return jsonify({'error': 'No file uploaded'}), 400

    file = request.files['file']
    if file.filename == '':
        return jsonify({'error': 'No file selected'}), 400

    buffer = file.read()

    try:
        validate_upload(file.filename, len(buffer), app.config['MAX_CONTENT_LENGTH'])
    except UnsupportedFileError as e:
        return jsonify({'error': str(e)}), 400
    except FileTooLargeError as e:
        return jsonify({'error': str(e)}), 413

    logger.info(f"File uploaded: {file.filename} ({len(buffer)} bytes)")

    parser = LedgerParser(buffer, file.filename)

    try:
        result = parser.parse()
    except NoDataAfterHeaderError as e:
        logger.warning(f"No data in {file.filename}: {e}")
        return jsonify({'error': str(e)}), 422
    except MalformedInputError as e:
        logger.warning(f"Unreadable file {file.filename}: {e}")
        return jsonify({'error': str(e)}), 400
    except LedgerExtractionError as e:
        logger.error(f"Error processing file {file.filename}: {e}")
        return jsonify({'error': str(e)}), 400

    issues = parser.validate()

    logger.info(f"Processed {len(result.records)} records for {file.filename}")

    payload = result.to_dict()
    payload['success'] = True
    payload['validationIssues'] = len(issues)
    return jsonify(payload)


@app.route('/health')
def health_check():
    """Health check endpoint."""
    return jsonify({
        'status': 'healthy',
        'app': APP_NAME,
        'version': APP_VERSION,
        'timestamp': datetime.now().isoformat()
    })


@app.errorhandler(413)
def file_too_large(e):
    """Handle file too large error."""
    return jsonify({
        'error': f"File too large. Maximum size is {app.config['MAX_CONTENT_LENGTH'] // (1024 * 1024)} MB."
    }), 413


@app.errorhandler(500)
def internal_error(e):
    """Handle internal server error."""
    logger.error(f"Internal server error: {e}")
    return jsonify({
        'error': 'An internal error occurred. Please try again.'
    }), 500


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    debug = os.environ.get('FLASK_DEBUG', 'false').lower() == 'true'

    logger.info(f"Starting {APP_NAME} v{APP_VERSION} on port {port}")

    app.run(host='0.0.0.0', port=port, debug=debug)
