#!/usr/bin/env python3
"""
Web Application for UGC photo generation using Google Gemini API
Serves the JSON API used by the browser front end.
"""

import logging
import os

from flask import Flask, jsonify
from flask_cors import CORS
from dotenv import load_dotenv

# Load environment variables before importing modules that rely on them
load_dotenv()

from studio.config import StudioSettings
from studio.endpoints import api_bp


def configure_logging():
    logging.basicConfig(
        level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )


def create_app(settings: StudioSettings = None, generation_client=None) -> Flask:
    """
    Build the Flask application

    Args:
        settings: Runtime settings (defaults to the environment)
        generation_client: Pre-built GenerationClient (defaults to one built per request)
    """
    settings = settings or StudioSettings.from_env()

    app = Flask(__name__)
    # Two uploads per request, each bounded by max_upload_mb
    app.config['MAX_CONTENT_LENGTH'] = 2 * settings.max_upload_bytes + 1024 * 1024
    app.config['STUDIO_SETTINGS'] = settings
    app.config['GENERATION_CLIENT'] = generation_client

    # Configure CORS
    CORS(app, resources={
        r"/api/*": {
            "origins": "*",
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type"],
        }
    })

    app.register_blueprint(api_bp)

    @app.route('/health')
    def health_check():
        """Health check endpoint"""
        return jsonify({'status': 'healthy'})

    @app.errorhandler(413)
    def request_too_large(error):
        return jsonify({
            'success': False,
            'error': 'File too large',
            'error_code': 'VALIDATION_003',
            'details': f'Maximum upload size is {settings.max_upload_mb}MB per image',
        }), 413

    return app


configure_logging()
app = create_app()

if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5000)
