"""
API Endpoints
Routes for image preparation and UGC photo generation
"""

import logging
import time
from typing import Optional, Tuple

from flask import Blueprint, request, jsonify, current_app
from flask_cors import cross_origin

from .config import StudioSettings
from .errors import ErrorKind, ProcessingError, HTTP_STATUS
from .generation import GenerationClient
from .image_prep import prepare_image
from .models import PreparedImage, create_error_response, create_success_response
from .prompts import SCENE_CATEGORIES, OUTPUT_ASPECT_RATIO, is_known_scene, find_category
from .utils import (
    DownloadTooLargeError, validate_image_file, download_image_from_url, to_data_url,
    generate_download_filename, format_file_size, format_processing_time
)

logger = logging.getLogger(__name__)

api_bp = Blueprint('studio', __name__, url_prefix='/api/v1')


def get_settings() -> StudioSettings:
    return current_app.config.get('STUDIO_SETTINGS') or StudioSettings.from_env()


def get_generation_client() -> GenerationClient:
    """Client configured on the app, or one built from the environment"""
    client = current_app.config.get('GENERATION_CLIENT')
    if client is None:
        client = GenerationClient.from_settings(get_settings())
    return client


class UploadError(Exception):
    def __init__(self, error_code: str, details: str, status: int = 400):
        self.error_code = error_code
        self.details = details
        self.status = status
        super().__init__(details)


def _read_upload(field: str, url_field: str) -> Optional[Tuple[bytes, str, str]]:
    """
    Read one image from a multipart file field or a URL form field.

    Returns:
        tuple: (bytes, content type, filename), or None if neither was sent
    """
    upload = request.files.get(field)
    image_url = request.form.get(url_field, '').strip()

    if upload and image_url:
        raise UploadError('VALIDATION_001', f"Provide either {field} file or {url_field}, not both")

    if upload:
        is_valid, error_msg = validate_image_file(upload, get_settings().max_upload_bytes)
        if not is_valid:
            error_code = 'VALIDATION_003' if error_msg.startswith('File too large') else 'VALIDATION_002'
            raise UploadError(error_code, f"{field}: {error_msg}")
        return upload.read(), upload.mimetype or '', upload.filename

    if image_url:
        max_bytes = get_settings().max_upload_bytes
        try:
            downloaded = download_image_from_url(image_url, max_bytes=max_bytes)
        except DownloadTooLargeError as e:
            logger.warning("❌ %s", e)
            raise UploadError('VALIDATION_003', f"{field}: File too large. Maximum size: {max_bytes // (1024 * 1024)}MB") from e
        if downloaded is None:
            raise UploadError('VALIDATION_002', f"Failed to download {field} image from URL. Please check the URL and try again.")
        data, content_type = downloaded
        return data, content_type, image_url

    return None


def _prepare_upload(field: str, url_field: str) -> Optional[PreparedImage]:
    upload = _read_upload(field, url_field)
    if upload is None:
        return None

    data, content_type, filename = upload
    settings = get_settings()
    prepared = prepare_image(data, content_type, settings.max_dimension, settings.jpeg_quality)
    if prepared is None:
        raise UploadError('VALIDATION_002', f"{field}: {filename} is not an image")
    return prepared


@api_bp.route('/health', methods=['GET'])
@cross_origin()
def health_check():
    """
    Health check endpoint
    """
    client = get_generation_client()
    return jsonify({
        'status': 'healthy',
        'timestamp': time.time(),
        'services': {
            'gemini_configured': client.is_configured(),
            'model': client.model,
        }
    })


@api_bp.route('/scenes', methods=['GET'])
@cross_origin()
def list_scenes():
    return jsonify({
        'success': True,
        'aspect_ratio': OUTPUT_ASPECT_RATIO,
        'categories': SCENE_CATEGORIES,
    })


@api_bp.route('/prepare', methods=['POST'])
@cross_origin()
def prepare():
    """
    Resize and re-encode one image, returning the preview that will be sent
    """
    try:
        prepared = _prepare_upload('image', 'image_url')
    except UploadError as e:
        return jsonify(create_error_response(e.error_code, e.details)), e.status
    except ProcessingError as e:
        return jsonify(create_error_response(ErrorKind.PROCESSING_ERROR, str(e.__cause__ or e))), 422

    if prepared is None:
        return jsonify(create_error_response('VALIDATION_001', 'Either image file or image_url is required')), 400

    encoded = prepared.encoded
    return jsonify(create_success_response(
        message="Image prepared successfully",
        preview=prepared.preview,
        width=encoded.width,
        height=encoded.height,
        mime_type=encoded.mime_type,
        file_size=format_file_size(encoded.size_bytes),
    ))


@api_bp.route('/generate', methods=['POST'])
@cross_origin()
def generate():
    """
    Main generation endpoint
    Combines the person and product photos into a UGC photo in the chosen scene
    """
    start_time = time.time()

    scene = request.form.get('scene', '').strip()
    if scene and not is_known_scene(scene):
        return jsonify(create_error_response('VALIDATION_004', f"Unknown scene: {scene}")), 400

    try:
        person = _prepare_upload('person', 'person_url')
        product = _prepare_upload('product', 'product_url')
    except UploadError as e:
        return jsonify(create_error_response(e.error_code, e.details)), e.status
    except ProcessingError as e:
        return jsonify(create_error_response(ErrorKind.PROCESSING_ERROR, str(e.__cause__ or e))), 422

    logger.info(
        "📋 Generate request - scene: %r, person: %s, product: %s",
        scene, bool(person), bool(product)
    )

    client = get_generation_client()
    result = client.generate_result(
        person.encoded if person else None,
        product.encoded if product else None,
        scene,
    )

    if not result.success:
        body = create_error_response(result.error_kind)
        body['error'] = result.message
        body['attempts'] = result.attempts
        return jsonify(body), HTTP_STATUS.get(result.error_kind, 500)

    category = find_category(scene)
    return jsonify(create_success_response(
        message="UGC photo generated successfully",
        image=to_data_url(result.data, 'image/png'),
        download_filename=generate_download_filename(),
        attempts=result.attempts,
        file_size=format_file_size(len(result.data)),
        processing_time=format_processing_time(start_time, time.time()),
        metadata={
            'scene': scene,
            'category': category['id'] if category else None,
            'aspect_ratio': OUTPUT_ASPECT_RATIO,
            'model': result.metadata.get('model'),
        },
    ))
