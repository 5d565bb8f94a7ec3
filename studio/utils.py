"""
Studio Utility Functions
Helper functions for uploads, downloads and response formatting
"""

import base64
import logging
import mimetypes
import time
from typing import Optional, Tuple

import requests

logger = logging.getLogger(__name__)

# Allowed file extensions for uploads
ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'webp'}

EXTENSION_CONTENT_TYPES = {
    'png': 'image/png',
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
    'webp': 'image/webp',
}


def allowed_file(filename: str) -> bool:
    """
    Check if file extension is allowed for uploads

    Args:
        filename: Name of the file to check

    Returns:
        bool: True if file type is allowed
    """
    return '.' in filename and \
           filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def guess_content_type(filename: str) -> Optional[str]:
    """Media type from the file name; allowed image extensions are always recognized"""
    content_type, _ = mimetypes.guess_type(filename)
    if content_type:
        return content_type
    if '.' not in filename:
        return None
    return EXTENSION_CONTENT_TYPES.get(filename.rsplit('.', 1)[1].lower())


def validate_image_file(file, max_bytes: int) -> Tuple[bool, str]:
    """
    Validate uploaded image file

    Args:
        file: Uploaded file object (werkzeug FileStorage)
        max_bytes: Largest accepted upload

    Returns:
        tuple: (is_valid, error_message)
    """
    if not file or not file.filename:
        return False, "No file provided"

    if not allowed_file(file.filename):
        return False, f"Invalid file type. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"

    file.seek(0, 2)  # Seek to end
    file_size = file.tell()
    file.seek(0)

    if file_size > max_bytes:
        return False, f"File too large. Maximum size: {max_bytes // (1024 * 1024)}MB"

    if file_size == 0:
        return False, "Empty file provided"

    return True, ""


class DownloadTooLargeError(Exception):
    """A downloaded image exceeded the upload size limit"""


def download_image_from_url(image_url: str, timeout: int = 15,
                            max_bytes: Optional[int] = None) -> Optional[Tuple[bytes, str]]:
    """
    Download an image into memory

    Args:
        image_url: http(s) URL of the image
        max_bytes: Largest accepted body; the download stops once it is exceeded

    Returns:
        tuple: (content bytes, content type), or None if the download failed

    Raises:
        DownloadTooLargeError: if the body is larger than max_bytes
    """
    if not image_url.startswith(('http://', 'https://')):
        return None

    try:
        resp = requests.get(image_url, timeout=timeout, stream=True)
        resp.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.warning("Failed to download image from %s: %s", image_url, e)
        return None

    try:
        declared = resp.headers.get('Content-Length')
        if max_bytes is not None and declared and declared.isdigit() and int(declared) > max_bytes:
            raise DownloadTooLargeError(f"Image at {image_url} is {declared} bytes")

        buffer = bytearray()
        for chunk in resp.iter_content(chunk_size=8192):
            buffer.extend(chunk)
            if max_bytes is not None and len(buffer) > max_bytes:
                raise DownloadTooLargeError(f"Image at {image_url} exceeds {max_bytes} bytes")
    except requests.exceptions.RequestException as e:
        logger.warning("Failed to download image from %s: %s", image_url, e)
        return None
    finally:
        resp.close()

    content_type = resp.headers.get('Content-Type', '').split(';')[0].strip()
    return bytes(buffer), content_type


def to_data_url(data: bytes, mime_type: str) -> str:
    """Self-contained data URL for previews and results"""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def generate_download_filename(prefix: str = 'ugc-gen') -> str:
    """Filename offered for the generated photo, e.g. ugc-gen-1718900000000.png"""
    return f"{prefix}-{int(time.time() * 1000)}.png"


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human readable format

    Args:
        size_bytes: Size in bytes

    Returns:
        str: Formatted file size
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def format_processing_time(start_time: float, end_time: float) -> str:
    """
    Format processing time in human readable format

    Args:
        start_time: Start timestamp
        end_time: End timestamp

    Returns:
        str: Formatted processing time
    """
    duration = end_time - start_time
    if duration < 1:
        return f"{duration * 1000:.0f}ms"
    elif duration < 60:
        return f"{duration:.1f}s"
    else:
        minutes = int(duration // 60)
        seconds = duration % 60
        return f"{minutes}m {seconds:.1f}s"
