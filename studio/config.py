"""
Runtime configuration read from the environment (.env is loaded by the entry points).
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY")

DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
DEFAULT_RETRY_DELAY_S = 2.0
DEFAULT_MAX_DIMENSION = 1024
DEFAULT_JPEG_QUALITY = 85
DEFAULT_MAX_UPLOAD_MB = 16


def get_api_key() -> Optional[str]:
    """
    Returns the Gemini credential, read fresh from the environment.

    Called once per generation so a rotated key is picked up without a restart.
    """
    for name in API_KEY_ENV_VARS:
        value = (os.getenv(name) or "").strip()
        if value:
            return value
    return None


def get_gemini_image_model() -> str:
    """
    Returns the Gemini model id used for image generation.

    Override via GEMINI_IMAGE_MODEL to avoid code changes when Google retires model ids.
    """
    return os.getenv("GEMINI_IMAGE_MODEL", DEFAULT_IMAGE_MODEL)


def _env_number(name: str, default, cast):
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("⚠️ Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


@dataclass(frozen=True)
class StudioSettings:
    image_model: str = DEFAULT_IMAGE_MODEL
    retry_delay_s: float = DEFAULT_RETRY_DELAY_S
    max_dimension: int = DEFAULT_MAX_DIMENSION
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    max_upload_mb: int = DEFAULT_MAX_UPLOAD_MB

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @classmethod
    def from_env(cls) -> 'StudioSettings':
        return cls(
            image_model=get_gemini_image_model(),
            retry_delay_s=_env_number("GEMINI_RETRY_DELAY_S", DEFAULT_RETRY_DELAY_S, float),
            max_dimension=_env_number("UGC_MAX_IMAGE_DIMENSION", DEFAULT_MAX_DIMENSION, int),
            jpeg_quality=_env_number("UGC_JPEG_QUALITY", DEFAULT_JPEG_QUALITY, int),
            max_upload_mb=_env_number("UGC_MAX_UPLOAD_MB", DEFAULT_MAX_UPLOAD_MB, int),
        )
