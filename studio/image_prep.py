"""
Image preparation for uploads.

Uploaded photos are bounded to a maximum dimension and re-encoded as JPEG so
the person and product images together stay well under the generation
service's request size ceiling (roughly 4MB). The preview data URL is built
from the very bytes that get transmitted.
"""
import io
import logging
from typing import Optional, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from .config import DEFAULT_MAX_DIMENSION, DEFAULT_JPEG_QUALITY
from .errors import ProcessingError
from .models import EncodedImage, PreparedImage
from .utils import to_data_url

logger = logging.getLogger(__name__)

ENCODED_MIME_TYPE = 'image/jpeg'


def is_image_type(content_type: Optional[str]) -> bool:
    return bool(content_type) and content_type.lower().startswith('image')


def compute_target_size(width: int, height: int, max_dimension: int = DEFAULT_MAX_DIMENSION) -> Tuple[int, int]:
    """
    Scale the longer side down to max_dimension, keeping the aspect ratio.

    Images already within the bound keep their original size.
    """
    new_width, new_height = float(width), float(height)
    if width > height:
        if width > max_dimension:
            new_height = height * max_dimension / width
            new_width = max_dimension
    elif height > max_dimension:
        new_width = width * max_dimension / height
        new_height = max_dimension

    return max(1, int(round(new_width))), max(1, int(round(new_height)))


def apply_exif_orientation(img: Image.Image) -> Image.Image:
    """
    Apply EXIF orientation data to image if present.
    Phone photos are often stored sideways with a rotation flag.
    """
    try:
        return ImageOps.exif_transpose(img)
    except (AttributeError, KeyError, TypeError, ValueError):
        # Broken EXIF block; keep pixels as stored
        return img


def _flatten_to_rgb(img: Image.Image) -> Image.Image:
    """JPEG has no alpha channel, so transparent areas become white."""
    has_alpha = img.mode in ('RGBA', 'LA') or (img.mode == 'P' and 'transparency' in img.info)
    if has_alpha:
        rgba = img.convert('RGBA')
        background = Image.new('RGB', rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[3])
        return background
    if img.mode != 'RGB':
        return img.convert('RGB')
    return img


def prepare_image(data: bytes, content_type: Optional[str],
                  max_dimension: int = DEFAULT_MAX_DIMENSION,
                  quality: int = DEFAULT_JPEG_QUALITY) -> Optional[PreparedImage]:
    """
    Resize and re-encode an uploaded image

    Args:
        data: Raw file bytes as uploaded
        content_type: Declared media type of the upload
        max_dimension: Bound for the longer side in pixels
        quality: JPEG quality (1-95)

    Returns:
        PreparedImage, or None when the declared type is not an image

    Raises:
        ProcessingError: if the bytes cannot be decoded or re-encoded
    """
    if not is_image_type(content_type):
        logger.info("Ignoring non-image upload (content type %r)", content_type)
        return None

    try:
        with Image.open(io.BytesIO(data)) as source:
            img = apply_exif_orientation(source)
            original_size = img.size
            target_size = compute_target_size(img.width, img.height, max_dimension)

            if target_size != original_size:
                img = img.resize(target_size, Image.Resampling.LANCZOS)

            img = _flatten_to_rgb(img)

            buffer = io.BytesIO()
            img.save(buffer, format='JPEG', quality=quality)
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        # Pillow reports broken PNG chunks as SyntaxError
        logger.warning("❌ Image processing error: %s", e)
        raise ProcessingError() from e

    encoded_bytes = buffer.getvalue()
    logger.info(
        "📐 Prepared image %sx%s -> %sx%s (%d bytes)",
        original_size[0], original_size[1], target_size[0], target_size[1], len(encoded_bytes)
    )

    encoded = EncodedImage(
        data=encoded_bytes,
        mime_type=ENCODED_MIME_TYPE,
        width=target_size[0],
        height=target_size[1],
    )
    return PreparedImage(encoded=encoded, preview=to_data_url(encoded_bytes, ENCODED_MIME_TYPE))


class ImageSlot:
    """Holds the prepared image for one upload field (person or product)."""

    def __init__(self, max_dimension: int = DEFAULT_MAX_DIMENSION, quality: int = DEFAULT_JPEG_QUALITY):
        self.max_dimension = max_dimension
        self.quality = quality
        self.image: Optional[PreparedImage] = None
        self.filename: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return self.image is not None

    @property
    def encoded(self) -> Optional[EncodedImage]:
        return self.image.encoded if self.image else None

    def load(self, data: bytes, content_type: Optional[str], filename: Optional[str] = None) -> bool:
        """
        Replace the held image with a freshly prepared one.

        Returns False (state unchanged) for non-image uploads. A ProcessingError
        propagates and also leaves the previous image in place.
        """
        prepared = prepare_image(data, content_type, self.max_dimension, self.quality)
        if prepared is None:
            return False
        self.image = prepared
        self.filename = filename
        return True

    def clear(self) -> None:
        self.image = None
        self.filename = None
