"""
UGC Studio
Blends a person photo and a product photo into a social-media style scene
using the Gemini image model
"""

from .errors import ErrorKind, GenerationError, ProcessingError, StudioError
from .generation import GenerationClient
from .image_prep import ImageSlot, prepare_image
from .models import EncodedImage, PreparedImage, GenerationRequest, GenerationResult

__all__ = [
    'ErrorKind', 'GenerationError', 'ProcessingError', 'StudioError',
    'GenerationClient', 'ImageSlot', 'prepare_image',
    'EncodedImage', 'PreparedImage', 'GenerationRequest', 'GenerationResult',
]
