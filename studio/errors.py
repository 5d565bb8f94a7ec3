"""
Error taxonomy for UGC generation.

Upstream google-genai errors have no stable schema across SDK versions, so
failures are classified by matching known markers in the error text. The
markers live in ERROR_PATTERNS; swap that table (or `error_signal_text`) to
move to structured codes without touching the call sites.
"""

from enum import Enum
from typing import Optional, Tuple


class ErrorKind(str, Enum):
    MISSING_INPUT = 'MISSING_INPUT'
    PROCESSING_ERROR = 'PROCESSING_ERROR'
    EMPTY_RESPONSE = 'EMPTY_RESPONSE'
    SAFETY_BLOCK = 'SAFETY_BLOCK'
    NO_IMAGE_RETURNED = 'NO_IMAGE_RETURNED'
    QUOTA_EXCEEDED = 'QUOTA_EXCEEDED'
    AUTH_FAILURE = 'AUTH_FAILURE'
    CONFIG_MISSING = 'CONFIG_MISSING'
    ENDPOINT_NOT_FOUND = 'ENDPOINT_NOT_FOUND'
    UNKNOWN = 'UNKNOWN'


USER_MESSAGES = {
    ErrorKind.MISSING_INPUT: "Please upload both a person and a product image, and select a scene.",
    ErrorKind.PROCESSING_ERROR: "The image could not be processed. Please try a different JPG, PNG or WEBP file.",
    ErrorKind.EMPTY_RESPONSE: "No output generated from the model. Please try again.",
    ErrorKind.SAFETY_BLOCK: (
        "AI returned text instead of an image. This usually happens if the content is flagged. "
        "Try a different scene."
    ),
    ErrorKind.NO_IMAGE_RETURNED: "The AI model did not return an image part. Please try again.",
    ErrorKind.QUOTA_EXCEEDED: "Rate limit or quota reached. Please wait a minute and try again.",
    ErrorKind.AUTH_FAILURE: "The API key was rejected. Please check your credentials.",
    ErrorKind.CONFIG_MISSING: "API key is not available in the environment. Set GEMINI_API_KEY and restart.",
    ErrorKind.ENDPOINT_NOT_FOUND: "API endpoint not found. Ensure your environment has access to the image model.",
    ErrorKind.UNKNOWN: "Failed to generate image. Please try again with smaller or clearer images.",
}

HTTP_STATUS = {
    ErrorKind.MISSING_INPUT: 400,
    ErrorKind.PROCESSING_ERROR: 422,
    ErrorKind.EMPTY_RESPONSE: 502,
    ErrorKind.SAFETY_BLOCK: 422,
    ErrorKind.NO_IMAGE_RETURNED: 502,
    ErrorKind.QUOTA_EXCEEDED: 429,
    ErrorKind.AUTH_FAILURE: 502,
    ErrorKind.CONFIG_MISSING: 500,
    ErrorKind.ENDPOINT_NOT_FOUND: 502,
    ErrorKind.UNKNOWN: 500,
}

# Checked in order, first match wins.
ERROR_PATTERNS: Tuple[Tuple[Tuple[str, ...], ErrorKind], ...] = (
    (("RESOURCE_EXHAUSTED", "429", "quota"), ErrorKind.QUOTA_EXCEEDED),
    (("API_KEY_INVALID", "401", "403"), ErrorKind.AUTH_FAILURE),
    (("SAFETY", "blocked"), ErrorKind.SAFETY_BLOCK),
    (("Requested entity was not found", "404", "NOT_FOUND"), ErrorKind.ENDPOINT_NOT_FOUND),
)

TRANSIENT_MARKERS = (
    "429", "RESOURCE_EXHAUSTED",
    "500", "502", "503", "504",
    "INTERNAL", "UNAVAILABLE",
)


class StudioError(Exception):
    """Base class for errors surfaced to studio callers"""

    kind = ErrorKind.UNKNOWN

    def __init__(self, message: Optional[str] = None):
        self.message = message or USER_MESSAGES[self.kind]
        super().__init__(self.message)


class ProcessingError(StudioError):
    """An uploaded image could not be decoded, resized or re-encoded"""

    kind = ErrorKind.PROCESSING_ERROR


class GenerationError(StudioError):
    """A generation call ended in a classified failure"""

    def __init__(self, kind: ErrorKind, message: Optional[str] = None,
                 detail: Optional[str] = None, attempts: int = 0):
        self.kind = kind
        self.detail = detail
        self.attempts = attempts
        super().__init__(message)

    @property
    def http_status(self) -> int:
        return HTTP_STATUS[self.kind]


def error_signal_text(exc: BaseException) -> str:
    """Text the classifier looks at: the message plus any structured code/status."""
    parts = [str(exc)]
    for attr in ("code", "status"):
        value = getattr(exc, attr, None)
        if value is not None and str(value) not in parts[0]:
            parts.append(str(value))
    return " ".join(parts)


def classify_message(text: Optional[str]) -> ErrorKind:
    """Map upstream error text to an ErrorKind. Pure; same text, same kind."""
    if not text:
        return ErrorKind.UNKNOWN
    for markers, kind in ERROR_PATTERNS:
        if any(marker in text for marker in markers):
            return kind
    return ErrorKind.UNKNOWN


def classify_error(exc: BaseException, model: Optional[str] = None) -> GenerationError:
    """Turn the final, non-retried upstream exception into a GenerationError"""
    if isinstance(exc, GenerationError):
        return exc

    text = error_signal_text(exc)
    kind = classify_message(text)

    message = None
    if kind is ErrorKind.ENDPOINT_NOT_FOUND and model:
        message = f"API endpoint not found. Ensure your environment has access to '{model}'."
    elif kind is ErrorKind.UNKNOWN and str(exc):
        message = str(exc)

    return GenerationError(kind, message, detail=text)


def is_transient_error(exc: BaseException) -> bool:
    """Rate-limit and server-fault errors are worth one more try"""
    if isinstance(exc, StudioError):
        return False
    text = error_signal_text(exc)
    return any(marker in text for marker in TRANSIENT_MARKERS)
