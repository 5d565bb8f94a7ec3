"""
Studio Data Models
Defines the image, request and result models shared by the preparer, the
generation client and the API endpoints
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Union

from .errors import ErrorKind, GenerationError, USER_MESSAGES


@dataclass(frozen=True)
class EncodedImage:
    """Image payload ready for transmission"""
    data: bytes
    mime_type: str = 'image/jpeg'
    width: int = 0
    height: int = 0

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class PreparedImage:
    """Encoded image plus the data URL shown as its preview"""
    encoded: EncodedImage
    preview: str


@dataclass(frozen=True)
class GenerationRequest:
    """One generation call. Rebuilt with attempt + 1 when retried."""
    person_image: EncodedImage
    product_image: EncodedImage
    scene: str
    attempt: int = 0


@dataclass
class GenerationResult:
    """Outcome of a generation call: image bytes or a classified failure"""
    data: Optional[bytes] = None
    error_kind: Optional[ErrorKind] = None
    message: str = ""
    attempts: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.data is not None and self.error_kind is None

    @classmethod
    def failure(cls, error: GenerationError, attempts: int = 0) -> 'GenerationResult':
        return cls(
            data=None,
            error_kind=error.kind,
            message=error.message,
            attempts=attempts or error.attempts,
        )

    def raise_for_error(self) -> None:
        """Raise the classified error if this result is a failure"""
        if self.success:
            return
        kind = self.error_kind or ErrorKind.UNKNOWN
        raise GenerationError(kind, self.message, attempts=self.attempts)


# Error codes for request validation failures raised before generation starts
ERROR_CODES = {
    'VALIDATION_001': 'Missing required parameter',
    'VALIDATION_002': 'Invalid file type',
    'VALIDATION_003': 'File too large',
    'VALIDATION_004': 'Invalid parameter value',
    'SERVICE_003': 'Internal processing error',
}


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_error_response(error_code: Union[str, ErrorKind], details: str = None) -> Dict[str, Any]:
    """
    Create standardized error response

    Args:
        error_code: Code from ERROR_CODES or a generation ErrorKind
        details: Additional error details

    Returns:
        dict: Error response dictionary
    """
    if isinstance(error_code, ErrorKind):
        error = USER_MESSAGES[error_code]
        code = error_code.value
    else:
        error = ERROR_CODES.get(error_code, 'Unknown error')
        code = error_code

    return {
        'success': False,
        'error': error,
        'error_code': code,
        'details': details,
        'timestamp': _utc_timestamp()
    }


def create_success_response(message: str, processing_time: str = None,
                            metadata: Dict[str, Any] = None, **fields) -> Dict[str, Any]:
    """
    Create standardized success response

    Args:
        message: Success message
        processing_time: Time taken for processing
        metadata: Additional metadata
        **fields: Extra top-level fields (image data URL, filename, ...)

    Returns:
        dict: Success response dictionary
    """
    response = {
        'success': True,
        'message': message,
        'timestamp': _utc_timestamp()
    }

    for key, value in fields.items():
        if value is not None:
            response[key] = value
    if processing_time:
        response['processing_time'] = processing_time
    if metadata:
        response['metadata'] = metadata

    return response
