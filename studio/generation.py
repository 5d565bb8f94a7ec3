"""
UGC photo generation using the Google Gemini image model.

One `generate` call sends the instruction text, the person image and the
product image (in that order) with a square aspect-ratio constraint, retries
once on rate-limit or server errors, and returns the first inline image of the
response.
"""
import base64
import logging
import time
from dataclasses import replace
from typing import Callable, Optional, Tuple

from google import genai
from google.genai import types

from .config import StudioSettings, get_api_key, DEFAULT_IMAGE_MODEL, DEFAULT_RETRY_DELAY_S
from .errors import ErrorKind, GenerationError, classify_error, is_transient_error
from .models import EncodedImage, GenerationRequest, GenerationResult
from .prompts import OUTPUT_ASPECT_RATIO, build_ugc_prompt

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 2

# Combined request size the service accepts comfortably
PAYLOAD_WARN_BYTES = 4 * 1024 * 1024


def _iter_response_parts(response):
    """
    Content parts of the first candidate, or [] when the response carries none.
    """
    if response is None:
        return []
    candidates = getattr(response, "candidates", None)
    if candidates:
        content = getattr(candidates[0], "content", None)
        if content is not None:
            return getattr(content, "parts", None) or []
    return []


def _inline_bytes(part) -> Optional[bytes]:
    inline = getattr(part, "inline_data", None)
    if inline is None:
        return None
    mime_type = getattr(inline, "mime_type", None)
    if mime_type and not mime_type.startswith("image/"):
        return None
    data = getattr(inline, "data", None)
    if not data:
        return None
    if isinstance(data, str):
        return base64.b64decode(data)
    return data


def extract_image_bytes(response) -> bytes:
    """
    Return the bytes of the first inline image part.

    An image wins over any text in the same response. Text with no image is
    treated as a content-policy refusal.
    """
    parts = _iter_response_parts(response)
    if not parts:
        raise GenerationError(ErrorKind.EMPTY_RESPONSE)

    text_output = []
    for part in parts:
        data = _inline_bytes(part)
        if data is not None:
            return data
        text = getattr(part, "text", None)
        if text:
            text_output.append(text)

    if text_output:
        logger.warning("⚠️ Model returned text instead of image: %s", " ".join(text_output)[:200])
        raise GenerationError(ErrorKind.SAFETY_BLOCK, detail=" ".join(text_output))

    raise GenerationError(ErrorKind.NO_IMAGE_RETURNED)


def build_request(person_image: Optional[EncodedImage], product_image: Optional[EncodedImage],
                  scene: Optional[str]) -> GenerationRequest:
    """Validate inputs and build the first-attempt request."""
    if person_image is None or not person_image.data:
        raise GenerationError(ErrorKind.MISSING_INPUT, detail="person image is missing")
    if product_image is None or not product_image.data:
        raise GenerationError(ErrorKind.MISSING_INPUT, detail="product image is missing")
    if not scene or not scene.strip():
        raise GenerationError(ErrorKind.MISSING_INPUT, detail="scene is empty")
    return GenerationRequest(person_image=person_image, product_image=product_image, scene=scene)


def build_contents(request: GenerationRequest) -> list:
    """Instruction first, then the person image, then the product image."""
    return [
        types.Part.from_text(text=build_ugc_prompt(request.scene)),
        types.Part.from_bytes(
            data=request.person_image.data,
            mime_type=request.person_image.mime_type or "image/jpeg",
        ),
        types.Part.from_bytes(
            data=request.product_image.data,
            mime_type=request.product_image.mime_type or "image/jpeg",
        ),
    ]


def build_config() -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        response_modalities=["IMAGE", "TEXT"],
        image_config=types.ImageConfig(aspect_ratio=OUTPUT_ASPECT_RATIO),
    )


class GenerationClient:
    """
    Generates one UGC photo per call.

    Args:
        api_key: Fixed credential. When omitted, `credential_provider` is
            called at the start of every generation (default: environment
            lookup), so a rotated key is picked up between calls.
        model: Gemini model id
        retry_delay_s: Pause before the single retry
        client_factory: Builds the SDK client from an api key
        sleep: Function used to wait out the retry delay
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        credential_provider: Callable[[], Optional[str]] = get_api_key,
        model: str = DEFAULT_IMAGE_MODEL,
        retry_delay_s: float = DEFAULT_RETRY_DELAY_S,
        client_factory: Callable[..., object] = genai.Client,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._api_key = api_key
        self._credential_provider = credential_provider
        self.model = model
        self.retry_delay_s = retry_delay_s
        self._client_factory = client_factory
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: StudioSettings, **kwargs) -> 'GenerationClient':
        return cls(model=settings.image_model, retry_delay_s=settings.retry_delay_s, **kwargs)

    def is_configured(self) -> bool:
        return bool(self._resolve_api_key())

    def _resolve_api_key(self) -> Optional[str]:
        if self._api_key:
            return self._api_key
        if self._credential_provider is None:
            return None
        return self._credential_provider()

    def _connect(self):
        api_key = self._resolve_api_key()
        if not api_key:
            raise GenerationError(ErrorKind.CONFIG_MISSING)
        return self._client_factory(api_key=api_key)

    def _send(self, client, request: GenerationRequest):
        return client.models.generate_content(
            model=self.model,
            contents=build_contents(request),
            config=build_config(),
        )

    def _send_with_retry(self, client, request: GenerationRequest) -> Tuple[object, int]:
        """
        Send the request, retrying once on a transient failure.

        Returns:
            tuple: (response, attempts made)
        """
        last_exc: Optional[Exception] = None

        for attempt in range(MAX_ATTEMPTS):
            request = replace(request, attempt=attempt)
            try:
                if attempt > 0:
                    logger.info("🔁 Gemini retry %d/%d (model=%s)", attempt, MAX_ATTEMPTS - 1, self.model)
                return self._send(client, request), attempt + 1
            except Exception as e:
                # google-genai raises different exception types across SDK versions
                last_exc = e
                logger.error("Gemini API call failed: %s", e)
                if attempt + 1 >= MAX_ATTEMPTS or not is_transient_error(e):
                    break
                logger.info("⏳ Gemini transient error, backing off %.1fs", self.retry_delay_s)
                self._sleep(self.retry_delay_s)

        error = classify_error(last_exc, model=self.model)
        error.attempts = request.attempt + 1
        raise error from last_exc

    def generate_result(self, person_image: Optional[EncodedImage], product_image: Optional[EncodedImage],
                        scene: Optional[str]) -> GenerationResult:
        """
        Generate a UGC photo, reporting failures in the result instead of raising.

        Returns:
            GenerationResult with image bytes or a classified error
        """
        attempts = 0
        try:
            request = build_request(person_image, product_image, scene)
            client = self._connect()

            payload_bytes = request.person_image.size_bytes + request.product_image.size_bytes
            if payload_bytes > PAYLOAD_WARN_BYTES:
                logger.warning("⚠️ Request images total %d bytes, the service may reject it", payload_bytes)

            logger.info("🎨 Generating UGC photo (model=%s, scene=%r)", self.model, request.scene)
            response, attempts = self._send_with_retry(client, request)
            data = extract_image_bytes(response)
        except GenerationError as e:
            logger.warning("❌ Generation failed [%s]: %s", e.kind.value, e.detail or e.message)
            return GenerationResult.failure(e, attempts)

        logger.info("✅ Generated image (%d bytes, %d attempt(s))", len(data), attempts)
        return GenerationResult(
            data=data,
            attempts=attempts,
            metadata={"model": self.model, "scene": request.scene, "aspect_ratio": OUTPUT_ASPECT_RATIO},
        )

    def generate(self, person_image: Optional[EncodedImage], product_image: Optional[EncodedImage],
                 scene: Optional[str]) -> bytes:
        """
        Generate a UGC photo combining the person and product in the scene.

        Returns:
            bytes: the generated image

        Raises:
            GenerationError: classified failure
        """
        result = self.generate_result(person_image, product_image, scene)
        result.raise_for_error()
        return result.data
