import base64
import logging
from typing import Any, Dict, List, Optional

import requests
from langdetect import DetectorFactory, detect
from langdetect.lang_detect_exception import LangDetectException
from pydantic import ValidationError as PydanticValidationError

from .config import Settings
from .errors import ConfigurationError, UpstreamError
from .geometry import build_fragment
from .models import OcrResult, TextFragment, Vertex

logger = logging.getLogger(__name__)

# langdetect is randomized unless seeded
DetectorFactory.seed = 0

DETECTION_FEATURE = "DOCUMENT_TEXT_DETECTION"
TILT_LOG_THRESHOLD = 5.0


class OcrProvider:
    def recognize(self, image_bytes: bytes) -> OcrResult:
        raise NotImplementedError


class GoogleVisionClient(OcrProvider):
    """Calls the Vision ``images:annotate`` REST endpoint with an API key."""

    def __init__(self, settings: Settings) -> None:
        if not settings.google_api_key:
            raise ConfigurationError("GOOGLE_API_KEY is not configured")
        self.vision_url = settings.vision_url
        self.api_key = settings.google_api_key
        self.language_hints = list(settings.language_hints)
        self.timeout = settings.timeout_seconds

    def build_request(self, image_bytes: bytes) -> Dict[str, Any]:
        image_base64 = base64.b64encode(image_bytes).decode("utf-8")
        request: Dict[str, Any] = {
            "image": {"content": image_base64},
            "features": [{"type": DETECTION_FEATURE, "maxResults": 1}],
        }
        if self.language_hints:
            request["imageContext"] = {"languageHints": self.language_hints}
        return {"requests": [request]}

    def recognize(self, image_bytes: bytes) -> OcrResult:
        payload = self.build_request(image_bytes)
        logger.info("Sending %d bytes to Google Vision", len(image_bytes))

        try:
            response = requests.post(
                self.vision_url,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise UpstreamError(f"Google Vision API request failed: {e}") from e

        if not response.ok:
            raise UpstreamError(f"Google Vision API error: {response.status_code} - {response.text}")

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(f"Google Vision API returned invalid JSON: {e}") from e

        return parse_response(data)


def parse_response(data: Any) -> OcrResult:
    """Normalize an ``images:annotate`` body into an :class:`OcrResult`.

    The first text annotation is Vision's transcription of the whole image;
    every following one is a single word or line with its own polygon.
    """
    if not isinstance(data, dict) or not isinstance(data.get("responses"), list) or not data["responses"]:
        raise UpstreamError("Unexpected Google Vision response: missing 'responses'")

    first = data["responses"][0]
    if not isinstance(first, dict):
        raise UpstreamError("Unexpected Google Vision response: 'responses[0]' is not an object")

    error = first.get("error")
    if error:
        code = error.get("code") if isinstance(error, dict) else None
        message = error.get("message") if isinstance(error, dict) else error
        raise UpstreamError(f"Google Vision API error: {code} - {message}")

    annotations = first.get("textAnnotations")
    if annotations is None or annotations == []:
        # no text found
        return OcrResult(full_text="", fragments=[])
    if not isinstance(annotations, list):
        raise UpstreamError("Unexpected Google Vision response: 'textAnnotations' is not a list")

    whole, rest = annotations[0], annotations[1:]
    full_text = _description(whole).strip()
    fragments = [_to_fragment(annotation) for annotation in rest]
    return OcrResult(full_text=full_text, fragments=fragments)


def _description(annotation: Any) -> str:
    if not isinstance(annotation, dict) or not isinstance(annotation.get("description"), str):
        raise UpstreamError("Unexpected Google Vision response: text annotation without 'description'")
    return annotation["description"]


def _to_fragment(annotation: Any) -> TextFragment:
    text = _description(annotation)
    poly = annotation.get("boundingPoly")
    vertices = poly.get("vertices") if isinstance(poly, dict) else None
    if not isinstance(vertices, list) or not all(isinstance(v, dict) for v in vertices):
        raise UpstreamError(f"Unexpected Google Vision response: no 'boundingPoly.vertices' for {text!r}")

    try:
        bounds = [Vertex(x=v.get("x"), y=v.get("y")) for v in vertices]
    except PydanticValidationError as e:
        raise UpstreamError(f"Unexpected Google Vision response: bad vertex for {text!r}: {e}") from e

    fragment = build_fragment(text, bounds)
    if abs(fragment.angle) > TILT_LOG_THRESHOLD:
        logger.debug("Rotated text detected: %r - angle %.2f", fragment.text, fragment.angle)
    return fragment


def detect_language(text: str) -> Optional[str]:
    if not text.strip():
        return None
    try:
        return detect(text)
    except LangDetectException:
        return None


def build_provider(settings: Settings) -> OcrProvider:
    return GoogleVisionClient(settings)


def summarize(fragments: List[TextFragment]) -> str:
    rotated = sum(1 for f in fragments if abs(f.angle) > TILT_LOG_THRESHOLD)
    return f"{len(fragments)} fragments ({rotated} rotated)"
