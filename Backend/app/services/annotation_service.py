# app/services/annotation_service.py
import base64
import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from app.config import ANNOTATION_API_KEY, ANNOTATION_MODEL, ANNOTATION_TIMEOUT
from app.errors import AnnotationServiceFailure

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


def build_prompt(item_name: str) -> str:
    return (
        f'Analyze this image for a quality control inspection. The checklist item is "{item_name}". '
        "Describe any defects or issues you see. Be concise and professional."
    )


class AnnotationProvider(ABC):
    """Suggests a comment for a checklist image. Failures never affect job state."""

    enabled = True

    @abstractmethod
    def annotate(self, image_bytes: bytes, mime_type: str, prompt: str) -> str:
        ...


class DisabledAnnotationProvider(AnnotationProvider):
    enabled = False

    def annotate(self, image_bytes: bytes, mime_type: str, prompt: str) -> str:
        raise AnnotationServiceFailure("Image analysis is not configured.")


class GeminiAnnotationProvider(AnnotationProvider):
    def __init__(
        self,
        api_key: str,
        model: str = ANNOTATION_MODEL,
        timeout: float = ANNOTATION_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.transport = transport

    def annotate(self, image_bytes: bytes, mime_type: str, prompt: str) -> str:
        payload = {
            "contents": [{
                "parts": [
                    {"inline_data": {"mime_type": mime_type, "data": base64.b64encode(image_bytes).decode()}},
                    {"text": prompt},
                ]
            }]
        }
        url = f"{GEMINI_BASE_URL}/models/{self.model}:generateContent"
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(url, params={"key": self.api_key}, json=payload)
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Error analyzing image: %s", exc)
            raise AnnotationServiceFailure(
                "Could not analyze the image. Please check your API key and network connection."
            ) from exc

        text = _extract_text(body).strip()
        if not text:
            raise AnnotationServiceFailure("No content generated.")
        return text


def _extract_text(body: dict) -> str:
    candidates = body.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts)


def get_annotation_provider() -> AnnotationProvider:
    if not ANNOTATION_API_KEY:
        return DisabledAnnotationProvider()
    return GeminiAnnotationProvider(ANNOTATION_API_KEY)
