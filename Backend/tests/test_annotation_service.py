import base64
import json

import httpx
import pytest

from app.errors import AnnotationServiceFailure
from app.services.annotation_service import (
    DisabledAnnotationProvider,
    GeminiAnnotationProvider,
    build_prompt,
)


def _provider(handler):
    return GeminiAnnotationProvider("test-key", model="gemini-test", transport=httpx.MockTransport(handler))


def _reply(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_prompt_names_the_item():
    prompt = build_prompt("Handle Colour")
    assert '"Handle Colour"' in prompt
    assert prompt.startswith("Analyze this image for a quality control inspection.")


def test_gemini_provider_sends_image_and_prompt():
    seen = {}

    def handler(request):
        seen["url"] = request.url
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_reply("  Scratch on the left stile.  "))

    text = _provider(handler).annotate(b"\x89PNG", "image/png", "describe")

    assert text == "Scratch on the left stile."
    assert seen["url"].path.endswith("/models/gemini-test:generateContent")
    assert seen["url"].params["key"] == "test-key"
    parts = seen["body"]["contents"][0]["parts"]
    assert parts[0]["inline_data"] == {
        "mime_type": "image/png",
        "data": base64.b64encode(b"\x89PNG").decode(),
    }
    assert parts[1] == {"text": "describe"}


def test_empty_reply_is_a_failure():
    provider = _provider(lambda request: httpx.Response(200, json={"candidates": []}))
    with pytest.raises(AnnotationServiceFailure, match="No content generated."):
        provider.annotate(b"x", "image/png", "describe")


def test_http_error_is_a_failure():
    provider = _provider(lambda request: httpx.Response(403, json={"error": {"message": "bad key"}}))
    with pytest.raises(AnnotationServiceFailure):
        provider.annotate(b"x", "image/png", "describe")


def test_transport_error_is_a_failure():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(AnnotationServiceFailure):
        _provider(handler).annotate(b"x", "image/png", "describe")


def test_disabled_provider_always_fails():
    provider = DisabledAnnotationProvider()
    assert not provider.enabled
    with pytest.raises(AnnotationServiceFailure):
        provider.annotate(b"x", "image/png", "describe")
