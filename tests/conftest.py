from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from handwriting_ocr.config import get_settings


def annotation(text, vertices):
    return {"description": text, "boundingPoly": {"vertices": vertices}}


def vision_payload(full_text, *fragments):
    """Build an ``images:annotate`` body: whole-image entry first, then fragments."""
    whole = annotation(full_text, [{"x": 0, "y": 0}, {"x": 400}, {"x": 400, "y": 300}, {"y": 300}])
    return {"responses": [{"textAnnotations": [whole, *fragments]}]}


def vision_response(payload=None, status_code=200, text=""):
    response = MagicMock()
    response.ok = 200 <= status_code < 300
    response.status_code = status_code
    response.text = text
    response.json.return_value = payload
    return response


@pytest.fixture
def two_fragment_payload():
    return vision_payload(
        "  你好\n世界  \n",
        annotation("你好", [{"x": 10, "y": 10}, {"x": 110, "y": 10}, {"x": 110, "y": 40}, {"x": 10, "y": 40}]),
        annotation("世界", [{"x": 200, "y": 50}, {"x": 200, "y": 150}, {"x": 170, "y": 150}, {"x": 170, "y": 50}]),
    )


@pytest.fixture
def settings_env(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
    monkeypatch.setenv("APP_ENV", "development")
    monkeypatch.setenv("OCR_LANGUAGE_HINTS", "")
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


@pytest.fixture
def client(settings_env):
    from handwriting_ocr.main import app

    return TestClient(app)
