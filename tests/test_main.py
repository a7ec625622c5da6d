from unittest.mock import patch

from conftest import annotation, vision_payload, vision_response
from handwriting_ocr.config import get_settings

PNG = ("page.png", b"\x89PNG\r\n\x1a\nfake", "image/png")


def post_image(client, payload=None, status_code=200, text=""):
    response = vision_response(payload, status_code=status_code, text=text)
    with patch("handwriting_ocr.ocr.requests.post", return_value=response) as post:
        result = client.post("/", files={"image": PNG})
    return result, post


def test_preflight(client):
    response = client.options("/")

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-methods"] == "POST, OPTIONS"
    assert response.headers["access-control-allow-headers"] == "Content-Type"


def test_browser_preflight(client):
    response = client.options(
        "/",
        headers={
            "Origin": "https://notes.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Authorization",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-methods"] == "POST, OPTIONS"
    assert response.headers["access-control-allow-headers"] == "Content-Type"


def test_other_methods_not_allowed(client):
    for method in ("get", "put", "delete"):
        response = getattr(client, method)("/")
        assert response.status_code == 405
        assert response.json()["success"] is False


def test_missing_image(client):
    response = client.post("/", data={"other": "value"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "image" in body["error"]


def test_non_multipart_body(client):
    response = client.post("/", json={"image": "not a file"})

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_empty_upload(client):
    response = client.post("/", files={"image": ("empty.png", b"", "image/png")})

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_annotate(client, two_fragment_payload):
    response, post = post_image(client, two_fragment_payload)

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    body = response.json()
    assert body["success"] is True
    assert body["typed_text"] == "你好\n世界"
    assert len(body["bounding_boxes"]) == 2
    assert body["annotated_image"]["type"] == "svg_overlay"
    assert body["annotated_image"]["svg"].count("<text") == 4
    assert post.call_count == 1

    first = body["bounding_boxes"][0]
    assert first["text"] == "你好"
    assert first["boundingBox"] == {"x": 10, "y": 10, "width": 100, "height": 30}
    assert first["center"] == {"x": 60, "y": 25}
    assert first["angle"] == 0
    assert len(first["bounds"]) == 4


def test_annotate_no_text(client):
    response, _ = post_image(client, {"responses": [{}]})

    assert response.status_code == 200
    body = response.json()
    assert body["typed_text"] == ""
    assert body["bounding_boxes"] == []
    assert body["detected_lang"] is None


def test_upstream_forbidden(client):
    response, _ = post_image(client, status_code=403, text='{"error": {"status": "PERMISSION_DENIED"}}')

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert "403" in body["error"]
    assert "stack" not in body


def test_malformed_upstream_payload(client):
    response, _ = post_image(client, {"unexpected": True})

    assert response.status_code == 500
    assert response.json()["success"] is False


def test_missing_api_key(client, settings_env):
    settings_env.setenv("GOOGLE_API_KEY", "")
    get_settings.cache_clear()

    response, post = post_image(client, vision_payload("a"))

    assert response.status_code == 500
    assert "GOOGLE_API_KEY" in response.json()["error"]
    post.assert_not_called()


def test_internal_error_includes_stack(client, two_fragment_payload):
    with patch("handwriting_ocr.main.render", side_effect=RuntimeError("boom")):
        response, _ = post_image(client, two_fragment_payload)

    assert response.status_code == 500
    body = response.json()
    assert body == {"error": "boom", "stack": body["stack"], "success": False}
    assert "RuntimeError" in body["stack"]


def test_internal_error_hides_stack_in_production(client, settings_env, two_fragment_payload):
    settings_env.setenv("APP_ENV", "production")
    get_settings.cache_clear()

    with patch("handwriting_ocr.main.render", side_effect=RuntimeError("boom")):
        response, _ = post_image(client, two_fragment_payload)

    assert response.status_code == 500
    assert response.json() == {"error": "boom", "success": False}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok", "service": "handwriting-ocr"}


def test_bounds_keep_vision_vertex_shape(client):
    payload = vision_payload(
        "x",
        annotation("x", [{"x": 5}, {"x": 15}, {"x": 15, "y": 9}, {"y": 9}]),
    )
    response, _ = post_image(client, payload)

    assert response.status_code == 200
    fragment = response.json()["bounding_boxes"][0]
    assert fragment["bounds"] == [{"x": 5}, {"x": 15}, {"x": 15, "y": 9}, {"y": 9}]
    assert fragment["boundingBox"] == {"x": 0, "y": 0, "width": 15, "height": 9}
