"""Tests for the request/response adapter: CORS, body parsing and error rendering."""

import pytest
from starlette.requests import Request

from app.core.http import audio_content_type, is_upload, parse_body


def make_request(body: bytes, content_type: str):
    async def receive():
        return {"type": "http.request", "body": body, "more_body": False}

    scope = {
        "type": "http",
        "method": "POST",
        "path": "/",
        "headers": [(b"content-type", content_type.encode())],
        "query_string": b"",
    }
    return Request(scope, receive)


class TestPreflight:
    def test_options_answers_204_with_cors_headers(self, client):
        response = client.options("/api/v1/todo")

        assert response.status_code == 204
        assert response.headers["access-control-allow-origin"] == "*"
        assert "PATCH" in response.headers["access-control-allow-methods"]
        assert response.headers["access-control-allow-headers"] == "Content-Type, Authorization"

    def test_options_on_unknown_path(self, client):
        assert client.options("/api/v1/nowhere").status_code == 204

    def test_cors_on_regular_response(self, client):
        response = client.get("/health", headers={"Origin": "https://diary.example"})

        assert response.headers["access-control-allow-origin"] == "*"


class TestErrorRendering:
    def test_method_not_allowed(self, client):
        response = client.get("/api/v1/auth")

        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed"}

    def test_unknown_route(self, client):
        response = client.get("/api/v1/nowhere")

        assert response.status_code == 404
        assert "error" in response.json()

    def test_missing_identity_is_401(self, client):
        response = client.get("/api/v1/entries")

        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}
        assert response.headers["www-authenticate"] == "Bearer"

    def test_missing_field_is_400(self, client, headers_for):
        response = client.post("/api/v1/entries", json={"title": "only title"}, headers=headers_for(1))

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Missing or invalid field: content"
        assert body["details"][0]["loc"] == ["body", "content"]

    def test_malformed_json_is_400(self, client, headers_for):
        response = client.post(
            "/api/v1/entries",
            content=b"{not json",
            headers={**headers_for(1), "Content-Type": "application/json"},
        )

        assert response.status_code == 400

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}
        assert client.get("/").json()["version"] == "1.0.0"


@pytest.mark.anyio
class TestParseBody:
    async def test_json_object(self):
        assert await parse_body(make_request(b'{"a": 1}', "application/json")) == {"a": 1}

    async def test_json_non_object(self):
        assert await parse_body(make_request(b"[1, 2]", "application/json")) == {}

    async def test_malformed_json(self):
        assert await parse_body(make_request(b"{nope", "application/json")) == {}

    async def test_empty_json(self):
        assert await parse_body(make_request(b"", "application/json")) == {}

    async def test_urlencoded(self):
        body = await parse_body(make_request(b"username=ann&password=pw", "application/x-www-form-urlencoded"))

        assert body == {"username": "ann", "password": "pw"}

    async def test_unknown_content_type(self):
        assert await parse_body(make_request(b"hello", "text/plain")) == {}

    async def test_multipart_file(self):
        payload = (
            b"--xyz\r\n"
            b'Content-Disposition: form-data; name="title"\r\n\r\n'
            b"memo\r\n"
            b"--xyz\r\n"
            b'Content-Disposition: form-data; name="audio"; filename="clip.wav"\r\n'
            b"Content-Type: audio/wav\r\n\r\n"
            b"RIFF\r\n"
            b"--xyz--\r\n"
        )
        body = await parse_body(make_request(payload, "multipart/form-data; boundary=xyz"))

        assert body["title"] == "memo"
        assert is_upload(body["audio"])
        assert body["audio"].filename == "clip.wav"
        assert await body["audio"].read() == b"RIFF"


class TestAudioContentType:
    def test_known_extensions(self):
        assert audio_content_type("audio_1.mp3") == "audio/mpeg"
        assert audio_content_type("audio_1.wav") == "audio/wav"
        assert audio_content_type("audio_1.ogg") == "audio/ogg"

    def test_default(self):
        assert audio_content_type("audio_1.webm") == "audio/webm"
        assert audio_content_type("audio_1") == "audio/webm"
