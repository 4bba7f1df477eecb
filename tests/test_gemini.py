"""REST transport: request shape and error wrapping."""

from __future__ import annotations

import pytest
import requests

from errors import CollaboratorError
from gemini import GeminiClient, extract_text, user_contents


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=""):
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


class FakeHTTPSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def post(self, url, headers=None, json=None, timeout=None):
        self.requests.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        if self.error:
            raise self.error
        return self.response

    def close(self):
        pass


def test_request_shape():
    http = FakeHTTPSession(FakeResponse(body={"candidates": []}))
    client = GeminiClient(api_key="k", base_url="https://example.test/v1beta/", timeout=5, session=http)

    client.generate_content("m", user_contents("hi"), system_instruction="persona",
                            generation_config={"responseMimeType": "application/json"})

    sent = http.requests[0]
    assert sent["url"] == "https://example.test/v1beta/models/m:generateContent"
    assert sent["headers"]["x-goog-api-key"] == "k"
    assert sent["timeout"] == 5
    assert sent["json"]["contents"] == [{"role": "user", "parts": [{"text": "hi"}]}]
    assert sent["json"]["systemInstruction"] == {"parts": [{"text": "persona"}]}
    assert sent["json"]["generationConfig"] == {"responseMimeType": "application/json"}


def test_missing_key():
    client = GeminiClient(api_key="", session=FakeHTTPSession())
    with pytest.raises(CollaboratorError):
        client.generate_content("m", user_contents("hi"))


def test_http_error_status():
    http = FakeHTTPSession(FakeResponse(status_code=429, text="quota exceeded"))
    with pytest.raises(CollaboratorError) as exc:
        GeminiClient(api_key="k", session=http).generate_content("m", user_contents("hi"))
    assert exc.value.status_code == 429
    assert "quota" in str(exc.value)


@pytest.mark.parametrize("error", [requests.exceptions.Timeout(), requests.exceptions.ConnectionError("down")])
def test_network_errors_wrapped(error):
    http = FakeHTTPSession(error=error)
    with pytest.raises(CollaboratorError):
        GeminiClient(api_key="k", session=http).generate_content("m", user_contents("hi"))


def test_non_json_body():
    http = FakeHTTPSession(FakeResponse(body=None))
    with pytest.raises(CollaboratorError):
        GeminiClient(api_key="k", session=http).generate_content("m", user_contents("hi"))


def test_extract_text_joins_parts():
    response = {"candidates": [{"content": {"parts": [{"text": '{"a":'}, {"text": "1}"}]}}]}
    assert extract_text(response) == '{"a":1}'
    assert extract_text({}) is None
