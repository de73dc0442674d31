import json

import pytest
import requests

from frontend import api_client
from frontend.api_client import BackendError, friendly_error


def _response(status: int, payload) -> requests.Response:
    r = requests.Response()
    r.status_code = status
    r.encoding = "utf-8"
    r._content = (payload if isinstance(payload, str) else json.dumps(payload)).encode()
    return r


@pytest.fixture
def post(monkeypatch):
    sent = []

    def install(response):
        def fake_post(url, timeout=None, **kwargs):
            sent.append({"url": url, "timeout": timeout, **kwargs})
            if isinstance(response, Exception):
                raise response
            return response

        monkeypatch.setattr(api_client.requests, "post", fake_post)
        return sent

    return install


@pytest.mark.parametrize(
    "message, code, expected",
    [
        ("GROQ API Error (400): content must be a string", "transport_error", "Text-Only"),
        ("model does not support image input", "", "Text-Only"),
        ("API Key is missing for OPENROUTER.", "missing_credential", "No API key found"),
        ("OPENROUTER API Error (401): unauthorized", "transport_error", "Authentication failed (401)"),
        ('{"error":{"code":"invalid_api_key"}}', "", "Authentication failed (401)"),
        ("OPENROUTER API Error (413): too big", "transport_error", "too large"),
        ("Payload Too Large", "", "too large"),
        ("Something odd happened", "", "Something odd happened"),
    ],
)
def test_friendly_error(message, code, expected):
    assert expected in friendly_error(message, code)


def test_compare_sends_files_and_trimmed_key(post):
    sent = post(_response(200, {"winner": "B", "score_a": 4, "score_b": 7}))

    result = api_client.compare_thumbnails(
        ("a.png", b"aaa", "image/png"), ("b.png", b"bbb", "image/png"), "OPENROUTER", "  sk-or  "
    )

    assert result["winner"] == "B"
    call = sent[0]
    assert call["url"].endswith("/api/v1/thumbnail/compare")
    assert call["timeout"] == 180
    assert set(call["files"]) == {"file_a", "file_b"}
    assert call["data"] == {"provider": "OPENROUTER", "api_key": "sk-or"}


def test_compare_without_key_omits_field(post):
    sent = post(_response(200, {"winner": "A"}))
    api_client.compare_thumbnails(("a", b"a", "image/png"), ("b", b"b", "image/png"), "GROQ", "")
    assert "api_key" not in sent[0]["data"]


def test_structured_error_detail_is_made_friendly(post):
    post(_response(401, {"detail": {"error": "missing_credential", "message": "API Key is missing for GROQ."}}))

    with pytest.raises(BackendError) as exc:
        api_client.find_keywords("baking")

    assert exc.value.code == "missing_credential"
    assert exc.value.status == 401
    assert "No API key found" in str(exc.value)


def test_plain_error_detail(post):
    post(_response(404, {"detail": "Job not found"}))
    with pytest.raises(BackendError, match="Job not found"):
        api_client.generate_titles("x")


def test_non_json_error_body(post):
    post(_response(500, "Internal Server Error"))
    with pytest.raises(BackendError, match="Internal Server Error"):
        api_client.generate_titles("x")


def test_unreachable_backend(post):
    post(requests.exceptions.ConnectionError("refused"))
    with pytest.raises(BackendError, match="Could not reach backend"):
        api_client.suggest_best_time("t", "a")


def test_feature_wrappers_unwrap_payload(post):
    sent = post(_response(200, {"suggestion": "Friday 7pm."}))
    assert api_client.suggest_best_time("Title", "Gamers", "fps") == "Friday 7pm."
    assert sent[0]["json"] == {"title": "Title", "audience": "Gamers", "tags": "fps"}
