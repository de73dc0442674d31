# test_api.py
import time

import httpx
import pytest
from fastapi.testclient import TestClient

from backend.app import main
from backend.app.agents.compare_agent import ThumbnailComparer
from backend.app.config import Settings
from backend.app.provider_client import MODEL_VISION_OPENROUTER_FALLBACK
from conftest import FakeProvider, FixedRandom, chat_reply, make_image_bytes, passthrough

VERDICT = {"winner": "1", "score1": 8.5, "score2": 6, "reasoning": "Bigger face.", "breakdown": []}


@pytest.fixture
def install(make_client, settings):
    """Route the app's provider calls through a FakeProvider."""

    def _install(fake, app_settings: Settings = None):
        app_settings = app_settings or settings
        client = make_client(fake, app_settings)
        main.app.dependency_overrides[main.get_settings] = lambda: app_settings
        main.app.dependency_overrides[main.get_client] = lambda: client
        main.app.dependency_overrides[main.get_comparer] = lambda: ThumbnailComparer(
            client, app_settings, rng=FixedRandom(0.9), compressor=passthrough
        )
        return TestClient(main.app)

    yield _install
    main.app.dependency_overrides.clear()


def _files(a: bytes = None, b: bytes = None):
    a = make_image_bytes(64, 36) if a is None else a
    b = make_image_bytes(64, 36, color=(10, 10, 200)) if b is None else b
    return {
        "file_a": ("a.png", a, "image/png"),
        "file_b": ("b.png", b, "image/png"),
    }


def test_compare_returns_caller_frame_result(install):
    client = install(FakeProvider(chat_reply(VERDICT)))

    r = client.post("/api/v1/thumbnail/compare", files=_files(), data={"provider": "OPENROUTER"})

    assert r.status_code == 200
    body = r.json()
    assert body["winner"] == "A"
    assert body["score_a"] == 8.5
    assert body["score_b"] == 6
    assert body["swapped"] is False


def test_compare_without_key_is_401(install):
    fake = FakeProvider(chat_reply(VERDICT))
    client = install(fake, Settings())

    r = client.post("/api/v1/thumbnail/compare", files=_files(), data={"provider": "GROQ"})

    assert r.status_code == 401
    assert r.json()["detail"]["error"] == "missing_credential"
    assert fake.calls == 0


def test_compare_with_user_key(install):
    fake = FakeProvider(chat_reply(VERDICT))
    client = install(fake, Settings())

    r = client.post(
        "/api/v1/thumbnail/compare",
        files=_files(),
        data={"provider": "GROQ", "api_key": "gsk-user"},
    )

    assert r.status_code == 200
    assert fake.requests[0].headers["Authorization"] == "Bearer gsk-user"


def test_compare_empty_upload_is_400(install):
    fake = FakeProvider(chat_reply(VERDICT))
    client = install(fake)

    r = client.post("/api/v1/thumbnail/compare", files=_files(b=b""))

    assert r.status_code == 400
    assert r.json()["detail"]["error"] == "invalid_input"
    assert fake.calls == 0


def test_compare_unknown_provider_is_400(install):
    client = install(FakeProvider(chat_reply(VERDICT)))
    r = client.post("/api/v1/thumbnail/compare", files=_files(), data={"provider": "GEMINI"})
    assert r.status_code == 400


def test_compare_both_models_failing_is_502(install):
    fake = FakeProvider(httpx.Response(500, text="primary down"), httpx.Response(503, text="fallback down"))
    client = install(fake)

    r = client.post("/api/v1/thumbnail/compare", files=_files())

    assert r.status_code == 502
    detail = r.json()["detail"]
    assert detail["error"] == "composite_failure"
    assert "primary down" in detail["message"]
    assert "fallback down" in detail["message"]
    assert fake.bodies()[1]["model"] == MODEL_VISION_OPENROUTER_FALLBACK


def test_compare_async_job_can_be_polled(install):
    with install(FakeProvider(chat_reply(VERDICT))) as client:
        r = client.post("/api/v1/thumbnail/compare_async", files=_files())
        assert r.status_code == 200
        job_id = r.json()["job_id"]

        job = {}
        for _ in range(100):
            job = client.get(f"/api/v1/jobs/{job_id}").json()
            if job["status"] not in ("pending", "queued"):
                break
            time.sleep(0.02)

    assert job["status"] == "done"
    assert job["result"]["winner"] == "A"


def test_unknown_job_is_404(install):
    client = install(FakeProvider(chat_reply(VERDICT)))
    assert client.get("/api/v1/jobs/missing").status_code == 404
    assert client.delete("/api/v1/jobs/missing").status_code == 404


def test_keywords_endpoint(install):
    client = install(FakeProvider(chat_reply({"keywords": [{"keyword": "air fryer recipes", "difficulty": 30}]})))

    r = client.post("/api/v1/keywords", json={"topic": "air fryer"})

    assert r.status_code == 200
    assert r.json()["keywords"][0]["keyword"] == "air fryer recipes"
    assert r.json()["keywords"][0]["difficulty"] == 30


def test_keywords_blank_topic_is_400(install):
    client = install(FakeProvider(chat_reply({})))
    r = client.post("/api/v1/keywords", json={"topic": " "})
    assert r.status_code == 400


def test_provider_error_is_502(install):
    client = install(FakeProvider(httpx.Response(401, text='{"error":{"code":"invalid_api_key"}}')))

    r = client.post("/api/v1/titles", json={"topic": "gardening"})

    assert r.status_code == 502
    assert "invalid_api_key" in r.json()["detail"]["message"]


def test_best_time_endpoint(install):
    client = install(FakeProvider(chat_reply("Sunday 10am.")))
    r = client.post("/api/v1/best-time", json={"title": "Meal Prep", "tags": "food"})
    assert r.json() == {"suggestion": "Sunday 10am."}


def test_generate_records_history(install):
    client = install(FakeProvider(chat_reply("Golden retriever surfing a huge wave")))

    first = client.post("/api/v1/thumbnail/generate", json={"prompt": "dog surfing"}).json()
    sid = first["session_id"]
    second = client.post(
        "/api/v1/thumbnail/generate",
        json={"prompt": "cat skiing", "optimize": False, "session_id": sid},
    ).json()

    assert second["session_id"] == sid
    history = client.get(f"/api/v1/thumbnail/history/{sid}").json()["history"]
    assert [h["original_prompt"] for h in history] == ["cat skiing", "dog surfing"]
    assert history[1]["optimized_prompt"] == "Golden retriever surfing a huge wave"


def test_health_and_metrics(install):
    client = install(FakeProvider(chat_reply(VERDICT)))

    assert client.get("/health").json()["status"] == "ok"
    client.post("/api/v1/thumbnail/compare", files=_files())
    assert client.get("/metrics").json()["provider_calls"] == 1
