import os
from typing import Any, Dict, Optional

import requests

API_BASE = os.getenv("BACKEND_URL", "http://127.0.0.1:8000")


class BackendError(Exception):
    """Backend answered with an error, or could not be reached."""

    def __init__(self, message: str, code: str = "error", status: Optional[int] = None):
        self.code = code
        self.status = status
        super().__init__(message)


def friendly_error(message: str, code: str = "") -> str:
    """Turn a raw provider/backend error into guidance a creator can act on."""
    text = message or ""
    lowered = text.lower()
    if "content must be a string" in lowered or "does not support image" in lowered:
        return "The selected Groq model is Text-Only. Please switch to OpenRouter for image analysis."
    if code == "missing_credential" or "api key is missing" in lowered:
        return "No API key found for this provider. Paste your key in the settings or add it to your .env file."
    if "401" in text or "invalid_api_key" in lowered or "invalid api key" in lowered:
        return "Authentication failed (401). Please check your API Key."
    if "413" in text or "payload too large" in lowered:
        return "The images are too large for the provider. Try smaller thumbnails."
    return text or "Request failed. Please try again."


def _raise_for_error(r: requests.Response) -> None:
    if r.ok:
        return
    code, message = "error", r.text
    try:
        detail = r.json().get("detail")
    except ValueError:
        detail = None
    if isinstance(detail, dict):
        code = detail.get("error", code)
        message = detail.get("message", message)
    elif isinstance(detail, str):
        message = detail
    raise BackendError(friendly_error(message, code), code=code, status=r.status_code)


def _post(path: str, timeout: float = 120, **kwargs) -> Dict[str, Any]:
    try:
        r = requests.post(f"{API_BASE}{path}", timeout=timeout, **kwargs)
    except requests.exceptions.RequestException as e:
        raise BackendError(f"Could not reach backend: {e}")
    _raise_for_error(r)
    return r.json()


def find_keywords(topic: str):
    return _post("/api/v1/keywords", json={"topic": topic})["keywords"]


def generate_script(title: str, audience: str):
    return _post("/api/v1/script", json={"title": title, "audience": audience})


def generate_titles(topic: str):
    return _post("/api/v1/titles", json={"topic": topic})["titles"]


def suggest_best_time(title: str, audience: str, tags: str = ""):
    return _post("/api/v1/best-time", json={"title": title, "audience": audience, "tags": tags})["suggestion"]


def analyze_competitor(channel_url: str):
    return _post("/api/v1/competitor", json={"channel_url": channel_url})


def generate_thumbnail(prompt: str, style: str, mood: str, optimize: bool, session_id: Optional[str]):
    return _post(
        "/api/v1/thumbnail/generate",
        json={
            "prompt": prompt,
            "style": style,
            "mood": mood,
            "optimize": optimize,
            "session_id": session_id or None,
        },
    )


def compare_thumbnails(file_a, file_b, provider: str, api_key: str = ""):
    """file_a / file_b are (name, bytes, content_type) tuples."""
    files = {"file_a": file_a, "file_b": file_b}
    data = {"provider": provider}
    if api_key and api_key.strip():
        data["api_key"] = api_key.strip()
    return _post("/api/v1/thumbnail/compare", timeout=180, files=files, data=data)
