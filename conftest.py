import io
import json
import random
from typing import Any, Callable, List, Union

import httpx
import pytest
from PIL import Image

from backend.app.config import Settings
from backend.app.image_compressor import image_to_data_uri
from backend.app.logging_config import reset_metrics
from backend.app.memory.memory import clear_sessions
from backend.app.provider_client import ProviderClient

Reply = Union[httpx.Response, Callable[[httpx.Request], httpx.Response], Exception]


def chat_reply(content: Any, status: int = 200) -> httpx.Response:
    if not isinstance(content, str):
        content = json.dumps(content)
    return httpx.Response(status, json={"choices": [{"message": {"content": content}}]})


class FakeProvider:
    """
    httpx MockTransport handler that replays queued replies in order (the
    last one repeats) and remembers every request it saw.
    """

    def __init__(self, *replies: Reply):
        self.replies: List[Reply] = list(replies)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)
        return reply

    @property
    def calls(self) -> int:
        return len(self.requests)

    def bodies(self) -> List[dict]:
        return [json.loads(r.content) for r in self.requests if r.content]


class FixedRandom(random.Random):
    def __init__(self, value: float):
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


async def passthrough(payload: str, timeout: float = 4.0) -> str:
    return payload


def make_image_bytes(width: int, height: int, mode: str = "RGB", color=(200, 30, 30), fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    Image.new(mode, (width, height), color).save(buf, format=fmt)
    return buf.getvalue()


def make_data_uri(width: int, height: int, mode: str = "RGB", color=(200, 30, 30)) -> str:
    return image_to_data_uri(Image.new(mode, (width, height), color), "PNG")


@pytest.fixture(autouse=True)
def _clean_state():
    reset_metrics()
    clear_sessions()
    yield


@pytest.fixture
def settings() -> Settings:
    return Settings(groq_api_key="groq-test-key", openrouter_api_key="or-test-key")


@pytest.fixture
def make_client(settings):
    def factory(fake: FakeProvider, settings_override: Settings = None) -> ProviderClient:
        return ProviderClient(settings_override or settings, transport=httpx.MockTransport(fake))

    return factory
