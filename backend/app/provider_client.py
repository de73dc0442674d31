# backend/app/provider_client.py
"""
Chat-completions client for the two OpenAI-compatible inference providers.

THE BRAIN: Groq (Kimi) handles all text / strategy / JSON work.
VISION:    OpenRouter (Grok, with a free Llama fallback) or Groq (Llama Vision).
"""

import json
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Union

import httpx

from .config import Settings
from .errors import InvalidInput, MalformedResponse, MissingCredential, TransportError
from .logging_config import inc_metric, measure

log = logging.getLogger("tubemaster")

GROQ_API_URL = "https://api.groq.com/openai/v1/chat/completions"
OPENROUTER_API_URL = "https://openrouter.ai/api/v1/chat/completions"

MODEL_BRAIN = "moonshotai/kimi-k2-instruct-0905"
MODEL_VISION_GROQ = "llama-3.2-90b-vision-preview"
MODEL_VISION_OPENROUTER = "x-ai/grok-4.1-fast"
MODEL_VISION_OPENROUTER_FALLBACK = "meta-llama/llama-3.2-11b-vision-instruct:free"

Message = Dict[str, Any]


class Provider(str, Enum):
    GROQ = "GROQ"
    OPENROUTER = "OPENROUTER"


class VisionProvider(Protocol):
    name: str
    api_url: str

    def default_model(self) -> str: ...

    def fallback_model(self) -> Optional[str]: ...

    def extra_headers(self) -> Dict[str, str]: ...


class GroqProvider:
    name = Provider.GROQ.value
    api_url = GROQ_API_URL

    def default_model(self) -> str:
        return MODEL_VISION_GROQ

    def fallback_model(self) -> Optional[str]:
        return None

    def extra_headers(self) -> Dict[str, str]:
        return {}


class OpenRouterProvider:
    name = Provider.OPENROUTER.value
    api_url = OPENROUTER_API_URL

    def default_model(self) -> str:
        return MODEL_VISION_OPENROUTER

    def fallback_model(self) -> Optional[str]:
        return MODEL_VISION_OPENROUTER_FALLBACK

    def extra_headers(self) -> Dict[str, str]:
        # Some OpenRouter routes answer 403/500 without app identification.
        return {
            "HTTP-Referer": "https://tubemaster.ai",
            "X-Title": "TubeMaster AI",
        }


_PROVIDERS: Dict[Provider, VisionProvider] = {
    Provider.GROQ: GroqProvider(),
    Provider.OPENROUTER: OpenRouterProvider(),
}


def get_provider(provider: Union[Provider, str]) -> VisionProvider:
    try:
        key = provider if isinstance(provider, Provider) else Provider(str(provider).strip().upper())
    except ValueError:
        raise InvalidInput(f"Unknown provider: {provider!r}. Use GROQ or OPENROUTER.")
    return _PROVIDERS[key]


class ProviderClient:
    """
    Sends chat messages to a provider and returns the first choice's text.

    `transport` is handed to httpx, so tests can plug in an
    `httpx.MockTransport` instead of the network.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    def http_client(self, **kwargs) -> httpx.AsyncClient:
        kwargs.setdefault("timeout", self.settings.request_timeout)
        return httpx.AsyncClient(transport=self._transport, **kwargs)

    async def chat(
        self,
        provider: VisionProvider,
        messages: List[Message],
        api_key: Optional[str],
        model: Optional[str] = None,
        json_mode: bool = True,
        temperature: Optional[float] = None,
        max_tokens: int = 2048,
    ) -> str:
        clean_key = (api_key or "").strip()
        if not clean_key:
            raise MissingCredential(provider.name)

        model = model or provider.default_model()
        headers = {
            "Authorization": f"Bearer {clean_key}",
            "Content-Type": "application/json",
            **provider.extra_headers(),
        }
        body: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens,
        }
        if temperature is not None:
            body["temperature"] = temperature
        if json_mode:
            body["response_format"] = {"type": "json_object"}

        inc_metric("provider_calls")
        inc_metric(f"provider_calls_{provider.name.lower()}")
        log.info(f"📡 {provider.name} request (model={model}, json_mode={json_mode})")

        try:
            with measure(f"{provider.name.lower()}_chat"):
                async with self.http_client() as client:
                    response = await client.post(provider.api_url, headers=headers, json=body)
        except httpx.HTTPError as e:
            inc_metric("provider_errors")
            raise TransportError(f"{provider.name} API Error: request failed ({e.__class__.__name__}: {e})")

        if response.status_code < 200 or response.status_code >= 300:
            inc_metric("provider_errors")
            raise TransportError(
                f"{provider.name} API Error ({response.status_code}): {response.text}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            inc_metric("provider_errors")
            raise MalformedResponse(f"{provider.name} API returned non-JSON body: {response.text}")

        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            inc_metric("provider_errors")
            error = data.get("error") if isinstance(data, dict) else None
            if error:
                message = error.get("message") if isinstance(error, dict) else None
                raise TransportError(
                    f"{provider.name} API Error: {message or json.dumps(error)}",
                    status_code=response.status_code,
                )
            raise MalformedResponse(
                f"{provider.name} API returned unexpected format (No choices): {json.dumps(data)}"
            )

        first = choices[0] if isinstance(choices[0], dict) else {}
        message = first.get("message") or {}
        content = message.get("content") if isinstance(message, dict) else message
        if content is None:
            return ""
        if not isinstance(content, str):
            inc_metric("provider_errors")
            raise MalformedResponse(
                f"{provider.name} API returned non-text content: {json.dumps(content, default=str)[:500]}"
            )
        return content

    async def ask_brain(self, prompt: str, json_mode: bool = True, api_key: Optional[str] = None) -> str:
        """One-shot text prompt to the Groq brain model."""
        groq = _PROVIDERS[Provider.GROQ]
        return await self.chat(
            groq,
            [{"role": "user", "content": prompt}],
            self.settings.resolve_key(groq.name, api_key),
            model=MODEL_BRAIN,
            json_mode=json_mode,
            temperature=0.6,
            max_tokens=4096,
        )
