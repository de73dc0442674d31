# backend/app/config.py
"""Runtime settings, read once from the environment at service start."""

import os
from dataclasses import dataclass
from typing import Optional


def _env(*names: str, default: str = "") -> str:
    # First non-empty variable wins.
    for name in names:
        value = os.getenv(name)
        if value and value.strip():
            return value.strip()
    return default


@dataclass(frozen=True)
class Settings:
    groq_api_key: str = ""
    openrouter_api_key: str = ""
    request_timeout: float = 60.0
    compress_timeout: float = 4.0
    scrape_proxy_url: str = "https://api.allorigins.win/get"
    image_api_url: str = "https://image.pollinations.ai/prompt/"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            groq_api_key=_env("VITE_GROQ_API_KEY", "GROQ_API_KEY"),
            openrouter_api_key=_env("VITE_OPENROUTER_API_KEY", "OPENROUTER_API_KEY"),
            request_timeout=float(_env("REQUEST_TIMEOUT", default="60")),
            compress_timeout=float(_env("COMPRESS_TIMEOUT", default="4")),
            scrape_proxy_url=_env("SCRAPE_PROXY_URL", default=cls.scrape_proxy_url),
            image_api_url=_env("IMAGE_API_URL", default=cls.image_api_url),
        )

    def resolve_key(self, provider: str, user_key: Optional[str] = None) -> str:
        """
        Key precedence: explicit key from the UI, then the provider's
        environment key, then "".
        """
        if user_key and user_key.strip():
            return user_key.strip()
        name = str(getattr(provider, "value", provider)).upper()
        if name == "OPENROUTER":
            return self.openrouter_api_key
        return self.groq_api_key
