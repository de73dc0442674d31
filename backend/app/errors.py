# backend/app/errors.py

from typing import Optional


class AssistantError(Exception):
    """Base class for every failure the assistant reports to its callers."""

    code = "assistant_error"


class InvalidInput(AssistantError):
    code = "invalid_input"


class MissingCredential(AssistantError):
    code = "missing_credential"

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(
            f"API Key is missing for {provider}. "
            "Enter a key in the settings or configure the environment variables."
        )


class ProviderError(AssistantError):
    """A provider call went out but did not produce usable content."""

    code = "provider_error"


class TransportError(ProviderError):
    code = "transport_error"

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class MalformedResponse(ProviderError):
    code = "malformed_response"


class CompositeFailure(AssistantError):
    code = "composite_failure"

    def __init__(self, primary: Exception, fallback: Exception):
        self.primary = primary
        self.fallback = fallback
        super().__init__(
            f"Primary & Fallback Models Failed. Primary error: {primary} | "
            f"Fallback error: {fallback}"
        )
