"""Provider error hierarchy for msg-ai's provider layer."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence


class ProviderError(Exception):
    """Base exception for provider-related errors.

    Attributes:
        provider: Short name of the provider involved, if any.
        status_code: HTTP status returned by the vendor, if any.
        response_body: Raw vendor response body, if any.
    """

    code = "PROVIDER_ERROR"

    def __init__(
        self,
        message: str,
        provider: str = "",
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ):
        self.provider = provider
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message)

    @property
    def message(self) -> str:
        return str(self)

    @property
    def details(self) -> Dict[str, Any]:
        return {"provider": self.provider}


class CredentialMissingError(ProviderError):
    """Raised when a provider's credential variable is not set."""

    code = "API_KEY_MISSING"

    def __init__(self, env_key: str, display_name: str, provider: str = ""):
        self.env_key = env_key
        self.display_name = display_name
        message = (
            f"{env_key} not found. Please set the {env_key} environment variable "
            f"to use {display_name}.\n\n"
            "To set it:\n"
            f'  - Linux/Mac: export {env_key}="your-api-key"\n'
            f'  - Windows: set {env_key}="your-api-key"\n'
            f"  - Or add it to a .env file: {env_key}=your-api-key"
        )
        super().__init__(message, provider=provider)

    @property
    def details(self) -> Dict[str, Any]:
        return {"env_key": self.env_key, "provider": self.display_name}


class ProviderNotFoundError(ProviderError):
    """Raised when a provider name is not registered."""

    code = "PROVIDER_NOT_FOUND"

    def __init__(self, requested: str, available: Sequence[str]):
        self.requested = requested
        self.available: List[str] = list(available)
        message = (
            f'Provider "{requested}" not found.\n'
            f"Available providers: {', '.join(self.available)}"
        )
        super().__init__(message)

    @property
    def details(self) -> Dict[str, Any]:
        return {"requested": self.requested, "available": self.available}


class ModelNotFoundError(ProviderError):
    """Raised when a model id is not in a provider's catalog.

    A vendor rejecting a model at request time is reported as an
    ``APIError`` instead.
    """

    code = "MODEL_NOT_FOUND"

    def __init__(self, model: str, provider: str, available: Sequence[str]):
        self.model = model
        self.available: List[str] = list(available)
        message = (
            f'Model "{model}" not found for provider {provider}.\n'
            f"Available models: {', '.join(self.available)}"
        )
        super().__init__(message, provider=provider)

    @property
    def details(self) -> Dict[str, Any]:
        return {"model": self.model, "provider": self.provider, "available": self.available}


class APIError(ProviderError):
    """Raised when a vendor call fails with an error response."""

    code = "API_ERROR"

    @property
    def has_response(self) -> bool:
        return self.status_code is not None and self.response_body is not None

    @property
    def api_message(self) -> str:
        """Human-readable message from the response body.

        Degrades to the raw body when it is not the usual
        ``{"error": ...}`` JSON shape, and to the exception message when
        there is no body at all.
        """
        if not self.response_body:
            return str(self)
        try:
            data = json.loads(self.response_body)
        except ValueError:
            return self.response_body
        error = data.get("error") if isinstance(data, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
        if error:
            return json.dumps(error)
        return self.response_body

    @property
    def details(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "status_code": self.status_code,
            "response_body": self.response_body,
        }


class AuthenticationError(APIError):
    """Raised when the vendor rejects the API key."""

    pass


class RateLimitError(APIError):
    """Raised when the provider's rate limit is hit.

    Attributes:
        retry_after: Suggested wait time in seconds before retrying.
    """

    def __init__(self, message: str, retry_after: Optional[float] = None, **kwargs):  # type: ignore[override]
        self.retry_after = retry_after
        super().__init__(message, **kwargs)


class ContextLengthError(APIError):
    """Raised when the input exceeds the model's context window."""

    pass


class NetworkError(ProviderError):
    """Raised on connection-level failures (timeout, refused, DNS)."""

    code = "NETWORK_ERROR"

    def __init__(self, message: str, provider: str = "", original_error: Optional[BaseException] = None):
        self.original_error = original_error
        super().__init__(message, provider=provider)

    @property
    def details(self) -> Dict[str, Any]:
        original = str(self.original_error) if self.original_error is not None else None
        return {"provider": self.provider, "original_error": original}


__all__ = [
    "ProviderError",
    "CredentialMissingError",
    "ProviderNotFoundError",
    "ModelNotFoundError",
    "APIError",
    "AuthenticationError",
    "RateLimitError",
    "ContextLengthError",
    "NetworkError",
]
