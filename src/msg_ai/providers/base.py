"""BaseProvider abstract class: the contract all msg-ai providers fulfill."""

from __future__ import annotations

import json
import logging
import os
import time
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Iterator, List, Mapping, Optional, Sequence, Tuple

import httpx

from .cache import ModelCache
from .env import resolve_api_key, resolve_base_url
from .errors import (
    APIError,
    AuthenticationError,
    ContextLengthError,
    CredentialMissingError,
    ModelNotFoundError,
    NetworkError,
    ProviderError,
    RateLimitError,
)
from .types import (
    ChatMessage,
    ChatOptions,
    ChatResponse,
    ModelHandle,
    ModelInfo,
    ProviderConfig,
    Usage,
)

logger = logging.getLogger("msg_ai.providers")

MODEL_LIST_TIMEOUT = 30.0

_PROMPT_FIELDS = ("prompt_tokens", "input_tokens", "prompt_token_count", "promptTokens")
_COMPLETION_FIELDS = (
    "completion_tokens",
    "output_tokens",
    "candidates_token_count",
    "completionTokens",
)
_TOTAL_FIELDS = ("total_tokens", "total_token_count", "totalTokens")

_CONTEXT_LENGTH_MARKERS = (
    "context length",
    "context_length",
    "maximum context",
    "token limit",
    "too long",
)


def _first_count(raw: Any, names: Sequence[str]) -> Optional[int]:
    for name in names:
        value = raw.get(name) if isinstance(raw, Mapping) else getattr(raw, name, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def normalize_usage(raw: Any) -> Optional[Usage]:
    """Map a vendor usage object (or dict) onto ``Usage``.

    Vendors name the counters differently (prompt/input/prompt_token_count,
    ...). ``total_tokens`` is computed when the vendor does not send one.
    Returns None when no counters are present.
    """
    if raw is None:
        return None
    prompt = _first_count(raw, _PROMPT_FIELDS)
    completion = _first_count(raw, _COMPLETION_FIELDS)
    if prompt is None and completion is None:
        return None
    return Usage.from_counts(prompt or 0, completion or 0, _first_count(raw, _TOTAL_FIELDS))


def _status_code_of(error: Exception) -> Optional[int]:
    for attr in ("status_code", "code"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _response_body_of(error: Exception) -> Optional[str]:
    response = getattr(error, "response", None)
    if response is not None:
        try:
            text = getattr(response, "text", None)
        except httpx.StreamError:
            text = None
        if isinstance(text, str) and text:
            return text
    for attr in ("response_json", "body"):
        body = getattr(error, attr, None)
        if isinstance(body, str):
            return body
        if isinstance(body, (dict, list)):
            return json.dumps(body)
    return None


def _retry_after_of(error: Exception) -> Optional[float]:
    headers = getattr(getattr(error, "response", None), "headers", None)
    if not isinstance(headers, Mapping):
        return None
    value = headers.get("retry-after")
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class BaseProvider(ABC):
    """Abstract base class for all LLM providers.

    Each concrete provider supplies a static ``CONFIG`` record and
    implements three hooks:
    - _create_client(): Build the vendor SDK client
    - _complete(): One buffered completion call
    - _stream(): One streaming completion call
    plus _fetch_models() for live model listing.

    Everything else (credential handling, model resolution, usage
    normalization, error translation, the model cache) lives here.
    """

    CONFIG: ClassVar[ProviderConfig]
    supports_reasoning_effort: ClassVar[bool] = False

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        *,
        environ: Optional[Mapping[str, str]] = None,
        config: Optional[ProviderConfig] = None,
    ):
        self.config = config or self.CONFIG
        env = os.environ if environ is None else environ
        self._api_key = api_key or resolve_api_key(
            self.config.env_key, self.config.alternative_env_keys, env
        )
        self._base_url = base_url or resolve_base_url(
            self.config.base_url_env_key, self.config.base_url, env
        )
        self._client: Optional[Any] = None  # Lazy-initialized vendor client
        self._model_cache = ModelCache()

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def display_name(self) -> str:
        return self.config.display_name

    @property
    def env_key(self) -> str:
        return self.config.env_key

    @property
    def api_key(self) -> Optional[str]:
        return self._api_key

    @property
    def base_url(self) -> Optional[str]:
        return self._base_url

    # --- Availability ---

    def is_available(self) -> bool:
        """True if a credential was resolved at construction."""
        return bool(self._api_key)

    def assert_available(self) -> None:
        """Raise CredentialMissingError unless a credential is configured."""
        if not self.is_available():
            raise CredentialMissingError(self.config.env_key, self.config.display_name, provider=self.name)

    # --- Model catalog ---

    def get_available_models(self) -> List[str]:
        """The static catalog ids, in configuration order."""
        return self.config.model_ids

    def get_model_info(self, model_id: str) -> ModelInfo:
        for model in self.config.models:
            if model.id == model_id:
                return model
        raise ModelNotFoundError(model_id, self.name, self.get_available_models())

    def resolve_model(self, model_id: Optional[str] = None) -> str:
        return model_id or self.config.default_model

    def fetch_available_models(self) -> List[str]:
        """Live model list, served from cache for one hour.

        Never raises: any fetch failure is logged and the static catalog
        is returned instead, leaving an existing cache entry untouched.
        """
        if not self.is_available():
            return self.get_available_models()

        cached = self._model_cache.get()
        if cached is not None:
            logger.debug(f"Using cached model list for {self.name}")
            return cached

        try:
            models = self._fetch_models()
        except Exception as e:
            logger.warning(f"Failed to fetch {self.display_name} models, using static list: {e}")
            return self.get_available_models()

        # An empty listing caches the static catalog as if it came from the vendor.
        if not models:
            models = self.get_available_models()
        self._model_cache.store(models)
        return list(models)

    @abstractmethod
    def _fetch_models(self) -> List[str]:
        """Query the vendor for its current model ids."""
        ...

    def _get_json(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """GET a JSON document, raising httpx.HTTPStatusError on non-2xx."""
        response = httpx.get(url, headers=headers, params=params, timeout=MODEL_LIST_TIMEOUT)
        response.raise_for_status()
        return response.json()

    # --- Client ---

    def _get_client(self) -> Any:
        """Construct the vendor client on first use and keep it."""
        if self._client is None:
            self.assert_available()
            self._client = self._create_client()
            logger.debug(f"Created {self.name} client (base_url={self._base_url!r})")
        return self._client

    @abstractmethod
    def _create_client(self) -> Any:
        ...

    def create_model(self, model_id: Optional[str] = None) -> ModelHandle:
        """Bind the vendor client to a model id. Does no network I/O."""
        return ModelHandle(provider=self.name, model_id=self.resolve_model(model_id), client=self._get_client())

    # --- Chat ---

    def _build_messages(self, messages: Sequence[ChatMessage], options: ChatOptions) -> List[ChatMessage]:
        """Prepend the system prompt, if any, as a system message."""
        built = list(messages)
        if options.system_prompt:
            built.insert(0, ChatMessage.system(options.system_prompt))
        return built

    def _prepare(
        self, messages: Sequence[ChatMessage], options: Optional[ChatOptions]
    ) -> Tuple[ModelHandle, List[ChatMessage], ChatOptions]:
        options = options or ChatOptions()
        self.assert_available()
        handle = self.create_model(options.model)
        if options.reasoning_effort is not None and not self.supports_reasoning_effort:
            logger.debug(f"{self.name} does not support reasoning effort; ignoring it")
        return handle, self._build_messages(messages, options), options

    def chat(self, messages: Sequence[ChatMessage], options: Optional[ChatOptions] = None) -> ChatResponse:
        """Generate a buffered completion.

        Raises:
            CredentialMissingError: Before any network call when no key is set.
            ProviderError: On vendor or network failures, after the SDK's retries.
        """
        handle, api_messages, options = self._prepare(messages, options)
        started = time.perf_counter()
        try:
            content, raw_usage = self._complete(handle, api_messages, options)
        except ProviderError:
            raise
        except Exception as e:
            raise self._translate_error(e) from e
        return ChatResponse(
            content=content or "",
            provider=self.name,
            model=handle.model_id,
            usage=normalize_usage(raw_usage),
            elapsed=time.perf_counter() - started,
        )

    def stream_chat(
        self, messages: Sequence[ChatMessage], options: Optional[ChatOptions] = None
    ) -> Iterator[str]:
        """Generate a streaming completion.

        Credentials are checked eagerly; the returned iterator yields text
        fragments in arrival order and raises ProviderError if the stream
        fails part-way.
        """
        handle, api_messages, options = self._prepare(messages, options)
        return self._iter_fragments(handle, api_messages, options)

    def _iter_fragments(
        self, handle: ModelHandle, messages: List[ChatMessage], options: ChatOptions
    ) -> Iterator[str]:
        try:
            for fragment in self._stream(handle, messages, options):
                if fragment:
                    yield fragment
        except ProviderError:
            raise
        except Exception as e:
            raise self._translate_error(e) from e

    @abstractmethod
    def _complete(
        self, handle: ModelHandle, messages: List[ChatMessage], options: ChatOptions
    ) -> Tuple[Optional[str], Any]:
        """Run one completion; return (text, raw vendor usage)."""
        ...

    @abstractmethod
    def _stream(self, handle: ModelHandle, messages: List[ChatMessage], options: ChatOptions) -> Iterator[str]:
        """Yield raw text deltas from one streaming call."""
        ...

    # --- Errors ---

    def _translate_error(self, error: Exception) -> ProviderError:
        """Translate vendor SDK exceptions to msg-ai provider errors."""
        if isinstance(error, ProviderError):
            return error
        error_str = str(error)
        error_type = type(error).__name__.lower()
        status_code = _status_code_of(error)

        if status_code is None:
            if isinstance(error, httpx.TransportError) or "connection" in error_type or "timeout" in error_type:
                return NetworkError(error_str, provider=self.name, original_error=error)
            return ProviderError(error_str, provider=self.name)

        kwargs: Any = {
            "provider": self.name,
            "status_code": status_code,
            "response_body": _response_body_of(error),
        }
        if status_code in (401, 403):
            return AuthenticationError(error_str, **kwargs)
        if status_code == 429:
            return RateLimitError(error_str, retry_after=_retry_after_of(error), **kwargs)
        if status_code in (400, 413) and any(m in error_str.lower() for m in _CONTEXT_LENGTH_MARKERS):
            return ContextLengthError(error_str, **kwargs)
        return APIError(error_str, **kwargs)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, available={self.is_available()})"


__all__ = ["BaseProvider", "normalize_usage"]
