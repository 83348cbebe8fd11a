"""Provider-agnostic data types for msg-ai's provider layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class MessageRole(str, Enum):
    """Standard message roles across all providers."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ReasoningEffort(str, Enum):
    """Inference depth for reasoning models (OpenAI family only)."""

    MINIMAL = "minimal"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class ChatMessage:
    """Provider-agnostic chat message.

    Provider implementations are responsible for translating to their
    native message types.
    """

    role: MessageRole
    content: str

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls(role=MessageRole.SYSTEM, content=content)


@dataclass(frozen=True)
class ModelInfo:
    """One entry of a provider's static model catalog."""

    id: str
    name: str
    max_tokens: Optional[int] = None


@dataclass(frozen=True)
class ProviderConfig:
    """Static description of a provider, compiled into each adapter.

    Attributes:
        name: Unique short identifier (e.g., "openai").
        display_name: Human-readable label.
        env_key: Primary credential environment variable.
        alternative_env_keys: Fallback credential variables, tried in order.
        base_url: Default API endpoint. None means the SDK default.
        default_model: Model id used when the caller specifies none.
        models: Ordered static catalog.
        max_retries: Retries on transient failures, managed by the vendor SDK.
        timeout: Request timeout in seconds.
    """

    name: str
    display_name: str
    env_key: str
    default_model: str
    models: Tuple[ModelInfo, ...]
    alternative_env_keys: Tuple[str, ...] = ()
    base_url: Optional[str] = None
    max_retries: int = 3
    timeout: float = 120.0

    def __post_init__(self) -> None:
        if self.default_model not in self.model_ids:
            raise ValueError(
                f"Default model {self.default_model!r} is not in the {self.name} catalog"
            )

    @property
    def model_ids(self) -> List[str]:
        return [m.id for m in self.models]

    @property
    def base_url_env_key(self) -> str:
        """Environment variable that overrides the base URL (OPENAI_API_KEY -> OPENAI_BASE_URL)."""
        return f"{self.env_key.replace('_API_KEY', '')}_BASE_URL"


@dataclass
class ChatOptions:
    """Per-call options supplied by the caller.

    ``temperature`` and ``stream`` defaults belong to the calling layer;
    the adapters forward only what is set here.
    """

    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    system_prompt: Optional[str] = None
    stream: bool = True
    reasoning_effort: Optional[ReasoningEffort] = None
    show_timing: bool = False


@dataclass(frozen=True)
class Usage:
    """Token usage reported by a vendor."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int

    @classmethod
    def from_counts(
        cls, prompt_tokens: int, completion_tokens: int, total_tokens: Optional[int] = None
    ) -> "Usage":
        if total_tokens is None:
            total_tokens = prompt_tokens + completion_tokens
        return cls(prompt_tokens, completion_tokens, total_tokens)


@dataclass(frozen=True)
class ChatResponse:
    """Standardized result returned by ``chat()``.

    Attributes:
        content: The generated text.
        provider: Short name of the provider that answered.
        model: Model id used for the request.
        usage: Token counts, or None when the vendor reports none.
        elapsed: Wall time of the call in seconds.
    """

    content: str
    provider: str
    model: str
    usage: Optional[Usage] = None
    elapsed: Optional[float] = None


@dataclass(frozen=True)
class ModelHandle:
    """A vendor client bound to one model id."""

    provider: str
    model_id: str
    client: Any = field(repr=False, compare=False)


@dataclass(frozen=True)
class ProviderStatus:
    """Listing entry returned by ``ProviderRegistry.list_available_providers()``."""

    name: str
    display_name: str
    available: bool
    models: List[str]
    env_key: str = ""


__all__ = [
    "MessageRole",
    "ReasoningEffort",
    "ChatMessage",
    "ModelInfo",
    "ProviderConfig",
    "ChatOptions",
    "Usage",
    "ChatResponse",
    "ModelHandle",
    "ProviderStatus",
]
