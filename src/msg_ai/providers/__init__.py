"""msg-ai provider abstraction layer.

Exposes all built-in providers, the base class, data types, the error
hierarchy, and the registry.

Usage:
    from msg_ai.providers import ChatMessage, ProviderRegistry

    registry = ProviderRegistry()
    provider = registry.get("openai")
    # or
    provider = registry.get_first_available()

    for fragment in provider.stream_chat([ChatMessage.user("Hello")]):
        print(fragment, end="")
"""

from msg_ai.providers.types import (
    ChatMessage,
    ChatOptions,
    ChatResponse,
    MessageRole,
    ModelHandle,
    ModelInfo,
    ProviderConfig,
    ProviderStatus,
    ReasoningEffort,
    Usage,
)
from msg_ai.providers.errors import (
    APIError,
    AuthenticationError,
    ContextLengthError,
    CredentialMissingError,
    ModelNotFoundError,
    NetworkError,
    ProviderError,
    ProviderNotFoundError,
    RateLimitError,
)
from msg_ai.providers.base import BaseProvider
from msg_ai.providers.openai_compatible import OpenAICompatibleProvider
from msg_ai.providers.openai_provider import OpenAIProvider
from msg_ai.providers.gemini import GeminiProvider
from msg_ai.providers.grok import GrokProvider
from msg_ai.providers.deepseek import DeepseekProvider
from msg_ai.providers.kimi import KimiProvider
from msg_ai.providers.anthropic import AnthropicProvider
from msg_ai.providers.registry import ProviderRegistry

__all__ = [
    # Base
    "BaseProvider",
    "OpenAICompatibleProvider",
    "ProviderConfig",
    "ModelInfo",
    "ChatMessage",
    "MessageRole",
    "ChatOptions",
    "ReasoningEffort",
    "ChatResponse",
    "Usage",
    "ModelHandle",
    "ProviderStatus",
    # Providers
    "OpenAIProvider",
    "GeminiProvider",
    "GrokProvider",
    "DeepseekProvider",
    "KimiProvider",
    "AnthropicProvider",
    # Registry
    "ProviderRegistry",
    # Errors
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
