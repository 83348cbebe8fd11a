"""msg-ai: one command line for many hosted LLM providers.

Sends a single prompt to OpenAI, Google Gemini, X.AI Grok, DeepSeek,
Kimi (Moonshot) or Anthropic and prints the answer, buffered or streamed.

Quickstart:
    from msg_ai import ChatMessage, ProviderRegistry

    registry = ProviderRegistry()
    provider = registry.get_first_available()
    response = provider.chat([ChatMessage.user("Hello")])
"""

from msg_ai._version import __version__
from msg_ai.providers import (
    BaseProvider,
    ChatMessage,
    ChatOptions,
    ChatResponse,
    ProviderError,
    ProviderRegistry,
)

__all__ = [
    "__version__",
    "BaseProvider",
    "ChatMessage",
    "ChatOptions",
    "ChatResponse",
    "ProviderError",
    "ProviderRegistry",
]
