"""Anthropic Claude provider for msg-ai.

Requires: pip install anthropic
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from .base import BaseProvider
from .errors import ModelNotFoundError
from .types import ChatMessage, ChatOptions, MessageRole, ModelHandle, ModelInfo, ProviderConfig

ANTHROPIC_CONFIG = ProviderConfig(
    name="anthropic",
    display_name="Anthropic (Claude)",
    env_key="ANTHROPIC_API_KEY",
    alternative_env_keys=("CLAUDE_API_KEY",),
    default_model="claude-3-5-sonnet-20241022",
    models=(
        ModelInfo("claude-3-5-sonnet-20241022", "Claude 3.5 Sonnet (Oct 2024)", 8192),
        ModelInfo("claude-3-5-haiku-20241022", "Claude 3.5 Haiku (Oct 2024)", 8192),
        ModelInfo("claude-3-opus-20240229", "Claude 3 Opus", 4096),
        ModelInfo("claude-3-sonnet-20240229", "Claude 3 Sonnet", 4096),
        ModelInfo("claude-3-haiku-20240307", "Claude 3 Haiku", 4096),
    ),
)

# Anthropic has no model-listing endpoint we rely on; this is the fuller
# list served by fetch_available_models().
KNOWN_MODELS = [
    "claude-3-5-sonnet-20241022",
    "claude-3-5-haiku-20241022",
    "claude-3-opus-20240229",
    "claude-3-opus-latest",
    "claude-3-sonnet-20240229",
    "claude-3-haiku-20240307",
    "claude-2.1",
    "claude-2.0",
    "claude-instant-1.2",
]

DEFAULT_MAX_TOKENS = 4096


class AnthropicProvider(BaseProvider):
    """Provider for Anthropic Claude models.

    Requires: pip install anthropic

    Configuration:
        - api_key: ANTHROPIC_API_KEY env var, falling back to CLAUDE_API_KEY.
        - base_url: Defaults to Anthropic's API. Override with ANTHROPIC_BASE_URL.
    """

    CONFIG = ANTHROPIC_CONFIG

    def _create_client(self) -> Any:
        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "Anthropic provider requires the 'anthropic' package. "
                "Install with: pip install anthropic"
            )
        client_kwargs: Dict[str, Any] = {
            "api_key": self.api_key,
            "max_retries": self.config.max_retries,
            "timeout": self.config.timeout,
        }
        if self.base_url:
            client_kwargs["base_url"] = self.base_url
        return anthropic.Anthropic(**client_kwargs)

    def _format_messages(self, messages: Sequence[ChatMessage]):
        """Convert ChatMessages to Anthropic's format.

        Anthropic uses a separate 'system' parameter rather than a system message
        in the messages list, so we extract it here.
        """
        system_content = None
        api_messages = []
        for msg in messages:
            if msg.role == MessageRole.SYSTEM:
                system_content = msg.content
            else:
                api_messages.append({
                    "role": msg.role.value,
                    "content": msg.content,
                })
        return system_content, api_messages

    def _resolve_max_tokens(self, handle: ModelHandle, options: ChatOptions) -> int:
        """Anthropic requires an output bound; default to the model's catalog limit."""
        if options.max_tokens is not None:
            return options.max_tokens
        try:
            return self.get_model_info(handle.model_id).max_tokens or DEFAULT_MAX_TOKENS
        except ModelNotFoundError:
            return DEFAULT_MAX_TOKENS

    def _create_kwargs(
        self, handle: ModelHandle, messages: List[ChatMessage], options: ChatOptions
    ) -> Dict[str, Any]:
        system_content, api_messages = self._format_messages(messages)
        create_kwargs: Dict[str, Any] = {
            "model": handle.model_id,
            "messages": api_messages,
            "max_tokens": self._resolve_max_tokens(handle, options),
        }
        if options.temperature is not None:
            create_kwargs["temperature"] = options.temperature
        if system_content:
            create_kwargs["system"] = system_content
        return create_kwargs

    def _complete(
        self, handle: ModelHandle, messages: List[ChatMessage], options: ChatOptions
    ) -> Tuple[Optional[str], Any]:
        response = handle.client.messages.create(**self._create_kwargs(handle, messages, options))
        content = "".join(
            block.text for block in response.content if getattr(block, "type", "text") == "text"
        )
        return content, response.usage

    def _stream(self, handle: ModelHandle, messages: List[ChatMessage], options: ChatOptions) -> Iterator[str]:
        with handle.client.messages.stream(**self._create_kwargs(handle, messages, options)) as stream:
            for text in stream.text_stream:
                yield text

    def _fetch_models(self) -> List[str]:
        return list(KNOWN_MODELS)


__all__ = ["AnthropicProvider", "ANTHROPIC_CONFIG"]
