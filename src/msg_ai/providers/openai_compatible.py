"""Shared provider for vendors speaking the OpenAI chat-completions wire format.

OpenAI, X.AI Grok, DeepSeek and Kimi all serve ``/chat/completions`` and
``/models`` in the OpenAI shape, so they share one client and one request
builder here and differ only in their static config.

Requires: pip install openai
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from .base import BaseProvider
from .types import ChatMessage, ChatOptions, ModelHandle

OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"


class OpenAICompatibleProvider(BaseProvider):
    """Provider for any OpenAI-compatible API, configured by ``CONFIG``."""

    max_tokens_param = "max_tokens"

    def _create_client(self) -> Any:
        try:
            import openai
        except ImportError:
            raise ImportError(
                f"{self.display_name} provider requires the 'openai' package. "
                "Install with: pip install openai"
            )
        client_kwargs: Dict[str, Any] = {
            "api_key": self.api_key,
            "max_retries": self.config.max_retries,
            "timeout": self.config.timeout,
        }
        if self.base_url:
            client_kwargs["base_url"] = self.base_url
        return openai.OpenAI(**client_kwargs)

    def _format_messages(self, messages: Sequence[ChatMessage]) -> List[Dict[str, str]]:
        """Convert ChatMessages to OpenAI's format (system stays inline)."""
        return [{"role": msg.role.value, "content": msg.content} for msg in messages]

    def _extra_params(self, options: ChatOptions) -> Dict[str, Any]:
        """Vendor-specific request fields. None by default."""
        return {}

    def _create_kwargs(
        self, handle: ModelHandle, messages: List[ChatMessage], options: ChatOptions
    ) -> Dict[str, Any]:
        create_kwargs: Dict[str, Any] = {
            "model": handle.model_id,
            "messages": self._format_messages(messages),
        }
        if options.temperature is not None:
            create_kwargs["temperature"] = options.temperature
        if options.max_tokens is not None:
            create_kwargs[self.max_tokens_param] = options.max_tokens
        create_kwargs.update(self._extra_params(options))
        return create_kwargs

    def _complete(
        self, handle: ModelHandle, messages: List[ChatMessage], options: ChatOptions
    ) -> Tuple[Optional[str], Any]:
        response = handle.client.chat.completions.create(**self._create_kwargs(handle, messages, options))
        content = response.choices[0].message.content if response.choices else None
        return content, response.usage

    def _stream(self, handle: ModelHandle, messages: List[ChatMessage], options: ChatOptions) -> Iterator[str]:
        create_kwargs = self._create_kwargs(handle, messages, options)
        create_kwargs["stream"] = True
        response = handle.client.chat.completions.create(**create_kwargs)
        for chunk in response:
            if chunk.choices and chunk.choices[0].delta.content:
                yield chunk.choices[0].delta.content

    # --- Live model listing ---

    def _models_url(self) -> str:
        return f"{(self.base_url or OPENAI_DEFAULT_BASE_URL).rstrip('/')}/models"

    def _keep_model(self, model_id: str) -> bool:
        return True

    def _fetch_models(self) -> List[str]:
        payload = self._get_json(
            self._models_url(),
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        entries = [entry for entry in payload["data"] if self._keep_model(entry["id"])]
        entries.sort(key=lambda entry: entry.get("created") or 0, reverse=True)
        return [entry["id"] for entry in entries]


__all__ = ["OpenAICompatibleProvider", "OPENAI_DEFAULT_BASE_URL"]
