"""Google Gemini provider for msg-ai.

Requires: pip install google-genai
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from .base import BaseProvider
from .types import ChatMessage, ChatOptions, MessageRole, ModelHandle, ModelInfo, ProviderConfig

GEMINI_CONFIG = ProviderConfig(
    name="gemini",
    display_name="Google Gemini",
    env_key="GEMINI_API_KEY",
    alternative_env_keys=("GOOGLE_API_KEY",),
    default_model="gemini-2.5-pro",
    models=(
        ModelInfo("gemini-2.5-pro", "Gemini 2.5 Pro", 1048576),
        ModelInfo("gemini-2.5-flash", "Gemini 2.5 Flash", 1048576),
        ModelInfo("gemini-2.5-flash-lite", "Gemini 2.5 Flash-Lite", 1048576),
    ),
)

GEMINI_DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"

# google-genai retries with delay = initial_delay * exp_base ** attempt
RETRY_INITIAL_DELAY = 1.0
RETRY_EXP_BASE = 2.0

ROLE_TRANSFORMS = {
    MessageRole.USER: "user",
    MessageRole.ASSISTANT: "model",
}


class GeminiProvider(BaseProvider):
    """Provider for Google's Gemini models via the Gemini Developer API.

    Configuration:
        - api_key: GEMINI_API_KEY env var, falling back to GOOGLE_API_KEY.
        - base_url: Override with GEMINI_BASE_URL.
    """

    CONFIG = GEMINI_CONFIG

    def _create_client(self) -> Any:
        try:
            from google import genai
            from google.genai import types as genai_types
        except ImportError:
            raise ImportError(
                "Gemini provider requires the 'google-genai' package. "
                "Install with: pip install google-genai"
            )
        return genai.Client(
            api_key=self.api_key,
            http_options=genai_types.HttpOptions(
                base_url=self.base_url,
                timeout=int(self.config.timeout * 1000),
                retry_options=genai_types.HttpRetryOptions(
                    attempts=self.config.max_retries + 1,
                    initial_delay=RETRY_INITIAL_DELAY,
                    exp_base=RETRY_EXP_BASE,
                ),
            ),
        )

    def _format_messages(self, messages: Sequence[ChatMessage]) -> Tuple[Optional[str], List[Dict[str, Any]]]:
        """Split out system messages and convert the rest to Gemini contents."""
        system_parts = []
        contents = []
        for msg in messages:
            if msg.role == MessageRole.SYSTEM:
                system_parts.append(msg.content)
            else:
                contents.append({"role": ROLE_TRANSFORMS[msg.role], "parts": [{"text": msg.content}]})
        system_instruction = "\n\n".join(system_parts) if system_parts else None
        return system_instruction, contents

    def _request(
        self, handle: ModelHandle, messages: List[ChatMessage], options: ChatOptions
    ) -> Dict[str, Any]:
        system_instruction, contents = self._format_messages(messages)
        config: Dict[str, Any] = {}
        if options.temperature is not None:
            config["temperature"] = options.temperature
        if options.max_tokens is not None:
            config["max_output_tokens"] = options.max_tokens
        if system_instruction:
            config["system_instruction"] = system_instruction
        return {"model": handle.model_id, "contents": contents, "config": config or None}

    def _complete(
        self, handle: ModelHandle, messages: List[ChatMessage], options: ChatOptions
    ) -> Tuple[Optional[str], Any]:
        response = handle.client.models.generate_content(**self._request(handle, messages, options))
        return response.text, response.usage_metadata

    def _stream(self, handle: ModelHandle, messages: List[ChatMessage], options: ChatOptions) -> Iterator[str]:
        for chunk in handle.client.models.generate_content_stream(**self._request(handle, messages, options)):
            if chunk.text:
                yield chunk.text

    def _fetch_models(self) -> List[str]:
        base = (self.base_url or GEMINI_DEFAULT_BASE_URL).rstrip("/")
        payload = self._get_json(
            f"{base}/v1beta/models",
            headers={"x-goog-api-key": self.api_key or ""},
            params={"pageSize": 1000},
        )
        models = []
        for entry in payload.get("models", []):
            if "generateContent" not in (entry.get("supportedGenerationMethods") or []):
                continue
            name = entry["name"].replace("models/", "")
            if "gemini" in name:
                models.append(name)
        return models


__all__ = ["GeminiProvider", "GEMINI_CONFIG"]
