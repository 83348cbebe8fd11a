"""OpenAI provider for msg-ai.

Requires: pip install openai

Note: This file is named openai_provider.py (not openai.py) to avoid
shadowing the openai package import within this package.
"""

from __future__ import annotations

from typing import Any, Dict

from .openai_compatible import OpenAICompatibleProvider
from .types import ChatOptions, ModelInfo, ProviderConfig

OPENAI_CONFIG = ProviderConfig(
    name="openai",
    display_name="OpenAI",
    env_key="OPENAI_API_KEY",
    default_model="gpt-4o-mini",
    models=(
        ModelInfo("gpt-5", "GPT-5", 128000),
        ModelInfo("gpt-5-mini", "GPT-5 Mini", 128000),
        ModelInfo("gpt-5-nano", "GPT-5 Nano", 128000),
        ModelInfo("gpt-4o", "GPT-4 Optimized", 16384),
        ModelInfo("gpt-4o-mini", "GPT-4 Optimized Mini", 16384),
        ModelInfo("gpt-4-turbo", "GPT-4 Turbo", 128000),
        ModelInfo("gpt-4", "GPT-4", 8192),
        ModelInfo("gpt-3.5-turbo", "GPT-3.5 Turbo", 16384),
    ),
)

CHAT_MODEL_MARKERS = ("gpt", "o1", "o3", "o4", "chatgpt")


class OpenAIProvider(OpenAICompatibleProvider):
    """Provider for OpenAI models.

    The only provider that forwards ``reasoning_effort`` (GPT-5 and
    o-series models). Output length is sent as ``max_completion_tokens``,
    which those models require in place of ``max_tokens``.

    Configuration:
        - api_key: Set via constructor or OPENAI_API_KEY env var.
        - base_url: Defaults to OpenAI's API. Override with OPENAI_BASE_URL.
    """

    CONFIG = OPENAI_CONFIG
    supports_reasoning_effort = True
    max_tokens_param = "max_completion_tokens"

    def _extra_params(self, options: ChatOptions) -> Dict[str, Any]:
        if options.reasoning_effort is None:
            return {}
        return {"reasoning_effort": options.reasoning_effort.value}

    def _keep_model(self, model_id: str) -> bool:
        return any(marker in model_id for marker in CHAT_MODEL_MARKERS)


__all__ = ["OpenAIProvider", "OPENAI_CONFIG"]
