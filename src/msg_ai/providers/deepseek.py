"""DeepSeek provider for msg-ai (OpenAI-compatible API)."""

from __future__ import annotations

from .openai_compatible import OpenAICompatibleProvider
from .types import ModelInfo, ProviderConfig

DEEPSEEK_CONFIG = ProviderConfig(
    name="deepseek",
    display_name="DeepSeek",
    env_key="DEEPSEEK_API_KEY",
    base_url="https://api.deepseek.com",
    default_model="deepseek-chat",
    models=(
        ModelInfo("deepseek-chat", "DeepSeek Chat", 65536),
        ModelInfo("deepseek-reasoner", "DeepSeek Reasoner", 65536),
    ),
)


class DeepseekProvider(OpenAICompatibleProvider):
    CONFIG = DEEPSEEK_CONFIG


__all__ = ["DeepseekProvider", "DEEPSEEK_CONFIG"]
