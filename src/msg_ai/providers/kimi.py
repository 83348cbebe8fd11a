"""Kimi (Moonshot) provider for msg-ai (OpenAI-compatible API)."""

from __future__ import annotations

from .openai_compatible import OpenAICompatibleProvider
from .types import ModelInfo, ProviderConfig

KIMI_CONFIG = ProviderConfig(
    name="kimi",
    display_name="Kimi (Moonshot)",
    env_key="KIMI_API_KEY",
    alternative_env_keys=("MOONSHOT_API_KEY",),
    base_url="https://api.moonshot.ai/v1",
    default_model="moonshot-v1-8k",
    models=(
        ModelInfo("moonshot-v1-8k", "Moonshot v1 8K", 8192),
        ModelInfo("moonshot-v1-32k", "Moonshot v1 32K", 32768),
        ModelInfo("moonshot-v1-128k", "Moonshot v1 128K", 131072),
    ),
)


class KimiProvider(OpenAICompatibleProvider):
    """Provider for Moonshot's Kimi models.

    Reads KIMI_API_KEY, falling back to MOONSHOT_API_KEY.
    """

    CONFIG = KIMI_CONFIG


__all__ = ["KimiProvider", "KIMI_CONFIG"]
