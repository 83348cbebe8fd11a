"""X.AI Grok provider for msg-ai (OpenAI-compatible API)."""

from __future__ import annotations

from .openai_compatible import OpenAICompatibleProvider
from .types import ModelInfo, ProviderConfig

GROK_CONFIG = ProviderConfig(
    name="grok",
    display_name="X.AI Grok",
    env_key="XAI_API_KEY",
    base_url="https://api.x.ai/v1",
    default_model="grok-3",
    models=(
        ModelInfo("grok-3", "Grok 3", 131072),
        ModelInfo("grok-3-fast", "Grok 3 Fast", 131072),
        ModelInfo("grok-3-mini", "Grok 3 Mini", 131072),
        ModelInfo("grok-3-mini-fast", "Grok 3 Mini Fast", 131072),
        ModelInfo("grok-4-0709", "Grok 4", 131072),
        ModelInfo("grok-2-1212", "Grok 2", 131072),
        ModelInfo("grok-2-vision-1212", "Grok 2 Vision", 32768),
    ),
)


class GrokProvider(OpenAICompatibleProvider):
    """Provider for X.AI's Grok models.

    Configuration:
        - api_key: XAI_API_KEY env var.
        - base_url: https://api.x.ai/v1, override with XAI_BASE_URL.
    """

    CONFIG = GROK_CONFIG


__all__ = ["GrokProvider", "GROK_CONFIG"]
