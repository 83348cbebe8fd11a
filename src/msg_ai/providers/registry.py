"""Provider registry for msg-ai.

Holds one adapter per supported provider family, in a fixed order that
also decides which provider "first available" picks.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterator, List, Mapping, Optional, Sequence

from .anthropic import AnthropicProvider
from .base import BaseProvider
from .deepseek import DeepseekProvider
from .errors import ProviderNotFoundError
from .gemini import GeminiProvider
from .grok import GrokProvider
from .kimi import KimiProvider
from .openai_provider import OpenAIProvider
from .types import ProviderStatus

logger = logging.getLogger("msg_ai.providers")

BUILTIN_PROVIDERS: Sequence[type] = (
    OpenAIProvider,
    GeminiProvider,
    GrokProvider,
    DeepseekProvider,
    KimiProvider,
    AnthropicProvider,
)


class ProviderRegistry:
    """Name -> adapter mapping, built once per process.

    Credentials are read from ``environ`` (default: ``os.environ``) when
    each adapter is constructed here and never re-read.
    """

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        provider_classes: Sequence[type] = BUILTIN_PROVIDERS,
    ):
        self._providers: Dict[str, BaseProvider] = {}
        for provider_class in provider_classes:
            self.register(provider_class(environ=environ))

    def register(self, provider: BaseProvider) -> None:
        """Register a provider instance under its short name.

        Re-registering a name replaces the earlier adapter but keeps its
        position in the detection order.
        """
        if not isinstance(provider, BaseProvider):
            raise TypeError(f"{provider!r} must be a BaseProvider instance")
        self._providers[provider.name] = provider
        logger.debug(f"Registered provider: {provider.name}")

    def get(self, name: str) -> BaseProvider:
        """Get a provider by its exact short name.

        Raises:
            ProviderNotFoundError: If the name is not registered.
        """
        provider = self._providers.get(name)
        if provider is None:
            raise ProviderNotFoundError(name, self.list_all_providers())
        return provider

    def list_all_providers(self) -> List[str]:
        """All registered names, in registration order."""
        return list(self._providers.keys())

    def list_available_providers(self) -> List[ProviderStatus]:
        """Status of every provider with its static catalog (no network I/O)."""
        return [
            ProviderStatus(
                name=provider.name,
                display_name=provider.display_name,
                available=provider.is_available(),
                models=provider.get_available_models(),
                env_key=provider.env_key,
            )
            for provider in self._providers.values()
        ]

    def get_first_available(self) -> Optional[BaseProvider]:
        """The earliest-registered provider with a credential, or None."""
        for provider in self._providers.values():
            if provider.is_available():
                logger.info(f"Auto-selected provider '{provider.name}'")
                return provider
        return None

    def fetch_all_models(self) -> Dict[str, List[str]]:
        """Live model lists for every provider, fetched concurrently.

        Unavailable providers report their static catalog without a
        request. Each fetch degrades to its own static list on failure,
        so one slow or broken provider never affects the others.
        """
        providers = list(self._providers.values())
        if not providers:
            return {}
        with ThreadPoolExecutor(max_workers=len(providers)) as pool:
            futures = {provider.name: pool.submit(provider.fetch_available_models) for provider in providers}
            return {name: future.result() for name, future in futures.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def __iter__(self) -> Iterator[BaseProvider]:
        return iter(list(self._providers.values()))

    def __len__(self) -> int:
        return len(self._providers)

    def __repr__(self) -> str:
        return f"ProviderRegistry(providers={self.list_all_providers()!r})"


__all__ = ["ProviderRegistry", "BUILTIN_PROVIDERS"]
