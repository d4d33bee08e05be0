"""
Provider registry.

Maps a provider name to its adapter instance. Adding a provider means
registering one more adapter here; the orchestrator never branches on names.
"""

import logging
from typing import Iterator, Optional

from core.config import Config, get_config

from ..errors import UnknownProviderError
from .base import VideoProvider
from .demo import DemoProvider
from .gemini import GeminiProvider
from .heygen import HeyGenProvider
from .luma import LumaProvider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Name -> adapter lookup."""

    def __init__(self, providers: Optional[list[VideoProvider]] = None):
        self._providers: dict[str, VideoProvider] = {}
        for provider in providers or []:
            self.register(provider)

    def register(self, provider: VideoProvider, replace: bool = False):
        """Register an adapter under its name."""
        if provider.name in self._providers and not replace:
            raise ValueError(f"Provider '{provider.name}' is already registered")
        self._providers[provider.name] = provider
        logger.debug(
            f"Registered provider {provider.name} (configured={provider.is_configured})"
        )

    def get(self, name: str) -> VideoProvider:
        """Get the adapter for a provider name."""
        try:
            return self._providers[name]
        except KeyError:
            raise UnknownProviderError(
                f"Unknown video provider: {name}",
                provider=name,
            ) from None

    def __contains__(self, name: str) -> bool:
        return name in self._providers

    def __iter__(self) -> Iterator[VideoProvider]:
        return iter(self._providers.values())

    def names(self) -> list[str]:
        return list(self._providers)

    def availability(self) -> dict[str, bool]:
        """Which providers can accept work right now."""
        return {name: p.is_configured for name, p in self._providers.items()}

    def any_credentialed(self) -> bool:
        """True when at least one external (credentialed) provider is usable."""
        return any(p.requires_credential and p.is_configured for p in self._providers.values())

    async def close(self):
        """Close every adapter's HTTP resources."""
        for provider in self._providers.values():
            try:
                await provider.close()
            except Exception as e:
                logger.warning(f"Failed to close provider {provider.name}: {e}")


def build_registry(config: Optional[Config] = None) -> ProviderRegistry:
    """Create a registry with the built-in providers wired from config."""
    config = config or get_config()
    api = config.api

    return ProviderRegistry([
        LumaProvider(
            api_key=api.luma_api_key,
            api_base=api.luma_api_base,
            model=api.luma_model,
            timeout=api.http_timeout,
        ),
        GeminiProvider(
            api_key=api.gemini_api_key,
            model=api.gemini_model,
            timeout=api.http_timeout,
        ),
        HeyGenProvider(
            api_key=api.heygen_api_key,
            api_base=api.heygen_api_base,
            avatar_id=api.heygen_avatar_id,
            voice_id=api.heygen_voice_id,
            timeout=api.http_timeout,
        ),
        DemoProvider(),
    ])
