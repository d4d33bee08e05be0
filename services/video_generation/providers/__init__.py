"""
Video provider adapters.

Usage:
    from services.video_generation.providers import build_registry

    registry = build_registry()
    handle = await registry.get("luma").submit(prompt, 5)
"""

from .base import VideoProvider, SynchronousProvider
from .demo import DemoProvider
from .gemini import GeminiProvider
from .heygen import HeyGenProvider
from .luma import LumaProvider
from .registry import ProviderRegistry, build_registry

__all__ = [
    "VideoProvider",
    "SynchronousProvider",
    "DemoProvider",
    "GeminiProvider",
    "HeyGenProvider",
    "LumaProvider",
    "ProviderRegistry",
    "build_registry",
]
