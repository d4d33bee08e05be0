"""
Video Generation Core Components

Provides foundational infrastructure for the video generation service:
- Environment-driven configuration (providers, polling, server)
- Shared logging format
"""

from .config import Config, get_config, reload_config
from .logging import setup_logging

__all__ = ["Config", "get_config", "reload_config", "setup_logging"]
