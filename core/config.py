"""
Configuration management for the video generation service.

Centralizes all configuration including:
- Provider credentials and endpoints
- Polling cadence for in-flight provider jobs
- Provider fallback routing
- HTTP server settings
"""

import os
from dataclasses import dataclass, field
from typing import Optional


def _first_env(*names: str) -> str:
    """Return the first non-empty environment variable among names."""
    for name in names:
        value = os.getenv(name, "")
        if value:
            return value
    return ""


def _parse_fallbacks(raw: str) -> dict[str, str]:
    """Parse "luma:demo,heygen:demo" into {"luma": "demo", "heygen": "demo"}."""
    fallbacks: dict[str, str] = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        source, sep, target = pair.partition(":")
        if not sep or not source.strip() or not target.strip():
            raise ValueError(f"Invalid fallback entry '{pair}' (expected 'provider:fallback')")
        fallbacks[source.strip().lower()] = target.strip().lower()
    return fallbacks


@dataclass
class APIConfig:
    """API configuration for the external video generation providers."""

    # Luma Dream Machine
    luma_api_key: str = field(
        default_factory=lambda: _first_env("LUMA_API_KEY", "DREAM_MACHINE_API_KEY")
    )
    luma_api_base: str = field(
        default_factory=lambda: os.getenv(
            "LUMA_API_BASE", "https://api.lumalabs.ai/dream-machine/v1"
        )
    )
    luma_model: str = field(default_factory=lambda: os.getenv("LUMA_MODEL", "ray-2"))

    # Google Gemini (synchronous concept generation)
    gemini_api_key: str = field(
        default_factory=lambda: _first_env("GEMINI_API_KEY", "GOOGLE_API_KEY")
    )
    gemini_model: str = field(
        default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
    )

    # HeyGen avatar videos
    heygen_api_key: str = field(default_factory=lambda: os.getenv("HEYGEN_API_KEY", ""))
    heygen_api_base: str = field(
        default_factory=lambda: os.getenv("HEYGEN_API_BASE", "https://api.heygen.com")
    )
    heygen_avatar_id: str = field(
        default_factory=lambda: os.getenv("HEYGEN_AVATAR_ID", "Daisy-inskirt-20220818")
    )
    heygen_voice_id: str = field(
        default_factory=lambda: os.getenv("HEYGEN_VOICE_ID", "2d5b0e6cf36f460aa7fc47e3eee4ba54")
    )

    # Shared HTTP settings
    http_timeout: float = field(
        default_factory=lambda: float(os.getenv("PROVIDER_HTTP_TIMEOUT", "60"))
    )


@dataclass
class PollingConfig:
    """Cadence for checking in-flight provider jobs."""

    initial_delay: float = field(
        default_factory=lambda: float(os.getenv("VIDEO_POLL_INITIAL_DELAY", "2"))
    )
    interval: float = field(
        default_factory=lambda: float(os.getenv("VIDEO_POLL_INTERVAL", "5"))
    )
    max_attempts: int = field(
        default_factory=lambda: int(os.getenv("VIDEO_POLL_MAX_ATTEMPTS", "60"))
    )

    @property
    def max_wait_seconds(self) -> float:
        """Worst-case wall time before a job times out."""
        return self.initial_delay + self.interval * (self.max_attempts - 1)


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "5000")))
    cors_origins: list[str] = field(
        default_factory=lambda: [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ]
    )
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())


@dataclass
class Config:
    """Main configuration class."""

    api: APIConfig = field(default_factory=APIConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    # Preferred provider -> single fallback provider
    fallbacks: dict[str, str] = field(
        default_factory=lambda: _parse_fallbacks(os.getenv("VIDEO_PROVIDER_FALLBACKS", ""))
    )

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls()

    def validate(self, known_providers: Optional[list[str]] = None) -> list[str]:
        """
        Validate configuration and return list of issues.

        Args:
            known_providers: Registered provider names; when given, fallback
                targets are checked against them
        """
        issues = []

        if not (self.api.luma_api_key or self.api.gemini_api_key or self.api.heygen_api_key):
            issues.append("No provider credential configured (only demo mode is available)")

        if self.polling.max_attempts < 1:
            issues.append("VIDEO_POLL_MAX_ATTEMPTS must be at least 1")

        if self.polling.interval <= 0 or self.polling.initial_delay < 0:
            issues.append("Polling delays must be positive")

        for source, target in self.fallbacks.items():
            if source == target:
                issues.append(f"Provider '{source}' cannot fall back to itself")
            elif known_providers is not None and target not in known_providers:
                issues.append(f"Fallback target '{target}' for '{source}' is not a known provider")

        return issues

    def describe(self) -> dict:
        """Summarize configuration without exposing credential values."""
        return {
            "credentials": {
                "luma": bool(self.api.luma_api_key),
                "gemini": bool(self.api.gemini_api_key),
                "heygen": bool(self.api.heygen_api_key),
            },
            "polling": {
                "initial_delay": self.polling.initial_delay,
                "interval": self.polling.interval,
                "max_attempts": self.polling.max_attempts,
            },
            "fallbacks": dict(self.fallbacks),
        }


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reload_config():
    """Reload configuration from environment."""
    global _config
    _config = Config.from_env()
