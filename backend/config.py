"""
Service Configuration

Reads the environment (optionally seeded from a .env file) once into an
immutable Settings object. Everything else receives Settings explicitly.
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# ============================================
# Constants
# ============================================

CDN_BASE_URL = "https://cdn.7tv.app/emote"
DEFAULT_API_BASE_URL = "https://7tv.io/v3"

ENVIRONMENTS = ("development", "production", "test")


def parse_set_ids(raw: str) -> List[str]:
    """Split a comma-separated id list, dropping blanks."""
    return [part.strip() for part in raw.split(",") if part.strip()]


def _parse_number(env: Mapping[str, str], name: str, default: str, cast=int):
    value = env.get(name, default).strip() or default
    try:
        return cast(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")


@dataclass(frozen=True)
class Settings:
    """Parsed service configuration."""
    emote_set_ids: Tuple[str, ...] = ()
    port: int = 3000
    cache_ttl: float = 3600.0            # Name index TTL (seconds, 0 = no expiry)
    cache_check_period: float = 120.0    # Expired-entry sweep interval (0 = off)
    upstream_timeout: float = 10.0       # Per-request upstream timeout
    api_base_url: str = DEFAULT_API_BASE_URL
    cdn_base_url: str = field(default=CDN_BASE_URL)
    environment: str = "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from an environment mapping.

        Args:
            env: Mapping to read from, defaults to os.environ

        Raises:
            ValueError: on malformed numbers or an unknown environment name
        """
        if env is None:
            env = os.environ

        environment = (env.get("ENVIRONMENT") or env.get("NODE_ENV") or "development").strip().lower()
        if environment not in ENVIRONMENTS:
            raise ValueError(
                f"ENVIRONMENT must be one of {', '.join(ENVIRONMENTS)}, got {environment!r}"
            )

        port = _parse_number(env, "PORT", "3000")
        cache_ttl = _parse_number(env, "CACHE_TTL", "3600", float)
        check_period = _parse_number(env, "CACHE_CHECK_PERIOD", "120", float)
        timeout = _parse_number(env, "UPSTREAM_TIMEOUT", "10", float)

        if cache_ttl < 0:
            raise ValueError("CACHE_TTL must not be negative")
        if timeout <= 0:
            raise ValueError("UPSTREAM_TIMEOUT must be positive")

        return cls(
            emote_set_ids=tuple(parse_set_ids(env.get("EMOTE_SET_IDS", ""))),
            port=port,
            cache_ttl=cache_ttl,
            cache_check_period=check_period,
            upstream_timeout=timeout,
            api_base_url=(env.get("SEVENTV_API_BASE") or DEFAULT_API_BASE_URL).rstrip("/"),
            environment=environment,
        )


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """Load .env (without overriding real environment values) and parse."""
    env_path = env_file or Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=False)
        logger.info(f"[Config] Loaded environment from {env_path}")
    settings = Settings.from_env()
    if not settings.emote_set_ids:
        logger.warning("[Config] EMOTE_SET_IDS is empty; no emotes will be served")
    return settings
