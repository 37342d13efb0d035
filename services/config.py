"""
Client configuration.

This module reads the client settings from environment variables, with local
development support using .env files and python-dotenv.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from utils.logging import setup_logger

logger = setup_logger(__name__)

# Load .env file for local development
load_dotenv()

DEFAULT_API_URL = "http://localhost:5000"
DEFAULT_TIMEOUT_SECS = 10.0
DEFAULT_TOKEN_FILE = "~/.shop-ledger/storage.json"


@lru_cache(maxsize=128)
def get_parameter(parameter_name: str) -> str | None:
    """
    Get a setting from the environment with caching.

    Args:
        parameter_name: Setting name such as ``api-url``; looked up as
            ``SHOP_API_URL``

    Returns:
        Setting value or None if not set
    """
    env_var = "SHOP_" + parameter_name.replace("/", "_").replace("-", "_").upper()
    value = os.getenv(env_var)
    if value:
        logger.debug(f"Using environment variable {env_var}")
    return value or None


class ShopConfig:
    """
    Configuration class that loads settings from the environment.

    Provides typed accessors with defaults for every setting the client uses.
    """

    def __init__(self):
        self._config_cache = {}

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Configuration key
            default: Default value if not found

        Returns:
            Configuration value or default
        """
        if key in self._config_cache:
            return self._config_cache[key]

        value = get_parameter(key)
        if value is None:
            value = default

        self._config_cache[key] = value
        return value

    @property
    def api_url(self) -> str:
        # REACT_APP_API_URL is the name the browser client used
        url = self.get("api-url") or os.getenv("REACT_APP_API_URL") or DEFAULT_API_URL
        return url.rstrip("/")

    @property
    def request_timeout(self) -> float:
        raw = self.get("request-timeout", DEFAULT_TIMEOUT_SECS)
        try:
            timeout = float(raw)
        except (TypeError, ValueError):
            logger.warning(f"Invalid request timeout {raw!r}, using default")
            return DEFAULT_TIMEOUT_SECS
        return timeout if timeout > 0 else DEFAULT_TIMEOUT_SECS

    @property
    def token_file(self) -> Path:
        return Path(self.get("token-file", DEFAULT_TOKEN_FILE)).expanduser()

    @property
    def locale(self) -> str:
        return self.get("locale", "en").lower()

    @property
    def log_level(self) -> str:
        return self.get("log-level", "INFO").upper()

    @property
    def structured_logging(self) -> bool:
        return self.get("log-format", "json").lower() != "text"

    @property
    def page_size(self) -> int:
        try:
            return max(1, int(self.get("page-size", 10)))
        except (TypeError, ValueError):
            return 10


# Global config instance
config = ShopConfig()


def clear_cache():
    """Clear the settings cache. Useful for testing or config updates."""
    get_parameter.cache_clear()
    config._config_cache.clear()
    logger.info("Configuration cache cleared")
