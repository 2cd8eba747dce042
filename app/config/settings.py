"""Member admin configuration using environment variables"""
import logging.config
from dataclasses import dataclass
from typing import Tuple

from decouple import config as env

from core.error.exceptions import ConfigurationException

# Page sizes offered by the member list
PAGE_SIZES: Tuple[int, ...] = (10, 20, 50, 100)

# Backend settings
API_URL = env("BANK_ADAPTER_API_URL", default="http://localhost:3000/api")
API_TIMEOUT = env("BANK_ADAPTER_TIMEOUT", default=30, cast=float)

# Credential persistence
REDIS_URL = env("REDIS_URL", default="redis://localhost:6379/0")
TOKEN_STORAGE_KEY = env("BANK_ADAPTER_TOKEN_KEY", default="bank-adapter-token")

# Member list behaviour
DEFAULT_PAGE_SIZE = env("MEMBER_LIST_PAGE_SIZE", default=10, cast=int)
SEARCH_DEBOUNCE = env("MEMBER_SEARCH_DEBOUNCE", default=0.5, cast=float)

# Console diagnostics; operator-facing outcomes are printed by the notifier
LOG_LEVEL = env("APP_LOG_LEVEL", default="WARNING")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "[%(asctime)s] %(levelname)s [%(name)s] %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "loggers": {
        # Core application logging
        "core": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "services": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "dashboard": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        # Third party libraries
        "urllib3": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
    },
}


def configure_logging() -> None:
    """Apply the LOGGING dict config"""
    logging.config.dictConfig(LOGGING)


@dataclass
class Settings:
    """Runtime settings for the member admin client"""
    api_url: str
    api_timeout: float
    redis_url: str
    token_storage_key: str
    default_page_size: int
    search_debounce: float

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables"""
        if not API_URL:
            raise ConfigurationException(
                "BANK_ADAPTER_API_URL environment variable is not set",
                "missing"
            )

        if not API_URL.startswith(("http://", "https://")):
            raise ConfigurationException(
                f"Invalid BANK_ADAPTER_API_URL: {API_URL}",
                "validation"
            )

        if API_TIMEOUT <= 0:
            raise ConfigurationException(
                "BANK_ADAPTER_TIMEOUT must be positive",
                "validation"
            )

        if DEFAULT_PAGE_SIZE not in PAGE_SIZES:
            raise ConfigurationException(
                f"MEMBER_LIST_PAGE_SIZE must be one of {PAGE_SIZES}",
                "validation"
            )

        if SEARCH_DEBOUNCE < 0:
            raise ConfigurationException(
                "MEMBER_SEARCH_DEBOUNCE cannot be negative",
                "validation"
            )

        if not TOKEN_STORAGE_KEY:
            raise ConfigurationException(
                "BANK_ADAPTER_TOKEN_KEY cannot be empty",
                "missing"
            )

        return cls(
            api_url=API_URL,
            api_timeout=API_TIMEOUT,
            redis_url=REDIS_URL,
            token_storage_key=TOKEN_STORAGE_KEY,
            default_page_size=DEFAULT_PAGE_SIZE,
            search_debounce=SEARCH_DEBOUNCE,
        )
