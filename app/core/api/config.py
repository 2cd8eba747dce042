"""Bank adapter API configuration"""
from dataclasses import dataclass, field
from typing import Dict, Optional

from config.settings import Settings
from core.error.exceptions import ConfigurationException


@dataclass
class APIConfig:
    """Configuration for bank adapter API access"""
    base_url: str
    timeout: float = 30
    default_headers: Dict[str, str] = field(
        default_factory=lambda: {"Content-Type": "application/json"}
    )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "APIConfig":
        """Create configuration from application settings"""
        settings = settings or Settings.from_env()
        return cls(base_url=settings.api_url, timeout=settings.api_timeout)

    def get_url(self, path: str) -> str:
        """Get full URL for an endpoint path"""
        if not path:
            raise ConfigurationException(
                "Endpoint path is required",
                "validation"
            )

        # base_url carries a path prefix (/api), so join by hand
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def get_headers(self, token: Optional[str] = None) -> Dict[str, str]:
        """Get request headers, with bearer auth when a token is given"""
        headers = self.default_headers.copy()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers
