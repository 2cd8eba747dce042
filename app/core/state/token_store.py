"""Credential store for the bank adapter bearer token

One CredentialStore instance owns the token for a client session. It is
passed to the API service and the controllers through their constructors.
"""
import logging
from enum import Enum
from typing import Optional

import requests

from core.api.base import make_api_request
from core.api.config import APIConfig
from core.error.exceptions import (APIException, InvalidInputException,
                                   MissingCredentialException,
                                   TimeoutException, UnreachableException)

from .interface import TokenStorageInterface

logger = logging.getLogger(__name__)

PROBE_PATH = "member/list"


class TokenValidity(Enum):
    """Result of a token probe"""
    VALID = "valid"
    INVALID = "invalid"


class CredentialStore:
    """Holds the single bearer token, persisted through TokenStorageInterface"""

    def __init__(
        self,
        storage: TokenStorageInterface,
        api_config: Optional[APIConfig] = None,
        session: Optional[requests.Session] = None
    ):
        self.storage = storage
        self.api_config = api_config
        self.session = session or requests.Session()
        self._token = storage.load() or ""

    def set(self, token: str) -> str:
        """Trim and persist a token

        Raises:
            InvalidInputException: If the token is empty after trimming
        """
        token = (token or "").strip()
        if not token:
            raise InvalidInputException("Please enter a token", "token")

        self.storage.save(token)
        self._token = token
        return token

    def get(self) -> str:
        """Current token, or an empty string when none is set"""
        return self._token

    def clear(self) -> None:
        """Remove the persisted token"""
        self.storage.delete()
        self._token = ""

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    def require(self, action: Optional[str] = None) -> str:
        """Current token for an outbound call

        Raises:
            MissingCredentialException: If no token is set
        """
        if not self._token:
            logger.warning(f"Blocked {action or 'request'}: token not set")
            raise MissingCredentialException(action=action)
        return self._token

    def test(self, token: Optional[str] = None) -> TokenValidity:
        """Probe the backend list endpoint with a token

        Args:
            token: Token to test, defaults to the stored one

        Returns:
            TokenValidity: VALID on a 2xx, INVALID on any other status

        Raises:
            InvalidInputException: If there is no token to test
            UnreachableException: If the backend cannot be reached
        """
        token = (token if token is not None else self._token).strip()
        if not token:
            raise InvalidInputException("Please enter a token before testing", "token")

        if self.api_config is None:
            self.api_config = APIConfig.from_settings()

        try:
            response = make_api_request(
                self.session,
                self.api_config,
                "GET",
                PROBE_PATH,
                token=token,
                params={"page": 1, "limit": 1}
            )
        except TimeoutException as e:
            raise UnreachableException(
                e.message,
                method=e.method,
                path=e.path
            ) from e
        except UnreachableException:
            raise
        except APIException as e:
            # Only the status matters, an unreadable 2xx body still accepts the token
            if e.status_code is not None and 200 <= e.status_code < 300:
                return TokenValidity.VALID
            logger.info(f"Token probe rejected: {e.status_code}")
            return TokenValidity.INVALID

        if response.http_status is not None and not 200 <= response.http_status < 300:
            logger.info(f"Token probe rejected: {response.http_status}")
            return TokenValidity.INVALID

        return TokenValidity.VALID
