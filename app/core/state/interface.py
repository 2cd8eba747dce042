"""Token storage interface"""
from abc import ABC, abstractmethod
from typing import Optional


class TokenStorageInterface(ABC):
    """Durable storage for the single bearer token"""

    @abstractmethod
    def load(self) -> Optional[str]:
        """Load the persisted token

        Returns:
            Optional[str]: Token, or None when nothing is stored
        """
        pass

    @abstractmethod
    def save(self, token: str) -> None:
        """Persist the token, replacing any previous one

        Args:
            token: Non-empty token

        Raises:
            StorageException: If the write fails
        """
        pass

    @abstractmethod
    def delete(self) -> None:
        """Remove the persisted token

        Raises:
            StorageException: If the delete fails
        """
        pass
