"""Operator notifications

Every user-visible outcome (success toast, error message) flows through a
NotifierInterface so the controllers stay independent of the front-end.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

logger = logging.getLogger(__name__)


class NotificationLevel(Enum):
    """Severity of a notification"""
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class Notification:
    """Message shown to the operator"""
    level: NotificationLevel
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, message: str) -> "Notification":
        return cls(level=NotificationLevel.SUCCESS, message=message)

    @classmethod
    def error(cls, message: str, details: Dict[str, Any] = None) -> "Notification":
        return cls(level=NotificationLevel.ERROR, message=message, details=details or {})

    @property
    def is_error(self) -> bool:
        return self.level is NotificationLevel.ERROR


class NotifierInterface(ABC):
    """Sink for operator notifications"""

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        """Deliver a notification to the operator

        Args:
            notification: Notification to deliver
        """
        pass


class LoggingNotifier(NotifierInterface):
    """Notifier that only writes to the log"""

    def notify(self, notification: Notification) -> None:
        if notification.is_error:
            logger.error(notification.message)
        else:
            logger.info(notification.message)
