"""Centralized error handling with clear boundaries

Controllers catch BankAdapterException only at the presentation boundary and
hand it to ErrorHandler, which logs it and turns it into the notification the
operator sees. Nothing here retries or recovers.
"""

import logging
from typing import Optional

from core.messaging.notifier import Notification

from .exceptions import (BankAdapterException, ConfigurationException,
                         InvalidInputException, MissingCredentialException,
                         NotFoundException, ServerErrorException,
                         StorageException, TimeoutException,
                         UnauthorizedException, UnreachableException,
                         ValidationFailedException)

logger = logging.getLogger(__name__)

# Operator-facing messages per error type
ERROR_MESSAGES = {
    MissingCredentialException: "Token is not set. Please set a token first.",
    TimeoutException: "Connection timed out. Please try again.",
    UnauthorizedException: "Token is invalid. Please set a new token.",
    ServerErrorException: "Server error. Please try again.",
    NotFoundException: "Record not found.",
    UnreachableException: "Cannot connect to the API.",
    StorageException: "Cannot access token storage.",
    ConfigurationException: "Invalid configuration.",
}


class ErrorHandler:
    """Maps exceptions to operator notifications"""

    @classmethod
    def message_for(cls, error: BankAdapterException) -> str:
        """Get the operator-facing message for an error"""
        # Input and business-rule errors carry their own text
        if isinstance(error, (InvalidInputException, ValidationFailedException)):
            return error.message

        for error_type in type(error).__mro__:
            if error_type in ERROR_MESSAGES:
                return ERROR_MESSAGES[error_type]

        return error.message or "Unexpected error."

    @classmethod
    def to_notification(
        cls,
        error: BankAdapterException,
        action: Optional[str] = None
    ) -> Notification:
        """Log an error and build the notification for it

        Args:
            error: Error raised by a client or store operation
            action: Optional name of the operation that failed

        Returns:
            Error notification
        """
        message = cls.message_for(error)
        details = dict(error.details)
        details["type"] = type(error).__name__
        if action:
            details["action"] = action
            message = f"{action}: {message}"

        # The notification is the operator-facing record
        logger.info(
            f"Error handled: {details['type']}: {error.message}",
            extra={"details": details}
        )

        return Notification.error(message, details)
