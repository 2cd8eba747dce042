"""Core exceptions with clear error boundaries

This module defines the exceptions used throughout the member admin client.
Transport and authorization failures raise; a backend `success: false`
envelope is returned to the caller and only becomes ValidationFailedException
when the caller asks for it.
"""

from typing import Dict, Optional


class BankAdapterException(Exception):
    """Base exception with error details"""
    def __init__(self, message: str, details: Optional[Dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class MissingCredentialException(BankAdapterException):
    """No token set; the request was never dispatched"""
    def __init__(self, message: str = "Token is not set", action: Optional[str] = None):
        super().__init__(message, {"action": action} if action else None)


class InvalidInputException(BankAdapterException):
    """Required input missing or malformed"""
    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message, {"field": field} if field else None)


class ConfigurationException(BankAdapterException):
    """Invalid or missing configuration"""
    def __init__(self, message: str, subtype: Optional[str] = None):
        self.subtype = subtype
        super().__init__(message, {"subtype": subtype} if subtype else None)


class StorageException(BankAdapterException):
    """Credential persistence failed"""
    pass


class APIException(BankAdapterException):
    """Base for errors raised while talking to the backend"""
    def __init__(
        self,
        message: str,
        method: str,
        path: str,
        status_code: Optional[int] = None,
        response: Optional[Dict] = None
    ):
        self.method = method
        self.path = path
        self.status_code = status_code
        self.response = response or {}
        details = {
            "method": method,
            "path": path,
            "status_code": status_code,
        }
        super().__init__(message, details)


class TimeoutException(APIException):
    """No response within the configured deadline"""
    pass


class UnreachableException(APIException):
    """Network level failure, no HTTP response at all"""
    pass


class UnauthorizedException(APIException):
    """Token present but rejected by the backend (401)"""
    pass


class NotFoundException(APIException):
    """Requested record does not exist (404)"""
    pass


class ServerErrorException(APIException):
    """Backend failure (5xx or unreadable body)"""
    pass


class ValidationFailedException(APIException):
    """Backend rejected the request on business rules"""
    pass
