"""Bank Adapter Service Package

This package provides the client for the bank adapter member API.
It handles member management, reference data and credit operations.
"""

from .config import BankAdapterEndpoints, Endpoint
from .interface import BankAdapterServiceInterface
from .service import BankAdapterService

__all__ = [
    'BankAdapterEndpoints',
    'BankAdapterService',
    'BankAdapterServiceInterface',
    'Endpoint',
]
