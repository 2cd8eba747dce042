"""Credential state and its persistence"""
from .interface import TokenStorageInterface
from .token_store import CredentialStore, TokenValidity

__all__ = [
    'CredentialStore',
    'TokenStorageInterface',
    'TokenValidity',
]
