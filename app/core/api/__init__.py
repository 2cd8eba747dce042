"""API package exposing the request function and the response envelope"""
from .api_response import ApiResponse, unwrap_envelope
from .base import make_api_request
from .config import APIConfig

__all__ = [
    'APIConfig',
    'ApiResponse',
    'make_api_request',
    'unwrap_envelope',
]
