"""
API module exposing the registry over HTTP.
"""

from .rest_api import RegistryRestAPI, CALLER_HEADER

__all__ = [
    "RegistryRestAPI",
    "CALLER_HEADER",
]
