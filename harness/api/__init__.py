"""
API Layer
=========

HTTP client with explicit session ownership, request building and
response validation.
"""

from harness.api.auth import ApiKeyAuth, AuthContext, AuthStrategy, BasicAuth, BearerAuth, NoAuth
from harness.api.client import ApiClient, ApiResponse
from harness.api.request import BuiltRequest, HttpMethod, RequestBuilder, send
from harness.api.validator import ResponseValidator

__all__ = [
    "ApiClient",
    "ApiResponse",
    "AuthContext",
    "AuthStrategy",
    "NoAuth",
    "ApiKeyAuth",
    "BasicAuth",
    "BearerAuth",
    "BuiltRequest",
    "HttpMethod",
    "RequestBuilder",
    "send",
    "ResponseValidator",
]
