"""CodePush REST API and file-upload service clients."""

from .client import ApiError, AppRef, CodePushApi, parse_app_ref
from .http import HttpClient, HttpError, HttpResponse, MockHttpClient, RealHttpClient

__all__ = [
    # client
    "ApiError",
    "AppRef",
    "CodePushApi",
    "parse_app_ref",
    # http
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
]
