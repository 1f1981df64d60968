"""HTTP client for the Salesforce service."""

from .client import DEFAULT_TIMEOUT, SalesforceCartClient
from .errors import ApiError, NetworkError, SalesforceSDKError

__all__ = [
    "ApiError",
    "DEFAULT_TIMEOUT",
    "NetworkError",
    "SalesforceCartClient",
    "SalesforceSDKError",
]
