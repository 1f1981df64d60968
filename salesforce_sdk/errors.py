"""Exceptions raised by the SDK client."""

from __future__ import annotations

import json
from typing import Any


class SalesforceSDKError(Exception):
    """Base class for every SDK failure."""


class ApiError(SalesforceSDKError):
    """The server answered with a non-2xx status."""

    def __init__(self, status_code: int, payload: Any) -> None:
        self.status_code = status_code
        self.payload = payload
        rendered = payload if isinstance(payload, str) else json.dumps(payload)
        super().__init__(f"API Error: {status_code} - {rendered}")


class NetworkError(SalesforceSDKError):
    """No response was received from the server."""
