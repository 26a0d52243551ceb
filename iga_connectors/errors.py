"""Errors raised by the outbound connectors."""
from __future__ import annotations

from typing import Optional


class UpstreamError(Exception):
    """An external API call failed or returned a non-success payload."""

    status_code = 502

    def __init__(self, message: str, provider: str = "", http_status: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.http_status = http_status
