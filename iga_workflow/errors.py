"""Error taxonomy for governance operations.

Each error carries the HTTP-equivalent status the operation boundary reports.
"""
from __future__ import annotations

from iga_connectors.errors import UpstreamError


class IGAError(Exception):
    status_code = 500


class ValidationError(IGAError):
    """Bad caller input; safe to retry once the input is fixed."""

    status_code = 400


class ForbiddenError(IGAError):
    status_code = 403


class NotFoundError(IGAError):
    status_code = 404


class ConflictError(IGAError):
    """A state precondition no longer holds, e.g. the item is not pending."""

    status_code = 409


class ConfigurationError(IGAError):
    """Required integration settings are missing."""

    status_code = 500


__all__ = [
    "IGAError",
    "ValidationError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "ConfigurationError",
    "UpstreamError",
]
