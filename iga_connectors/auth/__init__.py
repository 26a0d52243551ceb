"""
Authentication module for the outbound integrations.
"""

from .authentication import (
    BambooHRAuthenticator,
    HeaderAuthenticator,
    OktaAuthenticator,
    SlackAuthenticator,
)

__all__ = ["HeaderAuthenticator", "OktaAuthenticator", "BambooHRAuthenticator", "SlackAuthenticator"]
