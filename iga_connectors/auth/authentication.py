"""
Authentication header handling for the outbound integrations.
Okta uses SSWS API tokens, BambooHR uses HTTP Basic with the API key as the
username, Slack uses a bot token as a Bearer credential.
"""

import base64
from typing import Dict, Optional


class HeaderAuthenticator:
    """Builds request headers for one provider credential."""

    scheme = ""

    def __init__(self, credential: Optional[str] = None):
        self.credential = credential
        # Headers will be set after authentication setup
        self.headers: Optional[Dict[str, str]] = None

    def authorization_value(self) -> str:
        return f"{self.scheme} {self.credential}"

    async def setup_authentication(self) -> Dict[str, str]:
        """Setup authentication headers from the configured credential."""
        if not self.credential:
            raise RuntimeError(f"No {type(self).__name__} credential available")
        self.headers = {
            "Authorization": self.authorization_value(),
            "Accept": "application/json",
        }
        return self.headers

    async def get_headers(self) -> Dict[str, str]:
        """Get current authentication headers."""
        if self.headers is None:
            return await self.setup_authentication()
        return self.headers


class OktaAuthenticator(HeaderAuthenticator):
    """SSWS API token authentication for the Okta management API."""

    scheme = "SSWS"

    def set_api_token(self, api_token: str):
        self.credential = api_token
        self.headers = None


class BambooHRAuthenticator(HeaderAuthenticator):
    """Basic authentication where the API key is the user and the password is ignored."""

    scheme = "Basic"

    def authorization_value(self) -> str:
        encoded = base64.b64encode(f"{self.credential}:x".encode()).decode()
        return f"Basic {encoded}"


class SlackAuthenticator(HeaderAuthenticator):
    """Bot token authentication for the Slack Web API."""

    scheme = "Bearer"
