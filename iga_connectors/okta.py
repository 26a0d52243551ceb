"""Okta management API client used for group enumeration and revocation."""
from __future__ import annotations

from typing import Any, Dict, List

from .api_client import ApiClient
from .auth import OktaAuthenticator
from .endpoints import get_okta_endpoints


def normalize_domain(domain: str) -> str:
    """Strip scheme and trailing slash: ``https://acme.okta.com/`` -> ``acme.okta.com``."""
    value = (domain or "").strip()
    for prefix in ("https://", "http://"):
        if value.startswith(prefix):
            value = value[len(prefix):]
    return value.rstrip("/")


class OktaClient(ApiClient):
    provider = "okta"

    def __init__(self, domain: str, api_token: str, config_loader=None):
        authenticator = OktaAuthenticator()
        authenticator.set_api_token(api_token)
        super().__init__(f"https://{normalize_domain(domain)}", authenticator, config_loader)
        self.endpoints = get_okta_endpoints()

    async def list_app_groups(self, app_id: str) -> List[Dict[str, Any]]:
        path = self.endpoints["app_groups"]["list"].format(app_id=app_id)
        return await self.fetch_paginated(path)

    async def list_group_users(self, group_id: str) -> List[Dict[str, Any]]:
        path = self.endpoints["group_users"]["list"].format(group_id=group_id)
        return await self.fetch_paginated(path)

    async def remove_group_user(self, group_id: str, user_id: str) -> None:
        path = self.endpoints["group_user"]["delete"].format(group_id=group_id, user_id=user_id)
        await self._request("DELETE", path)

    async def check_connection(self) -> None:
        """Raises UpstreamError when the token or domain is rejected."""
        await self.get(self.endpoints["users"]["list"], {"limit": 1})
