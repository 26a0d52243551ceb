"""BambooHR client for pulling worker rosters from custom reports."""
from __future__ import annotations

from typing import Any, Dict, List

from .api_client import ApiClient
from .auth import BambooHRAuthenticator
from .endpoints import get_bamboohr_endpoints
from .errors import UpstreamError


class BambooHRClient(ApiClient):
    provider = "bamboohr"

    def __init__(self, subdomain: str, api_key: str, config_loader=None):
        self.endpoints = get_bamboohr_endpoints()
        self.subdomain = subdomain.strip()
        base_url = self.endpoints["base_url"].format(subdomain=self.subdomain)
        super().__init__(base_url, BambooHRAuthenticator(api_key), config_loader)

    async def fetch_report(self, report_id: str) -> List[Dict[str, Any]]:
        definition = self.endpoints["report"]
        payload = await self.get(definition["get"].format(report_id=report_id), dict(definition["params"]))
        employees = payload.get("employees") if isinstance(payload, dict) else None
        if not isinstance(employees, list):
            raise UpstreamError(
                f"Unexpected BambooHR payload for report {report_id} on {self.subdomain}.",
                provider=self.provider,
            )
        return employees

    async def check_connection(self) -> None:
        await self.get(self.endpoints["meta_fields"]["get"])
