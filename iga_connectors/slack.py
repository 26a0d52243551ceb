"""Slack Web API client: user directory listing and message posting."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .api_client import ApiClient
from .auth import SlackAuthenticator
from .endpoints import get_slack_endpoints
from .errors import UpstreamError


class SlackClient(ApiClient):
    provider = "slack"

    def __init__(self, bot_token: str, config_loader=None):
        self.endpoints = get_slack_endpoints()
        super().__init__(self.endpoints["base_url"], SlackAuthenticator(bot_token), config_loader)

    def _check_ok(self, payload: Any, method: str) -> Dict[str, Any]:
        # Slack reports most failures as HTTP 200 with ok=false
        if not isinstance(payload, dict) or not payload.get("ok"):
            error = payload.get("error") if isinstance(payload, dict) else None
            raise UpstreamError(f"Slack {method} returned error: {error or 'unknown_error'}", provider=self.provider)
        return payload

    async def list_users(self) -> List[Dict[str, Any]]:
        """All members of the workspace, following ``next_cursor`` until it is empty."""
        definition = self.endpoints["users_list"]
        members: List[Dict[str, Any]] = []
        cursor: Optional[str] = ""
        while True:
            params: Dict[str, Any] = {"limit": definition["page_size"]}
            if cursor:
                params["cursor"] = cursor
            payload = self._check_ok(await self.get(definition["get"], params), "users.list")
            members.extend(payload.get("members") or [])
            cursor = self.next_cursor(payload)
            if not cursor:
                return members

    @staticmethod
    def next_cursor(payload: Dict[str, Any]) -> str:
        metadata = payload.get("response_metadata") or {}
        return (metadata.get("next_cursor") or "").strip()

    async def post_message(self, channel: str, text: str) -> Dict[str, Any]:
        data, _ = await self._request(
            "POST",
            self.endpoints["post_message"]["post"],
            json_body={"channel": channel, "text": text},
        )
        return self._check_ok(data, "chat.postMessage")
