"""Delivery sinks for reviewer notifications."""
from __future__ import annotations

import logging
from typing import Any, Dict, List

logger = logging.getLogger("iga_workflow.sinks")


class SlackSink:
    """Posts each message through an open Slack client."""

    def __init__(self, slack_client):
        self.slack_client = slack_client

    async def deliver(self, channel: str, text: str) -> Dict[str, Any]:
        return await self.slack_client.post_message(channel, text)


class LoggingSink:
    """Dry-run sink: logs and keeps messages instead of sending them."""

    def __init__(self):
        self.delivered: List[Dict[str, str]] = []

    async def deliver(self, channel: str, text: str) -> Dict[str, Any]:
        logger.info("[DRY RUN] %s: %s", channel, text)
        self.delivered.append({"channel": channel, "text": text})
        return {"ok": True, "channel": channel}
