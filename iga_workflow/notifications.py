"""Slack notifications: ad-hoc messages and campaign reminders to reviewers."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from .context import WorkflowContext
from .errors import NotFoundError, UpstreamError, ValidationError
from .models import ReviewCampaign
from .sinks import SlackSink
from .store import get_employee_by_email, load_integration_settings, pending_counts_by_reviewer

logger = logging.getLogger("iga_workflow.notifications")


def reminder_text(campaign: ReviewCampaign, pending: int) -> str:
    noun = "item" if pending == 1 else "items"
    return (
        f"You have {pending} pending access review {noun} in campaign \"{campaign.name}\", "
        f"due {campaign.due_date.isoformat()}."
    )


async def send_slack_notification(ctx: WorkflowContext, channel: Optional[str], text: Optional[str]) -> Dict[str, Any]:
    if not channel or not text:
        raise ValidationError("channel and text are required.")
    async with ctx.database.session() as session:
        settings = await load_integration_settings(session)
    settings.require_slack()
    async with ctx.clients.slack(settings) as slack:
        response = await SlackSink(slack).deliver(channel, text)
    return {"channel": response.get("channel", channel), "ts": response.get("ts")}


async def notify_reviewers(ctx: WorkflowContext, campaign_id: Optional[str], sink=None) -> Dict[str, Any]:
    """Message every reviewer with pending items in the campaign at their synced Slack id.

    Reviewers without a Slack id are skipped. A failed post is counted and
    logged; remaining reviewers are still notified.
    """
    if not campaign_id:
        raise ValidationError("campaign_id is required.")

    async with ctx.database.session() as session:
        settings = await load_integration_settings(session)
        campaign = await session.get(ReviewCampaign, campaign_id)
        if campaign is None:
            raise NotFoundError(f"Campaign not found: {campaign_id}")
        messages: List[Tuple[str, str]] = []
        skipped: List[str] = []
        for reviewer, pending in sorted((await pending_counts_by_reviewer(session, campaign_id)).items()):
            employee = await get_employee_by_email(session, reviewer)
            if employee is None or not employee.slack_id:
                skipped.append(reviewer)
                continue
            messages.append((employee.slack_id, reminder_text(campaign, pending)))

    if sink is not None:
        failed = await _deliver_all(sink, messages)
    elif messages:
        settings.require_slack()
        async with ctx.clients.slack(settings) as slack:
            failed = await _deliver_all(SlackSink(slack), messages)
    else:
        failed = 0

    logger.info(
        "Campaign %s reminders: %d sent, %d skipped, %d failed",
        campaign_id, len(messages) - failed, len(skipped), failed,
    )
    return {
        "notified": len(messages) - failed,
        "skipped": len(skipped),
        "skipped_reviewers": skipped,
        "failed": failed,
    }


async def _deliver_all(sink, messages: List[Tuple[str, str]]) -> int:
    failed = 0
    for channel, text in messages:
        try:
            await sink.deliver(channel, text)
        except UpstreamError as exc:
            logger.warning("Reminder to %s failed: %s", channel, exc)
            failed += 1
    return failed
