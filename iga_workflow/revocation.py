"""Best-effort removal of a reviewed identity from its Okta group.

Runs only when auto-revocation is enabled in settings. Every attempt, skipped
or not, is recorded in the audit log. Failures never undo the review decision;
they are logged and reported back as the outcome.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .config import IntegrationSettings
from .context import WorkflowContext
from .errors import ConfigurationError, NotFoundError, UpstreamError, ValidationError
from .models import ACTION_OKTA_REVOKE, Asset, ReviewItem
from .parser import Parser, normalize_email
from .store import append_audit, get_asset, get_review_item, load_integration_settings

logger = logging.getLogger("iga_workflow.revocation")

REMOVED = "removed"
SKIPPED = "skipped"
USER_NOT_FOUND = "user_not_found"
FAILED = "failed"


@dataclass(frozen=True)
class RevocationOutcome:
    status: str
    message: str
    group_id: Optional[str] = None
    user_id: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.status in (FAILED, USER_NOT_FOUND)

    def as_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "message": self.message, "group_id": self.group_id, "user_id": self.user_id}


async def _resolve_group_id(okta, asset: Optional[Asset], item: Optional[ReviewItem], parser: Parser) -> Optional[str]:
    if item is not None and item.okta_group_id:
        return item.okta_group_id
    if asset is None or not asset.okta_id or item is None or not item.okta_group:
        return None
    # items created before group ids were stored only carry the display name
    for raw_group in await okta.list_app_groups(asset.okta_id):
        group = parser.parse_group(raw_group)
        if group.name == item.okta_group:
            return group.id
    return None


async def _remove_member(ctx: WorkflowContext, settings: IntegrationSettings, employee_email: str,
                         asset: Optional[Asset], item: Optional[ReviewItem],
                         group_id: Optional[str]) -> RevocationOutcome:
    parser = Parser()
    try:
        settings.require_okta()
        async with ctx.clients.okta(settings) as okta:
            group_id = group_id or await _resolve_group_id(okta, asset, item, parser)
            if not group_id:
                return RevocationOutcome(USER_NOT_FOUND, "Unable to resolve the Okta group for this access.")
            members = parser.parse_members(await okta.list_group_users(group_id))
            member = next((m for m in members if m.email == employee_email), None)
            if member is None:
                return RevocationOutcome(
                    USER_NOT_FOUND, f"{employee_email} is not a member of group {group_id}.", group_id
                )
            await okta.remove_group_user(group_id, member.id)
            return RevocationOutcome(REMOVED, f"Removed {employee_email} from group {group_id}.", group_id, member.id)
    except (UpstreamError, ConfigurationError) as exc:
        logger.warning("Okta revocation failed for %s: %s", employee_email, exc)
        return RevocationOutcome(FAILED, str(exc), group_id)


async def apply_revocation(
    ctx: WorkflowContext,
    settings: IntegrationSettings,
    employee_email: str,
    asset: Optional[Asset] = None,
    item: Optional[ReviewItem] = None,
    group_id: Optional[str] = None,
) -> RevocationOutcome:
    employee_email = normalize_email(employee_email)
    if not settings.okta_auto_revocation_enabled:
        outcome = RevocationOutcome(SKIPPED, "Auto-revocation disabled in settings.", group_id)
    else:
        outcome = await _remove_member(ctx, settings, employee_email, asset, item, group_id)

    log = logger.warning if outcome.failed else logger.info
    log("Revocation of %s: %s (%s)", employee_email, outcome.status, outcome.message)

    async with ctx.database.session() as session:
        append_audit(
            session,
            actor_email=ctx.system_actor,
            action=ACTION_OKTA_REVOKE,
            target_user=employee_email or None,
            asset_name=asset.name if asset else None,
            details={
                "review_item_id": item.id if item else None,
                "group_id": outcome.group_id,
                "outcome": outcome.status,
                "message": outcome.message,
            },
        )
        await session.commit()
    return outcome


async def revoke_access(
    ctx: WorkflowContext,
    review_item_id: Optional[str],
    employee_email: Optional[str] = None,
    group_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Standalone revocation for one review item, optionally pinned to an explicit group."""
    if not review_item_id:
        raise ValidationError("review_item_id required")

    async with ctx.database.session() as session:
        settings = await load_integration_settings(session)
        item = await get_review_item(session, review_item_id)
        if item is None:
            raise NotFoundError(f"Review item not found: {review_item_id}")
        asset = await get_asset(session, item.asset_id)

    outcome = await apply_revocation(
        ctx, settings, employee_email or item.employee_email, asset=asset, item=item, group_id=group_id
    )
    return {"skipped": outcome.status == SKIPPED, "revocation": outcome.as_dict()}
