"""Reviewer decisions on individual review items."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .context import WorkflowContext
from .errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from .models import (
    ACTION_REVIEW_DECISION,
    DECISION_APPROVED,
    DECISION_REVOKED,
    DECISIONS,
    LOGIN_TYPE_SSO,
    REVIEW_PENDING,
)
from .parser import normalize_email
from .revocation import apply_revocation
from .store import append_audit, get_asset, get_review_item, load_integration_settings, mark_reviewed

logger = logging.getLogger("iga_workflow.decisions")


def requires_evidence(login_type: Optional[str]) -> bool:
    """Direct-login assets (anything other than SSO) need a written justification."""
    return (login_type or "").strip().upper() != LOGIN_TYPE_SSO


async def submit_decision(
    ctx: WorkflowContext,
    review_item_id: Optional[str],
    decision: Optional[str],
    actor_email: Optional[str],
    evidence_notes: Optional[str] = None,
) -> Dict[str, Any]:
    if not review_item_id or not actor_email or not decision:
        raise ValidationError("review_item_id, actor_email and decision are required.")
    if decision not in DECISIONS:
        raise ValidationError(f"decision must be {DECISION_APPROVED} or {DECISION_REVOKED}.")
    actor = normalize_email(actor_email)
    notes = evidence_notes.strip() if evidence_notes else None

    async with ctx.database.session() as session:
        settings = await load_integration_settings(session)
        item = await get_review_item(session, review_item_id)
        if item is None:
            raise NotFoundError(f"Review item not found: {review_item_id}")
        if item.status != REVIEW_PENDING:
            raise ConflictError("Review item is no longer pending.")
        if decision == DECISION_APPROVED and actor == normalize_email(item.employee_email):
            raise ForbiddenError("Reviewers cannot approve their own access.")
        asset = await get_asset(session, item.asset_id)
        if asset is None:
            raise NotFoundError(f"Asset not found for review item: {item.asset_id}")
        if ctx.settings.require_evidence_for_direct_login and requires_evidence(asset.login_type) and not notes:
            raise ValidationError(f"Evidence notes are required for {asset.login_type or 'direct-login'} assets.")

        if await mark_reviewed(session, item.id, decision, notes) == 0:
            await session.rollback()
            raise ConflictError("Review item is no longer pending.")
        append_audit(
            session,
            actor_email=actor,
            action=ACTION_REVIEW_DECISION,
            target_user=normalize_email(item.employee_email),
            asset_name=asset.name,
            decision=decision,
            details={"review_item_id": item.id, "campaign_id": item.campaign_id, "okta_group": item.okta_group},
        )
        await session.commit()

    logger.info("Review item %s decided %s by %s", item.id, decision, actor)
    result: Dict[str, Any] = {"review_item_id": item.id, "decision": decision}

    if decision == DECISION_REVOKED and asset.is_federated:
        outcome = await apply_revocation(ctx, settings, item.employee_email, asset=asset, item=item)
        result["revocation"] = outcome.as_dict()
        if outcome.failed:
            result["warning"] = f"Decision saved but Okta revocation did not complete: {outcome.message}"
    return result
