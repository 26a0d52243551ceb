"""Read-side views used by the reviewer and audit pages."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional

from .context import WorkflowContext
from .errors import ValidationError
from .models import AuditLog, ReviewItem
from .store import list_audit_logs as _list_audit_logs
from .store import list_pending_items as _list_pending_items


def _iso(value: Optional[Any]) -> Optional[str]:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def review_item_view(item: ReviewItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "campaign_id": item.campaign_id,
        "asset_id": item.asset_id,
        "employee_email": item.employee_email,
        "reviewer_email": item.reviewer_email,
        "status": item.status,
        "decision": item.decision,
        "evidence_notes": item.evidence_notes,
        "okta_group": item.okta_group,
        "okta_group_id": item.okta_group_id,
        "created_at": _iso(item.created_at),
        "reviewed_at": _iso(item.reviewed_at),
    }


def audit_entry_view(entry: AuditLog) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "created_at": _iso(entry.created_at),
        "actor_email": entry.actor_email,
        "action": entry.action,
        "target_user": entry.target_user,
        "asset_name": entry.asset_name,
        "decision": entry.decision,
        "metadata": entry.details,
    }


async def list_pending_items(
    ctx: WorkflowContext,
    reviewer_email: Optional[str],
    campaign_id: Optional[str] = None,
) -> Dict[str, Any]:
    if not reviewer_email or not reviewer_email.strip():
        raise ValidationError("reviewer_email is required.")
    async with ctx.database.session() as session:
        items = await _list_pending_items(session, reviewer_email, campaign_id)
    return {"items": [review_item_view(item) for item in items]}


async def list_audit_logs(ctx: WorkflowContext, action: Optional[str] = None, limit: int = 100) -> Dict[str, Any]:
    if limit <= 0:
        raise ValidationError("limit must be positive.")
    async with ctx.database.session() as session:
        entries = await _list_audit_logs(session, action=action, limit=limit)
    return {"entries": [audit_entry_view(entry) for entry in entries]}
