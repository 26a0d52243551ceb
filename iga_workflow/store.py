"""Query and command helpers over the relational store.

Every helper takes the caller's ``AsyncSession``; committing is left to the
operation so one unit of work can span several helpers.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence
from uuid import uuid4

from sqlalchemy import JSON, Boolean, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .config import IntegrationSettings
from .errors import ValidationError
from .models import (
    CAMPAIGN_ACTIVE,
    REVIEW_PENDING,
    REVIEW_REVIEWED,
    Asset,
    AuditLog,
    Employee,
    ReviewCampaign,
    ReviewItem,
    SystemSettings,
)

SETTINGS_ID = 1
SECRET_SETTINGS = ("bamboohr_emp_api_key", "bamboohr_cont_api_key", "okta_api_token", "slack_bot_token")
READONLY_SETTINGS = ("id", "updated_at")
_BOOLEAN_WORDS = {"true": True, "yes": True, "on": True, "1": True, "false": False, "no": False, "off": False, "0": False}


# --- settings ---------------------------------------------------------------

async def get_settings_row(session: AsyncSession) -> Optional[SystemSettings]:
    return await session.get(SystemSettings, SETTINGS_ID)


async def ensure_settings_row(session: AsyncSession) -> SystemSettings:
    row = await get_settings_row(session)
    if row is None:
        row = SystemSettings(id=SETTINGS_ID, nhi_types=[])
        session.add(row)
        await session.flush()
    return row


async def load_integration_settings(session: AsyncSession) -> IntegrationSettings:
    return IntegrationSettings.from_row(await get_settings_row(session))


def coerce_setting(name: str, value: Any) -> Any:
    """Convert one settings value to its column type; text forms are accepted for flags and lists."""
    column = SystemSettings.__table__.columns.get(name)
    if column is None or name in READONLY_SETTINGS:
        raise ValidationError(f"Unknown settings field: {name}")
    if isinstance(column.type, Boolean):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in _BOOLEAN_WORDS:
            return _BOOLEAN_WORDS[value.strip().lower()]
        raise ValidationError(f"{name} must be true or false.")
    if isinstance(column.type, JSON):
        if isinstance(value, str):
            return [label.strip() for label in value.split(",") if label.strip()]
        if isinstance(value, (list, tuple)) and all(isinstance(label, str) for label in value):
            return list(value)
        raise ValidationError(f"{name} must be a list of labels.")
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{name} must be a string.")
    return value


async def update_settings(session: AsyncSession, **fields: Any) -> SystemSettings:
    editable = set(SystemSettings.__table__.columns.keys()) - set(READONLY_SETTINGS)
    unknown = sorted(set(fields) - editable)
    if unknown:
        raise ValidationError(f"Unknown settings fields: {', '.join(unknown)}")
    values = {name: coerce_setting(name, value) for name, value in fields.items()}
    row = await ensure_settings_row(session)
    for name, value in values.items():
        setattr(row, name, value)
    await session.flush()
    return row


def masked_settings(row: Optional[SystemSettings]) -> Dict[str, Any]:
    """Settings view with secrets replaced by a fixed mask."""
    view: Dict[str, Any] = {}
    if row is None:
        return view
    for column in SystemSettings.__table__.columns:
        if column.name in READONLY_SETTINGS:
            continue
        value = getattr(row, column.name)
        if column.name in SECRET_SETTINGS and value:
            value = "********"
        view[column.name] = value
    return view


# --- assets and campaigns ---------------------------------------------------

async def get_asset(session: AsyncSession, asset_id: str) -> Optional[Asset]:
    return await session.get(Asset, asset_id)


async def select_federated_assets(session: AsyncSession, asset_ids: Optional[Sequence[str]] = None) -> List[Asset]:
    """Assets with a provider id, optionally restricted to ``asset_ids``."""
    stmt = select(Asset).where(Asset.okta_id.is_not(None))
    if asset_ids is not None:
        stmt = stmt.where(Asset.id.in_(list(asset_ids)))
    result = await session.execute(stmt.order_by(Asset.name))
    return list(result.scalars().all())


def add_campaign(
    session: AsyncSession,
    name: str,
    start_date: date,
    due_date: date,
    items: Iterable[Dict[str, Any]],
) -> ReviewCampaign:
    """Stage one active campaign and its pending items; nothing is written until commit."""
    campaign = ReviewCampaign(
        id=str(uuid4()), name=name, start_date=start_date, due_date=due_date, status=CAMPAIGN_ACTIVE
    )
    session.add(campaign)
    session.add_all(
        ReviewItem(campaign_id=campaign.id, status=REVIEW_PENDING, **values) for values in items
    )
    return campaign


# --- review items -----------------------------------------------------------

async def get_review_item(session: AsyncSession, item_id: str) -> Optional[ReviewItem]:
    return await session.get(ReviewItem, item_id)


async def mark_reviewed(
    session: AsyncSession,
    item_id: str,
    decision: str,
    evidence_notes: Optional[str] = None,
) -> int:
    """Conditional pending -> reviewed transition. Returns the affected row count (0 or 1)."""
    values: Dict[str, Any] = {
        "status": REVIEW_REVIEWED,
        "decision": decision,
        "reviewed_at": datetime.now(timezone.utc),
    }
    if evidence_notes is not None:
        values["evidence_notes"] = evidence_notes
    result = await session.execute(
        update(ReviewItem)
        .where(ReviewItem.id == item_id, ReviewItem.status == REVIEW_PENDING)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


async def reassign_pending(session: AsyncSession, from_reviewer: str, to_reviewer: str) -> int:
    result = await session.execute(
        update(ReviewItem)
        .where(
            func.lower(ReviewItem.reviewer_email) == from_reviewer,
            ReviewItem.status == REVIEW_PENDING,
        )
        .values(reviewer_email=to_reviewer)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


async def list_pending_items(
    session: AsyncSession,
    reviewer_email: str,
    campaign_id: Optional[str] = None,
) -> List[ReviewItem]:
    stmt = select(ReviewItem).where(
        func.lower(ReviewItem.reviewer_email) == reviewer_email.strip().lower(),
        ReviewItem.status == REVIEW_PENDING,
    )
    if campaign_id:
        stmt = stmt.where(ReviewItem.campaign_id == campaign_id)
    result = await session.execute(stmt.order_by(ReviewItem.created_at, ReviewItem.employee_email))
    return list(result.scalars().all())


async def pending_counts_by_reviewer(session: AsyncSession, campaign_id: str) -> Dict[str, int]:
    result = await session.execute(
        select(ReviewItem.reviewer_email, func.count(ReviewItem.id))
        .where(ReviewItem.campaign_id == campaign_id, ReviewItem.status == REVIEW_PENDING)
        .group_by(ReviewItem.reviewer_email)
    )
    return {reviewer: count for reviewer, count in result.all()}


# --- audit log --------------------------------------------------------------

def append_audit(
    session: AsyncSession,
    *,
    actor_email: str,
    action: str,
    target_user: Optional[str] = None,
    asset_name: Optional[str] = None,
    decision: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    entry = AuditLog(
        actor_email=actor_email,
        action=action,
        target_user=target_user,
        asset_name=asset_name,
        decision=decision,
        details=details,
    )
    session.add(entry)
    return entry


async def list_audit_logs(
    session: AsyncSession,
    *,
    action: Optional[str] = None,
    limit: int = 100,
) -> List[AuditLog]:
    stmt = select(AuditLog)
    if action:
        stmt = stmt.where(AuditLog.action == action)
    stmt = stmt.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


# --- employees --------------------------------------------------------------

async def list_employees(session: AsyncSession, worker_types: Optional[Sequence[str]] = None) -> List[Employee]:
    stmt = select(Employee)
    if worker_types is not None:
        stmt = stmt.where(Employee.worker_type.in_(list(worker_types)))
    result = await session.execute(stmt.order_by(Employee.email))
    return list(result.scalars().all())


async def get_employee_by_email(session: AsyncSession, email: str) -> Optional[Employee]:
    result = await session.execute(select(Employee).where(Employee.email == email.strip().lower()))
    return result.scalar_one_or_none()


async def upsert_employees(session: AsyncSession, rows: Iterable[Dict[str, Any]]) -> int:
    """Insert or update by email. Returns the number of rows written."""
    by_email = {row["email"]: row for row in rows}
    if not by_email:
        return 0
    result = await session.execute(select(Employee).where(Employee.email.in_(list(by_email))))
    existing = {employee.email: employee for employee in result.scalars().all()}
    for email, row in by_email.items():
        employee = existing.get(email)
        if employee is None:
            session.add(Employee(**row))
            continue
        for name, value in row.items():
            setattr(employee, name, value)
    await session.flush()
    return len(by_email)


async def delete_employees(session: AsyncSession, employee_ids: Sequence[str]) -> int:
    if not employee_ids:
        return 0
    result = await session.execute(
        delete(Employee).where(Employee.id.in_(list(employee_ids))).execution_options(synchronize_session=False)
    )
    return result.rowcount
