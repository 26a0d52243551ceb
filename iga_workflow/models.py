"""Relational model shared by every governance operation."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    event,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

REVIEW_PENDING = "pending"
REVIEW_REVIEWED = "reviewed"

DECISION_APPROVED = "Approved"
DECISION_REVOKED = "Revoked"
DECISIONS = (DECISION_APPROVED, DECISION_REVOKED)

CAMPAIGN_ACTIVE = "active"
CAMPAIGN_COMPLETED = "completed"

LOGIN_TYPE_SSO = "SSO"

WORKER_EMPLOYEE = "Employee"
WORKER_CONTRACTOR = "Contractor"

ACTION_REVIEW_DECISION = "review_item_decision"
ACTION_REVIEW_DELEGATION = "review_delegation"
ACTION_OKTA_REVOKE = "okta_revoke_access"


def _uuid() -> str:
    return str(uuid4())


class Base(DeclarativeBase):
    pass


class Asset(Base):
    __tablename__ = "assets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(255))
    owner_email: Mapped[str | None] = mapped_column(String(320), nullable=True, index=True)
    # SSO, or one of the direct-login kinds: Local, SWA, Empty
    login_type: Mapped[str] = mapped_column(String(32), default=LOGIN_TYPE_SSO)
    okta_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    rbac_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    privileged_group_ids: Mapped[list[str]] = mapped_column(JSON, default=list)
    cached_user_count: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    @property
    def is_federated(self) -> bool:
        return bool(self.okta_id)


class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    # Lower-cased; joins against review_items.employee_email
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True)
    full_name: Mapped[str] = mapped_column(String(255), default="")
    role: Mapped[str] = mapped_column(String(255), default="")
    department: Mapped[str] = mapped_column(String(255), default="")
    manager: Mapped[str] = mapped_column(String(255), default="")
    status: Mapped[str] = mapped_column(String(64), default="")
    worker_type: Mapped[str] = mapped_column(String(32), default=WORKER_EMPLOYEE, index=True)
    slack_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    hire_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class ReviewCampaign(Base):
    __tablename__ = "review_campaigns"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(255))
    start_date: Mapped[date] = mapped_column(Date)
    due_date: Mapped[date] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(32), default=CAMPAIGN_ACTIVE)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class ReviewItem(Base):
    __tablename__ = "review_items"
    __table_args__ = (
        Index("ix_review_items_reviewer_status", "reviewer_email", "status"),
        CheckConstraint(
            "(status = 'pending' AND decision IS NULL) OR (status = 'reviewed' AND decision IS NOT NULL)",
            name="ck_review_items_decision_matches_status",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    campaign_id: Mapped[str] = mapped_column(String(36), ForeignKey("review_campaigns.id"), index=True)
    asset_id: Mapped[str] = mapped_column(String(36), ForeignKey("assets.id"), index=True)
    employee_email: Mapped[str] = mapped_column(String(320), index=True)
    reviewer_email: Mapped[str] = mapped_column(String(320))
    status: Mapped[str] = mapped_column(String(16), default=REVIEW_PENDING)
    decision: Mapped[str | None] = mapped_column(String(16), nullable=True)
    evidence_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    okta_group: Mapped[str | None] = mapped_column(String(255), nullable=True)
    okta_group_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class AuditLog(Base):
    """Append-only record of governance actions. Never updated or deleted."""

    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    actor_email: Mapped[str] = mapped_column(String(320))
    action: Mapped[str] = mapped_column(String(64), index=True)
    target_user: Mapped[str | None] = mapped_column(String(320), nullable=True)
    # Denormalized so the entry stays accurate if the asset is renamed later
    asset_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    decision: Mapped[str | None] = mapped_column(String(16), nullable=True)
    details: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSON, nullable=True)


@event.listens_for(AuditLog, "before_update")
@event.listens_for(AuditLog, "before_delete")
def _reject_audit_mutation(mapper, connection, target):
    raise RuntimeError("audit_logs is append-only")


class SystemSettings(Base):
    """Singleton row (id=1) with integration credentials and governance toggles."""

    __tablename__ = "system_settings"
    __table_args__ = (CheckConstraint("id = 1", name="ck_system_settings_singleton"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    bamboohr_emp_subdomain: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bamboohr_emp_api_key: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bamboohr_emp_report_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    bamboohr_cont_subdomain: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bamboohr_cont_api_key: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bamboohr_cont_report_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    okta_domain: Mapped[str | None] = mapped_column(String(255), nullable=True)
    okta_api_token: Mapped[str | None] = mapped_column(String(255), nullable=True)
    slack_bot_token: Mapped[str | None] = mapped_column(String(255), nullable=True)
    okta_auto_revocation_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    nhi_types: Mapped[list[str]] = mapped_column(JSON, default=list)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
