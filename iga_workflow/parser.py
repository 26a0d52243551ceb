"""Parser to map loosely-typed provider payloads onto typed records."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from .resources import EMPLOYEE_FIELD_KEYS, RESOURCE_DEFINITIONS

_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%d %b %Y", "%b %d, %Y")


def normalize_email(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def pick(record: Dict[str, Any], keys: Iterable[str]) -> str:
    """First non-blank string value among ``keys``, stripped; ``""`` when none."""
    for key in keys:
        value = record.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def parse_date(value: Optional[str]) -> Optional[date]:
    if not value or not value.strip():
        return None
    text = value.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


@dataclass(frozen=True)
class OktaGroup:
    id: str
    name: str


@dataclass(frozen=True)
class OktaMember:
    id: str
    email: str


@dataclass(frozen=True)
class EmployeeRecord:
    email: str
    full_name: str
    role: str
    department: str
    manager: str
    status: str
    worker_type: str
    hire_date: Optional[date]
    end_date: Optional[date]

    def as_row(self) -> Dict[str, Any]:
        return {
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role,
            "department": self.department,
            "manager": self.manager,
            "status": self.status,
            "worker_type": self.worker_type,
            "hire_date": self.hire_date,
            "end_date": self.end_date,
        }


@dataclass(frozen=True)
class SlackIdentity:
    id: str
    email: str


class Parser:
    def __init__(self):
        self.definitions = RESOURCE_DEFINITIONS

    def parse_group(self, raw: Dict[str, Any]) -> OktaGroup:
        definition = self.definitions["okta_groups"]
        return OktaGroup(id=definition["external_id"](raw), name=definition["display_name"](raw))

    def parse_members(self, payload: List[Dict[str, Any]]) -> List[OktaMember]:
        """Members with a resolvable email; the email is lower-cased."""
        definition = self.definitions["okta_users"]
        members = []
        for raw in payload:
            email = normalize_email(definition["email"](raw))
            if email:
                members.append(OktaMember(id=definition["external_id"](raw), email=email))
        return members

    def parse_employee(self, record: Dict[str, Any], worker_type: str) -> Optional[EmployeeRecord]:
        """Map one HR report row; rows without an email are dropped."""
        fields = {name: pick(record, keys) for name, keys in EMPLOYEE_FIELD_KEYS.items()}
        email = normalize_email(fields["email"])
        if not email:
            return None
        return EmployeeRecord(
            email=email,
            full_name=fields["full_name"] or email,
            role=fields["role"],
            department=fields["department"],
            manager=fields["manager"],
            status=fields["status"],
            worker_type=worker_type,
            hire_date=parse_date(fields["hire_date"]),
            end_date=parse_date(fields["end_date"]),
        )

    def parse_employees(self, payload: List[Dict[str, Any]], worker_type: str) -> List[EmployeeRecord]:
        parsed = (self.parse_employee(record, worker_type) for record in payload)
        return [record for record in parsed if record is not None]

    def parse_slack_members(self, payload: List[Dict[str, Any]]) -> List[SlackIdentity]:
        definition = self.definitions["slack_users"]
        identities = []
        for raw in payload:
            user_id = definition["external_id"](raw)
            email = normalize_email(definition["email"](raw))
            if not user_id or not email or definition["ignored"](raw):
                continue
            identities.append(SlackIdentity(id=user_id, email=email))
        return identities
