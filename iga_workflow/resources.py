"""Field blueprints for mapping provider payloads onto local records."""
from __future__ import annotations

from typing import Any, Callable, Dict, Tuple


ResourceDefinition = Dict[str, Callable[[Dict[str, Any]], Any]]


def _safe_get(obj, path, default=""):
    current = obj
    for part in path.split("."):
        if isinstance(current, dict):
            current = current.get(part, default)
        else:
            return default
    return current if current is not None else default


RESOURCE_DEFINITIONS: Dict[str, ResourceDefinition] = {
    "okta_groups": {
        "external_id": lambda obj: obj.get("id", ""),
        "display_name": lambda obj: _safe_get(obj, "profile.name") or obj.get("id", ""),
    },
    "okta_users": {
        "external_id": lambda obj: obj.get("id", ""),
        "email": lambda obj: _safe_get(obj, "profile.email") or _safe_get(obj, "profile.login"),
    },
    "slack_users": {
        "external_id": lambda obj: obj.get("id", ""),
        "email": lambda obj: _safe_get(obj, "profile.email"),
        # bots and deactivated accounts never map to an employee
        "ignored": lambda obj: bool(obj.get("deleted") or obj.get("is_bot")),
    },
}

# Ordered candidate keys per employee field; the first non-blank string wins.
# BambooHR custom reports name fields by alias, label, or numeric id depending on the report.
EMPLOYEE_FIELD_KEYS: Dict[str, Tuple[str, ...]] = {
    "email": ("workEmail", "email", "Email", "Work Email"),
    "full_name": ("displayName", "fullName", "name", "employeeName", "Employee", "firstName"),
    "role": ("jobTitle", "title", "role"),
    "department": ("customTribeName", "department", "Department"),
    "manager": ("91", "manager", "managerName", "Manager"),
    "status": ("status", "employmentStatus", "Employment Status"),
    "hire_date": ("hireDate", "dateOfHire", "Hire Date"),
    "end_date": ("terminationDate", "endDate", "End Date"),
}
