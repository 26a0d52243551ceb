"""Operation boundary: named operations in, ``{"success": ...}`` dictionaries out.

Every governance error is reported as ``{"success": False, "message", "status"}``
instead of propagating to the caller.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from .administration import (
    check_bamboohr_connection,
    check_okta_connection,
    get_settings,
    init_database,
    save_settings,
)
from .assets import fetch_asset_groups
from .campaigns import generate_campaign
from .clients import ClientFactories
from .context import WorkflowContext, build_context
from .decisions import submit_decision
from .delegation import delegate_pending
from .directory_sync import sync_employees, sync_slack_ids
from .errors import IGAError, UpstreamError
from .notifications import notify_reviewers, send_slack_notification
from .queries import list_audit_logs, list_pending_items
from .revocation import revoke_access

logger = logging.getLogger("iga_workflow.handlers")

Operation = Callable[..., Awaitable[Dict[str, Any]]]

OPERATIONS: Dict[str, Operation] = {
    "generate_campaign": generate_campaign,
    "submit_decision": submit_decision,
    "delegate_pending": delegate_pending,
    "revoke_access": revoke_access,
    "sync_employees": sync_employees,
    "sync_slack_ids": sync_slack_ids,
    "list_pending_items": list_pending_items,
    "list_audit_logs": list_audit_logs,
    "fetch_asset_groups": fetch_asset_groups,
    "check_okta_connection": check_okta_connection,
    "check_bamboohr_connection": check_bamboohr_connection,
    "send_slack_notification": send_slack_notification,
    "notify_reviewers": notify_reviewers,
    "get_settings": get_settings,
    "update_settings": save_settings,
    "init_database": init_database,
}


def failure(message: str, status: int) -> Dict[str, Any]:
    return {"success": False, "message": message, "status": status}


async def handle(ctx: WorkflowContext, name: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    operation = OPERATIONS.get(name)
    if operation is None:
        return failure(f"Unknown operation: {name}", 404)
    payload = dict(payload or {})
    try:
        inspect.signature(operation).bind(ctx, **payload)
    except TypeError as exc:
        return failure(f"Invalid arguments for {name}: {exc}", 400)

    try:
        result = await operation(ctx, **payload)
    except (IGAError, UpstreamError) as exc:
        logger.warning("%s failed (%s): %s", name, exc.status_code, exc)
        return failure(str(exc), exc.status_code)
    except Exception as exc:
        logger.exception("%s failed unexpectedly", name)
        return failure(str(exc) or type(exc).__name__, 500)
    return {"success": True, **result}


def run_operation(
    name: str,
    payload: Optional[Dict[str, Any]] = None,
    config_file: str = "configs/config.json",
    database_url: Optional[str] = None,
    clients: Optional[ClientFactories] = None,
) -> Dict[str, Any]:
    """Synchronous helper for scripts and the command line."""

    async def _run():
        ctx = build_context(config_file=config_file, database_url=database_url, clients=clients)
        try:
            return await handle(ctx, name, payload)
        finally:
            await ctx.close()

    return asyncio.run(_run())
