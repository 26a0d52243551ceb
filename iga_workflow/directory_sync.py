"""Directory mirrors: employees from BambooHR, Slack ids from the Slack user directory.

Both syncs fetch everything before touching the store. A failed fetch aborts
the run, so a partial roster is never reconciled against.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from .context import WorkflowContext
from .parser import EmployeeRecord, Parser
from .store import delete_employees, list_employees, load_integration_settings, upsert_employees

logger = logging.getLogger("iga_workflow.directory_sync")


async def sync_employees(ctx: WorkflowContext, target: str = "all") -> Dict[str, Any]:
    """Mirror the HR roster for ``target`` (employees, contractors or all).

    Rows whose worker type is in scope but whose email is absent upstream are
    deleted; rows of other worker types are left alone.
    """
    async with ctx.database.session() as session:
        settings = await load_integration_settings(session)
    sources = settings.bamboohr_sources(target)

    parser = Parser()
    fetched: List[EmployeeRecord] = []
    for source in sources:
        async with ctx.clients.bamboohr(source) as client:
            records = await client.fetch_report(source.report_id)
        parsed = parser.parse_employees(records, source.worker_type)
        logger.info("Fetched %d %s records from BambooHR", len(parsed), source.worker_type)
        fetched.extend(parsed)

    # last occurrence wins when an email appears in more than one report
    authoritative = {record.email: record.as_row() for record in fetched}
    worker_types = [source.worker_type for source in sources]

    async with ctx.database.session() as session:
        await upsert_employees(session, authoritative.values())
        local = await list_employees(session, worker_types)
        stale = [employee.id for employee in local if employee.email.strip().lower() not in authoritative]
        deleted = await delete_employees(session, stale)
        await session.commit()

    logger.info("Employee sync (%s): %d upserted, %d deleted", target, len(authoritative), deleted)
    return {
        "target": target,
        "fetched": len(authoritative),
        "deleted": deleted,
        "mirrored_worker_types": worker_types,
    }


async def sync_slack_ids(ctx: WorkflowContext) -> Dict[str, Any]:
    """Set each employee's Slack id from the Slack directory by email.

    Never creates or deletes employees. An employee whose email no longer
    appears in Slack has the stale id cleared.
    """
    async with ctx.database.session() as session:
        settings = await load_integration_settings(session)
    settings.require_slack()

    async with ctx.clients.slack(settings) as slack:
        members = await slack.list_users()
    slack_ids = {identity.email: identity.id for identity in Parser().parse_slack_members(members)}
    logger.info("Fetched %d Slack identities with an email", len(slack_ids))

    updated = 0
    async with ctx.database.session() as session:
        for employee in await list_employees(session):
            next_id = slack_ids.get(employee.email.strip().lower())
            if employee.slack_id != next_id:
                employee.slack_id = next_id
                updated += 1
        await session.commit()

    logger.info("Slack sync updated %d employees", updated)
    return {"updatedEmployees": updated, "total_slack_users": len(slack_ids)}
