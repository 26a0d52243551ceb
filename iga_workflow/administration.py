"""Store bootstrap, settings maintenance and integration connection checks."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .config import IntegrationSettings
from .context import WorkflowContext
from .errors import ValidationError
from .store import ensure_settings_row, get_settings_row, load_integration_settings, masked_settings, update_settings

logger = logging.getLogger("iga_workflow.administration")


async def init_database(ctx: WorkflowContext) -> Dict[str, Any]:
    await ctx.database.create_all()
    async with ctx.database.session() as session:
        await ensure_settings_row(session)
        await session.commit()
    logger.info("Database initialised at %s", ctx.settings.database_url.split("://")[0])
    return {}


async def get_settings(ctx: WorkflowContext) -> Dict[str, Any]:
    async with ctx.database.session() as session:
        return {"settings": masked_settings(await get_settings_row(session))}


async def save_settings(ctx: WorkflowContext, **fields: Any) -> Dict[str, Any]:
    if not fields:
        raise ValidationError("No settings fields given.")
    async with ctx.database.session() as session:
        row = await update_settings(session, **fields)
        await session.commit()
        view = masked_settings(row)
    logger.info("Settings updated: %s", ", ".join(sorted(fields)))
    return {"settings": view}


async def check_okta_connection(
    ctx: WorkflowContext,
    domain: Optional[str] = None,
    api_token: Optional[str] = None,
) -> Dict[str, Any]:
    """Check Okta credentials; falls back to the stored settings when none are given."""
    if domain is None and api_token is None:
        async with ctx.database.session() as session:
            settings = await load_integration_settings(session)
    else:
        if not domain or not api_token:
            raise ValidationError("Missing domain or apiToken.")
        settings = IntegrationSettings(okta_domain=domain, okta_api_token=api_token)
    settings.require_okta()

    async with ctx.clients.okta(settings) as okta:
        await okta.check_connection()
    return {"message": "Okta credentials are valid."}


async def check_bamboohr_connection(ctx: WorkflowContext, target: str = "employees") -> Dict[str, Any]:
    async with ctx.database.session() as session:
        settings = await load_integration_settings(session)
    checked = []
    for source in settings.bamboohr_sources(target):
        async with ctx.clients.bamboohr(source) as client:
            await client.check_connection()
        checked.append(source.worker_type)
    return {"message": f"BambooHR credentials are valid for: {', '.join(checked)}."}
