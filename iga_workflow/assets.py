"""Asset group enumeration and member-count refresh."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .context import WorkflowContext
from .errors import NotFoundError, ValidationError
from .parser import Parser
from .store import get_asset, load_integration_settings

logger = logging.getLogger("iga_workflow.assets")


async def fetch_asset_groups(ctx: WorkflowContext, asset_id: Optional[str]) -> Dict[str, Any]:
    """List the asset's Okta groups with their members and cache the distinct member count."""
    if not asset_id:
        raise ValidationError("asset_id required")

    async with ctx.database.session() as session:
        settings = await load_integration_settings(session)
        asset = await get_asset(session, asset_id)
        if asset is None:
            raise NotFoundError(f"Asset not found: {asset_id}")
    if not asset.okta_id:
        raise ValidationError(f"Asset {asset.name} has no Okta application id.")
    settings.require_okta()

    parser = Parser()
    groups: List[Dict[str, Any]] = []
    privileged = set(asset.privileged_group_ids or ())
    async with ctx.clients.okta(settings) as okta:
        for raw_group in await okta.list_app_groups(asset.okta_id):
            group = parser.parse_group(raw_group)
            members = parser.parse_members(await okta.list_group_users(group.id))
            groups.append({
                "id": group.id,
                "name": group.name,
                "privileged": group.id in privileged,
                "users": [{"id": member.id, "email": member.email} for member in members],
            })

    member_count = len({user["email"] for group in groups for user in group["users"]})
    async with ctx.database.session() as session:
        asset = await get_asset(session, asset_id)
        if asset is not None:
            asset.cached_user_count = member_count
            await session.commit()

    logger.info("Asset %s: %d groups, %d distinct members", asset_id, len(groups), member_count)
    return {"groups": groups, "cached_user_count": member_count}
