"""Access-review campaign generation.

Expands every in-scope asset into its Okta groups and each group into its
members, then writes the campaign and one pending review item per
(asset, group, member) in a single transaction. Provider enumeration runs
before anything is written, so an upstream failure leaves no partial campaign.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .context import WorkflowContext
from .errors import ValidationError
from .models import Asset
from .parser import Parser, parse_date
from .store import add_campaign, load_integration_settings, select_federated_assets

logger = logging.getLogger("iga_workflow.campaigns")

SCOPE_ALL = "all_assets"
SCOPE_SELECTED = "selected_assets"
SCOPES = (SCOPE_ALL, SCOPE_SELECTED)


@dataclass(frozen=True)
class CampaignRequest:
    name: str
    start_date: date
    due_date: date
    scope: str = SCOPE_ALL
    asset_ids: Tuple[str, ...] = ()

    @classmethod
    def parse(
        cls,
        name: Optional[str],
        start_date: Any,
        due_date: Any,
        scope: Optional[str] = None,
        asset_ids: Optional[Sequence[str]] = None,
    ) -> "CampaignRequest":
        scope = scope or SCOPE_ALL
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Campaign name is required.")
        start, due = _as_date(start_date), _as_date(due_date)
        if start is None or due is None:
            raise ValidationError("Valid start_date and due_date are required.")
        if scope not in SCOPES:
            raise ValidationError(f"scope must be one of: {', '.join(SCOPES)}.")
        if asset_ids is not None and not isinstance(asset_ids, (list, tuple)):
            raise ValidationError("asset_ids must be a list of asset ids.")
        ids = tuple(asset_id for asset_id in (asset_ids or ()) if asset_id)
        if scope == SCOPE_SELECTED and not ids:
            raise ValidationError("Provide at least one asset_id when using selected_assets scope.")
        return cls(name=name.strip(), start_date=start, due_date=due, scope=scope, asset_ids=ids)


def _as_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_date(value)
    return None


async def _asset_review_items(okta, asset: Asset, parser: Parser) -> List[Dict[str, Any]]:
    reviewer = asset.owner_email.strip().lower()
    items: List[Dict[str, Any]] = []
    for raw_group in await okta.list_app_groups(asset.okta_id):
        group = parser.parse_group(raw_group)
        for member in parser.parse_members(await okta.list_group_users(group.id)):
            items.append({
                "asset_id": asset.id,
                "employee_email": member.email,
                "reviewer_email": reviewer,
                "okta_group": group.name,
                "okta_group_id": group.id,
            })
    logger.debug("Asset %s: %d review items", asset.name, len(items))
    return items


async def generate_campaign(
    ctx: WorkflowContext,
    name: Optional[str],
    start_date: Any,
    due_date: Any,
    scope: Optional[str] = None,
    asset_ids: Optional[Sequence[str]] = None,
) -> Dict[str, Any]:
    request = CampaignRequest.parse(name, start_date, due_date, scope, asset_ids)

    async with ctx.database.session() as session:
        settings = await load_integration_settings(session)
        settings.require_okta()
        assets = await select_federated_assets(
            session, request.asset_ids if request.scope == SCOPE_SELECTED else None
        )

    # Assets without an owner are counted as processed but produce no items
    reviewable = [asset for asset in assets if asset.okta_id and asset.owner_email and asset.owner_email.strip()]
    logger.info(
        "Generating campaign %r: %d assets in scope, %d reviewable", request.name, len(assets), len(reviewable)
    )

    parser = Parser()
    async with ctx.clients.okta(settings) as okta:
        items: List[Dict[str, Any]] = []
        for asset in reviewable:
            items.extend(await _asset_review_items(okta, asset, parser))

    async with ctx.database.session() as session:
        campaign = add_campaign(session, request.name, request.start_date, request.due_date, items)
        await session.commit()

    logger.info("Campaign %s created with %d review items", campaign.id, len(items))
    return {
        "campaign_id": campaign.id,
        "processed_assets": len(assets),
        "created_review_items": len(items),
    }
