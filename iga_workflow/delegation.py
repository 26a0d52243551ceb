"""Bulk hand-over of one reviewer's pending work to another reviewer."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .context import WorkflowContext
from .errors import ValidationError
from .models import ACTION_REVIEW_DELEGATION
from .parser import normalize_email
from .store import append_audit, reassign_pending

logger = logging.getLogger("iga_workflow.delegation")


async def delegate_pending(
    ctx: WorkflowContext,
    from_reviewer: Optional[str],
    to_reviewer: Optional[str],
) -> Dict[str, Any]:
    """Reassign every pending item of ``from_reviewer``; reviewed items are never touched.

    Re-running once nothing is pending is a no-op that still records the attempt.
    """
    source, target = normalize_email(from_reviewer), normalize_email(to_reviewer)
    if not source or not target:
        raise ValidationError("from_reviewer and to_reviewer are required.")

    async with ctx.database.session() as session:
        moved = await reassign_pending(session, source, target)
        append_audit(
            session,
            actor_email=source,
            action=ACTION_REVIEW_DELEGATION,
            target_user=target,
            decision=None,
            details={"items": moved},
        )
        await session.commit()

    logger.info("Delegated %d pending items from %s to %s", moved, source, target)
    return {"delegated": moved}
