"""Per-process wiring shared by every operation: settings, store, client factories."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .clients import ClientFactories, default_client_factories
from .config import WorkflowSettings, load_workflow_settings
from .db import Database


@dataclass
class WorkflowContext:
    settings: WorkflowSettings
    database: Database
    clients: ClientFactories

    @property
    def system_actor(self) -> str:
        return self.settings.system_actor

    async def close(self) -> None:
        await self.database.dispose()


def build_context(
    settings: Optional[WorkflowSettings] = None,
    clients: Optional[ClientFactories] = None,
    config_file: str = "configs/config.json",
    database_url: Optional[str] = None,
) -> WorkflowContext:
    settings = settings or load_workflow_settings(config_file=config_file, database_url=database_url)
    return WorkflowContext(
        settings=settings,
        database=Database(settings.database_url, echo=settings.database_echo),
        clients=clients or default_client_factories(settings.config_loader),
    )
