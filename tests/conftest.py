import asyncio
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from iga_connectors.errors import UpstreamError
from iga_workflow.clients import ClientFactories
from iga_workflow.config import load_workflow_settings
from iga_workflow.context import build_context
from iga_workflow.store import ensure_settings_row


class FakeOkta:
    def __init__(self):
        self.app_groups = {}
        self.group_users = {}
        self.failing = set()
        self.removed = []
        self.calls = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    def add_group(self, app_id, group_id, name, emails):
        self.app_groups.setdefault(app_id, []).append({"id": group_id, "profile": {"name": name}})
        self.group_users[group_id] = [
            {"id": f"u-{email}", "profile": {"email": email, "login": email}} for email in emails
        ]

    def _maybe_fail(self, key):
        if key in self.failing:
            raise UpstreamError(f"okta GET {key} failed: 500", provider="okta", http_status=500)

    async def list_app_groups(self, app_id):
        self.calls.append(("app_groups", app_id))
        self._maybe_fail(app_id)
        return list(self.app_groups.get(app_id, []))

    async def list_group_users(self, group_id):
        self.calls.append(("group_users", group_id))
        self._maybe_fail(group_id)
        return list(self.group_users.get(group_id, []))

    async def remove_group_user(self, group_id, user_id):
        self.calls.append(("remove", group_id, user_id))
        self._maybe_fail(("remove", group_id))
        self.removed.append((group_id, user_id))

    async def check_connection(self):
        self._maybe_fail("users")


class FakeBambooHR:
    def __init__(self):
        self.reports = {}
        self.fetched = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def fetch_report(self, report_id):
        self.fetched.append(report_id)
        report = self.reports.get(report_id, [])
        if isinstance(report, Exception):
            raise report
        return report

    async def check_connection(self):
        return None


class FakeSlack:
    def __init__(self):
        self.members = []
        self.error = None
        self.posted = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def list_users(self):
        if self.error:
            raise self.error
        return list(self.members)

    async def post_message(self, channel, text):
        self.posted.append((channel, text))
        return {"ok": True, "channel": channel, "ts": "1700000000.000100"}


@pytest.fixture
def fakes():
    return SimpleNamespace(okta=FakeOkta(), bamboohr=FakeBambooHR(), slack=FakeSlack())


@pytest.fixture
def ctx(tmp_path, fakes):
    settings = load_workflow_settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'iga.db'}")
    clients = ClientFactories(
        okta=lambda integration: fakes.okta,
        bamboohr=lambda source: fakes.bamboohr,
        slack=lambda integration: fakes.slack,
    )
    context = build_context(settings=settings, clients=clients)

    async def _init():
        await context.database.create_all()
        async with context.database.session() as session:
            await ensure_settings_row(session)
            await session.commit()
        await context.database.dispose()

    asyncio.run(_init())
    return context


@pytest.fixture
def run(ctx):
    """Run one coroutine to completion, releasing pooled connections afterwards."""

    def _run(coro):
        async def _wrapped():
            try:
                return await coro
            finally:
                await ctx.database.dispose()

        return asyncio.run(_wrapped())

    return _run


@pytest.fixture
def seed(ctx, run):
    async def _seed(objects, settings):
        async with ctx.database.session() as session:
            if settings:
                row = await ensure_settings_row(session)
                for name, value in settings.items():
                    setattr(row, name, value)
            session.add_all(objects)
            await session.commit()

    def _call(*objects, **settings):
        run(_seed(objects, settings))

    return _call


@pytest.fixture
def query(ctx, run):
    """Fetch all rows of a model, optionally filtered by ``where`` clauses."""
    from sqlalchemy import select

    def _query(model, *where):
        async def _fetch():
            async with ctx.database.session() as session:
                result = await session.execute(select(model).where(*where) if where else select(model))
                return list(result.scalars().all())

        return run(_fetch())

    return _query
