from __future__ import annotations

import asyncpg
import pytest

from clubhub.infra import postgres
from clubhub.obs import health
from clubhub.settings import settings


class _Acquire:
	def __init__(self, conn):
		self._conn = conn

	async def __aenter__(self):
		return self._conn

	async def __aexit__(self, exc_type, exc, tb):
		return False


class _SchemaConnection:
	def __init__(self, *, version, missing=(), error: Exception | None = None) -> None:
		self.version = version
		self.missing = list(missing)
		self.error = error
		self.table_args = None

	async def execute(self, query, *args):
		return "SELECT 1"

	async def fetchval(self, query, *args):
		if self.error is not None:
			raise self.error
		return self.version

	async def fetch(self, query, *args):
		self.table_args = args
		return [{"name": name} for name in self.missing]


class _Pool:
	def __init__(self, conn):
		self.conn = conn

	def acquire(self):
		return _Acquire(self.conn)


def test_latest_migration_version_from_files(tmp_path):
	assert health.latest_migration_version(tmp_path) is None
	for name in ("0001_clubs_schema.sql", "0003_event_banners.sql", "0002_profiles_index.sql", "README.md"):
		(tmp_path / name).write_text("-- sql\n", encoding="utf-8")

	assert health.latest_migration_version(tmp_path) == "0003"


def test_required_migration_defaults_to_shipped_files(monkeypatch):
	monkeypatch.setattr(settings, "health_min_migration", None)
	assert health.required_migration() == health.latest_migration_version()
	assert health.required_migration() == "0001"

	monkeypatch.setattr(settings, "health_min_migration", "0005")
	assert health.required_migration() == "0005"


@pytest.mark.asyncio
async def test_schema_status_reports_missing_tables():
	conn = _SchemaConnection(version="0001", missing=["event_participants"])

	state = await health._schema_status(_Pool(conn), "0001")

	assert state["ok"] is False
	assert state["missing_tables"] == ["event_participants"]
	assert conn.table_args == (list(health.REQUIRED_TABLES),)


@pytest.mark.asyncio
async def test_schema_status_requires_newest_version():
	stale = await health._schema_status(_Pool(_SchemaConnection(version="0001")), "0002")
	assert stale == {"ok": False, "version": "0001", "required": "0002"}

	current = await health._schema_status(_Pool(_SchemaConnection(version="0002")), "0002")
	assert current["ok"] is True

	empty = await health._schema_status(_Pool(_SchemaConnection(version=None)), "0001")
	assert empty["ok"] is False


@pytest.mark.asyncio
async def test_schema_status_without_migrations_table():
	conn = _SchemaConnection(version=None, error=asyncpg.UndefinedTableError("schema_migrations"))

	state = await health._schema_status(_Pool(conn), "0001")

	assert state == {"ok": False, "error": "schema_migrations_missing"}


@pytest.mark.asyncio
async def test_readiness_ok_with_current_schema(monkeypatch):
	pool = _Pool(_SchemaConnection(version="0001"))

	async def _get_pool():
		return pool

	monkeypatch.setattr(postgres, "get_pool", _get_pool)
	monkeypatch.setattr(settings, "health_min_migration", None)

	status_code, payload = await health.readiness()

	assert status_code == 200
	assert payload["status"] == "ok"
	assert payload["checks"]["schema"] == {"ok": True, "version": "0001", "required": "0001"}
	assert payload["checks"]["redis"]["ok"] is True
