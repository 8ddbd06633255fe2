"""Liveness and readiness checks.

Readiness needs Postgres, the Redis audit stream, and a clubs schema at
least as new as the newest file under ``backend/migrations``.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from time import perf_counter
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

import asyncpg

from clubhub.infra import postgres
from clubhub.infra.redis import redis_client
from clubhub.obs import metrics
from clubhub.obs.logging import get_logger
from clubhub.settings import settings

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"

REQUIRED_TABLES = (
	"profiles",
	"clubs",
	"club_members",
	"events",
	"event_participants",
	"announcements",
)

logger = get_logger("clubhub.health")


def latest_migration_version(directory: Path = MIGRATIONS_DIR) -> Optional[str]:
	"""Numeric prefix of the newest migration file (``0001_clubs_schema.sql`` -> ``0001``)."""
	versions = sorted(path.name.split("_", 1)[0] for path in directory.glob("*.sql"))
	return versions[-1] if versions else None


def required_migration() -> Optional[str]:
	return settings.health_min_migration or latest_migration_version()


def _failed(check: str, error: str) -> Dict[str, Any]:
	logger.warning("readiness_check_failed", extra={"check": check, "error": error})
	return {"ok": False, "error": error}


async def _timed(
	check: str,
	call: Callable[[], Awaitable[Any]],
	mark: Callable[..., None],
	timeout: float,
) -> Dict[str, Any]:
	start = perf_counter()
	try:
		await asyncio.wait_for(call(), timeout=timeout)
	except Exception as exc:
		mark(False)
		return _failed(check, str(exc) or type(exc).__name__)
	latency = perf_counter() - start
	mark(True, latency_seconds=latency)
	return {"ok": True, "latency_ms": round(latency * 1000, 2)}


async def _postgres_status(timeout: float = 0.3) -> Tuple[Dict[str, Any], Any]:
	try:
		pool = await postgres.get_pool()
	except Exception as exc:
		metrics.mark_postgres(False)
		return _failed("postgres", str(exc)), None

	async def _ping() -> None:
		async with pool.acquire() as conn:
			await conn.execute("SELECT 1")

	return await _timed("postgres", _ping, metrics.mark_postgres, timeout), pool


async def _schema_status(pool, required: Optional[str]) -> Dict[str, Any]:
	if pool is None:
		return {"ok": False, "error": "pool_unavailable"}
	try:
		async with pool.acquire() as conn:
			version = await conn.fetchval("SELECT max(version) FROM schema_migrations")
			rows = await conn.fetch(
				"SELECT name FROM unnest($1::text[]) AS name WHERE to_regclass(name) IS NULL",
				list(REQUIRED_TABLES),
			)
	except asyncpg.UndefinedTableError:
		return _failed("schema", "schema_migrations_missing")
	except (asyncpg.PostgresError, OSError, asyncio.TimeoutError) as exc:
		return _failed("schema", str(exc))

	current = str(version) if version is not None else None
	missing = [row["name"] for row in rows]
	state: Dict[str, Any] = {"version": current, "required": required}
	if missing:
		state["missing_tables"] = missing
	state["ok"] = current is not None and (required is None or current >= required) and not missing
	return state


async def liveness() -> Dict[str, Any]:
	return {"status": "ok"}


async def readiness() -> Tuple[int, Dict[str, Any]]:
	redis_state = await _timed("redis", redis_client.ping, metrics.mark_redis, 0.2)
	postgres_state, pool = await _postgres_status()
	schema_state = await _schema_status(pool, required_migration())
	checks = {"redis": redis_state, "postgres": postgres_state, "schema": schema_state}
	ok = all(state["ok"] for state in checks.values())
	return (200 if ok else 503), {"status": "ok" if ok else "degraded", "checks": checks}
