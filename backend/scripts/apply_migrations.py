"""Apply pending SQL migrations from backend/migrations in filename order.

Each file runs in its own transaction and is recorded in schema_migrations
under its numeric prefix (``0001_clubs_schema.sql`` -> ``0001``).
"""

import asyncio
import os
import sys
from pathlib import Path

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from clubhub.infra.postgres import close_pool, get_pool  # noqa: E402

MIGRATIONS_DIR = BACKEND_ROOT / "migrations"


def _version(path: Path) -> str:
    return path.name.split("_", 1)[0]


async def _applied_versions(conn) -> set[str]:
    exists = await conn.fetchval("SELECT to_regclass('schema_migrations') IS NOT NULL")
    if not exists:
        return set()
    rows = await conn.fetch("SELECT version FROM schema_migrations")
    return {row["version"] for row in rows}


async def main(target: str | None = None) -> None:
    files = sorted(MIGRATIONS_DIR.glob("*.sql"))
    if target:
        files = [path for path in files if path.name == target]
        if not files:
            print(f"Migration file not found: {target}")
            return

    pool = await get_pool()
    try:
        async with pool.acquire() as conn:
            applied = await _applied_versions(conn)
            for path in files:
                version = _version(path)
                if version in applied:
                    print(f"Skipping {path.name} (already applied)")
                    continue
                print(f"Applying {path.name}...")
                async with conn.transaction():
                    await conn.execute(path.read_text(encoding="utf-8"))
                    await conn.execute(
                        "INSERT INTO schema_migrations (version) VALUES ($1) ON CONFLICT DO NOTHING",
                        version,
                    )
                print(f"Finished {path.name}")
    finally:
        await close_pool()


if __name__ == "__main__":
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(main(os.environ.get("MIGRATION_FILE") or (sys.argv[1] if len(sys.argv) > 1 else None)))
