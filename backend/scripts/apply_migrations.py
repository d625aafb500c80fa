"""Apply every SQL file under backend/migrations in lexical order."""

import asyncio
import sys
from pathlib import Path

from civichub.infra.postgres import acquire, close_pool

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"


async def apply_migrations(only: str | None = None) -> None:
    if not MIGRATIONS_DIR.exists():
        print(f"Migrations directory not found: {MIGRATIONS_DIR}")
        return

    files = sorted(path for path in MIGRATIONS_DIR.glob("*.sql") if only is None or path.name == only)
    if not files:
        print("No migrations to apply.")
        return

    try:
        async with acquire() as conn:
            for path in files:
                print(f"Applying {path.name}...")
                async with conn.transaction():
                    await conn.execute(path.read_text(encoding="utf-8"))
                print(f"Finished {path.name}")
    finally:
        await close_pool()


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else None
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(apply_migrations(target))
