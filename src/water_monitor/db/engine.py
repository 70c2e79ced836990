"""SQLite database engine with WAL mode for concurrent reads."""

from __future__ import annotations

import logging
from pathlib import Path

import aiosqlite

from water_monitor.db.migrations import run_migrations

logger = logging.getLogger(__name__)

_db: aiosqlite.Connection | None = None


async def _check_integrity(db: aiosqlite.Connection) -> bool:
    """Run PRAGMA integrity_check and return True if the database is healthy."""
    async with db.execute("PRAGMA integrity_check") as cursor:
        rows = await cursor.fetchall()
    # A healthy DB returns a single row: ("ok",)
    if len(rows) == 1 and str(rows[0][0]).lower() == "ok":
        return True
    problems = [str(r[0]) for r in rows[:10]]
    logger.error("Database integrity check failed: %s", "; ".join(problems))
    return False


async def init_db(db_path: str | Path) -> aiosqlite.Connection:
    """Open the database with WAL mode and run migrations.

    ``":memory:"`` opens a private in-memory database.

    Raises:
        RuntimeError: if an existing database file fails its integrity check
            or carries a newer schema version.
    """
    global _db
    if str(db_path) == ":memory:":
        target = ":memory:"
    else:
        path = Path(db_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        target = str(path)

    db = await aiosqlite.connect(target)
    if target != ":memory:":
        await db.execute("PRAGMA journal_mode=WAL")
        if not await _check_integrity(db):
            await db.close()
            raise RuntimeError(f"Database at {target} is corrupt; restore it from a backup")
    await db.execute("PRAGMA synchronous=FULL")
    await db.execute("PRAGMA foreign_keys=ON")
    await db.execute("PRAGMA busy_timeout=5000")
    db.row_factory = aiosqlite.Row

    try:
        await run_migrations(db)
    except RuntimeError:
        await db.close()
        raise
    _db = db
    logger.info("Database initialised at %s", target)
    return db


async def close_db() -> None:
    """Checkpoint the WAL and close the active connection."""
    global _db
    if _db is not None:
        try:
            await _db.execute("PRAGMA wal_checkpoint(TRUNCATE)")
        except aiosqlite.Error:
            logger.warning("WAL checkpoint failed on close", exc_info=True)
        await _db.close()
        _db = None
        logger.info("Database connection closed")
