"""Import historical meter readings from a CSV export.

The CSV needs ``date``, ``time`` and ``reading`` columns, where ``reading``
is the raw meter display value (one decimal litre digit), e.g.::

    date,time,reading
    2025-01-12,17:10:00,1257445
    2025-02-12,06:00:00,1259837
"""

from __future__ import annotations

import argparse
import asyncio
import csv
import logging
from dataclasses import dataclass
from datetime import date, time
from pathlib import Path

from water_monitor.billing.readings import raw_to_kilolitres
from water_monitor.config.manager import ConfigManager
from water_monitor.db.engine import close_db, init_db
from water_monitor.db.repository import Repository
from water_monitor.logging.context import owner_context
from water_monitor.logging.structured import setup_logging

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("date", "time", "reading")


@dataclass
class HistoryRow:
    reading_date: date
    reading_time: time
    raw_value: int

    @property
    def value_kl(self) -> float:
        return raw_to_kilolitres(self.raw_value)


def load_history_csv(path: Path) -> list[HistoryRow]:
    """Parse and validate every row before anything is written.

    Raises:
        ValueError: on a missing column or an unparseable row.
    """
    rows: list[HistoryRow] = []
    with open(path, newline="") as f:
        reader = csv.DictReader(f)
        missing = [c for c in REQUIRED_COLUMNS if c not in (reader.fieldnames or [])]
        if missing:
            raise ValueError(f"{path}: missing column(s) {', '.join(missing)}")
        for line_no, record in enumerate(reader, start=2):
            try:
                rows.append(HistoryRow(
                    reading_date=date.fromisoformat(record["date"].strip()),
                    reading_time=time.fromisoformat(record["time"].strip()),
                    raw_value=int(record["reading"].strip()),
                ))
            except ValueError as e:
                raise ValueError(f"{path}:{line_no}: {e}") from e
    rows.sort(key=lambda r: (r.reading_date, r.reading_time))
    return rows


async def import_history(
    repo: Repository,
    owner_id: str,
    rows: list[HistoryRow],
    clear_existing: bool = False,
) -> int:
    """Store *rows* for *owner_id*. Returns the number imported."""
    if clear_existing:
        removed = await repo.clear_readings(owner_id)
        logger.info("Cleared %d existing reading(s) for %s", removed, owner_id)

    previous: HistoryRow | None = None
    for row in rows:
        await repo.add_reading(owner_id, row.value_kl, row.reading_date, row.reading_time)
        if previous is None:
            logger.info("Imported %.4fkL on %s", row.value_kl, row.reading_date)
        else:
            logger.info(
                "Imported %.4fkL on %s (usage %.3fkL)",
                row.value_kl, row.reading_date, row.value_kl - previous.value_kl,
            )
        previous = row
    return len(rows)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Import historical meter readings from CSV")
    p.add_argument("csv_path", type=Path)
    p.add_argument("--owner", default=None, help="owner id (default: dashboard.default_owner_id)")
    p.add_argument("--config", type=Path, default=Path("config.yaml"))
    p.add_argument("--defaults", type=Path, default=Path("config.defaults.yaml"))
    p.add_argument("--db-path", default=None, help="override db.path from config")
    p.add_argument("--clear-existing", action="store_true")
    return p.parse_args(argv)


async def main_async(args: argparse.Namespace) -> int:
    config = ConfigManager(args.defaults, args.config).load()
    owner_id = args.owner or config.dashboard.default_owner_id
    rows = load_history_csv(args.csv_path)

    db = await init_db(args.db_path or config.db.path)
    try:
        repo = Repository(db)
        with owner_context(owner_id, source=str(args.csv_path)):
            await repo.initialize_owner_settings(owner_id)
            count = await import_history(repo, owner_id, rows, clear_existing=args.clear_existing)
    finally:
        await close_db()
    logger.info("Import completed: %d reading(s) for %s", count, owner_id)
    return count


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(fmt="console")
    asyncio.run(main_async(args))


if __name__ == "__main__":
    main()
