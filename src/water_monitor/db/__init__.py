"""Database engine and repository for Water Monitor."""

from water_monitor.db.engine import close_db, init_db
from water_monitor.db.repository import Repository

__all__ = ["close_db", "init_db", "Repository"]
