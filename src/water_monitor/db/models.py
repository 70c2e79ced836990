"""SQL table definitions for readings and per-owner settings."""

SCHEMA_VERSION = 1

TABLES = [
    """
    CREATE TABLE IF NOT EXISTS schema_version (
        id      INTEGER PRIMARY KEY CHECK (id = 1),
        version INTEGER NOT NULL
    )
    """,

    # ── Readings ────────────────────────────────────────────
    """
    CREATE TABLE IF NOT EXISTS readings (
        id              INTEGER PRIMARY KEY AUTOINCREMENT,
        owner_id        TEXT NOT NULL,
        reading_value   REAL NOT NULL CHECK (reading_value >= 0),
        reading_date    TEXT NOT NULL,
        reading_time    TEXT NOT NULL,
        recorded_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_readings_owner ON readings(owner_id)",
    "CREATE INDEX IF NOT EXISTS idx_readings_owner_date ON readings(owner_id, reading_date)",

    # ── Settings ────────────────────────────────────────────
    """
    CREATE TABLE IF NOT EXISTS settings (
        id              INTEGER PRIMARY KEY AUTOINCREMENT,
        owner_id        TEXT NOT NULL,
        setting_key     TEXT NOT NULL,
        setting_value   TEXT NOT NULL,
        UNIQUE(owner_id, setting_key)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_settings_owner ON settings(owner_id)",
]
