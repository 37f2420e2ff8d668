"""Migration 001: Initial schema setup"""

from onefocus.schemas.migrator import Migration
from onefocus.schemas.definitions import BASE_COLUMNS, FOCUS_COLUMNS, FOCUS_INDEX, FOCUS_TABLE

migration = Migration("001", "Initial schema setup")

@migration.upgrade
def upgrade(conn):
    """Create the focus table and its timestamp index."""
    conn.execute("PRAGMA journal_mode=WAL")
    columns = ",\n    ".join(f"{name} {FOCUS_COLUMNS[name]}" for name in BASE_COLUMNS)
    conn.execute(f"CREATE TABLE IF NOT EXISTS {FOCUS_TABLE} (\n    {columns}\n)")
    conn.execute(f"CREATE INDEX IF NOT EXISTS {FOCUS_INDEX} ON {FOCUS_TABLE}(focused_at)")

@migration.validate
def validate(conn):
    """Validate migration can be applied."""
    conn.execute("SELECT 1")
