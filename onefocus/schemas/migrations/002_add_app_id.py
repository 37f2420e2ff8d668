"""Migration 002: Record which editor produced each focus event"""

from onefocus.schemas.migrator import Migration, add_column
from onefocus.schemas.definitions import FOCUS_COLUMNS, FOCUS_TABLE

migration = Migration("002", "Add app_id column")

@migration.upgrade
def upgrade(conn):
    # Stores written by older builds may already carry the column.
    add_column(conn, FOCUS_TABLE, "app_id", FOCUS_COLUMNS["app_id"])
