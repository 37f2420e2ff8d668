"""Schema migration management.

This module handles schema migrations for the focus history store.
It provides:
1. Version tracking through SQLite's ``user_version`` pragma
2. Ordered forward migrations loaded from the migrations directory
3. Safe schema evolution (re-adding an existing column is not an error)
"""

import importlib.util
import logging
import sqlite3
from pathlib import Path
from typing import Callable, Dict, List, Optional

from onefocus.utils.exceptions import MigrationError

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"

class Migration:
    """Represents a single schema migration."""

    def __init__(self, version: str, description: str):
        """Initialize a migration.

        Args:
            version: Version identifier (e.g., "001")
            description: Description of what this migration does
        """
        self.version = version
        self.description = description
        self.upgrade_steps: List[Callable[[sqlite3.Connection], None]] = []
        self.validate_steps: List[Callable[[sqlite3.Connection], None]] = []

    def upgrade(self, step: Callable) -> Callable:
        """Decorator to add an upgrade step.

        Args:
            step: Function that performs the upgrade

        Returns:
            The decorated function
        """
        self.upgrade_steps.append(step)
        return step

    def validate(self, step: Callable) -> Callable:
        """Decorator to add a validation step, run before the upgrade steps."""
        self.validate_steps.append(step)
        return step


def add_column(conn: sqlite3.Connection, table: str, column: str, declaration: str) -> bool:
    """Adds a column, treating an already existing column as success.

    Returns:
        True when the column was added, False when it already existed.

    Raises:
        sqlite3.OperationalError: For any failure other than a duplicate column.
    """
    try:
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {declaration}")
    except sqlite3.OperationalError as e:
        if "duplicate column name" in str(e).lower():
            logger.debug(f"Column {table}.{column} already exists")
            return False
        raise
    return True


class MigrationManager:
    """Manages schema migrations."""

    def __init__(self, migrations_dir: Optional[Path] = None):
        self.migrations_dir = Path(migrations_dir) if migrations_dir else MIGRATIONS_DIR
        self.migrations: Dict[str, Migration] = {}
        self._load_migrations()

    def _load_migrations(self) -> None:
        """Load all migration files from the migrations directory."""
        if not self.migrations_dir.exists():
            return

        for file in sorted(self.migrations_dir.glob("*.py")):
            if file.name.startswith("_"):
                continue

            spec = importlib.util.spec_from_file_location(
                f"onefocus_migration_{file.stem}",
                str(file)
            )
            if spec and spec.loader:
                module = importlib.util.module_from_spec(spec)
                spec.loader.exec_module(module)

                if hasattr(module, "migration"):
                    self.migrations[module.migration.version] = module.migration

    @property
    def latest_version(self) -> int:
        return max((int(v) for v in self.migrations), default=0)

    @staticmethod
    def current_version(conn: sqlite3.Connection) -> int:
        return conn.execute("PRAGMA user_version").fetchone()[0]

    def get_migrations(self, current: int) -> List[Migration]:
        """Get migrations newer than the given version, oldest first."""
        versions = sorted(self.migrations.keys(), key=int)
        return [self.migrations[v] for v in versions if int(v) > current]

    def migrate(self, conn: sqlite3.Connection) -> int:
        """Apply pending migrations.

        Args:
            conn: Open connection in autocommit mode

        Returns:
            The schema version after migrating

        Raises:
            MigrationError: If a migration fails
        """
        current = self.current_version(conn)
        pending = self.get_migrations(current)
        if not pending:
            logger.debug(f"Schema is up to date at version {current}")
            return current

        for migration in pending:
            target = int(migration.version)
            try:
                logger.info(f"Migrating focus store from {current} to {target}: {migration.description}")

                for step in migration.validate_steps:
                    step(conn)
                for step in migration.upgrade_steps:
                    step(conn)

                conn.execute(f"PRAGMA user_version = {target}")
                current = target

            except Exception as e:
                raise MigrationError(
                    f"Failed to migrate to version {target}: {str(e)}"
                ) from e

        logger.info("Migration complete")
        return current
