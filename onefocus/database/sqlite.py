"""SQLite implementation of the focus history store.

The store keeps a bounded ring of focus events in a single table. Every
insert prunes the table back to ``max_rows`` inside the same transaction, so
readers never observe more rows than the bound or a half-written insert.

Blocking sqlite3 calls run in the default executor; the event loop never
waits on the database file.
"""

import asyncio
import functools
import logging
import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from onefocus.database.database_interface import FocusStoreInterface
from onefocus.schemas.definitions import FOCUS_TABLE, MAX_ROWS, RECORD_COLUMNS, FocusEvent
from onefocus.schemas.migrator import MigrationManager
from onefocus.utils.exceptions import DatabaseError, MigrationError, StoreUnavailableError
from onefocus.utils.transformation import extract_workspace_name

logger = logging.getLogger(__name__)

_SELECT_COLUMNS = ", ".join(RECORD_COLUMNS)

def _now_ms() -> int:
    return int(time.time() * 1000)

class SQLiteFocusStore(FocusStoreInterface):
    """Focus history stored in an embedded SQLite file."""

    def __init__(self, db_path, max_rows: int = MAX_ROWS,
                 migrator: Optional[MigrationManager] = None,
                 clock: Callable[[], int] = _now_ms):
        """Initialize the store. Nothing touches the disk until first use.

        Args:
            db_path: Location of the SQLite file; parent directories are created
            max_rows: Number of most recent events retained
            migrator: Migration manager, defaults to the bundled migrations
            clock: Source of millisecond timestamps for new events
        """
        self.db_path = Path(db_path).expanduser()
        self.max_rows = max_rows
        self.migrator = migrator or MigrationManager()
        self._clock = clock
        self._last_focused_at = 0
        self._init_task: Optional[asyncio.Future] = None

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open an autocommit connection; transactions are explicit."""
        try:
            conn = sqlite3.connect(str(self.db_path), timeout=5.0, isolation_level=None)
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Unable to open focus store at {self.db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    async def _run(self, func: Callable, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args))

    async def ensure_initialized(self) -> None:
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._run(self._initialize_sync))
            self._init_task.add_done_callback(self._reset_failed_init)
        # Cancelling one caller leaves setup running for the others
        await asyncio.shield(self._init_task)

    def _reset_failed_init(self, task: asyncio.Future) -> None:
        if task.cancelled() or task.exception() is not None:
            # Let the next caller retry from scratch
            if self._init_task is task:
                self._init_task = None

    def _initialize_sync(self) -> None:
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreUnavailableError(f"Unable to create focus store directory {self.db_path.parent}: {e}") from e

        with self._connect() as conn:
            try:
                version = self.migrator.migrate(conn)
            except MigrationError as e:
                raise DatabaseError(f"Focus store schema setup failed: {e}") from e
        logger.debug(f"Focus store ready at {self.db_path} (schema version {version})")

    async def record_focus_event(self, session_id: str, window_title: str,
                                 workspace_path: Optional[str] = None,
                                 active_file: Optional[str] = None,
                                 app_id: Optional[str] = None) -> Optional[FocusEvent]:
        if not window_title or not window_title.strip():
            return None

        await self.ensure_initialized()

        # Timestamps never go backwards, even if the wall clock does
        focused_at = max(self._clock(), self._last_focused_at)
        self._last_focused_at = focused_at

        event = FocusEvent(
            session_id=session_id,
            window_title=window_title,
            workspace_name=extract_workspace_name(window_title),
            workspace_path=workspace_path,
            active_file=active_file,
            focused_at=focused_at,
            app_id=app_id,
        )
        await self._run(self._insert_sync, event)
        logger.debug(f"Recorded focus event for {window_title!r} ({app_id})")
        return event

    def _insert_sync(self, event: FocusEvent) -> None:
        placeholders = ", ".join("?" for _ in RECORD_COLUMNS)
        values = tuple(getattr(event, column) for column in RECORD_COLUMNS)

        with self._connect() as conn:
            try:
                conn.execute("BEGIN IMMEDIATE")
                conn.execute(
                    f"INSERT INTO {FOCUS_TABLE} ({_SELECT_COLUMNS}) VALUES ({placeholders})",
                    values
                )
                conn.execute(
                    f"""
                    DELETE FROM {FOCUS_TABLE}
                    WHERE id NOT IN (
                        SELECT id FROM {FOCUS_TABLE} ORDER BY focused_at DESC, id DESC LIMIT ?
                    )
                    """,
                    (self.max_rows,)
                )
                conn.execute("COMMIT")
            except sqlite3.Error as e:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise DatabaseError(f"Failed to record focus event: {e}") from e

    async def get_last_relevant_window(self, exclude_session_id: str,
                                       app_id: Optional[str] = None) -> Optional[FocusEvent]:
        await self.ensure_initialized()
        return await self._run(self._query_last_sync, exclude_session_id, app_id)

    def _query_last_sync(self, exclude_session_id: str, app_id: Optional[str]) -> Optional[FocusEvent]:
        query = f"""
            SELECT {_SELECT_COLUMNS} FROM {FOCUS_TABLE}
            WHERE session_id != ?
              AND window_title IS NOT NULL AND window_title != ''
              AND (workspace_name IS NULL OR workspace_name = '' OR substr(workspace_name, -1) != '.')
        """
        params: list = [exclude_session_id]
        if app_id:
            query += " AND app_id = ?"
            params.append(app_id)
        query += " ORDER BY focused_at DESC, id DESC LIMIT 1"

        with self._connect() as conn:
            try:
                row = conn.execute(query, params).fetchone()
            except sqlite3.Error as e:
                raise DatabaseError(f"Failed to query focus history: {e}") from e
        return FocusEvent.from_row(row) if row else None

    async def get_recent_events(self, limit: int = 20) -> List[FocusEvent]:
        await self.ensure_initialized()
        return await self._run(self._recent_sync, limit)

    def _recent_sync(self, limit: int) -> List[FocusEvent]:
        with self._connect() as conn:
            try:
                rows = conn.execute(
                    f"SELECT {_SELECT_COLUMNS} FROM {FOCUS_TABLE} WHERE window_title IS NOT NULL "
                    f"ORDER BY focused_at DESC, id DESC LIMIT ?",
                    (limit,)
                ).fetchall()
            except sqlite3.Error as e:
                raise DatabaseError(f"Failed to read focus history: {e}") from e
        return [FocusEvent.from_row(row) for row in rows]

    async def count_events(self) -> int:
        await self.ensure_initialized()
        return await self._run(self._count_sync)

    def _count_sync(self) -> int:
        with self._connect() as conn:
            try:
                return conn.execute(f"SELECT COUNT(*) FROM {FOCUS_TABLE}").fetchone()[0]
            except sqlite3.Error as e:
                raise DatabaseError(f"Failed to count focus events: {e}") from e
