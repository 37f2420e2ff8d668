"""Focus event recording.

This module provides the FocusCoordinator class, which reacts to host
focus notifications, reads the frontmost editor window and persists a
focus event. Rapid repeats of the same window are debounced.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Callable, Optional

from onefocus.database.database_interface import FocusStoreInterface
from onefocus.interfaces.host import HostInterface
from onefocus.schemas.definitions import FocusEvent
from onefocus.utils.activity.last_window import write_last_window_marker
from onefocus.utils.activity.windows import WindowBridge
from onefocus.utils.exceptions import StoreUnavailableError
from onefocus.utils.transformation import is_dot_suffixed, window_label, window_signature

logger = logging.getLogger(__name__)

DEBOUNCE_MS = 500

class FocusCoordinator:
    """Records focus events for one host session."""

    def __init__(self, store: FocusStoreInterface, bridge: WindowBridge, host: HostInterface,
                 session_id: str, debounce_ms: int = DEBOUNCE_MS,
                 marker_dir: Optional[Path] = None,
                 clock: Callable[[], float] = time.monotonic):
        """Initialize the coordinator.

        Args:
            store: Focus history store
            bridge: Window bridge used to read the frontmost window
            host: Host providing the active file, workspace and messages
            session_id: Identifier of this host session
            debounce_ms: Window during which a repeated signal is ignored
            marker_dir: Directory of the last-window marker; None disables it
            clock: Monotonic clock in seconds
        """
        self.store = store
        self.bridge = bridge
        self.host = host
        self.session_id = session_id
        self.debounce_ms = debounce_ms
        self.marker_dir = marker_dir
        self._clock = clock

        self.last_signature: Optional[str] = None
        self.last_logged_at: Optional[float] = None
        self.store_warning_shown = False
        self._lock = asyncio.Lock()

    async def on_window_state_changed(self, focused: bool) -> None:
        """Host callback for window focus changes."""
        if not focused:
            return
        await self.log_current_window(force=False)

    async def log_current_window(self, force: bool = False) -> Optional[FocusEvent]:
        """Record the frontmost editor window.

        Args:
            force: Bypass the debounce and report problems to the user

        Returns:
            The recorded event, or None when nothing was recorded
        """
        async with self._lock:
            return await self._log_current_window(force)

    def is_debounced(self, signature: str, now: float) -> bool:
        if signature != self.last_signature or self.last_logged_at is None:
            return False
        return (now - self.last_logged_at) * 1000 < self.debounce_ms

    async def _log_current_window(self, force: bool) -> Optional[FocusEvent]:
        if not self.bridge.is_supported():
            if force:
                await self.host.show_warning("1Focus: window tracking is only supported on macOS.")
            return None

        frontmost = await self.bridge.get_frontmost_window()
        if not frontmost or not frontmost.title or not frontmost.app_id:
            if force:
                await self.host.show_warning("1Focus: unable to read the frontmost Cursor or VS Code window.")
            return None

        signature = window_signature(frontmost.app_id, frontmost.title)
        now = self._clock()
        if not force and self.is_debounced(signature, now):
            logger.debug(f"Skipping repeated focus signal for {frontmost.title!r}")
            return None
        self.last_signature = signature
        self.last_logged_at = now

        try:
            event = await self.store.record_focus_event(
                session_id=self.session_id,
                window_title=frontmost.title,
                workspace_path=self.host.get_workspace_path(),
                active_file=self.host.get_active_file(),
                app_id=frontmost.app_id,
            )
        except StoreUnavailableError as e:
            logger.warning(f"Focus store unavailable, not persisting: {e}")
            if not self.store_warning_shown:
                self.store_warning_shown = True
                await self.host.show_warning(f"1Focus: {e}")
            return None

        if event is None:
            return None

        await self._write_marker(frontmost.title)
        if force:
            await self.host.show_info(f"1Focus: logged window {frontmost.title}")
        return event

    async def _write_marker(self, window_title: str) -> None:
        if self.marker_dir is None:
            return
        label = window_label(window_title)
        if is_dot_suffixed(label):
            return
        try:
            await write_last_window_marker(label, self.marker_dir)
        except OSError as e:
            logger.warning(f"Failed to write last window marker: {e}")
