from abc import ABC, abstractmethod
from typing import List, Optional

from onefocus.schemas.definitions import FocusEvent

class FocusStoreInterface(ABC):
    """Interface for focus history storage.

    This interface defines the contract for stores holding a bounded ring
    of focus events.
    Features:
    - Append with pruning to a fixed number of rows
    - Most-recent-relevant-window lookup with session and app filters
    - Lazy, idempotent initialization
    """

    @abstractmethod
    async def ensure_initialized(self) -> None:
        """Create the store and apply schema migrations if needed.

        Concurrent callers share a single initialization; a failed
        initialization may be retried by a later call.

        Raises:
            StoreUnavailableError: If the backing engine cannot be opened
            DatabaseError: If the schema cannot be created or migrated
        """
        pass

    @abstractmethod
    async def record_focus_event(self, session_id: str, window_title: str,
                                 workspace_path: Optional[str] = None,
                                 active_file: Optional[str] = None,
                                 app_id: Optional[str] = None) -> Optional[FocusEvent]:
        """Append one focus event and prune the store to its bound.

        Args:
            session_id: Host process instance producing the event
            window_title: Raw window title; blank titles are ignored
            workspace_path: Active project root, if known
            active_file: File open at focus time, if any
            app_id: Supported application that produced the event

        Returns:
            FocusEvent: The written row, or None when the title was blank

        Raises:
            StoreUnavailableError: If the backing engine cannot be opened
            DatabaseError: If the write fails
        """
        pass

    @abstractmethod
    async def get_last_relevant_window(self, exclude_session_id: str,
                                       app_id: Optional[str] = None) -> Optional[FocusEvent]:
        """Most recent event from another session that is worth returning to.

        Events whose workspace name ends with a dot are skipped.

        Args:
            exclude_session_id: Session whose own events are ignored
            app_id: Only consider events from this application

        Returns:
            FocusEvent or None when nothing qualifies
        """
        pass

    @abstractmethod
    async def get_recent_events(self, limit: int = 20) -> List[FocusEvent]:
        """Newest events first."""
        pass

    @abstractmethod
    async def count_events(self) -> int:
        pass
