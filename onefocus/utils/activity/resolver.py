"""Re-focusing the last relevant editor window."""

import logging
from typing import Optional

from onefocus.database.database_interface import FocusStoreInterface
from onefocus.schemas.definitions import FocusOutcome, WindowTarget
from onefocus.utils.activity.windows import WindowBridge
from onefocus.utils.exceptions import PermissionDeniedError
from onefocus.utils.transformation import extract_workspace_name

logger = logging.getLogger(__name__)

PERMISSION_HINT = (
    "Grant Accessibility and Automation access to your editor in "
    "System Settings > Privacy & Security, then try again."
)

class WindowResolver:
    """Looks up the last window from another session and raises it."""

    def __init__(self, store: FocusStoreInterface, bridge: WindowBridge):
        self.store = store
        self.bridge = bridge

    async def focus_last_window(self, current_session_id: str,
                                preferred_app_id: Optional[str] = None) -> FocusOutcome:
        """Raise the most recent relevant window recorded by another session.

        Returns:
            FocusOutcome with ``focused`` False when history has no candidate

        Raises:
            StoreUnavailableError: The focus store cannot be opened
            PermissionDeniedError: Automation was refused; the message carries a hint
            WindowTrackingError: Any other failure to locate or raise the window
        """
        record = await self.store.get_last_relevant_window(current_session_id)
        if record is None:
            return FocusOutcome(focused=False, message="No previous window found to focus.")

        target = WindowTarget(
            title=record.window_title,
            workspace_name_hint=extract_workspace_name(record.window_title),
            preferred_app_id=record.app_id or preferred_app_id,
        )
        logger.debug(f"Focusing last window {target}")

        try:
            window = await self.bridge.focus_window(target)
        except PermissionDeniedError as e:
            raise PermissionDeniedError(f"{e} {PERMISSION_HINT}") from e

        return FocusOutcome(
            focused=True,
            message=f"Focused {window.title}",
            record=record,
            window=window,
        )
