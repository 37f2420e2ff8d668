"""Window tracking functionality.

This module provides the WindowBridge class, which maps supported editor
applications to their OS processes, reports the frontmost editor window
and raises a window matching a recorded focus event.

Core features:
- Supported application table, tried in a fixed order
- Frontmost window lookup (best effort, never raises)
- Window matching and raising by title or workspace name
"""

import logging
from typing import Dict, List, Optional

from onefocus.schemas.definitions import CandidateWindow, FrontmostWindow, SupportedApplication, WindowTarget
from onefocus.utils.activity.compositor.base_compositor import BaseCompositor
from onefocus.utils.exceptions import (
    NoMatchingWindowError, NoSupportedApplicationRunningError,
    PlatformUnsupportedError, WindowTrackingError
)
from onefocus.utils.transformation import matches_window

logger = logging.getLogger(__name__)

# Several display names may belong to one application id
SUPPORTED_APPLICATIONS: List[SupportedApplication] = [
    SupportedApplication("cursor", "Cursor"),
    SupportedApplication("cursor-insiders", "Cursor - Insiders"),
    SupportedApplication("vscode", "Code"),
    SupportedApplication("vscode", "Visual Studio Code"),
    SupportedApplication("vscode-insiders", "Code - Insiders"),
    SupportedApplication("vscode-insiders", "Visual Studio Code - Insiders"),
]

# Application names reported by the host itself
APP_NAME_ALIASES: Dict[str, str] = {
    "Cursor": "cursor",
    "Cursor - Insiders": "cursor-insiders",
    "Visual Studio Code": "vscode",
    "Code - OSS": "vscode",
    "VSCodium": "vscode",
    "Code - Insiders": "vscode-insiders",
    "Visual Studio Code - Insiders": "vscode-insiders",
}

def infer_app_id(app_name: Optional[str]) -> Optional[str]:
    """Map the host's application name to a supported application id."""
    if not app_name:
        return None
    return APP_NAME_ALIASES.get(app_name)

def is_supported_app_id(value: Optional[str]) -> bool:
    return any(app.app_id == value for app in SUPPORTED_APPLICATIONS)

class WindowBridge:
    """Finds and raises editor windows through a compositor."""

    def __init__(self, compositor: BaseCompositor,
                 applications: Optional[List[SupportedApplication]] = None) -> None:
        self.compositor = compositor
        self.applications = list(applications or SUPPORTED_APPLICATIONS)

    def is_supported(self) -> bool:
        return self.compositor.is_supported()

    def list_supported_applications(self) -> List[SupportedApplication]:
        return list(self.applications)

    def ordered_candidates(self, preferred_app_id: Optional[str] = None) -> List[SupportedApplication]:
        """Applications of the preferred id first, then the rest in table order."""
        if not preferred_app_id:
            return list(self.applications)
        preferred = [app for app in self.applications if app.app_id == preferred_app_id]
        rest = [app for app in self.applications if app.app_id != preferred_app_id]
        return preferred + rest

    async def get_frontmost_window(self) -> Optional[FrontmostWindow]:
        """Title and app id of the supported application holding input focus.

        Returns:
            FrontmostWindow, or None when no supported editor is frontmost,
            it has no windows, or automation is unavailable.
        """
        if not self.is_supported():
            return None

        try:
            for app in self.applications:
                state = await self.compositor.process_state(app.process_name)
                if not state.exists or not state.frontmost:
                    continue
                if state.window_count == 0:
                    return None

                title = await self.compositor.front_window_title(app.process_name)
                if not title or not title.strip():
                    return None
                return FrontmostWindow(title=title.strip(), app_id=app.app_id)
        except WindowTrackingError as e:
            logger.warning(f"Failed to read frontmost window: {e}")
            return None

        return None

    async def focus_window(self, target: WindowTarget) -> CandidateWindow:
        """Raise the first live window matching the target.

        Applications under ``target.preferred_app_id`` are tried first. Within
        an application windows are checked in OS order and only the first match
        is raised, by its exact title. A match that is gone by the time it is
        raised is skipped.

        Raises:
            PlatformUnsupportedError: Window automation is unavailable
            PermissionDeniedError: The OS refused automation
            AutomationError: Any other automation failure
            NoMatchingWindowError: Editors run but no window matched
            NoSupportedApplicationRunningError: No supported editor runs
        """
        if not self.is_supported():
            raise PlatformUnsupportedError()

        tried_process = False
        for app in self.ordered_candidates(target.preferred_app_id):
            state = await self.compositor.process_state(app.process_name)
            if not state.exists:
                continue
            tried_process = True
            if state.window_count == 0:
                continue

            titles = await self.compositor.window_titles(app.process_name)
            for title in titles:
                if not matches_window(title, target.title, target.workspace_name_hint):
                    continue
                # Windows may close or rename between listing and raising
                if not await self.compositor.raise_window(app.process_name, title):
                    continue
                logger.info(f"Focused {app.process_name} window {title!r}")
                return CandidateWindow(app_id=app.app_id, process_name=app.process_name, title=title)

        if tried_process:
            raise NoMatchingWindowError()
        raise NoSupportedApplicationRunningError()
