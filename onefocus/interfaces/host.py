"""Interface definition for the host application.

The focus tracker runs embedded in an editor host. This module defines what
it needs from that host.
Features:
- Window focus notifications
- Active file and workspace lookup
- Command registration
- An append-only output sink and user-facing messages
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional, Sequence

FocusCallback = Callable[[bool], Awaitable[None]]
CommandHandler = Callable[[], Awaitable[None]]

class HostInterface(ABC):
    """Interface to the editor host.

    Implementations adapt a concrete host (an extension host bridge, or the
    bundled terminal host) to the operations used by the focus tracker.
    """

    @abstractmethod
    def on_window_state_change(self, callback: FocusCallback) -> None:
        """Subscribe to host window focus changes.

        Args:
            callback: Coroutine function called with True when the host
                window gains focus and False when it loses it
        """
        pass

    @abstractmethod
    def is_focused(self) -> bool:
        """Whether the host window currently has focus."""
        pass

    @abstractmethod
    def get_active_file(self) -> Optional[str]:
        """Path of the file in the active editor, if any."""
        pass

    @abstractmethod
    def get_workspace_path(self) -> Optional[str]:
        """Root path of the workspace folder holding the active file.

        Falls back to the first workspace folder when no file is active.
        """
        pass

    @abstractmethod
    def get_app_name(self) -> Optional[str]:
        """Display name of the host application (e.g. "Cursor")."""
        pass

    @abstractmethod
    def register_command(self, command_id: str, handler: CommandHandler) -> None:
        """Expose a user-invocable command."""
        pass

    @abstractmethod
    def append_line(self, text: str) -> None:
        """Write one line to the output sink."""
        pass

    @abstractmethod
    def clear_output(self) -> None:
        pass

    @abstractmethod
    def show_log(self) -> None:
        """Reveal the output sink to the user."""
        pass

    @abstractmethod
    async def show_info(self, message: str) -> None:
        pass

    @abstractmethod
    async def show_warning(self, message: str) -> None:
        pass

    @abstractmethod
    async def show_error(self, message: str, *actions: str) -> Optional[str]:
        """Show an error with optional action buttons.

        Returns:
            The chosen action, or None when dismissed
        """
        pass

    @abstractmethod
    async def pick(self, items: Sequence[Any], placeholder: str = "") -> Optional[Any]:
        """Let the user choose one of ``items``; None when cancelled."""
        pass
