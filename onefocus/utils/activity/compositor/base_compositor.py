# onefocus/utils/activity/compositor/base_compositor.py
import abc
from typing import List, Optional

from onefocus.schemas.definitions import ProcessState

class BaseCompositor(abc.ABC):
    """Abstract base class for OS window automation primitives.

    Processes are addressed by their OS-visible display name and windows by
    their 1-based position in the OS enumeration order.
    """

    @abc.abstractmethod
    def is_supported(self) -> bool:
        """Whether window automation is available on this platform."""
        raise NotImplementedError

    @abc.abstractmethod
    async def process_state(self, process_name: str) -> ProcessState:
        """Report whether a process exists, is frontmost, and how many windows it has.

        Args:
            process_name: OS-visible process display name.

        Returns:
            ProcessState with ``exists`` False when the process is not running.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def front_window_title(self, process_name: str) -> Optional[str]:
        """Title of the process's front window, or None if it has no windows."""
        raise NotImplementedError

    @abc.abstractmethod
    async def window_titles(self, process_name: str) -> List[str]:
        """Titles of all windows of a process, in OS enumeration order."""
        raise NotImplementedError

    @abc.abstractmethod
    async def raise_window(self, process_name: str, title: str) -> bool:
        """Bring the process to the front and raise its first window named ``title``.

        The lookup and the raise happen in one step. Returns False when no
        window of the process carries that exact title any more.
        """
        raise NotImplementedError
