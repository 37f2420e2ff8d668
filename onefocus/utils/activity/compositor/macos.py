"""AppleScript backed window automation for macOS.

Every primitive is a short script sent to ``osascript`` on stdin and talks to
System Events. Reading window titles and raising windows requires the
Accessibility permission for the host application.
"""

import asyncio
import logging
import platform
import re
from typing import List, Optional

from onefocus.schemas.definitions import ProcessState
from onefocus.utils.activity.compositor.base_compositor import BaseCompositor
from onefocus.utils.exceptions import AutomationError, PermissionDeniedError, PlatformUnsupportedError

logger = logging.getLogger(__name__)

FIELD_DELIMITER = "__1F_SPLIT__"

# Messages and error numbers System Events uses when automation is refused
PERMISSION_PATTERNS = re.compile(
    r"assistive access|not authori[sz]ed|not allowed|\(-1743\)|\(-25211\)|\(-1719\)",
    re.IGNORECASE
)

def escape_applescript_string(value: Optional[str]) -> str:
    """Escape a value for use inside an AppleScript string literal."""
    if not value:
        return ""
    return value.replace("\\", "\\\\").replace('"', '\\"')

def is_permission_error(message: str) -> bool:
    return bool(PERMISSION_PATTERNS.search(message or ""))

class MacOSCompositor(BaseCompositor):
    def __init__(self, executable: str = "osascript"):
        self.executable = executable

    def is_supported(self) -> bool:
        return platform.system() == "Darwin"

    async def run_script(self, script: str) -> str:
        """Run an AppleScript and return its stdout without the trailing newline.

        Raises:
            PlatformUnsupportedError: Off macOS or when osascript is missing
            PermissionDeniedError: When the OS refuses automation
            AutomationError: For any other non-zero exit
        """
        if not self.is_supported():
            raise PlatformUnsupportedError()

        try:
            proc = await asyncio.create_subprocess_exec(
                self.executable,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except FileNotFoundError as e:
            raise PlatformUnsupportedError(f"{self.executable} is not available: {e}") from e

        stdout, stderr = await proc.communicate(script.encode("utf-8"))
        if proc.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip() or \
                f"{self.executable} exited with code {proc.returncode}"
            if is_permission_error(message):
                raise PermissionDeniedError(message)
            raise AutomationError(message, returncode=proc.returncode, stderr=message)

        return stdout.decode("utf-8", errors="replace").rstrip("\n")

    async def process_state(self, process_name: str) -> ProcessState:
        name = escape_applescript_string(process_name)
        script = f'''
            tell application "System Events"
                if not (exists process "{name}") then return "missing"
                tell process "{name}"
                    return ((frontmost as text) & "{FIELD_DELIMITER}" & ((count of windows) as text))
                end tell
            end tell
        '''
        output = (await self.run_script(script)).strip()
        if output == "missing":
            return ProcessState(exists=False)

        frontmost, _, count = output.partition(FIELD_DELIMITER)
        try:
            window_count = int(count.strip())
        except ValueError:
            raise AutomationError(f"Unexpected process state output for {process_name}: {output!r}")
        return ProcessState(exists=True, frontmost=frontmost.strip() == "true", window_count=window_count)

    async def front_window_title(self, process_name: str) -> Optional[str]:
        name = escape_applescript_string(process_name)
        script = f'''
            tell application "System Events"
                tell process "{name}"
                    if (count of windows) is 0 then return ""
                    return (name of front window) as text
                end tell
            end tell
        '''
        title = (await self.run_script(script)).strip()
        if not title or title == "missing value":
            return None
        return title

    async def window_titles(self, process_name: str) -> List[str]:
        name = escape_applescript_string(process_name)
        script = f'''
            set titles to {{}}
            tell application "System Events"
                tell process "{name}"
                    repeat with w in windows
                        set end of titles to ((name of w) as text)
                    end repeat
                end tell
            end tell
            set AppleScript's text item delimiters to "{FIELD_DELIMITER}"
            return titles as text
        '''
        output = await self.run_script(script)
        if not output:
            return []
        return output.split(FIELD_DELIMITER)

    async def raise_window(self, process_name: str, title: str) -> bool:
        name = escape_applescript_string(process_name)
        window_name = escape_applescript_string(title)
        script = f'''
            tell application "System Events"
                tell process "{name}"
                    set matching to (windows whose name is "{window_name}")
                    if (count of matching) is 0 then return "missing"
                    set frontmost to true
                    perform action "AXRaise" of (item 1 of matching)
                    set frontmost to true
                    return "raised"
                end tell
            end tell
        '''
        result = (await self.run_script(script)).strip()
        if result != "raised":
            logger.debug(f"No window {title!r} left in {process_name}")
            return False
        logger.debug(f"Raised {process_name} window {title!r}")
        return True
