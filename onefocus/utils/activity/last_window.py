"""Marker file naming the last focused editor window.

The marker directory holds exactly one file, named after the window label,
so other tools can read the last window with a directory listing.
"""

import logging
import os
import re
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os

logger = logging.getLogger(__name__)

DEFAULT_MARKER_DIR = Path.home() / ".db" / "1focus" / "vscode" / "last_window_open"

INVALID_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|]')

def sanitize_window_name(window_name: str) -> str:
    replaced = INVALID_FILENAME_CHARS.sub("_", window_name).strip()
    return replaced or "window"

async def write_last_window_marker(window_label: str, directory: Path = DEFAULT_MARKER_DIR) -> Optional[Path]:
    """Replace the marker directory contents with a file for ``window_label``.

    Returns:
        Path of the written marker, or None for a blank label.
    """
    trimmed = window_label.strip()
    if not trimmed:
        return None

    directory = Path(directory).expanduser()
    await aiofiles.os.makedirs(directory, exist_ok=True)

    for entry in await aiofiles.os.listdir(directory):
        try:
            await aiofiles.os.remove(os.path.join(directory, entry))
        except OSError as e:
            # Overwritten on the next write anyway
            logger.debug(f"Could not remove stale marker {entry}: {e}")

    file_path = directory / sanitize_window_name(trimmed)
    async with aiofiles.open(file_path, "w", encoding="utf-8") as f:
        await f.write(trimmed)
    return file_path
