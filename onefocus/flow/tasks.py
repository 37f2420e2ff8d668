"""Declarative tasks read from a project's flow.toml.

Tasks are ``[[tasks]]`` tables with a ``name`` and a ``command`` and an
optional ``description``. Entries missing either required key are skipped.
"""

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import aiofiles
import aiofiles.os

from onefocus.utils.exceptions import TaskDefinitionError

logger = logging.getLogger(__name__)

FLOW_FILE_NAME = "flow.toml"
MAX_SEARCH_DEPTH = 12

@dataclass
class FlowTask:
    name: str
    command: str
    description: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.name} - {self.description}" if self.description else self.name

@dataclass
class FlowTaskResult:
    flow_root: Path
    tasks: List[FlowTask] = field(default_factory=list)

async def resolve_start_path(start_path) -> Optional[Path]:
    """A directory resolves to itself, a file to its parent directory."""
    if not start_path:
        return None
    path = Path(start_path)
    if await aiofiles.os.path.isdir(path):
        return path
    if await aiofiles.os.path.isfile(path):
        return path.parent
    return None

async def find_flow_file(start: Path, file_name: str = FLOW_FILE_NAME,
                         max_depth: int = MAX_SEARCH_DEPTH) -> Optional[Path]:
    """Walk up from ``start`` looking for the flow file."""
    current = start.resolve()
    for _ in range(max_depth):
        candidate = current / file_name
        if await aiofiles.os.path.isfile(candidate):
            return candidate
        if current.parent == current:
            break
        current = current.parent
    return None

def parse_flow_tasks(content: str) -> List[FlowTask]:
    """Parse tasks from flow.toml content.

    Raises:
        TaskDefinitionError: If the content is not valid TOML
    """
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise TaskDefinitionError(f"flow.toml is not valid TOML: {e}") from e

    entries = data.get("tasks", [])
    if not isinstance(entries, list):
        return []

    tasks = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        name, command = entry.get("name"), entry.get("command")
        if not isinstance(name, str) or not isinstance(command, str) or not name or not command:
            continue
        description = entry.get("description")
        tasks.append(FlowTask(
            name=name,
            command=command,
            description=description if isinstance(description, str) else None,
        ))
    return tasks

async def load_flow_tasks(start_path, file_name: str = FLOW_FILE_NAME,
                          max_depth: int = MAX_SEARCH_DEPTH) -> FlowTaskResult:
    """Locate flow.toml above ``start_path`` and parse its tasks.

    Raises:
        TaskDefinitionError: No start path, no flow file, invalid file or no tasks
    """
    initial = await resolve_start_path(start_path)
    if initial is None:
        raise TaskDefinitionError(f"No workspace folder available to locate {file_name}.")

    flow_file = await find_flow_file(initial, file_name, max_depth)
    if flow_file is None:
        raise TaskDefinitionError(f"{file_name} not found in this workspace.")

    async with aiofiles.open(flow_file, "r", encoding="utf-8") as f:
        content = await f.read()

    tasks = parse_flow_tasks(content)
    if not tasks:
        raise TaskDefinitionError(f"No tasks with a name and command found in {flow_file}.")

    logger.debug(f"Loaded {len(tasks)} tasks from {flow_file}")
    return FlowTaskResult(flow_root=flow_file.parent, tasks=tasks)
