"""Running external commands with their output streamed to the host."""

import asyncio
import logging
import os
from typing import Callable, List, Union

from onefocus.utils.exceptions import CommandError

logger = logging.getLogger(__name__)

async def _pump(stream: asyncio.StreamReader, sink: Callable[[str], None]) -> None:
    while True:
        line = await stream.readline()
        if not line:
            break
        sink(line.decode("utf-8", errors="replace").rstrip("\r\n"))

async def _terminate(proc: asyncio.subprocess.Process, pumps: List[asyncio.Future]) -> None:
    for pump in pumps:
        pump.cancel()
    if proc.returncode is None:
        proc.kill()
    await proc.wait()

async def run_command(command: Union[str, List[str]], cwd, sink: Callable[[str], None]) -> None:
    """Run a command in ``cwd`` and stream stdout and stderr lines to ``sink``.

    A string runs through the shell, a list is executed directly.

    Raises:
        CommandError: If the command cannot be started, its output cannot be
            read or it exits non-zero. A command whose output fails is killed.
    """
    display = command if isinstance(command, str) else " ".join(command)
    sink(f"> {display}")
    try:
        if isinstance(command, str):
            proc = await asyncio.create_subprocess_shell(
                command,
                cwd=str(cwd),
                env=os.environ.copy(),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        else:
            proc = await asyncio.create_subprocess_exec(
                *command,
                cwd=str(cwd),
                env=os.environ.copy(),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
    except OSError as e:
        raise CommandError(f"Failed to start {display}: {e}") from e

    pumps = [asyncio.ensure_future(_pump(proc.stdout, sink)), asyncio.ensure_future(_pump(proc.stderr, sink))]
    try:
        await asyncio.gather(*pumps)
    except Exception as e:
        await _terminate(proc, pumps)
        raise CommandError(f"Failed reading output of {display}: {e}") from e
    except asyncio.CancelledError:
        await _terminate(proc, pumps)
        raise

    returncode = await proc.wait()
    if returncode != 0:
        raise CommandError(f"Exited with code {returncode}", returncode=returncode)
    logger.debug(f"{display} finished in {cwd}")
