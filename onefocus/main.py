"""Main entry point for the focus tracker."""

import os
import argparse
import asyncio
import signal
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from InquirerPy import inquirer
from InquirerPy.base.control import Choice

from onefocus.interfaces.host import CommandHandler, FocusCallback, HostInterface
from onefocus.utils.activity.activity_manager import (
    COMMAND_COMMIT_PUSH, COMMAND_FOCUS_LAST_WINDOW,
    COMMAND_LOG_CURRENT_WINDOW, COMMAND_RUN_FLOW_TASK,
    FocusActivityManager
)
from onefocus.utils.activity.windows import WindowBridge
from onefocus.utils.config import get_config, load_config_and_logging
from onefocus.utils.logging import get_logger

logger = get_logger(__name__)

class TerminalHost(HostInterface):
    """Host backed by the terminal: prompts for input, prints for output.

    Window focus notifications come from polling the frontmost editor window.
    """

    def __init__(self, workspace_path: Optional[str] = None, app_name: Optional[str] = None):
        self.workspace_path = workspace_path or os.getcwd()
        self.app_name = app_name or os.getenv("ONEFOCUS_APP_NAME")
        self.commands: Dict[str, CommandHandler] = {}
        self.output: List[str] = []
        self._focus_callbacks: List[FocusCallback] = []

    def on_window_state_change(self, callback: FocusCallback) -> None:
        self._focus_callbacks.append(callback)

    def is_focused(self) -> bool:
        return False

    def get_active_file(self) -> Optional[str]:
        return None

    def get_workspace_path(self) -> Optional[str]:
        return self.workspace_path

    def get_app_name(self) -> Optional[str]:
        return self.app_name

    def register_command(self, command_id: str, handler: CommandHandler) -> None:
        self.commands[command_id] = handler

    async def run_command(self, command_id: str) -> None:
        await self.commands[command_id]()

    def append_line(self, text: str) -> None:
        self.output.append(text)
        print(text)

    def clear_output(self) -> None:
        self.output.clear()

    def show_log(self) -> None:
        print("\n".join(self.output[-200:]))

    async def show_info(self, message: str) -> None:
        print(message)

    async def show_warning(self, message: str) -> None:
        print(f"Warning: {message}")

    async def show_error(self, message: str, *actions: str) -> Optional[str]:
        print(f"Error: {message}")
        if not actions:
            return None
        choice = await inquirer.select(
            message="Next step:",
            choices=[*actions, "Dismiss"],
            default="Dismiss"
        ).execute_async()
        return None if choice == "Dismiss" else choice

    async def pick(self, items: Sequence[Any], placeholder: str = "") -> Optional[Any]:
        if not items:
            return None
        choices = [Choice(value=item, name=getattr(item, "label", str(item))) for item in items]
        choices.append(Choice(value=None, name="Cancel"))
        return await inquirer.select(
            message=placeholder or "Select:",
            choices=choices,
            default=None
        ).execute_async()

    async def watch_focus(self, bridge: WindowBridge, interval: float = 1.0) -> None:
        """Notify subscribers whenever the frontmost editor window changes."""
        last = None
        while True:
            frontmost = await bridge.get_frontmost_window()
            if frontmost and frontmost != last:
                for callback in self._focus_callbacks:
                    await callback(True)
            last = frontmost
            await asyncio.sleep(interval)


class OneFocusCLI:
    """Command line interface for the focus tracker."""

    def __init__(self, config: Dict[str, Any], host: TerminalHost, manager: FocusActivityManager):
        """Initialize the CLI interface."""
        self.config = config
        self.host = host
        self.manager = manager
        self.tracking_task: Optional[asyncio.Task] = None
        self.is_shutting_down = False

    @classmethod
    async def create(cls, config: Dict[str, Any]) -> 'OneFocusCLI':
        """Create and initialize a new CLI instance."""
        host = TerminalHost()
        manager = FocusActivityManager(config, host)
        await manager.start()
        return cls(config, host, manager)

    @property
    def tracking_active(self) -> bool:
        return self.tracking_task is not None and not self.tracking_task.done()

    async def _start_tracking(self):
        """Start polling the frontmost window and recording focus changes."""
        if not self.manager.bridge.is_supported():
            print("Window tracking is only supported on macOS.")
            return
        if not self.tracking_active:
            interval = get_config(self.config, "tracking.poll_interval", 1.0)
            self.tracking_task = asyncio.create_task(self.host.watch_focus(self.manager.bridge, interval))
            logger.info("Focus tracking started")

    async def _stop_tracking(self):
        if self.tracking_active:
            self.tracking_task.cancel()
            await asyncio.gather(self.tracking_task, return_exceptions=True)
            logger.info("Focus tracking stopped")
        self.tracking_task = None

    async def _show_history(self):
        try:
            events = await self.manager.store.get_recent_events(limit=20)
        except Exception as e:
            await self.manager.report_failure("Show history", e)
            return
        if not events:
            print("No focus events recorded yet.")
        for event in events:
            print(f"{event.focused_at}  {event.app_id or '-':<16} {event.window_title}")

    def open_file(self, filepath: Path):
        """Open file with system's default application."""
        try:
            subprocess.run(['open', str(filepath)])
        except OSError as e:
            logger.error(f"Failed to open {filepath}: {e}")

    def get_choices(self) -> List[str]:
        """Dynamically generate choices based on current state."""
        choices = ["Stop Tracking" if self.tracking_active else "Start Tracking"]
        choices.extend([
            "Log Current Window",
            "Focus Last Window",
            "Commit & Push",
            "Run Flow Task",
            "Show Recent History",
            "Open Log",
            "Exit"
        ])
        return choices

    async def handle_choice(self, choice: str):
        """Handle user's choice."""
        if choice == "Start Tracking":
            await self._start_tracking()
        elif choice == "Stop Tracking":
            await self._stop_tracking()
        elif choice == "Log Current Window":
            await self.host.run_command(COMMAND_LOG_CURRENT_WINDOW)
        elif choice == "Focus Last Window":
            await self.host.run_command(COMMAND_FOCUS_LAST_WINDOW)
        elif choice == "Commit & Push":
            await self.host.run_command(COMMAND_COMMIT_PUSH)
        elif choice == "Run Flow Task":
            await self.host.run_command(COMMAND_RUN_FLOW_TASK)
        elif choice == "Show Recent History":
            await self._show_history()
        elif choice == "Open Log":
            log_file = self.config.get("log_file")
            if log_file:
                self.open_file(Path(log_file).expanduser())

    async def run(self):
        """Run the interactive CLI."""
        try:
            while True:
                choice = await inquirer.select(
                    message="Select action:",
                    choices=self.get_choices(),
                    default=None
                ).execute_async()

                if choice == "Exit":
                    await self.cleanup()
                    break

                await self.handle_choice(choice)
                print()
        except (KeyboardInterrupt, asyncio.CancelledError):
            logger.info("Received interrupt signal")
            await self.cleanup()

    async def track(self):
        """Record focus changes until interrupted."""
        await self._start_tracking()
        if self.tracking_task is None:
            return
        print("Tracking editor focus. Press Ctrl+C to stop.")
        await asyncio.gather(self.tracking_task, return_exceptions=True)

    async def cleanup(self):
        """Cleanup resources."""
        if self.is_shutting_down:
            return
        self.is_shutting_down = True
        await self._stop_tracking()
        logger.info("Cleanup completed successfully")

def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="onefocus", description="Editor window focus tracker")
    parser.add_argument("command", nargs="?", choices=["menu", "track"], default="menu",
                        help="menu: interactive commands (default), track: record focus until interrupted")
    parser.add_argument("--config", type=Path, default=None, help="Path to the JSON config file")
    return parser.parse_args(argv)

async def async_main(args: argparse.Namespace):
    """Async main entry point."""
    config = load_config_and_logging(args.config)
    cli = await OneFocusCLI.create(config)

    loop = asyncio.get_running_loop()
    for s in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(s, lambda: asyncio.create_task(cli.cleanup()))

    if args.command == "track":
        await cli.track()
    else:
        await cli.run()

def main():
    """Main entry point."""
    args = parse_args()
    try:
        asyncio.run(async_main(args))
    except KeyboardInterrupt:
        logger.info("Shutting down")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        raise

if __name__ == "__main__":
    main()
