import logging
import uuid
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional

from onefocus.database.database_interface import FocusStoreInterface
from onefocus.database.sqlite import SQLiteFocusStore
from onefocus.flow.runner import run_command
from onefocus.flow.tasks import load_flow_tasks
from onefocus.interfaces.host import HostInterface
from onefocus.schemas.definitions import FocusOutcome
from onefocus.utils.activity.compositor.macos import MacOSCompositor
from onefocus.utils.activity.resolver import WindowResolver
from onefocus.utils.activity.trackers.focus import FocusCoordinator
from onefocus.utils.activity.windows import WindowBridge, infer_app_id
from onefocus.utils.config import get_config

logger = logging.getLogger(__name__)

COMMAND_LOG_CURRENT_WINDOW = "1focus.logCurrentWindow"
COMMAND_FOCUS_LAST_WINDOW = "1focus.focusLastWindow"
COMMAND_COMMIT_PUSH = "1focus.commitPush"
COMMAND_RUN_FLOW_TASK = "1focus.runFlowTask"

SHOW_LOG_ACTION = "Show log"
LOG_PREFIX = "[1Focus]"

class FocusActivityManager:
    """Wires the focus store, window bridge, coordinator and resolver to a host."""

    def __init__(self, config: Dict[str, Any], host: HostInterface,
                 store: Optional[FocusStoreInterface] = None,
                 bridge: Optional[WindowBridge] = None,
                 session_id: Optional[str] = None):
        """Initialize FocusActivityManager."""
        self.config = config
        self.host = host
        self.session_id = session_id or str(uuid.uuid4())

        self.store = store or SQLiteFocusStore(
            get_config(config, "store.path"),
            max_rows=get_config(config, "store.max_rows", 500)
        )
        self.bridge = bridge or WindowBridge(MacOSCompositor())

        marker_dir = None
        if get_config(config, "marker.enabled", True):
            marker_dir = Path(get_config(config, "marker.directory")).expanduser()

        self.coordinator = FocusCoordinator(
            self.store, self.bridge, self.host, self.session_id,
            debounce_ms=get_config(config, "tracking.debounce_ms", 500),
            marker_dir=marker_dir
        )
        self.resolver = WindowResolver(self.store, self.bridge)
        self.command_running = False

        self.commands: Dict[str, Callable[[], Awaitable[None]]] = {
            COMMAND_LOG_CURRENT_WINDOW: self.log_current_window,
            COMMAND_FOCUS_LAST_WINDOW: self.focus_last_window,
            COMMAND_COMMIT_PUSH: self.commit_push,
            COMMAND_RUN_FLOW_TASK: self.run_flow_task,
        }

    async def start(self) -> None:
        """Register commands, subscribe to focus changes and record the current window."""
        for command_id, handler in self.commands.items():
            self.host.register_command(command_id, handler)
        self.host.on_window_state_change(self.on_window_state_changed)
        logger.info(f"Focus tracking started for session {self.session_id}")

        if self.host.is_focused():
            await self.on_window_state_changed(True)

    def append_line(self, text: str) -> None:
        self.host.append_line(text)
        logger.debug(text)

    async def report_failure(self, title: str, error: Exception) -> None:
        """Log a failed command and show it to the user with a "Show log" action."""
        message = str(error) or error.__class__.__name__
        self.append_line(f"{LOG_PREFIX} {title} failed: {message}")
        logger.error(f"{title} failed: {message}", exc_info=error)
        choice = await self.host.show_error(f"1Focus: {title} failed. {message}", SHOW_LOG_ACTION)
        if choice == SHOW_LOG_ACTION:
            self.host.show_log()

    async def on_window_state_changed(self, focused: bool) -> None:
        try:
            await self.coordinator.on_window_state_changed(focused)
        except Exception as e:
            # Background tracking never interrupts the user
            self.append_line(f"{LOG_PREFIX} Failed to record window focus: {e}")
            logger.error(f"Failed to record window focus: {e}", exc_info=True)

    def preferred_app_id(self) -> Optional[str]:
        return get_config(self.config, "tracking.preferred_app_id") or infer_app_id(self.host.get_app_name())

    async def log_current_window(self) -> None:
        try:
            event = await self.coordinator.log_current_window(force=True)
            if event:
                self.append_line(f"{LOG_PREFIX} Logged {event.window_title} ({event.app_id})")
        except Exception as e:
            await self.report_failure("Log current window", e)

    async def focus_last_window(self) -> Optional[FocusOutcome]:
        try:
            outcome = await self.resolver.focus_last_window(self.session_id, self.preferred_app_id())
        except Exception as e:
            await self.report_failure("Focus last window", e)
            return None

        if outcome.focused:
            self.append_line(f"{LOG_PREFIX} {outcome.message}")
        else:
            await self.host.show_info(f"1Focus: {outcome.message}")
        return outcome

    async def commit_push(self) -> None:
        if self.command_running:
            await self.host.show_warning("1Focus: a command is already running.")
            return

        self.command_running = True
        try:
            await self._commit_push()
        finally:
            self.command_running = False

    async def _commit_push(self) -> None:
        workspace_path = self.host.get_workspace_path()
        if not workspace_path:
            await self.host.show_error("1Focus: open a workspace before running commit & push.")
            return

        build_command = get_config(self.config, "commands.build_command", ["f", "commitPush"])
        self.host.clear_output()
        self.append_line(f"{LOG_PREFIX} Running {' '.join(build_command)} in {workspace_path}")
        try:
            await run_command(build_command, workspace_path, self.append_line)
            self.append_line(f"{LOG_PREFIX} Command completed successfully.")
        except Exception as e:
            await self.report_failure(" ".join(build_command), e)

    async def run_flow_task(self) -> None:
        if self.command_running:
            await self.host.show_warning("1Focus: a command is already running.")
            return

        # Held from task lookup through the run
        self.command_running = True
        try:
            await self._run_flow_task()
        finally:
            self.command_running = False

    async def _run_flow_task(self) -> None:
        try:
            result = await load_flow_tasks(
                self.host.get_active_file() or self.host.get_workspace_path(),
                file_name=get_config(self.config, "flow.file_name", "flow.toml"),
                max_depth=get_config(self.config, "flow.max_depth", 12)
            )
        except Exception as e:
            await self.report_failure("Load flow tasks", e)
            return

        task = await self.host.pick(result.tasks, placeholder="Select a flow task to run")
        if task is None:
            return

        self.host.clear_output()
        self.append_line(f"{LOG_PREFIX} Running task {task.name} in {result.flow_root}")
        try:
            await run_command(task.command, result.flow_root, self.append_line)
            self.append_line(f"{LOG_PREFIX} Task {task.name} completed successfully.")
        except Exception as e:
            await self.report_failure(f"Task {task.name}", e)
