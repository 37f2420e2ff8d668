"""Tests for the command surface exposed to the host."""

import asyncio
import sys
import tempfile
import unittest
from pathlib import Path

from onefocus.tests.fakes import FakeCompositor, FakeHost
from onefocus.utils.activity.activity_manager import (
    COMMAND_COMMIT_PUSH, COMMAND_FOCUS_LAST_WINDOW, COMMAND_LOG_CURRENT_WINDOW,
    COMMAND_RUN_FLOW_TASK, SHOW_LOG_ACTION, FocusActivityManager
)
from onefocus.utils.activity.windows import WindowBridge
from onefocus.utils.config import get_default_config, set_config
from onefocus.utils.exceptions import PermissionDeniedError


class SlowPickHost(FakeHost):
    """Keeps the task picker open for a moment before choosing."""

    async def pick(self, items, placeholder=""):
        await asyncio.sleep(0.05)
        return await super().pick(items, placeholder)


class TestFocusActivityManager(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)
        self.config = get_default_config()
        set_config(self.config, "store.path", str(self.root / "focus.db"))
        set_config(self.config, "marker.directory", str(self.root / "marker"))
        self.compositor = FakeCompositor({"Cursor": ["x.ts — demo"]}, frontmost="Cursor")
        self.host = FakeHost(workspace_path=str(self.root))

    def tearDown(self):
        self.tmp.cleanup()

    def make_manager(self, session_id="session-a"):
        return FocusActivityManager(
            self.config, self.host, bridge=WindowBridge(self.compositor), session_id=session_id
        )

    async def test_start_registers_commands(self):
        manager = self.make_manager()
        await manager.start()
        self.assertEqual(set(self.host.commands), {
            COMMAND_LOG_CURRENT_WINDOW, COMMAND_FOCUS_LAST_WINDOW,
            COMMAND_COMMIT_PUSH, COMMAND_RUN_FLOW_TASK
        })
        self.assertEqual(len(self.host.focus_callbacks), 1)
        self.assertEqual(await manager.store.count_events(), 0)

    async def test_start_records_when_focused(self):
        self.host.focused = True
        manager = self.make_manager()
        await manager.start()
        self.assertEqual(await manager.store.count_events(), 1)

    async def test_focus_last_window_across_sessions(self):
        await self.make_manager("session-a").log_current_window()
        self.compositor.processes["Cursor"] = ["y.ts — other", "x.ts — demo"]

        outcome = await self.make_manager("session-b").focus_last_window()
        self.assertTrue(outcome.focused)
        self.assertEqual(self.compositor.raised, [("Cursor", "x.ts — demo")])

    async def test_focus_last_window_nothing_found(self):
        outcome = await self.make_manager().focus_last_window()
        self.assertFalse(outcome.focused)
        self.assertEqual(self.host.infos, ["1Focus: No previous window found to focus."])
        self.assertEqual(self.host.errors, [])

    async def test_failure_offers_show_log(self):
        await self.make_manager("session-a").log_current_window()
        self.compositor.error = PermissionDeniedError("osascript is not allowed assistive access.")
        self.host.error_choice = SHOW_LOG_ACTION

        self.assertIsNone(await self.make_manager("session-b").focus_last_window())
        message, actions = self.host.errors[0]
        self.assertIn("assistive access", message)
        self.assertEqual(actions, (SHOW_LOG_ACTION,))
        self.assertEqual(self.host.log_shown, 1)

    async def test_log_current_window_when_frontmost_unreadable(self):
        self.compositor.error = PermissionDeniedError("not authorized")
        await self.make_manager().log_current_window()
        # Frontmost lookup failures are treated as no editor in front
        self.assertEqual(len(self.host.warnings), 1)
        self.assertEqual(self.host.log_shown, 0)

    async def test_background_focus_errors_are_logged(self):
        manager = self.make_manager()
        manager.coordinator.on_window_state_changed = self._boom
        await manager.on_window_state_changed(True)
        self.assertTrue(any("Failed to record window focus" in line for line in self.host.lines))
        self.assertEqual(self.host.errors, [])

    async def _boom(self, focused):
        raise RuntimeError("boom")

    async def test_commit_push_requires_workspace(self):
        self.host.workspace_path = None
        await self.make_manager().commit_push()
        self.assertEqual(len(self.host.errors), 1)
        self.assertIn("open a workspace", self.host.errors[0][0])

    async def test_commit_push_streams_output(self):
        set_config(self.config, "commands.build_command", [sys.executable, "-c", "print('pushed')"])
        manager = self.make_manager()
        await manager.commit_push()
        self.assertIn("pushed", self.host.lines)
        self.assertTrue(self.host.lines[-1].endswith("Command completed successfully."))
        self.assertFalse(manager.command_running)

    async def test_commit_push_failure_reported(self):
        set_config(self.config, "commands.build_command", [sys.executable, "-c", "raise SystemExit(2)"])
        await self.make_manager().commit_push()
        message, actions = self.host.errors[0]
        self.assertIn("Exited with code 2", message)
        self.assertEqual(actions, (SHOW_LOG_ACTION,))

    async def test_command_already_running(self):
        manager = self.make_manager()
        manager.command_running = True
        await manager.commit_push()
        await manager.run_flow_task()
        self.assertEqual(len(self.host.warnings), 2)

    async def test_run_flow_task(self):
        (self.root / "flow.toml").write_text(
            '[[tasks]]\nname = "hello"\ncommand = "echo flow-ok"\ndescription = "Say hello"\n'
        )
        await self.make_manager().run_flow_task()
        self.assertIn("flow-ok", self.host.lines)
        self.assertTrue(self.host.lines[-1].endswith("Task hello completed successfully."))

    async def test_commit_push_refused_while_picking_task(self):
        (self.root / "flow.toml").write_text('[[tasks]]\nname = "hello"\ncommand = "echo flow-ok"\n')
        set_config(self.config, "commands.build_command", [sys.executable, "-c", "print('pushed')"])
        self.host = SlowPickHost(workspace_path=str(self.root))
        manager = self.make_manager()

        await asyncio.gather(manager.run_flow_task(), manager.commit_push())

        self.assertEqual(self.host.warnings, ["1Focus: a command is already running."])
        self.assertIn("flow-ok", self.host.lines)
        self.assertNotIn("pushed", self.host.lines)
        self.assertFalse(manager.command_running)

    async def test_guard_released_when_no_task_runs(self):
        manager = self.make_manager()
        await manager.run_flow_task()
        self.assertFalse(manager.command_running)

        (self.root / "flow.toml").write_text('[[tasks]]\nname = "hello"\ncommand = "echo flow-ok"\n')
        self.host.pick_index = None
        await manager.run_flow_task()
        self.assertFalse(manager.command_running)

        self.host.workspace_path = None
        await manager.commit_push()
        self.assertFalse(manager.command_running)

    async def test_run_flow_task_cancelled_pick(self):
        (self.root / "flow.toml").write_text('[[tasks]]\nname = "hello"\ncommand = "echo flow-ok"\n')
        self.host.pick_index = None
        await self.make_manager().run_flow_task()
        self.assertEqual(self.host.lines, [])

    async def test_run_flow_task_without_flow_file(self):
        await self.make_manager().run_flow_task()
        self.assertIn("not found", self.host.errors[0][0])

    def test_preferred_app_from_host(self):
        self.host.app_name = "Visual Studio Code"
        self.assertEqual(self.make_manager().preferred_app_id(), "vscode")
        set_config(self.config, "tracking.preferred_app_id", "cursor")
        self.assertEqual(self.make_manager().preferred_app_id(), "cursor")


if __name__ == '__main__':
    unittest.main()
