import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from onefocus.utils.activity.compositor.macos import (
    FIELD_DELIMITER, MacOSCompositor, escape_applescript_string, is_permission_error
)
from onefocus.utils.exceptions import AutomationError, PermissionDeniedError, PlatformUnsupportedError


def fake_process(stdout: str = "", stderr: str = "", returncode: int = 0):
    proc = MagicMock()
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(stdout.encode(), stderr.encode()))
    return proc


class TestHelpers(unittest.TestCase):
    def test_escape(self):
        self.assertEqual(escape_applescript_string('say "hi" \\ bye'), 'say \\"hi\\" \\\\ bye')
        self.assertEqual(escape_applescript_string(None), "")

    def test_permission_detection(self):
        self.assertTrue(is_permission_error("System Events got an error: osascript is not allowed assistive access. (-1719)"))
        self.assertTrue(is_permission_error("Not authorized to send Apple events to System Events. (-1743)"))
        self.assertFalse(is_permission_error("Can't get window 3 of process \"Code\". (-1728)"))


@patch("onefocus.utils.activity.compositor.macos.platform.system", return_value="Darwin")
class TestMacOSCompositor(unittest.IsolatedAsyncioTestCase):
    async def test_process_state_missing(self, _system):
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=fake_process("missing\n"))):
            state = await MacOSCompositor().process_state("Cursor")
        self.assertFalse(state.exists)

    async def test_process_state_parsed(self, _system):
        output = f"true{FIELD_DELIMITER}3\n"
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=fake_process(output))) as spawn:
            state = await MacOSCompositor().process_state("Code")
        self.assertTrue(state.exists)
        self.assertTrue(state.frontmost)
        self.assertEqual(state.window_count, 3)
        self.assertEqual(spawn.call_args.args[0], "osascript")

    async def test_script_sent_on_stdin(self, _system):
        proc = fake_process(f"false{FIELD_DELIMITER}0")
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            await MacOSCompositor().process_state('Odd "Name"')
        script = proc.communicate.call_args.args[0].decode()
        self.assertIn('exists process "Odd \\"Name\\""', script)

    async def test_window_titles_split(self, _system):
        output = f"a.ts — one{FIELD_DELIMITER}b.ts — two\n"
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=fake_process(output))):
            titles = await MacOSCompositor().window_titles("Cursor")
        self.assertEqual(titles, ["a.ts — one", "b.ts — two"])

    async def test_window_titles_empty(self, _system):
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=fake_process("\n"))):
            self.assertEqual(await MacOSCompositor().window_titles("Cursor"), [])

    async def test_front_window_title(self, _system):
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=fake_process("x.ts — demo\n"))):
            self.assertEqual(await MacOSCompositor().front_window_title("Cursor"), "x.ts — demo")
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=fake_process("\n"))):
            self.assertIsNone(await MacOSCompositor().front_window_title("Cursor"))

    async def test_raise_window_matches_title_in_same_script(self, _system):
        proc = fake_process("raised\n")
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)) as spawn:
            self.assertTrue(await MacOSCompositor().raise_window("Cursor", 'x.ts — "demo"'))
        self.assertEqual(spawn.await_count, 1)
        script = proc.communicate.call_args.args[0].decode()
        self.assertIn('windows whose name is "x.ts — \\"demo\\""', script)
        self.assertIn('perform action "AXRaise" of (item 1 of matching)', script)

    async def test_raise_window_missing_title(self, _system):
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=fake_process("missing\n"))):
            self.assertFalse(await MacOSCompositor().raise_window("Cursor", "gone.ts — demo"))

    async def test_permission_error(self, _system):
        proc = fake_process(stderr="execution error: osascript is not allowed assistive access. (-1719)", returncode=1)
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            with self.assertRaises(PermissionDeniedError) as ctx:
                await MacOSCompositor().window_titles("Cursor")
        self.assertIn("assistive access", str(ctx.exception))

    async def test_other_automation_error(self, _system):
        proc = fake_process(stderr="execution error: boom (-2700)", returncode=1)
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
            with self.assertRaises(AutomationError) as ctx:
                await MacOSCompositor().window_titles("Cursor")
        self.assertEqual(ctx.exception.returncode, 1)
        self.assertIn("boom", str(ctx.exception))

    async def test_missing_osascript(self, _system):
        with patch("asyncio.create_subprocess_exec", AsyncMock(side_effect=FileNotFoundError("osascript"))):
            with self.assertRaises(PlatformUnsupportedError):
                await MacOSCompositor().window_titles("Cursor")


class TestUnsupportedPlatform(unittest.IsolatedAsyncioTestCase):
    async def test_linux_is_unsupported(self):
        with patch("onefocus.utils.activity.compositor.macos.platform.system", return_value="Linux"):
            compositor = MacOSCompositor()
            self.assertFalse(compositor.is_supported())
            with self.assertRaises(PlatformUnsupportedError):
                await compositor.run_script("return 1")


if __name__ == '__main__':
    unittest.main()
