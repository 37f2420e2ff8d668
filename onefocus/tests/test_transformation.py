import unittest

from onefocus.utils.transformation import (
    extract_workspace_name, is_dot_suffixed, matches_window,
    window_label, window_signature
)


class TestWorkspaceName(unittest.TestCase):
    def test_em_dash_separator(self):
        self.assertEqual(extract_workspace_name("Foo — bar.code-workspace"), "bar.code-workspace")

    def test_plain_dash_separator(self):
        self.assertEqual(extract_workspace_name("Foo - baz"), "baz")

    def test_no_separator(self):
        self.assertIsNone(extract_workspace_name("Foo"))
        self.assertIsNone(extract_workspace_name(""))
        self.assertIsNone(extract_workspace_name(None))

    def test_last_segment_wins(self):
        self.assertEqual(extract_workspace_name("a.ts — src — repo "), "repo")

    def test_em_dash_preferred_over_plain_dash(self):
        self.assertEqual(extract_workspace_name("a - b — c - d"), "c - d")

    def test_empty_trailing_segment(self):
        self.assertIsNone(extract_workspace_name("file.ts —  "))


class TestMatchesWindow(unittest.TestCase):
    def test_exact_title(self):
        self.assertTrue(matches_window("x.ts — demo", target_title="x.ts — demo"))
        self.assertFalse(matches_window("y.ts — other", target_title="x.ts — demo"))

    def test_em_dash_workspace_hint(self):
        self.assertTrue(matches_window("main.rs — myrepo", workspace_hint="myrepo"))

    def test_suffix_fallback_with_em_dash_present(self):
        # "repo" is not the em-dash segment but still a suffix of the title
        self.assertTrue(matches_window("main.rs — myrepo", workspace_hint="repo"))

    def test_suffix_fallback_without_em_dash(self):
        self.assertTrue(matches_window("main.rs - myrepo", workspace_hint="repo"))
        self.assertTrue(matches_window("myrepo", workspace_hint="repo"))

    def test_no_match(self):
        self.assertFalse(matches_window("main.rs — myrepo", workspace_hint="other"))
        self.assertFalse(matches_window("main.rs — myrepo", workspace_hint="my"))

    def test_nothing_to_match_on(self):
        self.assertFalse(matches_window("main.rs — myrepo"))
        self.assertFalse(matches_window("main.rs — myrepo", target_title="", workspace_hint=""))

    def test_hint_used_when_title_differs(self):
        self.assertTrue(matches_window("other.rs — myrepo", target_title="main.rs — myrepo", workspace_hint="myrepo"))


class TestHelpers(unittest.TestCase):
    def test_signature(self):
        self.assertEqual(window_signature("cursor", "a — b"), "cursor::a — b")
        self.assertNotEqual(window_signature("cursor", "a"), window_signature("vscode", "a"))

    def test_label(self):
        self.assertEqual(window_label("a.ts — demo"), "demo")
        self.assertEqual(window_label("  Welcome  "), "Welcome")

    def test_dot_suffix(self):
        self.assertTrue(is_dot_suffixed("Proj."))
        self.assertFalse(is_dot_suffixed("Proj"))
        self.assertFalse(is_dot_suffixed(None))
        self.assertFalse(is_dot_suffixed(""))


if __name__ == '__main__':
    unittest.main()
