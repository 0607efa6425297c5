"""
Tests for CLI entry points.

These tests focus on:
- Basic CLI argument validation (login requires a token)
- Session persistence using a temporary file
  (to avoid touching the real ~/.eventreview/session.json during tests)
- Dispatch of approve / decline / list commands to a fake catalog
"""

import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest import mock

from eventreview.cli import main

from fakes import FakeCatalog, make_event


class TestCLI(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.session_file = Path(self._tmp.name) / "session.json"
        env = mock.patch.dict(os.environ, {"EVENTREVIEW_SESSION_FILE": str(self.session_file)})
        env.start()
        self.addCleanup(env.stop)
        self.addCleanup(self._tmp.cleanup)

        self.catalog = FakeCatalog(
            pending=[
                make_event(5, tags=["ai"]),
                make_event(6, event_name="Web Day", tags=["web"]),
            ],
            approved=[make_event(7, status="approved")],
        )
        patcher = mock.patch("eventreview.cli.CatalogClient", return_value=self.catalog)
        patcher.start()
        self.addCleanup(patcher.stop)

    def run_cli(self, *argv: str) -> tuple[int, str]:
        out = io.StringIO()
        with redirect_stdout(out):
            with self.assertRaises(SystemExit) as ctx:
                main(list(argv))
        return ctx.exception.code, out.getvalue()

    def test_cli_login_requires_token(self) -> None:
        code, _ = self.run_cli("login", "   ")
        self.assertNotEqual(code, 0)
        self.assertFalse(self.session_file.exists())

    def test_cli_login_status_logout_roundtrip(self) -> None:
        code, _ = self.run_cli("login", "secret")
        self.assertEqual(code, 0)
        self.assertTrue(self.session_file.exists())

        code, out = self.run_cli("status")
        self.assertEqual(code, 0)
        self.assertIn("Logged in", out)

        self.run_cli("logout")
        code, out = self.run_cli("status")
        self.assertIn("Not logged in", out)

    def test_commands_require_login(self) -> None:
        code, out = self.run_cli("pending")
        self.assertEqual(code, 1)
        self.assertIn("Not logged in", out)
        self.assertEqual(self.catalog.calls, [])

    def test_pending_with_tag_filter(self) -> None:
        self.run_cli("login", "secret")
        code, out = self.run_cli("pending", "--tag", "web")
        self.assertEqual(code, 0)
        self.assertIn("Web Day", out)
        self.assertNotIn("Event 5", out)
        self.assertIn("1 of 2 events", out)

    def test_approve_with_edit(self) -> None:
        self.run_cli("login", "secret")
        code, _ = self.run_cli("approve", "5", "--set", "event_name=PyCon 2026", "--yes")
        self.assertEqual(code, 0)
        mutations = [c for c in self.catalog.calls if c[0] in ("set_status", "update_fields")]
        self.assertEqual(
            mutations,
            [("set_status", 5, "approved"), ("update_fields", 5, {"event_name": "PyCon 2026"})],
        )

    def test_edit_localized_field(self) -> None:
        self.run_cli("login", "secret")
        code, _ = self.run_cli("edit", "7", "--set", "en-us.cost=Free", "--yes")
        self.assertEqual(code, 0)
        update = next(c for c in self.catalog.calls if c[0] == "update_fields")
        self.assertEqual(update[1], 7)
        self.assertEqual(update[2]["intl"]["en-us"]["cost"], "Free")

    def test_edit_reuses_existing_language_key(self) -> None:
        self.catalog.approved = [
            make_event(7, status="approved", intl={"pt-br": {"cost": "Gratuito"}, "EN-US": {"cost": "Free"}})
        ]
        self.run_cli("login", "secret")
        code, _ = self.run_cli("edit", "7", "--set", "en-us.cost=Paid", "--yes")
        self.assertEqual(code, 0)
        update = next(c for c in self.catalog.calls if c[0] == "update_fields")
        self.assertEqual(sorted(update[2]["intl"]), ["EN-US", "pt-br"])
        self.assertEqual(update[2]["intl"]["EN-US"]["cost"], "Paid")

    def test_decline_unknown_event(self) -> None:
        self.run_cli("login", "secret")
        code, out = self.run_cli("decline", "99", "--yes")
        self.assertEqual(code, 1)
        self.assertIn("not found", out)

    def test_backend_failure_exits_nonzero(self) -> None:
        self.run_cli("login", "secret")
        self.catalog.fail.add("set_status")
        code, out = self.run_cli("decline", "6", "--yes")
        self.assertEqual(code, 1)
        self.assertIn("[error]", out)

    def test_declining_answer_cancels(self) -> None:
        self.run_cli("login", "secret")
        with mock.patch("builtins.input", return_value="n"):
            code, out = self.run_cli("decline", "6")
        self.assertEqual(code, 0)
        self.assertIn("Cancelled", out)
        self.assertNotIn("set_status", self.catalog.names())


if __name__ == "__main__":
    unittest.main()
