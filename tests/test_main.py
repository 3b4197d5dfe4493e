#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""Command line entry point."""

from __future__ import annotations

import contextlib
import io
import tempfile
import unittest
from pathlib import Path

import main
from modules.database.AccountStore import AccountStore
from utils.Logger import Logger

CONFIG = """
Logging:
  logging_levels: Success, Error
  logging_file_levels: None
auth:
  mode: {mode}
database:
  url: sqlite:///{db}
"""


class MainTest(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.db = self.tmp / "auth.db"

    def tearDown(self) -> None:
        Logger.configure({"logging_levels": "None"})
        self._tmp.cleanup()

    def _config(self, mode: str = "srp6") -> str:
        path = self.tmp / f"{mode}.yaml"
        path.write_text(CONFIG.format(mode=mode, db=self.db.as_posix()), encoding="utf-8")
        return str(path)

    def _run(self, *argv: str) -> tuple[int, str]:
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = main.main(list(argv))
        return code, out.getvalue()

    def _create_schema(self) -> None:
        store = AccountStore.from_url(f"sqlite:///{self.db.as_posix()}")
        store.create_schema()
        store.close()

    def test_verifier_with_fixed_salt(self) -> None:
        code, out = self._run(
            "-c", self._config(), "verifier", "testuser", "password1",
            "--salt", bytes(range(1, 33)).hex(),
        )

        self.assertEqual(code, 0)
        self.assertIn("82271AA3CFD0F763C0FFC91872E4D9A6D40856FFE6B6E59D87E208515CA008F9", out)
        self.assertIn("gicao8/Q92PA/8kYcuTZptQIVv/mtuWdh+IIUVygCPk=", out)

    def test_verifier_bad_salt(self) -> None:
        code, _ = self._run("-c", self._config(), "verifier", "testuser", "password1", "--salt", "zz")
        self.assertEqual(code, 1)

    def test_legacy_hash(self) -> None:
        code, out = self._run("-c", self._config("legacy"), "legacy-hash", "alice", "Secret123!")

        self.assertEqual(code, 0)
        self.assertIn("B9A1ADBAA0AD26FFD61DD77B90F465CEE5C83CEB", out)

    def test_missing_config(self) -> None:
        code, _ = self._run("-c", str(self.tmp / "nope.yaml"), "legacy-hash", "a", "b")
        self.assertEqual(code, 1)

    def test_register_then_login(self) -> None:
        self._create_schema()
        config = self._config()

        self.assertEqual(self._run("-c", config, "register", "alice", "Secret123!", "-e", "alice@example.com")[0], 0)
        self.assertEqual(self._run("-c", config, "login", "alice", "Secret123!")[0], 0)
        self.assertEqual(self._run("-c", config, "login", "alice", "WrongPass!")[0], 1)

    def test_legacy_register_then_login(self) -> None:
        self._create_schema()
        config = self._config("legacy")

        self.assertEqual(self._run("-c", config, "register", "bob", "abcd", "-e", "bob@example.com")[0], 0)
        self.assertEqual(self._run("-c", config, "login", "bob", "abcd")[0], 0)
        self.assertEqual(self._run("-c", config, "login", "bob", "dcba")[0], 1)


if __name__ == "__main__":
    unittest.main()
