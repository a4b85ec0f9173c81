"""Test argument parsing and process exit codes."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from unittest import TestCase, mock

from batchsend import cli
from fake_ledger import FakeLedger


class TestParseArgs(TestCase):
    def test_defaults(self):
        args = cli.parse_args([])
        self.assertIsNone(args.wallets)
        self.assertIsNone(args.pairs_file)

    def test_range_and_file(self):
        args = cli.parse_args(["1-3,5", "-f", "pairs.txt"])
        self.assertEqual(args.wallets, "1-3,5")
        self.assertEqual(args.pairs_file, Path("pairs.txt"))


class TestMain(TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self._cwd = os.getcwd()
        os.chdir(self.dir)
        self.ledger = FakeLedger()
        patches = [
            mock.patch.object(cli, "setup_logging"),
            mock.patch.object(cli, "Web3Ledger", return_value=self.ledger),
        ]
        for p in patches:
            p.start()
            self.addCleanup(p.stop)

    def tearDown(self):
        os.chdir(self._cwd)
        self._tmp.cleanup()

    def test_missing_pairs_file_exits_1(self):
        self.assertEqual(cli.main([]), 1)
        self.assertTrue(self.ledger.closed)

    def test_malformed_pairs_file_exits_1(self):
        (self.dir / "transfer_pairs.txt").write_text("1,onlykey\n", encoding="utf-8")
        self.assertEqual(cli.main([]), 1)
        self.assertEqual(self.ledger.broadcasts, [])

    def test_bad_selector_exits_1(self):
        (self.dir / "transfer_pairs.txt").write_text("1,k,0x" + "d4" * 20 + "\n", encoding="utf-8")
        self.assertEqual(cli.main(["x-2"]), 1)

    def test_per_pair_failures_still_exit_0(self):
        (self.dir / "transfer_pairs.txt").write_text("1,k,not-an-address\n", encoding="utf-8")
        self.assertEqual(cli.main([]), 0)
        self.assertTrue((self.dir / "single_failed_transactions.txt").exists())
        self.assertEqual(len(list(self.dir.glob("failed_wallets_*.txt"))), 1)

    def test_unexpected_error_exits_1(self):
        with mock.patch.object(cli.BatchOrchestrator, "run", side_effect=RuntimeError("boom")):
            (self.dir / "transfer_pairs.txt").write_text("1,k,not-an-address\n", encoding="utf-8")
            self.assertEqual(cli.main([]), 1)
