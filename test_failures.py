"""Test the append-only failure journal."""

from __future__ import annotations

import tempfile
from datetime import datetime, timezone
from pathlib import Path
from unittest import TestCase

from batchsend.failures import FailureRecorder, iso_timestamp

FIXED = datetime(2026, 10, 18, 9, 30, 5, 123000, tzinfo=timezone.utc)


class TestFailureRecorder(TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "single_failed_transactions.txt"
        self.recorder = FailureRecorder(self.path, clock=lambda: FIXED)

    def tearDown(self):
        self._tmp.cleanup()

    def test_line_format(self):
        self.recorder.record("4", "0xfrom", "0xto", "insufficient balance")
        self.assertEqual(
            self.path.read_text(encoding="utf-8"),
            "2026-10-18T09:30:05.123Z,4,0xfrom,0xto,insufficient balance\n",
        )

    def test_appends_and_never_truncates(self):
        self.path.write_text("old entry\n", encoding="utf-8")
        self.recorder.record("1", "a", "b", "x")
        self.recorder.record("1", "a", "b", "x")
        lines = self.path.read_text(encoding="utf-8").splitlines()
        self.assertEqual(len(lines), 3)
        self.assertEqual(lines[0], "old entry")
        self.assertEqual(lines[1], lines[2])

    def test_multiline_reason_stays_on_one_line(self):
        self.recorder.record("1", "a", "b", "boom\nstack")
        self.assertEqual(self.path.read_text(encoding="utf-8").count("\n"), 1)

    def test_io_error_is_not_raised(self):
        recorder = FailureRecorder(Path(self._tmp.name) / "missing-dir" / "log.txt", clock=lambda: FIXED)
        with self.assertLogs("batchsend.failures", level="ERROR"):
            recorder.record("1", "a", "b", "x")


class TestIsoTimestamp(TestCase):
    def test_z_suffix_and_millis(self):
        self.assertEqual(iso_timestamp(FIXED), "2026-10-18T09:30:05.123Z")
