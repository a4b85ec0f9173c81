"""Test settings loading and the logging configuration."""

from __future__ import annotations

import tempfile
from decimal import Decimal
from pathlib import Path
from unittest import TestCase

from batchsend.config import Settings, load_settings, settings
from batchsend.errors import ConfigError
from batchsend.logging_config import build_logging_config


class TestBundledSettings(TestCase):
    def test_bundled_values(self):
        self.assertEqual(settings.files.pairs, Path("transfer_pairs.txt"))
        self.assertEqual(settings.files.failure_log, Path("single_failed_transactions.txt"))
        self.assertEqual(settings.submit.max_attempts, 5)
        self.assertEqual(settings.submit.retry_delay, 3.0)
        self.assertEqual(settings.submit.gas_limit, 21000)
        self.assertEqual(settings.submit.gas_price_gwei, Decimal("2.5"))
        self.assertEqual((settings.throttle.amount_min_gwei, settings.throttle.amount_max_gwei), (10, 10000))
        self.assertEqual((settings.throttle.delay_min, settings.throttle.delay_max), (60, 360))
        self.assertEqual(settings.balance.min_ether, Decimal("0.0000001"))

    def test_bundled_matches_model_defaults(self):
        self.assertEqual(settings, Settings())


class TestLoadSettings(TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, text: str) -> Path:
        path = self.dir / "config.toml"
        path.write_text(text, encoding="utf-8")
        return path

    def test_partial_file_uses_defaults(self):
        s = load_settings(self._write("[submit]\nmax_attempts = 2\n"))
        self.assertEqual(s.submit.max_attempts, 2)
        self.assertEqual(s.submit.gas_limit, 21000)

    def test_invalid_toml(self):
        with self.assertRaises(ConfigError):
            load_settings(self._write("[submit\n"))

    def test_invalid_values(self):
        with self.assertRaises(ConfigError):
            load_settings(self._write("[submit]\nmax_attempts = 0\n"))

    def test_unordered_bounds(self):
        with self.assertRaises(ConfigError):
            load_settings(self._write("[throttle]\ndelay_min = 400\ndelay_max = 360\n"))

    def test_missing_file(self):
        with self.assertRaises(ConfigError):
            load_settings(self.dir / "absent.toml")


class TestLoggingConfig(TestCase):
    def test_file_handler_and_quiet_libraries(self):
        cfg = build_logging_config(Path("logs/run.log"), "DEBUG")
        self.assertEqual(cfg["handlers"]["file"]["filename"], str(Path("logs/run.log")))
        self.assertEqual(cfg["loggers"]["batchsend"]["level"], "DEBUG")
        self.assertEqual(cfg["loggers"]["web3"]["level"], "WARNING")
