"""Test the per-signer nonce cache."""

from __future__ import annotations

from unittest import IsolatedAsyncioTestCase

from batchsend.sequence import SequenceTracker
from fake_ledger import ADDR_A, ADDR_B, FakeLedger


class FlakyCountLedger(FakeLedger):
    async def transaction_count(self, address: str) -> int:
        raise TimeoutError("rpc timeout")


class TestSequenceTracker(IsolatedAsyncioTestCase):
    async def test_starts_at_baseline_and_increments(self):
        ledger = FakeLedger(counts={ADDR_A: 7})
        tracker = SequenceTracker(ledger)

        got = [await tracker.next_sequence(ADDR_A) for _ in range(4)]

        self.assertEqual(got, [7, 8, 9, 10])
        self.assertEqual(tracker.peek(ADDR_A), 11)

    async def test_queries_ledger_once_per_address(self):
        ledger = FakeLedger(counts={ADDR_A: 3, ADDR_B: 0})
        tracker = SequenceTracker(ledger)

        for _ in range(3):
            await tracker.next_sequence(ADDR_A)
        await tracker.next_sequence(ADDR_B)
        await tracker.next_sequence(ADDR_B)

        self.assertEqual(ledger.count_queries, [ADDR_A, ADDR_B])
        self.assertEqual((tracker.peek(ADDR_A), tracker.peek(ADDR_B)), (6, 2))

    async def test_addresses_are_independent(self):
        tracker = SequenceTracker(FakeLedger(counts={ADDR_A: 5, ADDR_B: 5}))

        self.assertEqual(await tracker.next_sequence(ADDR_A), 5)
        self.assertEqual(await tracker.next_sequence(ADDR_A), 6)
        self.assertEqual(await tracker.next_sequence(ADDR_B), 5)

    async def test_baseline_error_propagates_and_caches_nothing(self):
        tracker = SequenceTracker(FlakyCountLedger())

        with self.assertRaises(TimeoutError):
            await tracker.next_sequence(ADDR_A)
        self.assertIsNone(tracker.peek(ADDR_A))
