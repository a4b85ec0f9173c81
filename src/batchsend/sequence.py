import logging

from batchsend.ledger import Ledger

log = logging.getLogger("batchsend.sequence")


class SequenceTracker:
    """Per-signer nonce cache for one run.

    The baseline for an address is read from the ledger on first use and never
    re-read. Every issued nonce is consumed; there is no release, because a
    failed attempt may still be pending on the ledger with that nonce.
    """

    def __init__(self, ledger: Ledger) -> None:
        self.ledger = ledger
        self._next: dict[str, int] = {}

    async def next_sequence(self, address: str) -> int:
        if address not in self._next:
            # Errors propagate, the submitter's retry loop owns retrying.
            baseline = await self.ledger.transaction_count(address)
            log.debug("Nonce baseline for %s is %s", address, baseline)
            self._next[address] = baseline

        s = self._next[address]
        self._next[address] = s + 1
        return s

    def peek(self, address: str) -> int | None:
        return self._next.get(address)
