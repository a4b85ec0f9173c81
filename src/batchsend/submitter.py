import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from web3 import Web3

import batchsend.constants as C
from batchsend.errors import SignerConstructionError, TransientSubmissionError
from batchsend.failures import FailureRecorder
from batchsend.ledger import Ledger, Signer
from batchsend.models import PairOutcome, TransferPair, TransferTx
from batchsend.sequence import SequenceTracker

log = logging.getLogger("batchsend.submit")

Sleep = Callable[[float], Awaitable[None]]


def build_signer(ledger: Ledger, key_material: str) -> Signer:
    """Ask the ledger for a signer, normalizing any failure to SignerConstructionError."""
    try:
        return ledger.signer(key_material)
    except SignerConstructionError:
        raise
    except Exception as e:
        raise SignerConstructionError(f"{type(e).__name__}: {e}") from e


@dataclass(slots=True)
class Submission:
    pair: TransferPair
    amount: int
    state: C.SubmitState = C.SubmitState.INIT
    from_address: str | None = None
    attempts: int = 0
    nonce: int | None = None
    tx_hash: str | None = None
    last_error: str | None = None

    def __str__(self):
        return f"wallet {self.pair.wallet_id} -- {self.from_address} -- {self.state}"


class TransactionSubmitter:
    """Drives one pair through signer construction and a bounded send/confirm retry loop.

    Every attempt takes a fresh nonce from the tracker and builds the transfer
    with the fixed gas limit and gas price. The live gas price is queried and
    logged only. Each call to ``submit`` returns exactly one ``PairOutcome``.
    """

    def __init__(
        self,
        ledger: Ledger,
        sequences: SequenceTracker,
        recorder: FailureRecorder,
        *,
        max_attempts: int = 5,
        retry_delay: float = 3.0,
        gas_limit: int = 21000,
        gas_price: int = Web3.to_wei("2.5", "gwei"),
        sleep: Sleep = asyncio.sleep,
    ):
        self.ledger = ledger
        self.sequences = sequences
        self.recorder = recorder
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.gas_limit = gas_limit
        self.gas_price = gas_price
        self.sleep = sleep

    def _move(self, sub: Submission, state: C.SubmitState) -> None:
        log.debug("%s --> %s  wallet %s", sub.state, state, sub.pair.wallet_id)
        sub.state = state

    async def submit(self, pair: TransferPair, amount: int) -> PairOutcome:
        sub = Submission(pair=pair, amount=amount)

        self._move(sub, C.SubmitState.BUILD_SIGNER)
        try:
            signer = build_signer(self.ledger, pair.key_material)
        except SignerConstructionError as e:
            log.error("Failed to build signer for wallet %s: %s", pair.wallet_id, e)
            self._move(sub, C.SubmitState.FAILURE)
            self.recorder.record(pair.wallet_id, C.FROM_UNRESOLVED, pair.to_address, C.FailureReason.SIGNER_CONSTRUCTION)
            return PairOutcome.failure(
                pair, C.FailureKind.SIGNER_CONSTRUCTION, C.FailureReason.SIGNER_CONSTRUCTION,
                from_address=C.FROM_UNRESOLVED,
            )
        sub.from_address = signer.address

        while sub.attempts < self.max_attempts:
            sub.attempts += 1
            try:
                await self._attempt(sub, signer)
            except Exception as e:
                sub.last_error = f"{type(e).__name__}: {e}"
                log.error("Attempt %s/%s failed for wallet %s: %s", sub.attempts, self.max_attempts, pair.wallet_id, sub.last_error)
                if sub.attempts >= self.max_attempts:
                    break
                log.info("Waiting %ss before retrying...", self.retry_delay)
                await self.sleep(self.retry_delay)
                continue

            self._move(sub, C.SubmitState.SUCCESS)
            log.info(
                "Transfer succeeded! wallet=%s from=%s to=%s amount=%s ETH hash=%s",
                pair.wallet_id, sub.from_address, pair.to_address, Web3.from_wei(amount, "ether"), sub.tx_hash,
            )
            return PairOutcome.success(pair, sub.from_address, sub.tx_hash, sub.attempts)

        self._move(sub, C.SubmitState.FAILURE)
        log.error("Reached max attempts (%s), giving up on wallet %s", self.max_attempts, pair.wallet_id)
        self.recorder.record(pair.wallet_id, sub.from_address, pair.to_address, C.FailureReason.MAX_ATTEMPTS)
        return PairOutcome.failure(
            pair, C.FailureKind.MAX_ATTEMPTS, C.FailureReason.MAX_ATTEMPTS,
            from_address=sub.from_address, attempts=sub.attempts,
        )

    async def _attempt(self, sub: Submission, signer: Signer) -> None:
        self._move(sub, C.SubmitState.PREPARE_ATTEMPT)
        log.info("Attempt %s/%s -- wallet %s from %s", sub.attempts, self.max_attempts, sub.pair.wallet_id, sub.from_address)

        # Taken before anything else can fail and never handed back.
        sub.nonce = await self.sequences.next_sequence(sub.from_address)
        log.info("Nonce: %s", sub.nonce)

        fee = await self.ledger.fee_data()
        log.info("Current gas price: %s Gwei", Web3.from_wei(fee.gas_price, "gwei"))

        tx = TransferTx(
            to=sub.pair.to_address,
            value=sub.amount,
            gas=self.gas_limit,
            gas_price=self.gas_price,
            nonce=sub.nonce,
        )

        self._move(sub, C.SubmitState.BROADCAST)
        sub.tx_hash = await self.ledger.send_transfer(signer, tx)
        log.info("Broadcast, waiting for confirmation: %s", sub.tx_hash)

        self._move(sub, C.SubmitState.CONFIRM)
        receipt = await self.ledger.wait_for_receipt(sub.tx_hash)
        if not receipt.ok:
            raise TransientSubmissionError(f"transaction {receipt.tx_hash} failed with status {receipt.status}")
        sub.tx_hash = receipt.tx_hash
