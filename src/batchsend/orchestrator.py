import asyncio
import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from web3 import Web3

import batchsend.constants as C
from batchsend.config import Settings
from batchsend.errors import SignerConstructionError
from batchsend.failures import FailureRecorder, iso_timestamp, utc_now
from batchsend.ledger import Ledger
from batchsend.models import BatchResult, PairOutcome, TransferPair, mask_key
from batchsend.pairs import load_pairs, parse_wallet_range, select_pairs
from batchsend.randoms import AmountPicker, DelayPicker, RandomSource, default_source, fisher_yates
from batchsend.sequence import SequenceTracker
from batchsend.submitter import Sleep, TransactionSubmitter, build_signer

log = logging.getLogger("batchsend.batch")


class BatchOrchestrator:
    """Runs one batch: load, select, shuffle, then gate and send pair by pair.

    Pairs are processed strictly one at a time, so the nonce cache, the used
    key set and the result sets are only ever touched by this control flow.
    """

    def __init__(
        self,
        ledger: Ledger,
        settings: Settings,
        *,
        rng: RandomSource | None = None,
        sleep: Sleep = asyncio.sleep,
        clock: Callable[[], datetime] = utc_now,
        sequences: SequenceTracker | None = None,
        recorder: FailureRecorder | None = None,
        submitter: TransactionSubmitter | None = None,
        out_dir: Path = Path("."),
    ):
        self.ledger = ledger
        self.settings = settings
        self.rng = rng or default_source()
        self.sleep = sleep
        self.clock = clock
        self.out_dir = Path(out_dir)

        self.sequences = sequences or SequenceTracker(ledger)
        self.recorder = recorder or FailureRecorder(self.out_dir / settings.files.failure_log, clock=clock)
        sub_cfg = settings.submit
        self.submitter = submitter or TransactionSubmitter(
            ledger,
            self.sequences,
            self.recorder,
            max_attempts=sub_cfg.max_attempts,
            retry_delay=sub_cfg.retry_delay,
            gas_limit=sub_cfg.gas_limit,
            gas_price=Web3.to_wei(sub_cfg.gas_price_gwei, "gwei"),
            sleep=sleep,
        )

        thr = settings.throttle
        self.amounts = AmountPicker(self.rng, thr.amount_min_gwei, thr.amount_max_gwei)
        self.delays = DelayPicker(self.rng, thr.delay_min, thr.delay_max)
        self.min_balance = Web3.to_wei(Decimal(settings.balance.min_ether), "ether")

        self.used_keys: set[str] = set()

    def load(self, path: Path, wallet_range: str | None = None) -> list[TransferPair]:
        """Read the pairs file and keep the pairs whose wallet id is selected. ConfigError propagates."""
        selected = parse_wallet_range(wallet_range)
        pairs = select_pairs(load_pairs(path), selected)
        log.info("Loaded %s transfer pairs", len(pairs))
        return pairs

    async def run(self, pairs: Sequence[TransferPair]) -> BatchResult:
        log.info("Starting batch transfer...")
        shuffled = fisher_yates(list(pairs), self.rng)
        total = len(shuffled)
        log.info("Transfers to process: %s", total)

        result = BatchResult()
        for index, pair in enumerate(shuffled, start=1):
            log.info("Processing transfer %s/%s", index, total)

            if pair.key_material in self.used_keys:
                log.info("Wallet %s already transferred, skipping", pair.wallet_id)
                continue

            outcome, submitted = await self.process_pair(pair)
            result.add(outcome)

            if submitted:
                delay_ms = self.delays.pick_ms()
                log.info("Waiting %ss before the next transfer...", delay_ms / 1000)
                await self.sleep(delay_ms / 1000)

        self.report(result)
        return result

    async def process_pair(self, pair: TransferPair) -> tuple[PairOutcome, bool]:
        """Gate one pair and send it if it passes.

        Returns the outcome and whether the pair reached the submitter. Nothing
        raised while processing the pair escapes; it becomes an UNCLASSIFIED outcome.
        """
        try:
            return await self._process_pair(pair)
        except Exception as e:
            log.error("Error while processing %s: %s", pair, e, exc_info=True)
            reason = str(e) or type(e).__name__
            self.recorder.record(pair.wallet_id, C.FROM_PROCESSING_ERROR, pair.to_address, reason)
            return PairOutcome.failure(pair, C.FailureKind.UNCLASSIFIED, reason, from_address=C.FROM_PROCESSING_ERROR), False

    async def _process_pair(self, pair: TransferPair) -> tuple[PairOutcome, bool]:
        if not self.ledger.is_address(pair.to_address):
            log.warning("Invalid destination address: %s", pair.to_address)
            return self._reject(pair, C.FailureKind.INVALID_DESTINATION, C.FailureReason.INVALID_DESTINATION, C.FROM_UNKNOWN), False

        try:
            signer = build_signer(self.ledger, pair.key_material)
        except SignerConstructionError as e:
            log.error("Failed to build signer for wallet %s (%s): %s", pair.wallet_id, mask_key(pair.key_material), e)
            return self._reject(pair, C.FailureKind.SIGNER_CONSTRUCTION, C.FailureReason.SIGNER_CONSTRUCTION, C.FROM_UNRESOLVED), False

        balance = await self.ledger.balance(signer.address)
        log.info("Wallet %s balance: %s ETH", pair.wallet_id, Web3.from_wei(balance, "ether"))
        if balance <= self.min_balance:
            log.warning("Wallet %s balance too low", pair.wallet_id)
            return self._reject(pair, C.FailureKind.INSUFFICIENT_BALANCE, C.FailureReason.INSUFFICIENT_BALANCE, signer.address), False

        amount = self.amounts.pick()
        log.info("Transfer amount: %s ETH", Web3.from_wei(amount, "ether"))

        outcome = await self.submitter.submit(pair, amount)
        # Spent even when the send failed, a key gets one chance per run.
        self.used_keys.add(pair.key_material)
        return outcome, True

    def _reject(self, pair: TransferPair, kind: C.FailureKind, reason: C.FailureReason, from_address: str) -> PairOutcome:
        self.recorder.record(pair.wallet_id, from_address, pair.to_address, reason)
        return PairOutcome.failure(pair, kind, reason, from_address=from_address)

    def report(self, result: BatchResult) -> Path | None:
        """Log the summary and persist the failed ids. Returns the written file, if any."""
        log.info("Batch transfer complete!")
        log.info("Succeeded: %s wallets", len(result.succeeded))
        log.info("Failed: %s wallets", len(result.failed))
        if not result.failed:
            return None

        failed_list = result.failed_range()
        log.info("Failed wallets: %s", failed_list)
        log.info('Re-run argument for the next run: "%s"', failed_list)

        stamp = iso_timestamp(self.clock()).replace(":", "-")
        path = self.out_dir / f"{self.settings.files.failed_wallets_prefix}{stamp}.txt"
        try:
            path.write_text(failed_list, encoding="utf-8")
        except OSError as e:
            log.error("Could not save failed wallet list to %s: %s", path, e)
            return None
        log.info("Saved failed wallet ids to %s", path)
        return path
