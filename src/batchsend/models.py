"""Domain data structures for a batch run."""

from dataclasses import dataclass, field

from batchsend.constants import FailureKind


def mask_key(key_material: str) -> str:
    """Return key material safe for a log line: only the last 4 chars survive."""
    if len(key_material) <= 8:
        return "*" * len(key_material)
    return f"...{key_material[-4:]}"


@dataclass(frozen=True, slots=True)
class TransferPair:
    wallet_id: str
    key_material: str = field(repr=False)
    to_address: str

    def __str__(self):
        return f"wallet {self.wallet_id} ({mask_key(self.key_material)}) -> {self.to_address}"


@dataclass(frozen=True, slots=True)
class TransferTx:
    """Unsigned legacy value transfer. ``value`` and ``gas_price`` are in wei."""

    to: str
    value: int
    gas: int
    gas_price: int
    nonce: int

    def to_dict(self) -> dict:
        return {
            "to": self.to,
            "value": self.value,
            "gas": self.gas,
            "gasPrice": self.gas_price,
            "nonce": self.nonce,
        }


@dataclass(frozen=True, slots=True)
class FeeData:
    gas_price: int  # wei


@dataclass(frozen=True, slots=True)
class Receipt:
    tx_hash: str
    block_number: int | None
    status: int

    @property
    def ok(self) -> bool:
        return self.status == 1


@dataclass(frozen=True, slots=True)
class PairOutcome:
    """End state of one pair. ``kind`` is None on success."""

    wallet_id: str
    to_address: str
    kind: FailureKind | None = None
    from_address: str | None = None
    tx_hash: str | None = None
    attempts: int = 0
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.kind is None

    @classmethod
    def success(cls, pair: TransferPair, from_address: str, tx_hash: str, attempts: int) -> "PairOutcome":
        return cls(
            wallet_id=pair.wallet_id,
            to_address=pair.to_address,
            from_address=from_address,
            tx_hash=tx_hash,
            attempts=attempts,
        )

    @classmethod
    def failure(
        cls,
        pair: TransferPair,
        kind: FailureKind,
        reason: str,
        *,
        from_address: str | None = None,
        attempts: int = 0,
    ) -> "PairOutcome":
        return cls(
            wallet_id=pair.wallet_id,
            to_address=pair.to_address,
            kind=kind,
            from_address=from_address,
            attempts=attempts,
            reason=reason,
        )


@dataclass
class BatchResult:
    """Disjoint succeeded/failed wallet-id sets plus every outcome in processing order.

    A wallet id that fails once stays failed even if another pair with the same id succeeds later.
    """

    succeeded: set[str] = field(default_factory=set)
    failed: set[str] = field(default_factory=set)
    outcomes: list[PairOutcome] = field(default_factory=list)

    def add(self, outcome: PairOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.ok:
            if outcome.wallet_id not in self.failed:
                self.succeeded.add(outcome.wallet_id)
        else:
            self.succeeded.discard(outcome.wallet_id)
            self.failed.add(outcome.wallet_id)

    def failed_range(self) -> str:
        """Sorted, comma-joined failed ids, usable as the next run's wallet selector."""
        return ",".join(sorted(self.failed))
