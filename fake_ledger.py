"""In-memory Ledger used by the tests."""

from dataclasses import dataclass, field

from web3 import Web3

from batchsend.errors import SignerConstructionError
from batchsend.ledger import is_valid_address
from batchsend.models import FeeData, Receipt, TransferTx

ADDR_A = "0x" + "a1" * 20
ADDR_B = "0x" + "b2" * 20
ADDR_C = "0x" + "c3" * 20
DEST = "0x" + "d4" * 20


@dataclass(frozen=True)
class FakeSigner:
    address: str


@dataclass
class FakeLedger:
    keys: dict[str, str] = field(default_factory=dict)         # key material -> address
    balances: dict[str, int] = field(default_factory=dict)
    counts: dict[str, int] = field(default_factory=dict)       # chain-observed nonce baseline
    fail_sends: dict[str, int] = field(default_factory=dict)   # address -> broadcasts to fail first
    reverted: set[str] = field(default_factory=set)            # tx hashes whose receipt has status 0
    gas_price: int = Web3.to_wei(7, "gwei")
    balance_error: Exception | None = None

    count_queries: list[str] = field(default_factory=list)
    fee_queries: int = 0
    broadcasts: list[tuple[str, TransferTx]] = field(default_factory=list)
    sent: list[tuple[str, TransferTx]] = field(default_factory=list)
    closed: bool = False

    def signer(self, key_material: str) -> FakeSigner:
        if key_material not in self.keys:
            raise SignerConstructionError(f"unknown key {key_material[:4]}")
        return FakeSigner(self.keys[key_material])

    def is_address(self, value: str) -> bool:
        return is_valid_address(value)

    async def transaction_count(self, address: str) -> int:
        self.count_queries.append(address)
        return self.counts.get(address, 0)

    async def balance(self, address: str) -> int:
        if self.balance_error is not None:
            raise self.balance_error
        return self.balances.get(address, 0)

    async def fee_data(self) -> FeeData:
        self.fee_queries += 1
        return FeeData(gas_price=self.gas_price)

    async def send_transfer(self, signer: FakeSigner, tx: TransferTx) -> str:
        self.broadcasts.append((signer.address, tx))
        if self.fail_sends.get(signer.address, 0) > 0:
            self.fail_sends[signer.address] -= 1
            raise ConnectionError("rpc unavailable")
        self.sent.append((signer.address, tx))
        return f"0x{len(self.broadcasts):064x}"

    async def wait_for_receipt(self, tx_hash: str) -> Receipt:
        status = 0 if tx_hash in self.reverted else 1
        return Receipt(tx_hash=tx_hash, block_number=100, status=status)

    async def close(self) -> None:
        self.closed = True


class Sleeps:
    """Records requested sleeps instead of waiting."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class ScriptedRandom:
    """RandomSource that replays fixed values, then repeats the last one."""

    def __init__(self, *values: float):
        self.values = list(values) or [0.0]
        self.i = 0

    def random(self) -> float:
        v = self.values[min(self.i, len(self.values) - 1)]
        self.i += 1
        return v
