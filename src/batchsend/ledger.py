"""Ledger collaborator: the seam between the dispatch engine and the chain.

Everything the engine needs from the chain goes through the ``Ledger``
protocol. ``Web3Ledger`` is the production implementation on web3.py and
eth-account; tests substitute an in-memory fake.
"""

import logging
from typing import Protocol

from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

import batchsend.constants as C
from batchsend.errors import SignerConstructionError
from batchsend.models import FeeData, Receipt, TransferTx

log = logging.getLogger("batchsend.ledger")


def is_valid_address(value: str) -> bool:
    """Hex address check that also enforces EIP-55 when the address is mixed case.

    Newer eth-utils releases no longer reject a mixed-case address with a bad
    checksum in ``Web3.is_address``; such an address is a typo, not a destination.
    """
    if not Web3.is_address(value):
        return False
    body = value[2:] if value[:2].lower() == "0x" else value
    return body == body.lower() or body == body.upper() or Web3.is_checksum_address(value)


class Signer(Protocol):
    @property
    def address(self) -> str: ...


class Ledger(Protocol):
    def signer(self, key_material: str) -> Signer: ...
    def is_address(self, value: str) -> bool: ...
    async def transaction_count(self, address: str) -> int: ...
    async def balance(self, address: str) -> int: ...
    async def fee_data(self) -> FeeData: ...
    async def send_transfer(self, signer: Signer, tx: TransferTx) -> str: ...
    async def wait_for_receipt(self, tx_hash: str) -> Receipt: ...


class Web3Ledger:
    def __init__(self, url: str = C.RPC_URL, *, receipt_timeout: float = 120.0):
        self.url = url
        self.receipt_timeout = receipt_timeout
        self.w3 = AsyncWeb3(AsyncHTTPProvider(url))
        self._chain_id: int | None = None

    def signer(self, key_material: str):
        try:
            return Account.from_key(key_material)
        except Exception as e:
            # eth-account raises ValueError, binascii.Error, eth_keys ValidationError... depending on the input
            raise SignerConstructionError(f"{type(e).__name__}: {e}") from e

    def is_address(self, value: str) -> bool:
        return is_valid_address(value)

    async def transaction_count(self, address: str) -> int:
        return await self.w3.eth.get_transaction_count(address, C.BLOCK_IDENTIFIER)

    async def balance(self, address: str) -> int:
        return await self.w3.eth.get_balance(address)

    async def fee_data(self) -> FeeData:
        return FeeData(gas_price=await self.w3.eth.gas_price)

    async def chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = await self.w3.eth.chain_id
            log.debug("chain id %s", self._chain_id)
        return self._chain_id

    async def send_transfer(self, signer, tx: TransferTx) -> str:
        tx_dict = tx.to_dict()
        tx_dict["to"] = Web3.to_checksum_address(tx.to)
        tx_dict["chainId"] = await self.chain_id()
        signed = signer.sign_transaction(tx_dict)
        tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        return Web3.to_hex(tx_hash)

    async def wait_for_receipt(self, tx_hash: str) -> Receipt:
        r = await self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        return Receipt(
            tx_hash=Web3.to_hex(r["transactionHash"]),
            block_number=r.get("blockNumber"),
            status=int(r["status"]),
        )

    async def close(self) -> None:
        await self.w3.provider.disconnect()
