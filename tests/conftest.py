"""Pytest configuration and fixtures."""

import os
from typing import Any, Optional

import pytest
from eth_abi import encode
from eth_account import Account

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "true"
os.environ["RPC_URL"] = "http://rpc.invalid"

from tokenrelay.config import Settings
from tokenrelay.errors import RPCError
from tokenrelay.rpc.base import ChainRPC, FeeData
from tokenrelay.rpc.erc20 import (
    ERC20_BALANCE_OF_SELECTOR,
    ERC20_DECIMALS_SELECTOR,
    ERC20_NAME_SELECTOR,
    ERC20_SYMBOL_SELECTOR,
)
from tokenrelay.transfer import TransactionBuilder, TransferPreparer

CHAIN_ID = 4200

SENDER_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
OTHER_KEY = "0x8da4ef21b864d2cc526dbdb2a120bd2874c36c9d0a1fb7f8c63d7f7a8b41de8f"

TOKEN = "0x" + "ab" * 20
RECIPIENT = "0x" + "cd" * 20


def abi_word(types: list[str], values: list[Any]) -> str:
    """Encode a contract return value as eth_call would return it."""
    return "0x" + encode(types, values).hex()


class FakeChainRPC(ChainRPC):
    """In-memory chain client.

    Set ``fail`` to an exception to make every call raise it.
    """

    def __init__(
        self,
        chain_id: int = CHAIN_ID,
        block_number: int = 1_000_000,
        nonce: int = 7,
        fees: Optional[FeeData] = None,
        gas_estimate: Optional[int] = 52_000,
        decimals: Optional[int] = 6,
        symbol: str = "USDT",
        name: str = "Tether USD",
        balance: int = 2_500_000,
    ):
        self.chain_id = chain_id
        self.block_number = block_number
        self.syncing = False
        self.nonce = nonce
        self.fees = fees or FeeData(
            gas_price=50_000_000,
            max_fee_per_gas=101_000_000,
            max_priority_fee_per_gas=1_000_000,
        )
        self.gas_estimate = gas_estimate
        self.fail: Optional[Exception] = None
        self.send_error: Optional[Exception] = None
        self.sent: list[dict[str, str]] = []
        self.receipts: dict[str, dict[str, Any]] = {}
        self.contract_calls: dict[str, Any] = {
            ERC20_SYMBOL_SELECTOR: abi_word(["string"], [symbol]),
            ERC20_NAME_SELECTOR: abi_word(["string"], [name]),
            ERC20_BALANCE_OF_SELECTOR: abi_word(["uint256"], [balance]),
        }
        if decimals is None:
            self.contract_calls[ERC20_DECIMALS_SELECTOR] = RPCError("execution reverted")
        else:
            self.contract_calls[ERC20_DECIMALS_SELECTOR] = abi_word(["uint8"], [decimals])
        self.closed = False

    def _check(self) -> None:
        if self.fail is not None:
            raise self.fail

    async def get_block_number(self) -> int:
        self._check()
        return self.block_number

    async def get_chain_id(self) -> int:
        self._check()
        return self.chain_id

    async def is_syncing(self) -> bool:
        self._check()
        return self.syncing

    async def get_transaction_count(self, address: str, block: str = "pending") -> int:
        self._check()
        return self.nonce

    async def get_fee_data(self) -> FeeData:
        self._check()
        return self.fees

    async def estimate_gas(self, tx: dict[str, Any]) -> int:
        self._check()
        if self.gas_estimate is None:
            raise RPCError("execution reverted")
        return self.gas_estimate

    async def call(self, to: str, data: str) -> str:
        self._check()
        result = self.contract_calls.get(data[:10])
        if isinstance(result, Exception):
            raise result
        if result is None:
            raise RPCError("execution reverted")
        return result

    async def send_transaction(self, params: dict[str, str]) -> str:
        self._check()
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(params)
        return "0x" + f"{len(self.sent):064x}"

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[dict[str, Any]]:
        self._check()
        return self.receipts.get(tx_hash)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def sender_account():
    """Account whose key signs confirmations in tests."""
    return Account.from_key(SENDER_KEY)


@pytest.fixture
def other_account():
    """A second account that is not the transaction sender."""
    return Account.from_key(OTHER_KEY)


@pytest.fixture
def fake_rpc() -> FakeChainRPC:
    return FakeChainRPC()


@pytest.fixture
def builder(fake_rpc) -> TransactionBuilder:
    return TransactionBuilder(fake_rpc, chain_id=CHAIN_ID)


@pytest.fixture
def preparer(builder) -> TransferPreparer:
    return TransferPreparer(builder)


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the process environment and any .env file."""
    return Settings(
        _env_file=None,
        rpc_url="https://rpc.example.org/v3/secret-key",
        chain_id=CHAIN_ID,
        probe_timeout=1.0,
        wallet_private_key=None,
    )
