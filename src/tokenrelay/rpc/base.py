"""Base interface for the blockchain RPC collaborator.

The relay and the transaction builder only talk to the chain through this
interface. A single instance may be shared between concurrent requests; it
must not keep any per-user state.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass
class FeeData:
    """Current fee suggestion from the node (all values in wei)."""

    gas_price: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None

    @property
    def supports_eip1559(self) -> bool:
        return self.max_fee_per_gas is not None


class ChainRPC(ABC):
    """Abstract chain client.

    Implementations raise ``RPCUnavailable`` when the node cannot be reached
    and ``RPCError`` when the node answers with an error.
    """

    @abstractmethod
    async def get_block_number(self) -> int:
        """Return the current block height."""
        pass

    @abstractmethod
    async def get_chain_id(self) -> int:
        """Return the chain ID reported by the node."""
        pass

    @abstractmethod
    async def is_syncing(self) -> bool:
        """Return True while the node is still catching up."""
        pass

    @abstractmethod
    async def get_transaction_count(self, address: str, block: str = "pending") -> int:
        """Return the nonce to use for the next transaction of ``address``."""
        pass

    @abstractmethod
    async def get_fee_data(self) -> FeeData:
        """Return current gas price / EIP-1559 fee suggestion."""
        pass

    @abstractmethod
    async def estimate_gas(self, tx: dict[str, Any]) -> int:
        """Estimate gas for a call described by RPC-style params."""
        pass

    @abstractmethod
    async def call(self, to: str, data: str) -> str:
        """Execute a read-only contract call, returning hex return data."""
        pass

    @abstractmethod
    async def send_transaction(self, params: dict[str, str]) -> str:
        """Submit a transaction and return its network hash."""
        pass

    @abstractmethod
    async def get_transaction_receipt(self, tx_hash: str) -> Optional[dict[str, Any]]:
        """Return the receipt, or None while the transaction is pending."""
        pass

    async def close(self) -> None:
        """Release pooled connections."""
        return None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
