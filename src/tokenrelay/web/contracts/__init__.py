"""Request and response contracts for the web layer.

These Pydantic models define the JSON interface shared by the relay and its
clients.
"""

from tokenrelay.web.contracts.tokens import (
    TokenBalance,
    TokenInfo,
)
from tokenrelay.web.contracts.transactions import (
    BroadcastResponse,
    PreparedTransferResponse,
    PrepareTransferRequest,
    RPCStatusResponse,
    UnsignedTransaction,
)

__all__ = [
    # Transaction contracts
    "UnsignedTransaction",
    "PrepareTransferRequest",
    "PreparedTransferResponse",
    "BroadcastResponse",
    "RPCStatusResponse",
    # Token contracts
    "TokenInfo",
    "TokenBalance",
]
