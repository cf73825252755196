"""Client-side wallet abstraction.

Wallet kinds are a closed set, each implementing the same capability
interface; the kind is selected once when connecting.
"""

from tokenrelay.wallet.base import (
    WALLET_NAMES,
    WalletKind,
    WalletProvider,
    WalletSession,
    WalletUnavailable,
    connect_wallet,
)
from tokenrelay.wallet.local import LocalWalletProvider
from tokenrelay.wallet.jsonrpc import JsonRpcWalletProvider

__all__ = [
    "WALLET_NAMES",
    "WalletKind",
    "WalletProvider",
    "WalletSession",
    "WalletUnavailable",
    "connect_wallet",
    "LocalWalletProvider",
    "JsonRpcWalletProvider",
]
