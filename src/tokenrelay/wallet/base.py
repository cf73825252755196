"""Wallet capability interface and per-session context.

A wallet kind is chosen once at connection time. Everything after that goes
through the ``WalletSession`` object passed explicitly to each operation;
there is no module-level "current wallet" state.

SECURITY: Sessions NEVER hold private keys. Signing is delegated to the
provider, which belongs to the end user.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from eth_utils import to_checksum_address

from tokenrelay.errors import WalletRejected

logger = logging.getLogger(__name__)

AccountsListener = Callable[[list[str]], None]
ChainListener = Callable[[int], None]

# EIP-1193 "User Rejected Request"
USER_REJECTED_CODE = 4001


class WalletKind(str, Enum):
    """Supported wallet families."""

    BINANCE = "binance"
    METAMASK = "metamask"
    OKX = "okx"
    LOCAL = "local"  # In-process key, development only


WALLET_NAMES: dict[WalletKind, str] = {
    WalletKind.BINANCE: "Binance Web3 Wallet",
    WalletKind.METAMASK: "MetaMask",
    WalletKind.OKX: "OKX Wallet",
    WalletKind.LOCAL: "Local Wallet",
}


class WalletUnavailable(RuntimeError):
    """Raised when the selected wallet is not installed or not reachable."""


class WalletProvider(ABC):
    """Uniform capability interface every wallet kind implements."""

    def __init__(self, kind: WalletKind):
        self.kind = kind
        self._accounts_listeners: list[AccountsListener] = []
        self._chain_listeners: list[ChainListener] = []

    @property
    def display_name(self) -> str:
        return WALLET_NAMES[self.kind]

    @abstractmethod
    async def detect(self) -> bool:
        """Return True if the wallet is available."""
        pass

    @abstractmethod
    async def request_accounts(self) -> list[str]:
        """Ask the user to authorise accounts; raises WalletRejected if declined."""
        pass

    @abstractmethod
    async def sign_message(self, address: str, message: str) -> str:
        """personal_sign ``message`` with ``address``; raises WalletRejected if declined."""
        pass

    @abstractmethod
    async def get_chain_id(self) -> int:
        """Return the chain the wallet is currently on."""
        pass

    def on_accounts_changed(self, listener: AccountsListener) -> None:
        self._accounts_listeners.append(listener)

    def on_chain_changed(self, listener: ChainListener) -> None:
        self._chain_listeners.append(listener)

    def emit_accounts_changed(self, accounts: list[str]) -> None:
        for listener in list(self._accounts_listeners):
            listener(accounts)

    def emit_chain_changed(self, chain_id: int) -> None:
        for listener in list(self._chain_listeners):
            listener(chain_id)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(kind={self.kind.value})"


@dataclass
class WalletSession:
    """Connection context for one user: provider, account and chain."""

    provider: WalletProvider
    address: Optional[str]
    chain_id: int
    chain_changed: bool = False
    events: list[str] = field(default_factory=list)

    @property
    def is_connected(self) -> bool:
        return self.address is not None

    @property
    def short_address(self) -> str:
        if not self.address:
            return ""
        return f"{self.address[:6]}...{self.address[-4:]}"

    def handle_accounts_changed(self, accounts: list[str]) -> None:
        if not accounts:
            logger.info("%s disconnected", self.provider.display_name)
            self.address = None
            self.events.append("disconnected")
        elif self.address is None or accounts[0].lower() != self.address.lower():
            self.address = to_checksum_address(accounts[0])
            logger.info("Switched to account %s", self.short_address)
            self.events.append("account_changed")

    def handle_chain_changed(self, chain_id: int) -> None:
        if chain_id != self.chain_id:
            logger.warning("Wallet network changed from %s to %s", self.chain_id, chain_id)
            self.chain_id = chain_id
            self.chain_changed = True
            self.events.append("chain_changed")

    async def sign(self, message: str) -> str:
        """Have the connected account sign ``message``."""
        if not self.address:
            raise WalletRejected("Wallet is not connected")
        return await self.provider.sign_message(self.address, message)


async def connect_wallet(provider: WalletProvider) -> WalletSession:
    """Connect a wallet and return its session context.

    Raises:
        WalletUnavailable: If the wallet is not detected
        WalletRejected: If the user declines or authorises no account
    """
    if not await provider.detect():
        raise WalletUnavailable(f"Please install {provider.display_name}")

    accounts = await provider.request_accounts()
    if not accounts:
        raise WalletRejected("No account was authorised")
    chain_id = await provider.get_chain_id()

    session = WalletSession(
        provider=provider,
        address=to_checksum_address(accounts[0]),
        chain_id=chain_id,
    )
    provider.on_accounts_changed(session.handle_accounts_changed)
    provider.on_chain_changed(session.handle_chain_changed)

    logger.info("%s connected: %s", provider.display_name, session.short_address)
    return session
