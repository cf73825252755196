"""Wallet provider backed by an in-process key.

Useful for scripted transfers and tests. An optional ``approve`` callback
plays the role of the wallet's confirmation prompt.
"""

import logging
from typing import Callable, Optional

from tokenrelay.errors import WalletRejected
from tokenrelay.signing.local import LocalSigner
from tokenrelay.wallet.base import WalletKind, WalletProvider

logger = logging.getLogger(__name__)


class LocalWalletProvider(WalletProvider):
    """Local key wallet."""

    def __init__(
        self,
        private_key: str,
        chain_id: int,
        approve: Optional[Callable[[str], bool]] = None,
        kind: WalletKind = WalletKind.LOCAL,
    ):
        super().__init__(kind)
        self._signer = LocalSigner(private_key)
        self._chain_id = chain_id
        self._approve = approve

    @property
    def address(self) -> str:
        return self._signer.address

    async def detect(self) -> bool:
        return True

    async def request_accounts(self) -> list[str]:
        return [self._signer.address]

    async def sign_message(self, address: str, message: str) -> str:
        if address.lower() != self._signer.address.lower():
            raise WalletRejected(f"Account {address} is not managed by this wallet")
        if self._approve is not None and not self._approve(message):
            raise WalletRejected("User declined the signature request")
        return self._signer.sign_message(message).signature

    async def get_chain_id(self) -> int:
        return self._chain_id

    def switch_chain(self, chain_id: int) -> None:
        """Simulate the user switching networks."""
        self._chain_id = chain_id
        self.emit_chain_changed(chain_id)
