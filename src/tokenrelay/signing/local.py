"""Local signing backend.

Signs EIP-191 personal messages with an in-memory private key. Suitable for:
- Development/testing
- Scripted transfers from a key the operator controls

WARNING: The private key is held in memory. The relay itself never uses
this module; it only verifies signatures.
"""

import logging
from dataclasses import dataclass

from eth_account import Account
from eth_account.messages import encode_defunct

logger = logging.getLogger(__name__)


@dataclass
class SignatureResult:
    """Result of a signing operation.

    Attributes:
        signature: 65-byte ``r || s || v`` signature as 0x-prefixed hex
        v: Recovery parameter (27 or 28)
        r: R component (hex)
        s: S component (hex)
        address: Address of the signing key
    """
    signature: str
    v: int
    r: str
    s: str
    address: str


class LocalSigner:
    """Personal-message signer backed by one in-memory key."""

    def __init__(self, private_key: str):
        self._account = Account.from_key(private_key)
        logger.info("Loaded local signing key for %s", self.address)

    @property
    def address(self) -> str:
        return self._account.address

    def sign_message(self, message: str) -> SignatureResult:
        """Sign ``message`` the way ``personal_sign`` does."""
        signed = self._account.sign_message(encode_defunct(text=message))
        signature = "0x" + bytes(signed.signature).hex()
        return SignatureResult(
            signature=signature,
            v=signed.v,
            r=hex(signed.r),
            s=hex(signed.s),
            address=self.address,
        )

    def __repr__(self) -> str:
        return f"LocalSigner(address={self.address})"
