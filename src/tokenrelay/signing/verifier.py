"""Signer recovery for EIP-191 personal messages.

Verification fails closed: malformed input, non-canonical signatures and
recovery errors all yield ``False`` and are never raised to the caller.
"""

import logging
import re
from typing import Optional

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import is_address

logger = logging.getLogger(__name__)

# secp256k1 group order
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

_SIGNATURE_PATTERN = re.compile(r"^0x[0-9a-fA-F]{130}$")


def split_signature(signature: str) -> Optional[tuple[int, int, int]]:
    """Split a 65-byte ``r || s || v`` hex signature into (v, r, s).

    Returns None unless the signature is canonical: ``v`` in {27, 28},
    ``r`` and ``s`` non-zero and ``s`` in the lower half of the curve order.
    """
    if not isinstance(signature, str) or not _SIGNATURE_PATTERN.match(signature):
        return None
    raw = bytes.fromhex(signature[2:])
    r = int.from_bytes(raw[:32], "big")
    s = int.from_bytes(raw[32:64], "big")
    v = raw[64]
    if v not in (27, 28):
        return None
    if not 0 < r < SECP256K1_N or not 0 < s <= SECP256K1_N // 2:
        return None
    return v, r, s


class SignatureVerifier:
    """Recovers the signer of a personal message and compares addresses.

    Works on the message text and signature alone; no chain client needed.
    """

    def recover(self, message: str, signature: str) -> Optional[str]:
        """Recover the checksum address that signed ``message``, or None."""
        if not isinstance(message, str) or split_signature(signature) is None:
            return None
        try:
            return Account.recover_message(encode_defunct(text=message), signature=signature)
        except Exception as e:
            logger.debug("Signer recovery failed: %s", e)
            return None

    def verify(self, message: str, signature: str, claimed_address: str) -> bool:
        """Check that ``signature`` over ``message`` was made by ``claimed_address``."""
        if not isinstance(claimed_address, str) or not is_address(claimed_address):
            return False
        recovered = self.recover(message, signature)
        if recovered is None:
            return False
        return recovered.lower() == claimed_address.lower()
