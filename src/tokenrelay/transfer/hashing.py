"""Canonical content hash of an unsigned transaction.

Client and relay must agree on the hash bit for bit, possibly across
languages. The serialization therefore fixes field order and encodes every
integer as a decimal string; it never depends on mapping iteration order or
on how the quantities were spelled on the wire.
"""

import hmac
import json
from typing import Any, Union

from eth_utils import keccak

from tokenrelay.web.contracts.transactions import UnsignedTransaction, parse_quantity

# (wire name, attribute, encoding)
CANONICAL_FIELDS: tuple[tuple[str, str, str], ...] = (
    ("chainId", "chain_id", "int"),
    ("nonce", "nonce", "int"),
    ("from", "from_address", "hex"),
    ("to", "to", "hex"),
    ("value", "value", "int"),
    ("data", "data", "hex"),
    ("gasLimit", "gas_limit", "int"),
    ("gasPrice", "gas_price", "int"),
    ("maxFeePerGas", "max_fee_per_gas", "int"),
    ("maxPriorityFeePerGas", "max_priority_fee_per_gas", "int"),
)


def canonical_serialize(tx: UnsignedTransaction) -> str:
    """Serialize as a compact JSON array of ``[name, value]`` pairs.

    Absent optional fields are encoded as ``""`` so every serialization
    carries the same ten pairs in the same order.
    """
    pairs = []
    for name, attr, encoding in CANONICAL_FIELDS:
        raw = getattr(tx, attr)
        if raw is None:
            value = ""
        elif encoding == "int":
            value = str(parse_quantity(raw))
        else:
            value = raw.lower()
        pairs.append([name, value])
    return json.dumps(pairs, separators=(",", ":"), ensure_ascii=True)


def hashes_equal(a: str, b: str) -> bool:
    """Case-insensitive constant-time comparison of two hex digests."""
    if not isinstance(a, str) or not isinstance(b, str):
        return False
    return hmac.compare_digest(a.lower().encode(), b.lower().encode())


class CanonicalHasher:
    """Produces the keccak-256 content hash binding a transaction to its confirmation."""

    def serialize(self, tx: Union[UnsignedTransaction, dict[str, Any]]) -> str:
        if not isinstance(tx, UnsignedTransaction):
            tx = UnsignedTransaction.model_validate(tx)
        return canonical_serialize(tx)

    def hash(self, tx: Union[UnsignedTransaction, dict[str, Any]]) -> str:
        """Return the ``0x``-prefixed hex content hash of ``tx``."""
        return "0x" + keccak(text=self.serialize(tx)).hex()
