"""Transfer construction: builder, canonical hash and confirmation binding."""

from tokenrelay.transfer.builder import (
    BuiltTransfer,
    TransactionBuilder,
    decode_transfer_call,
    encode_transfer_call,
)
from tokenrelay.transfer.confirmation import ConfirmationBinder, ConfirmationFields
from tokenrelay.transfer.hashing import CanonicalHasher, canonical_serialize, hashes_equal
from tokenrelay.transfer.preparer import PreparedTransfer, TransferPreparer

__all__ = [
    "BuiltTransfer",
    "TransactionBuilder",
    "encode_transfer_call",
    "decode_transfer_call",
    "ConfirmationBinder",
    "ConfirmationFields",
    "CanonicalHasher",
    "canonical_serialize",
    "hashes_equal",
    "PreparedTransfer",
    "TransferPreparer",
]
