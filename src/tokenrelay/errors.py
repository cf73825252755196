"""Error taxonomy shared by the client, the builder and the relay.

Builders and codecs raise the exceptions below. The relay gateway and the
transfer client never raise them to their callers; they return result objects
carrying an ``ErrorKind`` instead.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Classification of every failure the transfer flow can report."""

    INVALID_AMOUNT_FORMAT = "InvalidAmountFormat"
    INVALID_ADDRESS = "InvalidAddress"
    INVALID_FIELD = "InvalidField"
    MISSING_FIELD = "MissingField"
    HASH_MISMATCH = "HashMismatch"
    SIGNATURE_INVALID = "SignatureInvalid"
    REPLAY_DETECTED = "ReplayDetected"
    RPC_UNAVAILABLE = "RPCUnavailable"
    BROADCAST_FAILED = "BroadcastFailed"
    WALLET_REJECTED = "WalletRejected"


# Short user-facing status text per failure kind
STATUS_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.INVALID_AMOUNT_FORMAT: "Invalid amount format",
    ErrorKind.INVALID_ADDRESS: "Invalid address",
    ErrorKind.INVALID_FIELD: "Invalid transaction field",
    ErrorKind.MISSING_FIELD: "Missing transaction data or signature",
    ErrorKind.HASH_MISMATCH: "Transaction does not match the signed confirmation",
    ErrorKind.SIGNATURE_INVALID: "Signature does not match the sender",
    ErrorKind.REPLAY_DETECTED: "Transaction was already submitted",
    ErrorKind.RPC_UNAVAILABLE: "Cannot reach the chain RPC node, please retry later",
    ErrorKind.BROADCAST_FAILED: "Transaction broadcast failed",
    ErrorKind.WALLET_REJECTED: "Signature request was declined in the wallet",
}


def status_message(kind: ErrorKind, detail: Optional[str] = None) -> str:
    """Build the status line shown to the user for a failure."""
    base = STATUS_MESSAGES[kind]
    return f"{base}: {detail}" if detail else base


class RelayError(Exception):
    """Base exception for the transfer flow."""

    kind: ErrorKind = ErrorKind.BROADCAST_FAILED

    def __init__(self, message: str = ""):
        super().__init__(message or STATUS_MESSAGES[self.kind])


class InvalidAmountFormat(RelayError, ValueError):
    """Raised when an amount is not a valid non-negative decimal numeral."""

    kind = ErrorKind.INVALID_AMOUNT_FORMAT


class InvalidAddress(RelayError, ValueError):
    """Raised when an address is not a well-formed 20-byte hex address."""

    kind = ErrorKind.INVALID_ADDRESS


class RPCUnavailable(RelayError):
    """Raised when the chain RPC endpoint cannot be reached."""

    kind = ErrorKind.RPC_UNAVAILABLE


class RPCError(RelayError):
    """Raised when the RPC node answers with an error object.

    The message only carries the node's error text, never the endpoint URL.
    """

    kind = ErrorKind.BROADCAST_FAILED

    def __init__(self, message: str, code: Optional[int] = None):
        self.code = code
        super().__init__(message)


class WalletRejected(RelayError):
    """Raised when the user declines a wallet request."""

    kind = ErrorKind.WALLET_REJECTED
