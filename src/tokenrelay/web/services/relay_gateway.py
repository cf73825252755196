"""Relay gateway: verifies signed envelopes and forwards them for broadcast.

Per-request state machine::

    Received -> Validated -> HashVerified -> SignatureVerified -> Broadcast -> Completed
         \\__________\\______________\\________________\\______________> Rejected

Every outcome is returned as a ``BroadcastResult``; validation failures are
never raised to the caller. The gateway keeps no per-user state between
requests.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError

from tokenrelay.amounts import to_base_units
from tokenrelay.errors import (
    ErrorKind,
    InvalidAmountFormat,
    RelayError,
    RPCUnavailable,
    status_message,
)
from tokenrelay.rpc.base import ChainRPC
from tokenrelay.rpc.erc20 import Erc20Token
from tokenrelay.rpc.health import RPCHealthProbe
from tokenrelay.signing.verifier import SignatureVerifier
from tokenrelay.transfer.builder import decode_transfer_call
from tokenrelay.transfer.confirmation import ConfirmationBinder
from tokenrelay.transfer.hashing import CanonicalHasher, hashes_equal
from tokenrelay.utils.replay import ReplayGuard
from tokenrelay.web.contracts.transactions import BroadcastResponse, UnsignedTransaction

logger = logging.getLogger(__name__)

REQUIRED_ENVELOPE_FIELDS = ("transaction", "signature", "txHash", "message")
REQUIRED_TX_FIELDS = ("from", "to", "data", "nonce", "chainId")
GAS_LIMIT_FIELDS = ("gasLimit", "gas")
FEE_FIELDS = ("maxFeePerGas", "gasPrice")


class RelayState(str, Enum):
    """States of one broadcast request."""

    RECEIVED = "Received"
    VALIDATED = "Validated"
    HASH_VERIFIED = "HashVerified"
    SIGNATURE_VERIFIED = "SignatureVerified"
    BROADCAST = "Broadcast"
    COMPLETED = "Completed"
    REJECTED = "Rejected"


@dataclass
class BroadcastResult:
    """Definitive outcome of one broadcast request."""

    success: bool
    tx_hash: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None
    states: list[RelayState] = field(default_factory=list)

    def to_response(self) -> BroadcastResponse:
        return BroadcastResponse(
            success=self.success,
            tx_hash=self.tx_hash,
            error=self.error,
            error_kind=self.error_kind.value if self.error_kind else None,
        )


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def find_missing_fields(envelope: Any) -> list[str]:
    """List required envelope fields that are absent or empty."""
    if not isinstance(envelope, dict):
        return list(REQUIRED_ENVELOPE_FIELDS)

    missing = [name for name in REQUIRED_ENVELOPE_FIELDS if _is_blank(envelope.get(name))]
    tx = envelope.get("transaction")
    if not isinstance(tx, dict):
        return missing

    missing.extend(f"transaction.{name}" for name in REQUIRED_TX_FIELDS if _is_blank(tx.get(name)))
    if all(_is_blank(tx.get(name)) for name in GAS_LIMIT_FIELDS):
        missing.append("transaction.gasLimit")
    if all(_is_blank(tx.get(name)) for name in FEE_FIELDS):
        missing.append("transaction.maxFeePerGas|gasPrice")
    return missing


class RelayGateway:
    """Server-side boundary for signed transfer envelopes."""

    def __init__(
        self,
        rpc: ChainRPC,
        chain_id: int,
        verifier: Optional[SignatureVerifier] = None,
        hasher: Optional[CanonicalHasher] = None,
        binder: Optional[ConfirmationBinder] = None,
        health_probe: Optional[RPCHealthProbe] = None,
        replay_guard: Optional[ReplayGuard] = None,
        default_decimals: int = 18,
    ):
        """Initialize gateway.

        Args:
            rpc: Shared chain client used for the broadcast
            chain_id: The only chain this relay accepts transactions for
            verifier: Signature verifier
            hasher: Canonical content hasher
            binder: Confirmation message parser
            health_probe: If set, gates every broadcast
            replay_guard: If set, rejects envelopes already broadcast
            default_decimals: Decimals assumed when decimals() cannot be read,
                matching the transaction builder's fallback
        """
        self.rpc = rpc
        self.chain_id = chain_id
        self.verifier = verifier or SignatureVerifier()
        self.hasher = hasher or CanonicalHasher()
        self.binder = binder or ConfirmationBinder()
        self.health_probe = health_probe
        self.replay_guard = replay_guard
        self.default_decimals = default_decimals

    @staticmethod
    def _reject(states: list[RelayState], kind: ErrorKind, detail: str) -> BroadcastResult:
        logger.warning("Broadcast rejected in %s (%s): %s", states[-1].value, kind.value, detail)
        states.append(RelayState.REJECTED)
        return BroadcastResult(
            success=False,
            error_kind=kind,
            error=status_message(kind, detail),
            states=states,
        )

    async def _token_decimals(self, token_address: str) -> int:
        """Read the token's decimals, falling back to the default.

        Raises:
            RPCUnavailable: If the node cannot be reached
        """
        try:
            return await Erc20Token(self.rpc, token_address).decimals()
        except RPCUnavailable:
            raise
        except Exception as e:
            logger.warning(
                "Failed to read decimals for %s, using default %d: %s",
                token_address,
                self.default_decimals,
                e,
            )
            return self.default_decimals

    async def _check_binding(
        self, tx: UnsignedTransaction, message: str, content_hash: str
    ) -> Optional[str]:
        """Check that the signed text describes this exact transaction.

        Raises:
            RPCUnavailable: If the token's decimals cannot be read
        """
        try:
            fields = self.binder.parse(message)
        except ValueError:
            return "message is not a transfer confirmation"
        try:
            recipient, amount = decode_transfer_call(tx.data)
        except ValueError as e:
            return str(e)

        if not hashes_equal(fields.content_hash, content_hash):
            return "message was signed for a different transaction hash"
        if fields.recipient.lower() != recipient.lower():
            return "message recipient differs from call data"
        if fields.token.lower() != tx.to.lower():
            return "message token contract differs from transaction"
        if fields.base_units != amount:
            return "message amount differs from call data"

        # The amount text is what the user reads; it must scale to the same base units
        decimals = await self._token_decimals(tx.to)
        try:
            shown = to_base_units(fields.amount_text, decimals)
        except InvalidAmountFormat:
            shown = None
        if shown != amount:
            return (
                f"message amount {fields.amount_text} is not {amount} base units "
                f"at {decimals} decimals"
            )
        return None

    async def process(self, envelope: Any) -> BroadcastResult:
        """Run one envelope through the full verification pipeline."""
        states = [RelayState.RECEIVED]

        # 1. Validate
        missing = find_missing_fields(envelope)
        if missing:
            return self._reject(states, ErrorKind.MISSING_FIELD, ", ".join(missing))

        try:
            tx = UnsignedTransaction.model_validate(envelope["transaction"])
        except ValidationError as e:
            first = e.errors()[0]
            loc = first["loc"][0] if first["loc"] else None
            kind = ErrorKind.INVALID_ADDRESS if loc in ("from", "to") else ErrorKind.INVALID_FIELD
            where = f"transaction.{loc}" if loc is not None else "transaction"
            return self._reject(states, kind, f"{where}: {first['msg']}")

        signature, claimed_hash, message = (
            envelope["signature"],
            envelope["txHash"],
            envelope["message"],
        )
        if not all(isinstance(value, str) for value in (signature, claimed_hash, message)):
            return self._reject(
                states, ErrorKind.INVALID_FIELD, "signature, txHash and message must be strings"
            )
        if tx.quantity("chain_id") != self.chain_id:
            return self._reject(
                states,
                ErrorKind.INVALID_FIELD,
                f"chainId {tx.quantity('chain_id')} is not served by this relay ({self.chain_id})",
            )
        if tx.quantity("value") != 0:
            # The confirmation message shows no native amount
            return self._reject(
                states, ErrorKind.INVALID_FIELD, "transaction.value must be 0 for a token transfer"
            )
        states.append(RelayState.VALIDATED)

        # 2. Recompute the content hash and check the message binding
        content_hash = self.hasher.hash(tx)
        if not hashes_equal(content_hash, claimed_hash):
            return self._reject(
                states, ErrorKind.HASH_MISMATCH, "recomputed hash differs from txHash"
            )
        try:
            binding_error = await self._check_binding(tx, message, content_hash)
        except RPCUnavailable as e:
            return self._reject(states, ErrorKind.RPC_UNAVAILABLE, str(e))
        if binding_error:
            return self._reject(states, ErrorKind.HASH_MISMATCH, binding_error)
        states.append(RelayState.HASH_VERIFIED)

        # 3. Recover the signer
        if not self.verifier.verify(message, signature, tx.from_address):
            return self._reject(
                states, ErrorKind.SIGNATURE_INVALID, "signer is not the transaction sender"
            )
        states.append(RelayState.SIGNATURE_VERIFIED)

        # 4. Broadcast
        if self.replay_guard is not None and not await self.replay_guard.claim(content_hash):
            return self._reject(states, ErrorKind.REPLAY_DETECTED, content_hash)

        broadcast_ok = False
        try:
            if self.health_probe is not None:
                health = await self.health_probe.check()
                if not health.connected:
                    return self._reject(states, ErrorKind.RPC_UNAVAILABLE, health.error or "")

            try:
                network_hash = await self.rpc.send_transaction(tx.to_rpc_params())
            except RelayError as e:
                return self._reject(states, ErrorKind.BROADCAST_FAILED, str(e))
            except Exception as e:
                logger.exception("Unexpected error broadcasting %s", content_hash)
                return self._reject(
                    states, ErrorKind.BROADCAST_FAILED, f"unexpected {type(e).__name__}"
                )
            broadcast_ok = True
        finally:
            # A failed or cancelled attempt may be resubmitted
            if not broadcast_ok:
                await self._release(content_hash)
        states.append(RelayState.BROADCAST)

        logger.info("Broadcast %s from %s -> %s", content_hash, tx.from_address, network_hash)
        states.append(RelayState.COMPLETED)
        return BroadcastResult(success=True, tx_hash=network_hash, states=states)

    async def _release(self, content_hash: str) -> None:
        if self.replay_guard is not None:
            await self.replay_guard.release(content_hash)
