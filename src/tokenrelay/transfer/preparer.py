"""Prepare step of a transfer: build, hash and render the confirmation."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from tokenrelay.transfer.builder import TransactionBuilder
from tokenrelay.transfer.confirmation import ConfirmationBinder
from tokenrelay.transfer.hashing import CanonicalHasher
from tokenrelay.web.contracts.transactions import PreparedTransferResponse, UnsignedTransaction

logger = logging.getLogger(__name__)


@dataclass
class PreparedTransfer:
    """Everything the wallet needs to approve one transfer attempt."""

    transaction: UnsignedTransaction
    tx_hash: str
    message: str
    decimals: int
    base_units: int
    amount_text: str
    recipient: str

    def envelope(self, signature: str) -> dict[str, Any]:
        """Body for ``POST /broadcast``."""
        return {
            "transaction": self.transaction.to_wire(),
            "signature": signature,
            "txHash": self.tx_hash,
            "message": self.message,
        }

    def to_response(self) -> PreparedTransferResponse:
        return PreparedTransferResponse(
            transaction=self.transaction.to_wire(),
            tx_hash=self.tx_hash,
            message=self.message,
            decimals=self.decimals,
            base_units=str(self.base_units),
        )


class TransferPreparer:
    """Runs builder, hasher and binder for one transfer attempt."""

    def __init__(
        self,
        builder: TransactionBuilder,
        hasher: Optional[CanonicalHasher] = None,
        binder: Optional[ConfirmationBinder] = None,
    ):
        self.builder = builder
        self.hasher = hasher or CanonicalHasher()
        self.binder = binder or ConfirmationBinder()

    async def prepare(
        self,
        sender: str,
        recipient: str,
        token_address: str,
        amount_text: str,
    ) -> PreparedTransfer:
        """Build the unsigned transaction and the message to sign.

        Raises:
            InvalidAddress, InvalidAmountFormat, RPCUnavailable
        """
        built = await self.builder.build_transfer(sender, recipient, token_address, amount_text)
        tx_hash = self.hasher.hash(built.transaction)
        message = self.binder.render(
            recipient=built.recipient,
            amount_text=str(built.amount),
            base_units=built.base_units,
            token=built.transaction.to,
            content_hash=tx_hash,
        )
        logger.info("Prepared transfer %s (nonce %s)", tx_hash, built.transaction.nonce)
        return PreparedTransfer(
            transaction=built.transaction,
            tx_hash=tx_hash,
            message=message,
            decimals=built.amount.decimals,
            base_units=built.base_units,
            amount_text=str(built.amount),
            recipient=built.recipient,
        )
