"""Transaction builder for preparing unsigned ERC20 transfers.

This service builds unsigned transactions for wallet-side approval.
NO signing or broadcasting happens here.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from tokenrelay.amounts import TokenAmount
from tokenrelay.errors import InvalidAddress, InvalidAmountFormat, RelayError
from tokenrelay.rpc.base import ChainRPC, FeeData
from tokenrelay.rpc.erc20 import Erc20Token
from tokenrelay.web.contracts.transactions import UnsignedTransaction, normalize_address

logger = logging.getLogger(__name__)

# ERC-20 ABI fragment
ERC20_TRANSFER_SELECTOR = "0xa9059cbb"  # transfer(address,uint256)

MAX_UINT256 = 2**256 - 1
DEFAULT_TOKEN_DECIMALS = 18


def encode_transfer_call(recipient: str, amount: int) -> str:
    """Encode ``transfer(address,uint256)`` call data.

    Selector, then the recipient zero-padded to 32 bytes, then the amount as
    a 32-byte big-endian integer.
    """
    if amount < 0 or amount > MAX_UINT256:
        raise InvalidAmountFormat("Amount does not fit in uint256")
    to_padded = recipient.lower().replace("0x", "").zfill(64)
    amount_hex = hex(amount)[2:].zfill(64)
    return f"{ERC20_TRANSFER_SELECTOR}{to_padded}{amount_hex}"


def decode_transfer_call(data: str) -> tuple[str, int]:
    """Decode ``transfer(address,uint256)`` call data.

    Returns:
        (recipient checksum address, amount in base units)

    Raises:
        ValueError: If the data is not exactly one ERC20 transfer call
    """
    data = data.lower()
    if not data.startswith(ERC20_TRANSFER_SELECTOR) or len(data) != 10 + 128:
        raise ValueError("Call data is not an ERC20 transfer")
    address_word = data[10:74]
    if address_word[:24] != "0" * 24:
        raise ValueError("Malformed recipient word in transfer call data")
    recipient = normalize_address("0x" + address_word[24:])
    amount = int(data[74:], 16)
    return recipient, amount


@dataclass
class BuiltTransfer:
    """An assembled transfer plus the values shown to the user."""

    transaction: UnsignedTransaction
    amount: TokenAmount
    base_units: int
    recipient: str
    decimals_fallback: bool = False


class TransactionBuilder:
    """Builds unsigned ERC20 transfers for wallet-side approval.

    This service NEVER:
    - Accesses private keys
    - Signs transactions
    - Broadcasts transactions
    """

    def __init__(
        self,
        rpc: ChainRPC,
        chain_id: int,
        default_decimals: int = DEFAULT_TOKEN_DECIMALS,
        default_gas_limit: int = 100000,
    ):
        self.rpc = rpc
        self.chain_id = chain_id
        self.default_decimals = default_decimals
        self.default_gas_limit = default_gas_limit

    @staticmethod
    def validate_address(address: str, field: str) -> str:
        """Return the checksum form of ``address`` or raise InvalidAddress."""
        try:
            return normalize_address(address)
        except ValueError:
            raise InvalidAddress(f"Invalid {field} address: {address!r}")

    def build_token_transfer(
        self,
        sender: str,
        token_address: str,
        to_address: str,
        amount: int,
        nonce: int,
        fees: FeeData,
        gas_limit: int,
    ) -> UnsignedTransaction:
        """Assemble an ERC-20 transfer from already-resolved chain values.

        Args:
            sender: Sender address
            token_address: Token contract address
            to_address: Recipient address
            amount: Amount in token base units
            nonce: Sender nonce
            fees: Fee suggestion from the node
            gas_limit: Gas limit

        Returns:
            UnsignedTransaction for the wallet to approve
        """
        fee_fields: dict[str, str] = {}
        if fees.supports_eip1559:
            fee_fields["maxFeePerGas"] = str(fees.max_fee_per_gas)
            if fees.max_priority_fee_per_gas is not None:
                fee_fields["maxPriorityFeePerGas"] = str(fees.max_priority_fee_per_gas)
        elif fees.gas_price is not None:
            fee_fields["gasPrice"] = str(fees.gas_price)
        else:
            raise RelayError("Node returned no usable fee data")

        return UnsignedTransaction.model_validate(
            {
                "from": sender,
                "to": token_address,
                "data": encode_transfer_call(to_address, amount),
                "value": "0",
                "gasLimit": str(gas_limit),
                "nonce": str(nonce),
                "chainId": str(self.chain_id),
                **fee_fields,
            }
        )

    async def resolve_decimals(self, token_address: str) -> tuple[int, bool]:
        """Read the token's decimals, falling back to the default.

        Returns:
            (decimals, True if the fallback was used)
        """
        try:
            return await Erc20Token(self.rpc, token_address).decimals(), False
        except Exception as e:
            logger.warning(
                "Failed to read decimals for %s, using default %d: %s",
                token_address,
                self.default_decimals,
                e,
            )
            return self.default_decimals, True

    async def estimate_gas_limit(self, sender: str, token_address: str, data: str) -> int:
        """Estimate gas for the transfer call, falling back to the default."""
        try:
            return await self.rpc.estimate_gas(
                {"from": sender, "to": token_address, "data": data, "value": "0x0"}
            )
        except RelayError as e:
            logger.warning(
                "Gas estimation failed for %s, using default %d: %s",
                token_address,
                self.default_gas_limit,
                e,
            )
            return self.default_gas_limit

    async def build_transfer(
        self,
        sender: str,
        recipient: str,
        token_address: str,
        amount_text: str,
        decimals: Optional[int] = None,
    ) -> BuiltTransfer:
        """Build an unsigned ERC-20 transfer from user input.

        Args:
            sender: Connected wallet address
            recipient: Recipient address
            token_address: Token contract address
            amount_text: Amount as entered, e.g. "1.5"
            decimals: Known token decimals (skips the contract read)

        Returns:
            BuiltTransfer with the unsigned transaction

        Raises:
            InvalidAddress: If any address is malformed
            InvalidAmountFormat: If the amount is not a valid numeral
            RPCUnavailable: If nonce or fee data cannot be fetched
        """
        sender = self.validate_address(sender, "sender")
        recipient = self.validate_address(recipient, "recipient")
        token_address = self.validate_address(token_address, "token")

        fallback = False
        if decimals is None:
            decimals, fallback = await self.resolve_decimals(token_address)

        amount = TokenAmount(text=amount_text, decimals=decimals)
        base_units = amount.base_units
        data = encode_transfer_call(recipient, base_units)
        logger.debug("Converted amount %s -> %d base units", amount, base_units)

        nonce, fees = await asyncio.gather(
            self.rpc.get_transaction_count(sender),
            self.rpc.get_fee_data(),
        )
        gas_limit = await self.estimate_gas_limit(sender, token_address, data)

        tx = self.build_token_transfer(
            sender=sender,
            token_address=token_address,
            to_address=recipient,
            amount=base_units,
            nonce=nonce,
            fees=fees,
            gas_limit=gas_limit,
        )
        return BuiltTransfer(
            transaction=tx,
            amount=amount,
            base_units=base_units,
            recipient=recipient,
            decimals_fallback=fallback,
        )
