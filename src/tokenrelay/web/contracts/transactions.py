"""Transaction contracts shared by the client and the relay.

Numeric fields travel as hex (``0x...``) or decimal strings, never as native
JSON numbers, so no intermediate float can ever touch a quantity.
"""

import re
from typing import Any, Optional

from eth_utils import is_address, to_checksum_address
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

_HEX_DATA = re.compile(r"^0x([0-9a-fA-F]{2})*$")
_HEX_QUANTITY = re.compile(r"^0x[0-9a-fA-F]+$")
_DEC_QUANTITY = re.compile(r"^[0-9]+$")

ADDRESS_FIELDS = ("from", "to")
QUANTITY_FIELDS = (
    "value",
    "gasLimit",
    "gasPrice",
    "maxFeePerGas",
    "maxPriorityFeePerGas",
    "nonce",
    "chainId",
)


def parse_quantity(value: Any) -> int:
    """Parse a hex or decimal quantity string into an integer.

    Raises:
        ValueError: If the value is not a string in either notation
    """
    if not isinstance(value, str):
        raise ValueError("must be a hex or decimal string")
    text = value.strip()
    if _HEX_QUANTITY.match(text):
        return int(text, 16)
    if _DEC_QUANTITY.match(text):
        return int(text)
    raise ValueError(f"not a hex or decimal quantity: {value!r}")


def normalize_address(value: Any) -> str:
    """Validate an address and return its checksum form."""
    if not isinstance(value, str) or not is_address(value):
        raise ValueError(f"invalid address: {value!r}")
    return to_checksum_address(value)


class UnsignedTransaction(BaseModel):
    """An unsigned ERC20 transfer transaction.

    Immutable once constructed: the content hash is computed over these
    exact field values.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    from_address: str = Field(..., alias="from", description="Sender address")
    to: str = Field(..., description="Token contract address")
    data: str = Field(..., description="ERC20 transfer call data (hex)")
    value: str = Field(default="0", description="Native value in wei")
    gas_limit: str = Field(
        ...,
        validation_alias=AliasChoices("gasLimit", "gas", "gas_limit"),
        serialization_alias="gasLimit",
        description="Gas limit",
    )
    gas_price: Optional[str] = Field(None, alias="gasPrice", description="Legacy gas price")
    max_fee_per_gas: Optional[str] = Field(None, alias="maxFeePerGas", description="EIP-1559 max fee")
    max_priority_fee_per_gas: Optional[str] = Field(
        None, alias="maxPriorityFeePerGas", description="EIP-1559 priority fee"
    )
    nonce: str = Field(..., description="Sender nonce")
    chain_id: str = Field(..., alias="chainId", description="EVM chain ID")

    @field_validator("from_address", "to", mode="before")
    @classmethod
    def validate_address(cls, v: Any) -> str:
        return normalize_address(v)

    @field_validator("data", mode="before")
    @classmethod
    def validate_data(cls, v: Any) -> str:
        if not isinstance(v, str) or not _HEX_DATA.match(v):
            raise ValueError("data must be 0x-prefixed hex bytes")
        return v.lower()

    @field_validator(
        "value",
        "gas_limit",
        "gas_price",
        "max_fee_per_gas",
        "max_priority_fee_per_gas",
        "nonce",
        "chain_id",
        mode="before",
    )
    @classmethod
    def validate_quantity(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        parse_quantity(v)
        return v.strip()

    @model_validator(mode="after")
    def check_fee_fields(self) -> "UnsignedTransaction":
        if self.gas_price is None and self.max_fee_per_gas is None:
            raise ValueError("either gasPrice or maxFeePerGas is required")
        return self

    @property
    def is_eip1559(self) -> bool:
        return self.max_fee_per_gas is not None

    def quantity(self, name: str) -> Optional[int]:
        """Integer value of a numeric field, None when the field is absent."""
        raw = getattr(self, name)
        return None if raw is None else parse_quantity(raw)

    def to_wire(self) -> dict[str, str]:
        """JSON shape exchanged between client and relay."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_rpc_params(self) -> dict[str, str]:
        """Parameters for ``eth_sendTransaction`` (hex quantities)."""
        params = {
            "from": self.from_address,
            "to": self.to,
            "data": self.data,
            "value": hex(self.quantity("value")),
            "gas": hex(self.quantity("gas_limit")),
            "nonce": hex(self.quantity("nonce")),
            "chainId": hex(self.quantity("chain_id")),
        }
        if self.is_eip1559:
            params["maxFeePerGas"] = hex(self.quantity("max_fee_per_gas"))
            if self.max_priority_fee_per_gas is not None:
                params["maxPriorityFeePerGas"] = hex(self.quantity("max_priority_fee_per_gas"))
        else:
            params["gasPrice"] = hex(self.quantity("gas_price"))
        return params


class PrepareTransferRequest(BaseModel):
    """Request to prepare an unsigned transfer on the relay side."""

    sender: str = Field(..., description="Sender address (wallet account)")
    recipient: str = Field(..., description="Recipient of the tokens")
    token: str = Field(..., description="ERC20 token contract address")
    amount: str = Field(..., description="Amount as entered, e.g. '1.5'")


class PreparedTransferResponse(BaseModel):
    """Unsigned transaction, its content hash and the text to sign."""

    model_config = ConfigDict(populate_by_name=True)

    transaction: dict[str, str] = Field(..., description="UnsignedTransaction wire form")
    tx_hash: str = Field(..., alias="txHash", description="Content hash of the transaction")
    message: str = Field(..., description="Confirmation message for the wallet to sign")
    decimals: int = Field(..., description="Token decimals used for conversion")
    base_units: str = Field(..., alias="baseUnits", description="Amount in base units")


class BroadcastResponse(BaseModel):
    """Result of POST /broadcast."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    tx_hash: Optional[str] = Field(None, alias="txHash", description="Network transaction hash")
    error: Optional[str] = Field(None, description="Failure description")
    error_kind: Optional[str] = Field(None, alias="errorKind", description="Failure classification")


class RPCStatusResponse(BaseModel):
    """Result of GET /check-rpc."""

    model_config = ConfigDict(populate_by_name=True)

    connected: bool
    block_number: Optional[int] = Field(None, alias="blockNumber")
    chain_id: Optional[int] = Field(None, alias="chainId")
    error: Optional[str] = None
