"""Read-only ERC20 contract calls."""

import logging
from typing import Optional

from eth_abi import decode, encode

from tokenrelay.errors import RPCError
from tokenrelay.rpc.base import ChainRPC

logger = logging.getLogger(__name__)

# ERC-20 view selectors
ERC20_DECIMALS_SELECTOR = "0x313ce567"  # decimals()
ERC20_SYMBOL_SELECTOR = "0x95d89b41"  # symbol()
ERC20_NAME_SELECTOR = "0x06fdde03"  # name()
ERC20_BALANCE_OF_SELECTOR = "0x70a08231"  # balanceOf(address)


def _return_bytes(result: str, field: str) -> bytes:
    if not isinstance(result, str) or not result.startswith("0x") or len(result) <= 2:
        raise RPCError(f"Empty {field} response from token contract")
    try:
        return bytes.fromhex(result[2:])
    except ValueError as exc:
        raise RPCError(f"Invalid {field} response from token contract") from exc


def _decode_text(raw: bytes) -> Optional[str]:
    """Decode a string return value, accepting legacy bytes32 tokens."""
    if len(raw) == 32:
        text = raw.rstrip(b"\x00").decode("utf-8", errors="ignore")
    else:
        try:
            (text,) = decode(["string"], raw)
        except Exception as e:
            logger.debug("Undecodable string return value: %s", e)
            return None
    cleaned = "".join(ch for ch in text if 32 <= ord(ch) <= 126).strip()
    return cleaned or None


class Erc20Token:
    """Thin wrapper around the ERC20 view functions of one contract."""

    def __init__(self, rpc: ChainRPC, address: str):
        self.rpc = rpc
        self.address = address

    async def decimals(self) -> int:
        raw = _return_bytes(await self.rpc.call(self.address, ERC20_DECIMALS_SELECTOR), "decimals")
        (value,) = decode(["uint256"], raw[-32:].rjust(32, b"\x00"))
        if value > 255:
            raise RPCError("Token decimals() is out of supported bounds")
        return value

    async def symbol(self) -> Optional[str]:
        raw = _return_bytes(await self.rpc.call(self.address, ERC20_SYMBOL_SELECTOR), "symbol")
        return _decode_text(raw)

    async def name(self) -> Optional[str]:
        raw = _return_bytes(await self.rpc.call(self.address, ERC20_NAME_SELECTOR), "name")
        return _decode_text(raw)

    async def balance_of(self, owner: str) -> int:
        data = ERC20_BALANCE_OF_SELECTOR + encode(["address"], [owner]).hex()
        raw = _return_bytes(await self.rpc.call(self.address, data), "balanceOf")
        (value,) = decode(["uint256"], raw[:32].rjust(32, b"\x00"))
        return value

    def __repr__(self) -> str:
        return f"Erc20Token(address={self.address})"
