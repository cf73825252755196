"""Token service for ERC20 metadata and balances.

Provides read-only access to token contracts.
"""

import asyncio
import logging

from tokenrelay.amounts import format_units
from tokenrelay.errors import InvalidAddress
from tokenrelay.rpc.base import ChainRPC
from tokenrelay.rpc.erc20 import Erc20Token
from tokenrelay.web.contracts.tokens import TokenBalance, TokenInfo
from tokenrelay.web.contracts.transactions import normalize_address

logger = logging.getLogger(__name__)


def _checksum(address: str, field: str) -> str:
    try:
        return normalize_address(address)
    except ValueError:
        raise InvalidAddress(f"Invalid {field} address: {address!r}")


class TokenService:
    """Service for ERC20 token metadata.

    This is a READ-ONLY service.
    """

    def __init__(self, rpc: ChainRPC, default_decimals: int = 18):
        self.rpc = rpc
        self.default_decimals = default_decimals

    async def get_token_info(self, token_address: str) -> TokenInfo:
        """Read name, symbol and decimals of a token.

        Name and symbol are optional; a failing decimals() falls back to the
        configured default.

        Raises:
            InvalidAddress: If the token address is malformed
        """
        token_address = _checksum(token_address, "token")
        token = Erc20Token(self.rpc, token_address)

        name, symbol, decimals = await asyncio.gather(
            token.name(), token.symbol(), token.decimals(), return_exceptions=True
        )

        fallback = False
        if isinstance(decimals, BaseException):
            logger.warning(
                "Failed to read decimals for %s, using default %d: %s",
                token_address,
                self.default_decimals,
                decimals,
            )
            decimals, fallback = self.default_decimals, True

        return TokenInfo(
            address=token_address,
            name=None if isinstance(name, BaseException) else name,
            symbol=None if isinstance(symbol, BaseException) else symbol,
            decimals=decimals,
            decimals_fallback=fallback,
        )

    async def get_balance(self, token_address: str, owner: str) -> TokenBalance:
        """Get the formatted token balance of ``owner``.

        Raises:
            InvalidAddress: If an address is malformed
            RPCUnavailable, RPCError: If balanceOf cannot be read
        """
        owner = _checksum(owner, "owner")
        info = await self.get_token_info(token_address)
        raw = await Erc20Token(self.rpc, info.address).balance_of(owner)
        return TokenBalance(
            token=info,
            owner=owner,
            raw_balance=str(raw),
            balance=format_units(raw, info.decimals),
        )
