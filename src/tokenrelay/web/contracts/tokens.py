"""Token metadata and balance contracts."""

from typing import Optional

from pydantic import BaseModel, Field


class TokenInfo(BaseModel):
    """ERC20 metadata as read from the token contract."""

    address: str = Field(..., description="Token contract address (checksummed)")
    name: Optional[str] = Field(None, description="Token name, if exposed")
    symbol: Optional[str] = Field(None, description="Token symbol, if exposed")
    decimals: int = Field(..., description="Token decimals")
    decimals_fallback: bool = Field(
        default=False, description="True if decimals() failed and the default was used"
    )


class TokenBalance(BaseModel):
    """Balance of one owner for one token."""

    token: TokenInfo
    owner: str = Field(..., description="Owner address (checksummed)")
    raw_balance: str = Field(..., description="Balance in base units")
    balance: str = Field(..., description="Balance formatted with the token decimals")

    @property
    def display(self) -> str:
        if self.token.symbol:
            return f"Balance: {self.balance} {self.token.symbol}"
        return f"Balance: {self.balance}"
