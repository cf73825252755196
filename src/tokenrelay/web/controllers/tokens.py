"""Token API endpoints (read-only)."""

from fastapi import APIRouter, HTTPException, Request

from tokenrelay.errors import InvalidAddress, InvalidAmountFormat, RelayError
from tokenrelay.web.contracts.tokens import TokenBalance, TokenInfo
from tokenrelay.web.controllers.relay import get_services

router = APIRouter(prefix="/tokens", tags=["tokens"])


@router.get("/{token_address}", response_model=TokenInfo)
async def get_token(request: Request, token_address: str) -> TokenInfo:
    """Get ERC20 metadata for a token contract."""
    try:
        return await get_services(request).tokens.get_token_info(token_address)
    except InvalidAddress as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{token_address}/balance/{owner}", response_model=TokenBalance)
async def get_balance(request: Request, token_address: str, owner: str) -> TokenBalance:
    """Get the token balance of an owner address.

    Args:
        token_address: Token contract
        owner: Wallet address

    Returns:
        TokenBalance with raw and formatted values
    """
    try:
        return await get_services(request).tokens.get_balance(token_address, owner)
    except (InvalidAddress, InvalidAmountFormat) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RelayError as e:
        raise HTTPException(status_code=502, detail=str(e))
