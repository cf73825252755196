"""Transaction API endpoints.

These endpoints prepare unsigned transfers for wallet-side signing.
NO signing or broadcasting happens here.
"""

from fastapi import APIRouter, HTTPException, Request

from tokenrelay.errors import InvalidAddress, InvalidAmountFormat, RPCUnavailable, RelayError
from tokenrelay.web.contracts.transactions import PreparedTransferResponse, PrepareTransferRequest
from tokenrelay.web.controllers.relay import get_services

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.post("/prepare", response_model=PreparedTransferResponse)
async def prepare_transfer(
    request: Request, body: PrepareTransferRequest
) -> PreparedTransferResponse:
    """Build an unsigned ERC20 transfer, its content hash and the text to sign.

    The client must:
    1. Show ``message`` in the wallet and sign it (personal_sign)
    2. POST the transaction, signature, txHash and message to /broadcast
    """
    preparer = get_services(request).preparer
    try:
        prepared = await preparer.prepare(
            sender=body.sender,
            recipient=body.recipient,
            token_address=body.token,
            amount_text=body.amount,
        )
    except (InvalidAddress, InvalidAmountFormat) as e:
        raise HTTPException(status_code=400, detail={"errorKind": e.kind.value, "error": str(e)})
    except RPCUnavailable as e:
        raise HTTPException(status_code=503, detail={"errorKind": e.kind.value, "error": str(e)})
    except RelayError as e:
        raise HTTPException(status_code=502, detail={"errorKind": e.kind.value, "error": str(e)})
    return prepared.to_response()
