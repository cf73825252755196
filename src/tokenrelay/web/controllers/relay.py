"""Relay API endpoints.

These endpoints verify wallet-signed envelopes and forward them to the chain.
The relay never holds user keys; it only recomputes the content hash and
recovers the signer.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from tokenrelay.web.contracts.transactions import BroadcastResponse, RPCStatusResponse
from tokenrelay.web.services import RelayServices

logger = logging.getLogger(__name__)

router = APIRouter(tags=["relay"])


def get_services(request: Request) -> RelayServices:
    return request.app.state.services


@router.get("/check-rpc", response_model=RPCStatusResponse, response_model_exclude_none=True)
async def check_rpc(request: Request) -> RPCStatusResponse:
    """Check that the configured RPC node is reachable and synced."""
    probe = await get_services(request).health_probe.check()
    return RPCStatusResponse(
        connected=probe.connected,
        block_number=probe.block_number,
        chain_id=probe.chain_id,
        error=probe.error,
    )


@router.post("/broadcast", response_model=BroadcastResponse, response_model_exclude_none=True)
async def broadcast(request: Request):
    """Verify a signed envelope and broadcast its transaction.

    Body: ``{transaction, signature, txHash, message}``.
    Any failure answers HTTP 500 with ``{success: false, error, errorKind}``.
    """
    try:
        envelope = await request.json()
    except ValueError:
        # Unparseable body is reported like an empty one
        envelope = None

    result = await get_services(request).gateway.process(envelope)
    response = result.to_response()
    if result.success:
        return response
    return JSONResponse(
        status_code=500,
        content=response.model_dump(by_alias=True, exclude_none=True),
    )
