"""Service layer for the relay API.

Services are built once per application and shared by all requests. None of
them keeps per-user state.
"""

from dataclasses import dataclass
from typing import Optional

from tokenrelay.config import Settings
from tokenrelay.rpc.base import ChainRPC
from tokenrelay.rpc.health import RPCHealthProbe
from tokenrelay.rpc.jsonrpc import JsonRpcClient
from tokenrelay.transfer.builder import TransactionBuilder
from tokenrelay.transfer.preparer import TransferPreparer
from tokenrelay.utils.replay import ReplayGuard
from tokenrelay.web.services.relay_gateway import BroadcastResult, RelayGateway, RelayState
from tokenrelay.web.services.token_service import TokenService


@dataclass
class RelayServices:
    """Shared service instances attached to the FastAPI app."""

    rpc: ChainRPC
    health_probe: RPCHealthProbe
    gateway: RelayGateway
    preparer: TransferPreparer
    tokens: TokenService


def build_services(settings: Settings, rpc: Optional[ChainRPC] = None) -> RelayServices:
    """Wire the relay services from settings.

    Args:
        settings: Application settings
        rpc: Chain client to use instead of a JSON-RPC client (tests)
    """
    rpc = rpc or JsonRpcClient(
        settings.rpc_url,
        timeout=settings.rpc_timeout,
        default_priority_fee=settings.default_priority_fee_wei,
    )
    probe = RPCHealthProbe(rpc, timeout=settings.probe_timeout, expected_chain_id=settings.chain_id)
    replay_guard = (
        ReplayGuard(
            ttl_seconds=settings.replay_guard_ttl_seconds,
            max_entries=settings.replay_guard_max_entries,
        )
        if settings.replay_guard_enabled
        else None
    )
    gateway = RelayGateway(
        rpc,
        chain_id=settings.chain_id,
        health_probe=probe if settings.require_rpc_health else None,
        replay_guard=replay_guard,
        default_decimals=settings.default_token_decimals,
    )
    builder = TransactionBuilder(
        rpc,
        chain_id=settings.chain_id,
        default_decimals=settings.default_token_decimals,
        default_gas_limit=settings.default_gas_limit,
    )
    return RelayServices(
        rpc=rpc,
        health_probe=probe,
        gateway=gateway,
        preparer=TransferPreparer(builder),
        tokens=TokenService(rpc, default_decimals=settings.default_token_decimals),
    )


__all__ = [
    "BroadcastResult",
    "RelayGateway",
    "RelayServices",
    "RelayState",
    "TokenService",
    "build_services",
]
