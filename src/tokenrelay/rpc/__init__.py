"""Blockchain RPC collaborator: chain client, ERC20 reads and health probe."""

from tokenrelay.rpc.base import ChainRPC, FeeData
from tokenrelay.rpc.erc20 import Erc20Token
from tokenrelay.rpc.health import ProbeResult, RPCHealthProbe
from tokenrelay.rpc.jsonrpc import JsonRpcClient

__all__ = [
    "ChainRPC",
    "FeeData",
    "Erc20Token",
    "JsonRpcClient",
    "ProbeResult",
    "RPCHealthProbe",
]
