"""JSON-RPC chain client over httpx.

One ``httpx.AsyncClient`` is kept per instance so connections are pooled
across requests.
"""

import asyncio
import itertools
import logging
from typing import Any, Optional

import httpx

from tokenrelay.errors import RPCError, RPCUnavailable
from tokenrelay.rpc.base import ChainRPC, FeeData

logger = logging.getLogger(__name__)


def _to_int(value: Any, method: str) -> int:
    if not isinstance(value, str) or not value.startswith("0x"):
        raise RPCError(f"Invalid response for {method}")
    try:
        return int(value, 16)
    except ValueError as exc:
        raise RPCError(f"Invalid response for {method}") from exc


class JsonRpcClient(ChainRPC):
    """Chain client speaking Ethereum JSON-RPC over HTTP."""

    def __init__(
        self,
        rpc_url: str,
        timeout: float = 30.0,
        default_priority_fee: int = 1_000_000_000,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize client.

        Args:
            rpc_url: JSON-RPC endpoint (may contain an API key; never logged)
            timeout: Per-call timeout in seconds
            default_priority_fee: Priority fee when the node has no suggestion
            client: Optional pre-built httpx client (tests, custom transports)
        """
        self.rpc_url = rpc_url
        self.timeout = timeout
        self.default_priority_fee = default_priority_fee
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._ids = itertools.count(1)

    async def request(self, method: str, params: list[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        try:
            response = await self._client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            raise RPCUnavailable(
                f"RPC node returned HTTP {exc.response.status_code} for {method}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RPCUnavailable(
                f"RPC transport error for {method}: {type(exc).__name__}"
            ) from exc
        except ValueError as exc:
            raise RPCError(f"RPC returned invalid JSON for {method}") from exc

        if not isinstance(body, dict):
            raise RPCError(f"RPC returned invalid response for {method}")
        error = body.get("error")
        if error:
            if isinstance(error, dict):
                raise RPCError(str(error.get("message", "unknown error")), code=error.get("code"))
            raise RPCError(str(error))
        return body.get("result")

    async def get_block_number(self) -> int:
        return _to_int(await self.request("eth_blockNumber", []), "eth_blockNumber")

    async def get_chain_id(self) -> int:
        return _to_int(await self.request("eth_chainId", []), "eth_chainId")

    async def is_syncing(self) -> bool:
        # eth_syncing returns false or a progress object
        return bool(await self.request("eth_syncing", []))

    async def get_transaction_count(self, address: str, block: str = "pending") -> int:
        result = await self.request("eth_getTransactionCount", [address, block])
        return _to_int(result, "eth_getTransactionCount")

    async def get_fee_data(self) -> FeeData:
        """Fetch fee data the way ethers' getFeeData does.

        EIP-1559 chains get ``maxFeePerGas = 2 * baseFee + priorityFee``.
        """
        block, gas_price_hex = await asyncio.gather(
            self.request("eth_getBlockByNumber", ["latest", False]),
            self.request("eth_gasPrice", []),
        )
        fees = FeeData(gas_price=_to_int(gas_price_hex, "eth_gasPrice"))

        base_fee_hex = block.get("baseFeePerGas") if isinstance(block, dict) else None
        if base_fee_hex is None:
            return fees

        base_fee = _to_int(base_fee_hex, "eth_getBlockByNumber")
        try:
            priority = _to_int(
                await self.request("eth_maxPriorityFeePerGas", []),
                "eth_maxPriorityFeePerGas",
            )
        except RPCError as e:
            logger.debug("eth_maxPriorityFeePerGas unsupported, using default: %s", e)
            priority = self.default_priority_fee

        fees.max_priority_fee_per_gas = priority
        fees.max_fee_per_gas = base_fee * 2 + priority
        return fees

    async def estimate_gas(self, tx: dict[str, Any]) -> int:
        return _to_int(await self.request("eth_estimateGas", [tx]), "eth_estimateGas")

    async def call(self, to: str, data: str) -> str:
        result = await self.request("eth_call", [{"to": to, "data": data}, "latest"])
        if not isinstance(result, str):
            raise RPCError("Invalid response for eth_call")
        return result

    async def send_transaction(self, params: dict[str, str]) -> str:
        result = await self.request("eth_sendTransaction", [params])
        if not isinstance(result, str) or not result.startswith("0x"):
            raise RPCError("Invalid response for eth_sendTransaction")
        return result

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[dict[str, Any]]:
        return await self.request("eth_getTransactionReceipt", [tx_hash])

    async def close(self) -> None:
        await self._client.aclose()

    def __repr__(self) -> str:
        return f"JsonRpcClient(timeout={self.timeout})"
