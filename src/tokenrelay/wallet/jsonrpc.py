"""Wallet provider speaking EIP-1193 methods over JSON-RPC.

Talks to any endpoint that exposes ``eth_requestAccounts``, ``eth_chainId``
and ``personal_sign`` (a wallet bridge, or a dev node with unlocked
accounts). A JSON-RPC error with code 4001 means the user declined.
"""

import logging
from typing import Any, Optional

import httpx

from tokenrelay.errors import RPCError, RPCUnavailable, WalletRejected
from tokenrelay.rpc.jsonrpc import JsonRpcClient
from tokenrelay.wallet.base import USER_REJECTED_CODE, WalletKind, WalletProvider

logger = logging.getLogger(__name__)

# JSON-RPC "Method not found"
METHOD_NOT_FOUND_CODE = -32601


class JsonRpcWalletProvider(WalletProvider):
    """EIP-1193 wallet reached through a JSON-RPC endpoint."""

    def __init__(
        self,
        url: str,
        kind: WalletKind = WalletKind.METAMASK,
        timeout: float = 120.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(kind)
        # Signing prompts wait on a human, hence the long default timeout
        self._rpc = JsonRpcClient(url, timeout=timeout, client=client)

    async def _request(self, method: str, params: list[Any]) -> Any:
        try:
            return await self._rpc.request(method, params)
        except RPCError as e:
            if e.code == USER_REJECTED_CODE:
                raise WalletRejected("User declined the wallet request") from e
            raise

    async def detect(self) -> bool:
        try:
            await self._rpc.get_chain_id()
        except (RPCUnavailable, RPCError) as e:
            logger.info("%s not detected: %s", self.display_name, e)
            return False
        return True

    async def request_accounts(self) -> list[str]:
        try:
            accounts = await self._request("eth_requestAccounts", [])
        except RPCError as e:
            if e.code != METHOD_NOT_FOUND_CODE:
                raise
            accounts = await self._request("eth_accounts", [])
        return list(accounts or [])

    async def sign_message(self, address: str, message: str) -> str:
        payload = "0x" + message.encode("utf-8").hex()
        signature = await self._request("personal_sign", [payload, address])
        if not isinstance(signature, str):
            raise RPCError("Wallet returned no signature")
        return signature

    async def get_chain_id(self) -> int:
        return await self._rpc.get_chain_id()

    async def close(self) -> None:
        await self._rpc.close()
