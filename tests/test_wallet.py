"""Tests for wallet providers and sessions."""

import json

import httpx
import pytest

from tokenrelay.errors import ErrorKind, RPCError, WalletRejected
from tokenrelay.signing import LocalSigner, SignatureVerifier
from tokenrelay.wallet import (
    JsonRpcWalletProvider,
    LocalWalletProvider,
    WalletKind,
    WalletUnavailable,
    connect_wallet,
)

from tests.conftest import CHAIN_ID, OTHER_KEY, SENDER_KEY

MESSAGE = "Please sign the following transaction:"


def remote_provider(handler, kind: WalletKind = WalletKind.OKX) -> JsonRpcWalletProvider:
    return JsonRpcWalletProvider(
        "http://wallet.local",
        kind=kind,
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def rpc_reply(payload: dict, result=None, error=None) -> httpx.Response:
    body = {"jsonrpc": "2.0", "id": payload["id"]}
    if error is not None:
        body["error"] = error
    else:
        body["result"] = result
    return httpx.Response(200, json=body)


class TestLocalWallet:
    """Tests for LocalWalletProvider and WalletSession."""

    @pytest.mark.asyncio
    async def test_connect(self):
        session = await connect_wallet(LocalWalletProvider(SENDER_KEY, chain_id=CHAIN_ID))

        assert session.is_connected
        assert session.address == LocalSigner(SENDER_KEY).address
        assert session.chain_id == CHAIN_ID
        assert session.short_address.startswith(session.address[:6])
        assert session.provider.display_name == "Local Wallet"

    @pytest.mark.asyncio
    async def test_sign_produces_verifiable_signature(self):
        session = await connect_wallet(LocalWalletProvider(SENDER_KEY, chain_id=CHAIN_ID))

        signature = await session.sign(MESSAGE)

        assert SignatureVerifier().verify(MESSAGE, signature, session.address)

    @pytest.mark.asyncio
    async def test_user_declines(self):
        provider = LocalWalletProvider(SENDER_KEY, chain_id=CHAIN_ID, approve=lambda message: False)
        session = await connect_wallet(provider)

        with pytest.raises(WalletRejected) as exc_info:
            await session.sign(MESSAGE)

        assert exc_info.value.kind == ErrorKind.WALLET_REJECTED

    @pytest.mark.asyncio
    async def test_foreign_account_cannot_sign(self):
        provider = LocalWalletProvider(SENDER_KEY, chain_id=CHAIN_ID)

        with pytest.raises(WalletRejected):
            await provider.sign_message(LocalSigner(OTHER_KEY).address, MESSAGE)

    @pytest.mark.asyncio
    async def test_chain_change_is_tracked(self):
        provider = LocalWalletProvider(SENDER_KEY, chain_id=CHAIN_ID)
        session = await connect_wallet(provider)

        provider.switch_chain(1)

        assert session.chain_id == 1
        assert session.chain_changed
        assert session.events == ["chain_changed"]

    @pytest.mark.asyncio
    async def test_account_change_and_disconnect(self):
        provider = LocalWalletProvider(SENDER_KEY, chain_id=CHAIN_ID)
        session = await connect_wallet(provider)
        other = LocalSigner(OTHER_KEY).address

        provider.emit_accounts_changed([other.lower()])
        assert session.address == other

        provider.emit_accounts_changed([])
        assert not session.is_connected
        assert session.events == ["account_changed", "disconnected"]

        with pytest.raises(WalletRejected):
            await session.sign(MESSAGE)

    @pytest.mark.asyncio
    async def test_sessions_are_independent(self):
        first = await connect_wallet(LocalWalletProvider(SENDER_KEY, chain_id=CHAIN_ID))
        second = await connect_wallet(LocalWalletProvider(OTHER_KEY, chain_id=CHAIN_ID))

        assert first.address != second.address


class TestJsonRpcWallet:
    """Tests for JsonRpcWalletProvider."""

    @pytest.mark.asyncio
    async def test_connect_and_sign(self):
        signer = LocalSigner(SENDER_KEY)
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            payload = json.loads(request.content)
            seen.append(payload["method"])
            if payload["method"] == "eth_chainId":
                return rpc_reply(payload, hex(CHAIN_ID))
            if payload["method"] == "eth_requestAccounts":
                return rpc_reply(payload, [signer.address])
            if payload["method"] == "personal_sign":
                text = bytes.fromhex(payload["params"][0][2:]).decode()
                return rpc_reply(payload, signer.sign_message(text).signature)
            return rpc_reply(payload, error={"code": -32601, "message": "not found"})

        provider = remote_provider(handler)
        session = await connect_wallet(provider)
        signature = await session.sign(MESSAGE)

        assert session.address == signer.address
        assert session.chain_id == CHAIN_ID
        assert provider.display_name == "OKX Wallet"
        assert "personal_sign" in seen
        assert SignatureVerifier().verify(MESSAGE, signature, signer.address)

    @pytest.mark.asyncio
    async def test_user_rejection_code(self):
        def handler(request: httpx.Request) -> httpx.Response:
            payload = json.loads(request.content)
            if payload["method"] == "eth_chainId":
                return rpc_reply(payload, hex(CHAIN_ID))
            return rpc_reply(payload, error={"code": 4001, "message": "User rejected the request."})

        with pytest.raises(WalletRejected):
            await connect_wallet(remote_provider(handler, kind=WalletKind.BINANCE))

    @pytest.mark.asyncio
    async def test_falls_back_to_eth_accounts(self):
        account = "0x" + "cd" * 20

        def handler(request: httpx.Request) -> httpx.Response:
            payload = json.loads(request.content)
            if payload["method"] == "eth_chainId":
                return rpc_reply(payload, hex(CHAIN_ID))
            if payload["method"] == "eth_accounts":
                return rpc_reply(payload, [account])
            return rpc_reply(payload, error={"code": -32601, "message": "method not found"})

        session = await connect_wallet(remote_provider(handler))

        assert session.address.lower() == account

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self):
        def handler(request: httpx.Request) -> httpx.Response:
            payload = json.loads(request.content)
            if payload["method"] == "eth_chainId":
                return rpc_reply(payload, hex(CHAIN_ID))
            return rpc_reply(payload, error={"code": -32000, "message": "locked"})

        with pytest.raises(RPCError):
            await connect_wallet(remote_provider(handler))

    @pytest.mark.asyncio
    async def test_not_detected(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(WalletUnavailable, match="Please install MetaMask"):
            await connect_wallet(remote_provider(handler, kind=WalletKind.METAMASK))

    @pytest.mark.asyncio
    async def test_no_accounts(self):
        def handler(request: httpx.Request) -> httpx.Response:
            payload = json.loads(request.content)
            if payload["method"] == "eth_chainId":
                return rpc_reply(payload, hex(CHAIN_ID))
            return rpc_reply(payload, [])

        with pytest.raises(WalletRejected):
            await connect_wallet(remote_provider(handler))
