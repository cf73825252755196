"""Tests for the client-side transfer flow against the relay app."""

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from tokenrelay.api.app import create_app
from tokenrelay.client import TransferClient
from tokenrelay.errors import ErrorKind, RPCError, RPCUnavailable
from tokenrelay.wallet import LocalWalletProvider, connect_wallet

from tests.conftest import CHAIN_ID, RECIPIENT, SENDER_KEY, TOKEN

RELAY_URL = "http://relay"


@pytest.fixture
async def relay_http(settings, fake_rpc):
    """HTTP client talking to an in-process relay."""
    app = create_app(settings, rpc=fake_rpc)
    async with AsyncClient(transport=ASGITransport(app=app), base_url=RELAY_URL) as ac:
        yield ac


@pytest.fixture
def provider():
    return LocalWalletProvider(SENDER_KEY, chain_id=CHAIN_ID)


@pytest.fixture
async def transfer_client(provider, fake_rpc, relay_http):
    session = await connect_wallet(provider)
    return TransferClient(session, fake_rpc, RELAY_URL, chain_id=CHAIN_ID, http_client=relay_http)


class TestTransferClient:
    """Tests for TransferClient."""

    @pytest.mark.asyncio
    async def test_transfer_success(self, transfer_client, fake_rpc):
        outcome = await transfer_client.transfer(RECIPIENT, TOKEN, "1.5")

        assert outcome.success
        assert outcome.tx_hash == "0x" + f"{1:064x}"
        assert outcome.error_kind is None
        assert outcome.tx_hash in outcome.status_message
        assert len(fake_rpc.sent) == 1

    @pytest.mark.asyncio
    async def test_prepare(self, transfer_client):
        prepared = await transfer_client.prepare(RECIPIENT, TOKEN, "2")

        assert prepared.base_units == 2_000_000
        assert prepared.tx_hash in prepared.message

    @pytest.mark.asyncio
    async def test_wallet_rejection(self, fake_rpc, relay_http):
        provider = LocalWalletProvider(SENDER_KEY, chain_id=CHAIN_ID, approve=lambda message: False)
        session = await connect_wallet(provider)
        client = TransferClient(session, fake_rpc, RELAY_URL, chain_id=CHAIN_ID, http_client=relay_http)

        outcome = await client.transfer(RECIPIENT, TOKEN, "1")

        assert not outcome.success
        assert outcome.error_kind == ErrorKind.WALLET_REJECTED
        assert fake_rpc.sent == []

    @pytest.mark.asyncio
    async def test_invalid_amount(self, transfer_client):
        outcome = await transfer_client.transfer(RECIPIENT, TOKEN, "one")

        assert outcome.error_kind == ErrorKind.INVALID_AMOUNT_FORMAT
        assert outcome.status_message.startswith("Invalid amount format")

    @pytest.mark.asyncio
    async def test_invalid_recipient(self, transfer_client):
        outcome = await transfer_client.transfer("0x1234", TOKEN, "1")

        assert outcome.error_kind == ErrorKind.INVALID_ADDRESS

    @pytest.mark.asyncio
    async def test_wallet_on_wrong_chain(self, transfer_client, provider, fake_rpc):
        provider.switch_chain(1)

        outcome = await transfer_client.transfer(RECIPIENT, TOKEN, "1")

        assert outcome.error_kind == ErrorKind.INVALID_FIELD
        assert "chain 1" in outcome.status_message
        assert fake_rpc.sent == []

    @pytest.mark.asyncio
    async def test_disconnected_wallet(self, transfer_client, provider):
        provider.emit_accounts_changed([])

        outcome = await transfer_client.transfer(RECIPIENT, TOKEN, "1")

        assert outcome.error_kind == ErrorKind.WALLET_REJECTED

    @pytest.mark.asyncio
    async def test_relay_failure_kind_is_reported(self, transfer_client, fake_rpc):
        fake_rpc.send_error = RPCError("insufficient funds for gas")

        outcome = await transfer_client.transfer(RECIPIENT, TOKEN, "1")

        assert not outcome.success
        assert outcome.error_kind == ErrorKind.BROADCAST_FAILED
        assert "insufficient funds" in outcome.status_message

    @pytest.mark.asyncio
    async def test_relay_unreachable(self, provider, fake_rpc):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        session = await connect_wallet(provider)
        client = TransferClient(
            session,
            fake_rpc,
            RELAY_URL,
            chain_id=CHAIN_ID,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

        outcome = await client.transfer(RECIPIENT, TOKEN, "1")

        assert outcome.error_kind == ErrorKind.BROADCAST_FAILED
        assert "relay unreachable" in outcome.status_message

    @pytest.mark.asyncio
    async def test_check_rpc(self, transfer_client):
        status = await transfer_client.check_rpc()

        assert status.connected
        assert status.relay_block_number == 1_000_000
        assert status.local_block_number == 1_000_000

    @pytest.mark.asyncio
    async def test_check_rpc_down(self, transfer_client, fake_rpc):
        fake_rpc.fail = RPCUnavailable("RPC node returned HTTP 502 for eth_blockNumber")

        status = await transfer_client.check_rpc()

        assert not status.connected
        assert "502" in status.error

    @pytest.mark.asyncio
    async def test_token_balance(self, transfer_client):
        balance = await transfer_client.token_balance(TOKEN)

        assert balance.balance == "2.5"
        assert balance.display == "Balance: 2.5 USDT"

    @pytest.mark.asyncio
    async def test_wait_for_receipt(self, transfer_client, fake_rpc):
        tx_hash = "0x" + "ab" * 32
        fake_rpc.receipts[tx_hash] = {"status": "0x1", "blockNumber": "0x10"}

        assert await transfer_client.wait_for_receipt(tx_hash, timeout=1) == {
            "status": "0x1",
            "blockNumber": "0x10",
        }
        assert await transfer_client.wait_for_receipt("0x" + "cd" * 32, timeout=0.01, poll_interval=0.01) is None
