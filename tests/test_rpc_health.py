"""Tests for the RPC health probe."""

import asyncio

import pytest

from tokenrelay.errors import RPCUnavailable
from tokenrelay.rpc import RPCHealthProbe

from tests.conftest import CHAIN_ID, FakeChainRPC


class SlowChainRPC(FakeChainRPC):
    async def get_block_number(self) -> int:
        await asyncio.sleep(10)
        return await super().get_block_number()


class TestRPCHealthProbe:
    """Tests for RPCHealthProbe.check."""

    @pytest.mark.asyncio
    async def test_connected(self, fake_rpc):
        result = await RPCHealthProbe(fake_rpc, expected_chain_id=CHAIN_ID).check()

        assert result.connected
        assert result.block_number == 1_000_000
        assert result.chain_id == CHAIN_ID
        assert result.error is None

    @pytest.mark.asyncio
    async def test_unreachable(self, fake_rpc):
        fake_rpc.fail = RPCUnavailable("RPC transport error for eth_blockNumber: ConnectError")

        result = await RPCHealthProbe(fake_rpc).check()

        assert not result.connected
        assert "ConnectError" in result.error

    @pytest.mark.asyncio
    async def test_wrong_chain(self):
        result = await RPCHealthProbe(FakeChainRPC(chain_id=1), expected_chain_id=CHAIN_ID).check()

        assert not result.connected
        assert "expected 4200" in result.error

    @pytest.mark.asyncio
    async def test_syncing_node(self, fake_rpc):
        fake_rpc.syncing = True

        result = await RPCHealthProbe(fake_rpc).check()

        assert not result.connected
        assert "syncing" in result.error

    @pytest.mark.asyncio
    async def test_timeout_is_bounded(self):
        result = await RPCHealthProbe(SlowChainRPC(), timeout=0.05).check()

        assert not result.connected
        assert "did not answer" in result.error

    @pytest.mark.asyncio
    async def test_is_reachable(self, fake_rpc):
        probe = RPCHealthProbe(fake_rpc)
        assert await probe.is_reachable()

        fake_rpc.fail = RPCUnavailable()
        assert not await probe.is_reachable()
