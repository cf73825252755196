"""RPC endpoint health probe.

Used once at startup (informational) and as a gate in front of every
broadcast, so an unreachable node fails fast instead of timing out inside
the broadcast path.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from tokenrelay.errors import RelayError
from tokenrelay.rpc.base import ChainRPC

logger = logging.getLogger(__name__)


@dataclass
class ProbeResult:
    """Outcome of a single health probe."""

    connected: bool
    block_number: Optional[int] = None
    chain_id: Optional[int] = None
    error: Optional[str] = None


class RPCHealthProbe:
    """Checks that the configured RPC endpoint is reachable and synced."""

    def __init__(
        self,
        rpc: ChainRPC,
        timeout: float = 5.0,
        expected_chain_id: Optional[int] = None,
    ):
        self.rpc = rpc
        self.timeout = timeout
        self.expected_chain_id = expected_chain_id

    async def _query(self) -> ProbeResult:
        block_number, chain_id, syncing = await asyncio.gather(
            self.rpc.get_block_number(),
            self.rpc.get_chain_id(),
            self.rpc.is_syncing(),
        )
        if self.expected_chain_id is not None and chain_id != self.expected_chain_id:
            return ProbeResult(
                connected=False,
                block_number=block_number,
                chain_id=chain_id,
                error=f"RPC node serves chain {chain_id}, expected {self.expected_chain_id}",
            )
        if syncing:
            return ProbeResult(
                connected=False,
                block_number=block_number,
                chain_id=chain_id,
                error="RPC node is still syncing",
            )
        return ProbeResult(connected=True, block_number=block_number, chain_id=chain_id)

    async def check(self) -> ProbeResult:
        """Run one bounded round trip against the node."""
        try:
            result = await asyncio.wait_for(self._query(), timeout=self.timeout)
        except asyncio.TimeoutError:
            result = ProbeResult(
                connected=False, error=f"RPC node did not answer within {self.timeout}s"
            )
        except RelayError as e:
            result = ProbeResult(connected=False, error=str(e))

        if not result.connected:
            logger.warning("RPC health probe failed: %s", result.error)
        return result

    async def is_reachable(self) -> bool:
        return (await self.check()).connected
