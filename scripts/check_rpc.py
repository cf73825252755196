#!/usr/bin/env python3
"""RPC Connectivity Check.

Probes the configured chain RPC and, optionally, a running relay's
/check-rpc endpoint.

Usage:
    python scripts/check_rpc.py [--rpc-url URL] [--relay-url URL]

Options:
    --rpc-url    RPC endpoint to probe (default: RPC_URL from settings)
    --relay-url  Also query the relay's /check-rpc
    --timeout    Probe timeout in seconds
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import httpx
from dotenv import load_dotenv

from tokenrelay.config import get_settings
from tokenrelay.rpc import JsonRpcClient, RPCHealthProbe

load_dotenv()

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


async def check_relay(relay_url: str) -> bool:
    """Query the relay's own view of the RPC."""
    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(f"{relay_url.rstrip('/')}/check-rpc")
            body = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Relay unreachable: {type(e).__name__}")
        return False

    if body.get("connected"):
        logger.info(f"Relay connected, block {body.get('blockNumber')}")
        return True
    logger.error(f"Relay reports RPC down: {body.get('error')}")
    return False


async def main() -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="RPC Connectivity Check")
    parser.add_argument("--rpc-url", type=str, default=settings.rpc_url, help="RPC endpoint to probe")
    parser.add_argument("--relay-url", type=str, help="Relay base URL to query as well")
    parser.add_argument("--timeout", type=float, default=settings.probe_timeout, help="Probe timeout")
    args = parser.parse_args()

    rpc = JsonRpcClient(args.rpc_url, timeout=args.timeout)
    probe = RPCHealthProbe(rpc, timeout=args.timeout, expected_chain_id=settings.chain_id)
    try:
        result = await probe.check()
    finally:
        await rpc.close()

    ok = result.connected
    if ok:
        logger.info(f"RPC connected: block {result.block_number}, chain {result.chain_id}")
    else:
        logger.error(f"RPC unavailable: {result.error}")

    if args.relay_url:
        ok = await check_relay(args.relay_url) and ok

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
