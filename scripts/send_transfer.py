#!/usr/bin/env python3
"""Send an ERC20 Transfer Through the Relay.

Prepares the transfer from chain state, signs the confirmation message with
WALLET_PRIVATE_KEY and submits the signed envelope to the relay.

Usage:
    python scripts/send_transfer.py --token 0x... --to 0x... --amount 1.5

Options:
    --token      ERC20 token contract address
    --to         Recipient address
    --amount     Human-readable amount (e.g. "1.5")
    --relay-url  Relay base URL (default: RELAY_URL from settings)
    --wait       Wait for the transaction receipt
    --dry-run    Print the confirmation message without signing
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dotenv import load_dotenv

from tokenrelay.client import TransferClient
from tokenrelay.config import get_settings
from tokenrelay.errors import RelayError
from tokenrelay.rpc import JsonRpcClient
from tokenrelay.wallet import LocalWalletProvider, WalletUnavailable, connect_wallet

load_dotenv()

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


async def main() -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Send an ERC20 transfer through the relay")
    parser.add_argument("--token", type=str, required=True, help="Token contract address")
    parser.add_argument("--to", type=str, required=True, help="Recipient address")
    parser.add_argument("--amount", type=str, required=True, help="Amount, e.g. 1.5")
    parser.add_argument("--relay-url", type=str, default=settings.relay_url, help="Relay base URL")
    parser.add_argument("--wait", action="store_true", help="Wait for the receipt")
    parser.add_argument("--dry-run", action="store_true", help="Only show the confirmation message")
    args = parser.parse_args()

    if not settings.wallet_private_key:
        logger.error("WALLET_PRIVATE_KEY is not set")
        return 1

    rpc = JsonRpcClient(
        settings.rpc_url,
        timeout=settings.rpc_timeout,
        default_priority_fee=settings.default_priority_fee_wei,
    )
    provider = LocalWalletProvider(settings.wallet_private_key, chain_id=settings.chain_id)

    try:
        session = await connect_wallet(provider)
    except (WalletUnavailable, RelayError) as e:
        logger.error(f"Wallet connection failed: {e}")
        await rpc.close()
        return 1

    client = TransferClient(
        session,
        rpc,
        args.relay_url,
        chain_id=settings.chain_id,
        default_decimals=settings.default_token_decimals,
        default_gas_limit=settings.default_gas_limit,
    )
    try:
        balance = await client.token_balance(args.token)
        logger.info(balance.display)

        if args.dry_run:
            prepared = await client.prepare(args.to, args.token, args.amount)
            print(prepared.message)
            return 0

        outcome = await client.transfer(args.to, args.token, args.amount)
        if not outcome.success:
            logger.error(f"{outcome.error_kind.value if outcome.error_kind else 'Error'}: {outcome.status_message}")
            return 1
        logger.info(outcome.status_message)

        if args.wait and outcome.tx_hash:
            receipt = await client.wait_for_receipt(outcome.tx_hash)
            if receipt is None:
                logger.warning("No receipt yet, check the explorer")
            else:
                status = "success" if receipt.get("status") == "0x1" else "reverted"
                logger.info(f"Mined in block {int(receipt['blockNumber'], 16)}: {status}")
                logger.info(f"Explorer: {settings.explorer_url.rstrip('/')}/tx/{outcome.tx_hash}")
        return 0
    except RelayError as e:
        logger.error(f"Transfer failed: {e}")
        return 1
    finally:
        await client.close()
        await rpc.close()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
