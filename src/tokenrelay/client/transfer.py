"""Transfer client: prepare, sign with the user's wallet, submit to the relay.

The client never holds keys. It builds the unsigned transaction from chain
state, asks the session's wallet to sign the confirmation message and posts
the signed envelope to the relay. Every attempt ends in a ``TransferOutcome``
with a definite success or failure.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from tokenrelay.errors import ErrorKind, RelayError, WalletRejected, status_message
from tokenrelay.rpc.base import ChainRPC
from tokenrelay.transfer.builder import TransactionBuilder
from tokenrelay.transfer.preparer import PreparedTransfer, TransferPreparer
from tokenrelay.wallet.base import WalletSession
from tokenrelay.web.contracts.tokens import TokenBalance
from tokenrelay.web.services.token_service import TokenService

logger = logging.getLogger(__name__)


@dataclass
class TransferOutcome:
    """Result of one transfer attempt as shown to the user."""

    success: bool
    tx_hash: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    status_message: str = ""

    @classmethod
    def failed(cls, kind: ErrorKind, detail: Optional[str] = None) -> "TransferOutcome":
        return cls(success=False, error_kind=kind, status_message=status_message(kind, detail))


@dataclass
class ConnectionStatus:
    """Relay-side and client-side view of the chain RPC."""

    relay_connected: bool
    relay_block_number: Optional[int] = None
    local_block_number: Optional[int] = None
    error: Optional[str] = None

    @property
    def connected(self) -> bool:
        return self.relay_connected and self.local_block_number is not None


class TransferClient:
    """Drives one user's transfers through a connected wallet session."""

    def __init__(
        self,
        session: WalletSession,
        rpc: ChainRPC,
        relay_url: str,
        chain_id: int,
        default_decimals: int = 18,
        default_gas_limit: int = 100_000,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        """Initialize client.

        Args:
            session: Connected wallet session
            rpc: Chain client used to read nonce, fees and balances
            relay_url: Base URL of the relay API
            chain_id: Chain the transfers are built for
            default_decimals: Decimals used when decimals() cannot be read
            default_gas_limit: Gas limit used when estimation fails
            http_client: Optional pre-built httpx client for the relay
            timeout: Relay request timeout in seconds
        """
        self.session = session
        self.rpc = rpc
        self.relay_url = relay_url.rstrip("/")
        self.chain_id = chain_id
        self._http = http_client or httpx.AsyncClient(timeout=timeout)
        self._preparer = TransferPreparer(
            TransactionBuilder(
                rpc,
                chain_id=chain_id,
                default_decimals=default_decimals,
                default_gas_limit=default_gas_limit,
            )
        )
        self._tokens = TokenService(rpc, default_decimals=default_decimals)

    async def prepare(self, recipient: str, token_address: str, amount_text: str) -> PreparedTransfer:
        """Build the unsigned transaction, its hash and confirmation message.

        Raises:
            WalletRejected: If the wallet is not connected
            InvalidAddress, InvalidAmountFormat, RPCUnavailable
        """
        if not self.session.address:
            raise WalletRejected("Wallet is not connected")
        return await self._preparer.prepare(
            self.session.address, recipient, token_address, amount_text
        )

    async def transfer(self, recipient: str, token_address: str, amount_text: str) -> TransferOutcome:
        """Run a full transfer: prepare, sign, broadcast through the relay."""
        if not self.session.is_connected:
            return TransferOutcome.failed(ErrorKind.WALLET_REJECTED, "wallet is not connected")
        if self.session.chain_id != self.chain_id:
            return TransferOutcome.failed(
                ErrorKind.INVALID_FIELD,
                f"wallet is on chain {self.session.chain_id}, expected {self.chain_id}",
            )

        try:
            prepared = await self.prepare(recipient, token_address, amount_text)
            signature = await self.session.sign(prepared.message)
        except RelayError as e:
            logger.info("Transfer not submitted: %s", e)
            return TransferOutcome.failed(e.kind, str(e))

        return await self.submit(prepared.envelope(signature))

    async def submit(self, envelope: dict[str, Any]) -> TransferOutcome:
        """POST a signed envelope to the relay's ``/broadcast``."""
        try:
            response = await self._http.post(f"{self.relay_url}/broadcast", json=envelope)
            body = response.json()
        except httpx.HTTPError as e:
            logger.warning("Relay unreachable: %s", type(e).__name__)
            return TransferOutcome.failed(ErrorKind.BROADCAST_FAILED, "relay unreachable")
        except ValueError:
            return TransferOutcome.failed(
                ErrorKind.BROADCAST_FAILED, f"relay returned HTTP {response.status_code}"
            )

        if isinstance(body, dict) and body.get("success"):
            tx_hash = body.get("txHash")
            logger.info("Transfer broadcast: %s", tx_hash)
            return TransferOutcome(
                success=True,
                tx_hash=tx_hash,
                status_message=f"Transaction sent: {tx_hash}",
            )

        body = body if isinstance(body, dict) else {}
        try:
            kind = ErrorKind(body.get("errorKind"))
        except ValueError:
            kind = ErrorKind.BROADCAST_FAILED
        return TransferOutcome(
            success=False,
            error_kind=kind,
            status_message=body.get("error") or status_message(kind),
        )

    async def check_rpc(self) -> ConnectionStatus:
        """Ask the relay for its RPC status and read the block number locally."""
        status = ConnectionStatus(relay_connected=False)

        try:
            response = await self._http.get(f"{self.relay_url}/check-rpc")
            body = response.json()
            status.relay_connected = bool(body.get("connected"))
            status.relay_block_number = body.get("blockNumber")
            status.error = body.get("error")
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            status.error = f"relay unreachable: {type(e).__name__}"

        try:
            status.local_block_number = await self.rpc.get_block_number()
        except RelayError as e:
            status.error = status.error or str(e)

        return status

    async def token_balance(self, token_address: str, owner: Optional[str] = None) -> TokenBalance:
        """Balance of ``owner`` (the connected account by default)."""
        return await self._tokens.get_balance(token_address, owner or self.session.address or "")

    async def wait_for_receipt(
        self,
        tx_hash: str,
        timeout: float = 120.0,
        poll_interval: float = 2.0,
    ) -> Optional[dict[str, Any]]:
        """Poll for a receipt; returns None if none appears within ``timeout``."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            try:
                receipt = await self.rpc.get_transaction_receipt(tx_hash)
            except RelayError as e:
                logger.debug("Receipt lookup failed for %s: %s", tx_hash, e)
                receipt = None
            if receipt:
                return receipt
            if loop.time() >= deadline:
                return None
            await asyncio.sleep(poll_interval)

    async def close(self) -> None:
        await self._http.aclose()
