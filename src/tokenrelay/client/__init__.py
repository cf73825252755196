"""Client side of the transfer flow."""

from tokenrelay.client.transfer import ConnectionStatus, TransferClient, TransferOutcome

__all__ = ["ConnectionStatus", "TransferClient", "TransferOutcome"]
