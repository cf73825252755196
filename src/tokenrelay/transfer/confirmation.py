"""Human-readable confirmation message bound to a transaction.

The message shows every value that decides where funds go (recipient,
amount, token contract) plus the content hash. Two different transactions
have different hashes, so they can never render to the same text.
"""

import re
from dataclasses import dataclass

MESSAGE_HEADER = "Please sign the following transaction:"

_MESSAGE_PATTERN = re.compile(
    r"\A" + re.escape(MESSAGE_HEADER) + r"\n"
    r"\n"
    r"Recipient: (?P<recipient>0x[0-9a-fA-F]{40})\n"
    r"Amount: (?P<amount>[0-9]+(?:\.[0-9]+)?) \((?P<base_units>[0-9]+) base units\)\n"
    r"Token contract: (?P<token>0x[0-9a-fA-F]{40})\n"
    r"\n"
    r"Transaction hash: (?P<hash>0x[0-9a-fA-F]{64})\Z"
)


@dataclass(frozen=True)
class ConfirmationFields:
    """Values extracted from a rendered confirmation message."""

    recipient: str
    amount_text: str
    base_units: int
    token: str
    content_hash: str


class ConfirmationBinder:
    """Renders and parses confirmation messages."""

    def render(
        self,
        recipient: str,
        amount_text: str,
        base_units: int,
        token: str,
        content_hash: str,
    ) -> str:
        """Render the text the user signs in the wallet.

        Raises:
            ValueError: If a field would break the message layout
        """
        message = (
            f"{MESSAGE_HEADER}\n"
            "\n"
            f"Recipient: {recipient}\n"
            f"Amount: {amount_text.strip()} ({base_units} base units)\n"
            f"Token contract: {token}\n"
            "\n"
            f"Transaction hash: {content_hash}"
        )
        if not _MESSAGE_PATTERN.match(message):
            raise ValueError("Confirmation fields are not in canonical form")
        return message

    def parse(self, message: str) -> ConfirmationFields:
        """Extract the bound fields from a confirmation message.

        Raises:
            ValueError: If the text was not produced by ``render``
        """
        match = _MESSAGE_PATTERN.match(message) if isinstance(message, str) else None
        if not match:
            raise ValueError("Message is not a transfer confirmation")
        return ConfirmationFields(
            recipient=match.group("recipient"),
            amount_text=match.group("amount"),
            base_units=int(match.group("base_units")),
            token=match.group("token"),
            content_hash=match.group("hash"),
        )
