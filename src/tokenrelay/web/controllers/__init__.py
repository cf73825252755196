"""HTTP controllers for web API endpoints.

SECURITY: These controllers MUST NOT:
- Access private keys
- Sign transactions

The relay controller is the only one that broadcasts, and only after the
gateway has verified the envelope.
"""

from tokenrelay.web.controllers.relay import router as relay_router
from tokenrelay.web.controllers.tokens import router as tokens_router
from tokenrelay.web.controllers.transactions import router as transactions_router

__all__ = [
    "relay_router",
    "tokens_router",
    "transactions_router",
]
