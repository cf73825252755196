"""Web boundary layer of the relay.

SECURITY PRINCIPLES:
1. This layer MUST NOT import from:
   - signing.local (private key handling)
   - wallet/ (client-side wallet providers)
   - client/ (client-side transfer flow)

2. This layer CAN import from:
   - transfer/ (building, hashing, confirmation binding)
   - signing.verifier (signer recovery only)
   - rpc/ (chain access)
   - config (settings)
"""

__all__ = [
    "contracts",
    "services",
    "controllers",
]
