"""Signed ERC20 transfer relay.

Builds unsigned transfers, binds them to a wallet-signed confirmation message
through a canonical content hash, and relays verified transactions to the
chain RPC node.
"""

__version__ = "0.1.0"
