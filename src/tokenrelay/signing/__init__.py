"""Message signing and signer recovery.

The relay only imports the verifier. The local signer exists for the
Python client and for tests.
"""

from tokenrelay.signing.local import LocalSigner, SignatureResult
from tokenrelay.signing.verifier import SignatureVerifier, split_signature

__all__ = [
    "LocalSigner",
    "SignatureResult",
    "SignatureVerifier",
    "split_signature",
]
