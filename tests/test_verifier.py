"""Tests for personal-message signer recovery."""

import pytest

from tokenrelay.signing import LocalSigner, SignatureVerifier
from tokenrelay.signing.verifier import SECP256K1_N, split_signature

from tests.conftest import OTHER_KEY, SENDER_KEY

MESSAGE = "Please sign the following transaction:\n\nhello"


def flip_v(signature: str) -> str:
    v = int(signature[-2:], 16)
    return signature[:-2] + f"{55 - v:02x}"


def high_s(signature: str) -> str:
    """The malleable twin of a signature: s -> n - s, v flipped."""
    r = signature[2:66]
    s = int(signature[66:130], 16)
    v = int(signature[130:], 16)
    return "0x" + r + f"{SECP256K1_N - s:064x}" + f"{55 - v:02x}"


@pytest.fixture
def signer() -> LocalSigner:
    return LocalSigner(SENDER_KEY)


class TestSplitSignature:
    """Tests for signature shape checks."""

    def test_canonical_signature(self, signer):
        result = signer.sign_message(MESSAGE)
        v, r, s = split_signature(result.signature)

        assert v == result.v
        assert r == int(result.r, 16)
        assert s == int(result.s, 16)

    @pytest.mark.parametrize(
        "signature",
        [None, "", "0x", "0x" + "00" * 64, "0x" + "zz" * 65, "ab" * 65],
    )
    def test_malformed(self, signature):
        assert split_signature(signature) is None

    def test_rejects_other_v_values(self, signer):
        signature = signer.sign_message(MESSAGE).signature
        assert split_signature(signature[:-2] + "00") is None
        assert split_signature(signature[:-2] + "1d") is None

    def test_rejects_high_s(self, signer):
        signature = signer.sign_message(MESSAGE).signature
        assert split_signature(high_s(signature)) is None


class TestSignatureVerifier:
    """Tests for SignatureVerifier."""

    def test_recover(self, signer):
        signature = signer.sign_message(MESSAGE).signature
        assert SignatureVerifier().recover(MESSAGE, signature) == signer.address

    def test_verify_true_for_signer(self, signer):
        signature = signer.sign_message(MESSAGE).signature
        assert SignatureVerifier().verify(MESSAGE, signature, signer.address)

    def test_verify_is_case_insensitive(self, signer):
        signature = signer.sign_message(MESSAGE).signature
        assert SignatureVerifier().verify(MESSAGE, signature, signer.address.lower())

    def test_verify_false_for_other_account(self, signer):
        signature = signer.sign_message(MESSAGE).signature
        other = LocalSigner(OTHER_KEY)

        assert not SignatureVerifier().verify(MESSAGE, signature, other.address)

    def test_verify_false_for_other_message(self, signer):
        signature = signer.sign_message(MESSAGE).signature
        assert not SignatureVerifier().verify(MESSAGE + " ", signature, signer.address)

    def test_single_byte_change_is_detected(self, signer):
        signature = signer.sign_message(MESSAGE).signature
        verifier = SignatureVerifier()

        assert not verifier.verify(MESSAGE, flip_v(signature), signer.address)
        tampered = signature[:10] + ("0" if signature[10] != "0" else "1") + signature[11:]
        assert not verifier.verify(MESSAGE, tampered, signer.address)

    def test_malleable_twin_rejected(self, signer):
        signature = signer.sign_message(MESSAGE).signature
        assert not SignatureVerifier().verify(MESSAGE, high_s(signature), signer.address)

    @pytest.mark.parametrize("claimed", [None, "", "0x1234", "not-an-address"])
    def test_bad_claimed_address(self, signer, claimed):
        signature = signer.sign_message(MESSAGE).signature
        assert not SignatureVerifier().verify(MESSAGE, signature, claimed)

    def test_non_string_message(self, signer):
        signature = signer.sign_message(MESSAGE).signature
        assert SignatureVerifier().recover(None, signature) is None
