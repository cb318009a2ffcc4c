"""
Unit tests for CredentialHasher
"""
import bcrypt
import pytest

from credential_service.app.services.credential_hasher import CredentialHasher
from credential_service.app.services.settings import HashingSettings
from credential_service.domain.errors import CorruptVerifier, InvalidInput


def test_hash_then_verify(hasher):
    verifier = hasher.hash("CorrectHorse1")

    assert hasher.verify("CorrectHorse1", verifier) is True
    assert hasher.verify("CorrectHorse2", verifier) is False


def test_verifier_embeds_algorithm_and_work_factor(hasher):
    verifier = hasher.hash("CorrectHorse1")

    assert verifier.startswith("$2b$04$")
    assert len(verifier) == 60
    assert "CorrectHorse1" not in verifier


def test_hash_is_salted(hasher):
    """Same plaintext never yields the same verifier"""
    assert hasher.hash("CorrectHorse1") != hasher.hash("CorrectHorse1")


def test_verify_uses_embedded_cost_not_configured_cost():
    """A verifier made at cost 5 still verifies after the work factor changes"""
    old = CredentialHasher(HashingSettings(work_factor=5))
    new = CredentialHasher(HashingSettings(work_factor=4))

    verifier = old.hash("CorrectHorse1")

    assert new.verify("CorrectHorse1", verifier) is True


def test_verify_accepts_external_bcrypt_hash(hasher):
    verifier = bcrypt.hashpw(b"LegacyPass9", bcrypt.gensalt(4)).decode()

    assert hasher.verify("LegacyPass9", verifier) is True


@pytest.mark.parametrize("plaintext", ["", "short1"])
def test_hash_rejects_empty_and_short(hasher, plaintext):
    with pytest.raises(InvalidInput):
        hasher.hash(plaintext)


def test_hash_rejects_over_72_bytes(hasher):
    with pytest.raises(InvalidInput):
        hasher.hash("a1" * 40)


def test_verify_mismatch_for_empty_or_oversized_plaintext(hasher):
    verifier = hasher.hash("CorrectHorse1")

    assert hasher.verify("", verifier) is False
    assert hasher.verify("a" * 100, verifier) is False


@pytest.mark.parametrize(
    "verifier",
    [
        "",
        "plaintext-password",
        "$2b$04$tooshort",
        "$argon2id$v=19$m=65536,t=3,p=4$c2FsdA$aGFzaA",
    ],
)
def test_verify_rejects_malformed_verifier(hasher, verifier):
    with pytest.raises(CorruptVerifier):
        hasher.verify("CorrectHorse1", verifier)


def test_verify_dummy_always_false(hasher):
    assert hasher.verify_dummy("CorrectHorse1") is False
    # Second call reuses the cached dummy verifier
    assert hasher.verify_dummy("dummy_password") is False
