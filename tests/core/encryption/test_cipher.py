"""Tests for the password-based AES-GCM cipher."""

import base64

import pytest

from docgroup.core.encryption.cipher import NONCE_SIZE, SALT_SIZE, PasswordCipher
from docgroup.core.exceptions import DecryptionError, InvalidArgument

# Low iteration count keeps key derivation fast in tests.
ITERATIONS = 1_000


@pytest.fixture
def cipher() -> PasswordCipher:
    return PasswordCipher("s3cret", iterations=ITERATIONS)


def test_round_trip(cipher):
    token = cipher.encrypt("alice@example.com")
    assert token != "alice@example.com"
    assert cipher.decrypt(token) == "alice@example.com"


def test_unicode_round_trip(cipher):
    assert cipher.decrypt(cipher.encrypt("città ✓")) == "città ✓"


def test_token_layout(cipher):
    blob = base64.b64decode(cipher.encrypt("abc"))
    # salt + nonce + 3 bytes of ciphertext + 16-byte tag
    assert len(blob) == SALT_SIZE + NONCE_SIZE + 3 + 16


def test_fresh_salt_and_nonce_per_value(cipher):
    assert cipher.encrypt("same") != cipher.encrypt("same")


@pytest.mark.parametrize("value", [None, 42, 1.5, True, ["a"]])
def test_non_strings_pass_through(cipher, value):
    assert cipher.encrypt(value) == value
    assert cipher.decrypt(value) == value


def test_wrong_password_fails(cipher):
    token = cipher.encrypt("secret")
    other = PasswordCipher("other", iterations=ITERATIONS)
    with pytest.raises(DecryptionError, match="Authentication failed"):
        other.decrypt(token)


def test_tampered_token_fails(cipher):
    blob = bytearray(base64.b64decode(cipher.encrypt("secret")))
    blob[-1] ^= 0x01
    with pytest.raises(DecryptionError):
        cipher.decrypt(base64.b64encode(bytes(blob)).decode("ascii"))


def test_malformed_tokens(cipher):
    with pytest.raises(DecryptionError, match="base64"):
        cipher.decrypt("not base64!")
    with pytest.raises(DecryptionError, match="too short"):
        cipher.decrypt(base64.b64encode(b"short").decode("ascii"))


def test_empty_password_rejected():
    with pytest.raises(InvalidArgument):
        PasswordCipher("")


def test_policy_uses_cipher(cipher):
    policy = cipher.policy(fields=("email",))
    encrypted = policy.encrypt_values({"name": "x", "email": "a@b.c"})

    assert encrypted["name"] == "x"
    assert encrypted["email"] != "a@b.c"
    assert policy.decrypt_values(encrypted) == {"name": "x", "email": "a@b.c"}
