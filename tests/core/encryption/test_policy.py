"""Tests for EncryptionPolicy field transforms."""

from docgroup.core.encryption.policy import EncryptionPolicy
from tests.utils import reverse_text


def _upper_policy(fields=None) -> EncryptionPolicy:
    return EncryptionPolicy.using(str.upper, str.lower, fields)


def test_disabled_policy_copies_values():
    policy = EncryptionPolicy.disabled()
    values = {"name": "x"}

    result = policy.encrypt_values(values)

    assert result == values
    assert result is not values
    assert not policy.applies_to("name")


def test_enabled_policy_transforms_every_field_by_default():
    policy = _upper_policy()
    assert policy.encrypt_values({"name": "ab", "city": "cd"}) == {"name": "AB", "city": "CD"}


def test_none_values_are_left_untouched():
    policy = _upper_policy()
    assert policy.encrypt_values({"name": "ab", "email": None}) == {"name": "AB", "email": None}
    assert policy.encrypt_value("email", None) is None


def test_field_restriction():
    policy = _upper_policy(fields=["email"])
    assert policy.encrypt_values({"name": "ab", "email": "cd"}) == {"name": "ab", "email": "CD"}
    assert policy.encrypt_value("name", "ab") == "ab"
    assert policy.encrypt_value("email", "ab") == "AB"


def test_input_mapping_is_not_mutated():
    policy = _upper_policy()
    values = {"name": "ab"}
    policy.encrypt_values(values)
    assert values == {"name": "ab"}


def test_decrypt_inverts_encrypt():
    policy = EncryptionPolicy.using(reverse_text, reverse_text)
    values = {"name": "alice", "id": 7, "email": None}
    assert policy.decrypt_values(policy.encrypt_values(values)) == values
