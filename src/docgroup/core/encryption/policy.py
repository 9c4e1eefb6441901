"""EncryptionPolicy - field-level encrypt/decrypt pass.

A policy pairs an encrypt and a decrypt callable with the set of fields they
apply to. The callables receive one field value at a time and must be pure:
``decrypt(encrypt(v)) == v`` for every value the entity can hold.
"""

import logging
from collections.abc import Callable, Collection, Mapping
from dataclasses import dataclass
from typing import Any, Self

logger = logging.getLogger(__name__)

type FieldTransform = Callable[[Any], Any]


def _identity(value: Any) -> Any:
    return value


@dataclass(frozen=True, slots=True)
class EncryptionPolicy:
    """Per-entity-type encryption configuration.

    Attributes:
        enabled: When False every transform is a no-op.
        encrypt: Applied to each configured field value before it is written.
        decrypt: Applied to each configured field value after it is read.
        fields: Attribute names to transform. None means every declared
            field of the entity.
    """

    enabled: bool = False
    encrypt: FieldTransform = _identity
    decrypt: FieldTransform = _identity
    fields: tuple[str, ...] | None = None

    @classmethod
    def disabled(cls) -> Self:
        """Return the policy installed when a group declares none."""
        return cls()

    @classmethod
    def using(
        cls,
        encrypt: FieldTransform,
        decrypt: FieldTransform,
        fields: Collection[str] | None = None,
    ) -> Self:
        """Build an enabled policy.

        Args:
            encrypt: Field-level encrypt function.
            decrypt: Field-level decrypt function.
            fields: Optional attribute names to restrict the pass to.

        Returns:
            Enabled EncryptionPolicy.
        """
        return cls(
            enabled=True,
            encrypt=encrypt,
            decrypt=decrypt,
            fields=tuple(fields) if fields is not None else None,
        )

    def applies_to(self, field_name: str) -> bool:
        """Return True when values of ``field_name`` are transformed."""
        return self.enabled and (self.fields is None or field_name in self.fields)

    def encrypt_values(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Return a copy of ``values`` with every configured field encrypted."""
        return self._transform(values, self.encrypt)

    def decrypt_values(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Return a copy of ``values`` with every configured field decrypted."""
        return self._transform(values, self.decrypt)

    def encrypt_value(self, field_name: str, value: Any) -> Any:
        """Encrypt a single assignment value.

        None is returned unchanged, as are values of fields outside the
        policy.
        """
        if value is None or not self.applies_to(field_name):
            return value
        return self.encrypt(value)

    def _transform(self, values: Mapping[str, Any], fn: FieldTransform) -> dict[str, Any]:
        if not self.enabled:
            return dict(values)
        return {
            name: fn(value) if value is not None and self.applies_to(name) else value
            for name, value in values.items()
        }


__all__ = ["EncryptionPolicy", "FieldTransform"]
