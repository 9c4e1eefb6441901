"""DocGroup - Exceptions.

Exceptions are for SYSTEM errors and programming errors only (bad input,
missing registration, inconsistent configuration). Expected outcomes of an
operation (not found, uniqueness violations) are returned as
OperationResult failures - see dto/result_dto.py.
"""

from typing import Any


class DocGroupError(Exception):
    """Base exception for all docgroup errors."""

    pass


class InvalidArgument(DocGroupError, ValueError):
    """Raised when a required input is missing, empty or malformed.

    Attributes:
        details: Description of what is wrong.
        argument: Optional name of the offending argument.
        value: Optional offending value.
    """

    def __init__(
        self,
        details: str,
        argument: str | None = None,
        value: Any = None,
    ):
        """Initialize InvalidArgument.

        Args:
            details: Human-readable description of the problem.
            argument: Optional argument name associated with the error.
            value: Optional invalid value.
        """
        self.details = details
        self.argument = argument
        self.value = value

        argument_info = f" (argument={argument!r})" if argument else ""
        value_info = f" [value={value!r}]" if value is not None else ""
        super().__init__(f"Invalid argument{argument_info}: {details}{value_info}")


class NotRegistered(DocGroupError, LookupError):
    """Raised when an operation is invoked for an entity type with no group.

    Attributes:
        entity_type: The entity type that has no registered group.
    """

    def __init__(self, entity_type: type):
        """Initialize NotRegistered.

        Args:
            entity_type: The unregistered entity type.
        """
        self.entity_type = entity_type
        super().__init__(f"No group registered for type {entity_type.__name__}.")


class GroupAlreadyRegistered(DocGroupError):
    """Raised by a strict registry when a type is registered twice.

    Attributes:
        entity_type: The entity type already present in the registry.
        name: Name of the group that is already registered.
    """

    def __init__(self, entity_type: type, name: str):
        """Initialize GroupAlreadyRegistered.

        Args:
            entity_type: The entity type already registered.
            name: Name of the existing group.
        """
        self.entity_type = entity_type
        self.name = name
        super().__init__(
            f"Override not allowed for already registered group {name!r} "
            f"(type {entity_type.__name__})."
        )


class GroupConfigurationError(DocGroupError):
    """Raised when a group configuration is inconsistent.

    Examples: a custom key field without a primary key, or a delete-by-id
    call on a group that never declared a primary key.
    """

    pass


class MappingFrozen(DocGroupError):
    """Raised when a frozen EntityMap is asked to change its field mapping.

    Attributes:
        entity_type: The entity type whose mapping is frozen.
    """

    def __init__(self, entity_type: type):
        """Initialize MappingFrozen.

        Args:
            entity_type: The entity type whose mapping is frozen.
        """
        self.entity_type = entity_type
        super().__init__(
            f"Field mapping for {entity_type.__name__} is frozen; "
            "it was already used for a read or write."
        )


class UnsupportedEntityType(DocGroupError, TypeError):
    """Raised when an entity type is neither a pydantic model nor a dataclass."""

    def __init__(self, entity_type: Any):
        """Initialize UnsupportedEntityType.

        Args:
            entity_type: The rejected type.
        """
        self.entity_type = entity_type
        name = getattr(entity_type, "__name__", repr(entity_type))
        super().__init__(
            f"Entity type {name} must be a pydantic BaseModel subclass or a dataclass."
        )


class DuplicateKeyError(DocGroupError):
    """Raised by a Store when a write violates a unique index.

    Store adapters translate their native duplicate-key error into this one.

    Attributes:
        index: Optional name of the violated index.
        key: Optional offending key value.
        cause: Optional original exception from the backend.
    """

    def __init__(
        self,
        index: str | None = None,
        key: Any = None,
        cause: BaseException | None = None,
    ):
        """Initialize DuplicateKeyError.

        Args:
            index: Name of the violated index, if known.
            key: The duplicated key value, if known.
            cause: Optional original exception from the backend.
        """
        self.index = index
        self.key = key
        self.cause = cause

        index_info = f" on index {index!r}" if index else ""
        key_info = f" [key={key!r}]" if key is not None else ""
        super().__init__(f"Duplicate key{index_info}{key_info}")

        if cause:
            self.__cause__ = cause


class DecryptionError(DocGroupError):
    """Raised by a cipher when a stored value cannot be decrypted."""

    pass


__all__ = [
    "DocGroupError",
    "InvalidArgument",
    "NotRegistered",
    "GroupAlreadyRegistered",
    "GroupConfigurationError",
    "MappingFrozen",
    "UnsupportedEntityType",
    "DuplicateKeyError",
    "DecryptionError",
]
