"""Result types for docgroup operations.

Provides the uniform envelope returned by every CRUD call. Expected states
(not found, uniqueness violations) are returned as OperationResult with
state=FAILURE, while system errors (invalid input, missing registration,
backend crash) raise exceptions.

This design:
- Keeps expected business outcomes cheap (no stack trace creation)
- Provides type-safe, inspectable results
- Gives the HTTP/service layer one shape to serialize for every operation
"""

from enum import Enum
from typing import Any, Final, Generic, Self, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class OperationState(str, Enum):
    """Possible states of an operation."""

    SUCCESS = "success"
    FAILURE = "failure"


class OperationResult(BaseModel, Generic[T]):
    """Outcome of a create/read/update/delete call.

    Pattern:
    - state=SUCCESS → operation succeeded, new_data populated when the
      operation produces a document and the group asks for it
    - state=FAILURE → expected failure, status_code/message describe it

    Use is_ok()/is_error() for clear status checks.

    Attributes:
        state: Operation state.
        message: Human-readable outcome description.
        status_code: Machine-readable outcome code (see StatusCode).
        old_data: Previous document state, if applicable.
        new_data: Resulting document state, if applicable.
        context: Additional diagnostic data (safe to log/serialize).

    Example:
        >>> result = await service.create(customer)
        >>> if result.is_ok():
        ...     print(result.new_data)
        >>> else:
        ...     print(f"Error [{result.status_code}]: {result.message}")
    """

    state: OperationState = Field(default=OperationState.SUCCESS, description="Operation state")
    message: str = Field(default="", description="Human-readable outcome description")
    status_code: str = Field(default="", description="Machine-readable outcome code")
    old_data: T | None = Field(default=None, description="Previous document state")
    new_data: T | None = Field(default=None, description="Resulting document state")
    context: dict[str, Any] = Field(default_factory=dict, description="Diagnostic context")

    model_config = {"extra": "forbid", "arbitrary_types_allowed": True}

    def is_ok(self) -> bool:
        """Check if operation succeeded."""
        return self.state is OperationState.SUCCESS

    def is_error(self) -> bool:
        """Check if operation failed with an expected error."""
        return self.state is OperationState.FAILURE

    @classmethod
    def success(cls, status_code: str, message: str, **kwargs: Any) -> Self:
        """Factory method for successful result.

        Args:
            status_code: Outcome code, e.g. StatusCode.CREATION_SUCCESS.
            message: Human-readable description.
            **kwargs: Optional old_data/new_data/context.

        Returns:
            Result instance with state=SUCCESS.

        Example:
            >>> OperationResult.success(
            ...     StatusCode.READ_SUCCESS, "Document read successfully", new_data=entity
            ... )
        """
        return cls(state=OperationState.SUCCESS, status_code=status_code, message=message, **kwargs)

    @classmethod
    def fail(cls, status_code: str, message: str, **kwargs: Any) -> Self:
        """Factory method for expected failure result.

        Args:
            status_code: Failure code, e.g. StatusCode.NOT_FOUND.
            message: Human-readable description.
            **kwargs: Optional context.

        Returns:
            Result instance with state=FAILURE.

        Example:
            >>> OperationResult.fail(
            ...     StatusCode.NOT_FOUND,
            ...     "No document found matching the specified condition",
            ... )
        """
        return cls(state=OperationState.FAILURE, status_code=status_code, message=message, **kwargs)


# =============================================================================
# STATUS CODE REGISTRY
# =============================================================================


class StatusCode:
    """Centralized registry of status codes returned by operations.

    Use these constants instead of magic strings to ensure consistency
    and enable IDE autocomplete.

    Example:
        >>> result = await service.delete(42)
        >>> if result.status_code == StatusCode.NOT_FOUND:
        ...     handle_missing()
    """

    # -------------------------------------------------------------------------
    # Success
    # -------------------------------------------------------------------------
    CREATION_SUCCESS: Final = "CREATION_SUCCESS"
    """[Create] Document inserted."""

    READ_SUCCESS: Final = "READ_SUCCESS"
    """[Read] Document found."""

    UPDATE_SUCCESS: Final = "UPDATE_SUCCESS"
    """[Update] A document matched and was updated."""

    DELETION_SUCCESS: Final = "DELETION_SUCCESS"
    """[Delete] A document matched and was deleted."""

    # -------------------------------------------------------------------------
    # Expected failures
    # -------------------------------------------------------------------------
    UNIQUE_INDEX_VIOLATION: Final = "UNIQUE_INDEX_VIOLATION"
    """[Create] Pre-check found an existing document with the same unique value."""

    DUPLICATE_KEY: Final = "DUPLICATE_KEY"
    """[Create] The store rejected the insert with its own unique constraint."""

    NOT_FOUND: Final = "NOT_FOUND"
    """[Read/Update/Delete] No document matched the filter (expected state)."""


__all__ = ["OperationResult", "OperationState", "StatusCode"]
