"""DTO package for docgroup core.

Provides the OperationResult pattern for consistent result handling across
operations.
"""

from .result_dto import OperationResult, OperationState, StatusCode

__all__ = [
    "OperationResult",
    "OperationState",
    "StatusCode",
]
