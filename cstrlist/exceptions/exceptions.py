"""
cstrlist exceptions.

This module defines the exception hierarchy for cstrlist:

    CStrListError (base)
    ├── ResourceError - Allocation failure while building C storage
    ├── StateError - Invalid object state (e.g. stale pointer-array view)
    └── ValidationError - Value that cannot be represented as a C string

Usage:
    try:
        topics.append("bad\\x00topic")
    except cstrlist.ValidationError as e:
        print(f"Error {e.code}: {e}")
        print(f"Details: {e.details}")

See Also
--------
    CStrListError : Base exception for all cstrlist errors.
"""

from typing import Any

__all__ = [
    # Base
    "CStrListError",
    # Resource
    "ResourceError",
    # State
    "StateError",
    # Validation
    "ValidationError",
]


class CStrListError(Exception):
    """
    Base exception for all cstrlist errors.

    All cstrlist-specific exceptions inherit from this class, enabling:
    - Catch-all handling: ``except cstrlist.CStrListError``
    - Stable string-based error codes for programmatic handling
    - Structured details for debugging and logging

    Attributes
    ----------
    message : str
        Human-readable error description.
    code : str
        Stable, string-based error code (e.g., "STALE_VIEW").
        Use this for programmatic error handling.
    details : dict[str, Any]
        Structured context (e.g., {"index": 3, "count": 5}).
    """

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.details = details or {}

    @property
    def message(self) -> str:
        return self.args[0]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.args[0]!r}, code={self.code!r})"


# =============================================================================
# Resource Errors
# =============================================================================


class ResourceError(CStrListError, MemoryError):
    """
    Allocation failure while building C-compatible storage.

    Raised when a string buffer or the pointer array cannot be allocated
    during construction, append, extend, copy or assignment. The collection
    that raised it keeps its previous contents and a consistent pointer
    array.

    Inherits from MemoryError, so existing ``except MemoryError`` handlers
    keep working.
    """

    def __init__(
        self,
        message: str,
        code: str = "RESOURCE_EXHAUSTED",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


# =============================================================================
# State Errors
# =============================================================================


class StateError(CStrListError, RuntimeError):
    """
    Invalid object state error.

    Raised when an operation is attempted on an object in an invalid state:
    - Reading a pointer-array view after its collection was mutated
    - Reading a view whose collection was moved from or cleared
    """

    def __init__(
        self,
        message: str,
        code: str = "STATE_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(CStrListError, ValueError):
    """
    Invalid parameter value.

    Raised when a value has an acceptable type but cannot be used, e.g. a
    string containing a NUL byte (it would be truncated when read as a C
    string) or a NULL foreign array with a non-zero count.

    This exception inherits from both CStrListError and ValueError, so both
    work::

        except cstrlist.CStrListError:   # catches all cstrlist errors
        except ValueError:               # catches validation errors (Pythonic)
    """

    def __init__(
        self,
        message: str,
        code: str = "INVALID_ARGUMENT",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)
