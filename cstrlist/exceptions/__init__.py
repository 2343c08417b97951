"""
cstrlist exceptions.

This module defines the exception hierarchy for cstrlist:

    CStrListError (base)
    ├── ResourceError - Allocation failure while building C storage
    ├── StateError - Invalid object state (e.g. stale pointer-array view)
    └── ValidationError - Value that cannot be represented as a C string
"""

from .exceptions import (
    CStrListError,
    ResourceError,
    StateError,
    ValidationError,
)

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
