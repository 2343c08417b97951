"""
Shared test fixtures for cstrlist.

Maps to: N/A (shared test fixtures)
"""

from .consumers import ForeignConsumer, decode_c_arr, entry_addresses

__all__ = [
    "ForeignConsumer",
    "decode_c_arr",
    "entry_addresses",
]
