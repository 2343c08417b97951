"""
cstrlist - Python string lists for C APIs that take ``char**`` + count.

Many C libraries take a list of names as an array of NUL-terminated string
pointers plus a count (subscription topics, file lists, option names).
cstrlist keeps such an array in step with a Python-owned list of strings.

Quick Start
-----------

    >>> from cstrlist import StringCollection
    >>>
    >>> topics = StringCollection(["sensors/temp", "sensors/rh"])
    >>> topics.append("alerts/#")
    >>> lib.subscribe_many(topics.c_arr, len(topics))

The pointer returned by ``c_arr`` is borrowed. It is valid until the next
``append``/``extend``/``clear``/``assign``/``move`` on the collection, or
until the collection is garbage collected. Ask for it again after any
change; do not store it.

Copying and moving:

    >>> backup = topics.copy()      # independent strings and pointer array
    >>> owner = topics.move()       # same storage, new owner; topics is empty

Checked access (raises StateError instead of reading stale memory):

    >>> view = owner.view()
    >>> view.decode()
    ['sensors/temp', 'sensors/rh', 'alerts/#']

Reading a list produced by C code:

    >>> names = StringCollection.from_c_array(ptr, count)


Core Classes
------------

- `StringCollection` - Owned strings with a synchronized ``char**``
- `CStringArrayView` - Read-only, staleness-checked view of that array
- `CStringList` - ctypes struct ``{char** items; size_t count;}``
"""

from cstrlist._bindings import CStringList
from cstrlist._logging import setup_logging
from cstrlist._version import __version__ as __version__
from cstrlist.collection import CStringArrayView, StringCollection

# Exceptions (all via cstrlist.exceptions)
from cstrlist.exceptions import (
    CStrListError as CStrListError,
)
from cstrlist.exceptions import (
    ResourceError as ResourceError,
)
from cstrlist.exceptions import (
    StateError as StateError,
)
from cstrlist.exceptions import (
    ValidationError as ValidationError,
)

# =============================================================================
# Public API
# =============================================================================
__all__ = [
    # Core
    "StringCollection",
    "CStringArrayView",
    "CStringList",
    # Logging
    "setup_logging",
    # Exceptions
    "CStrListError",
    "ResourceError",
    "StateError",
    "ValidationError",
]
