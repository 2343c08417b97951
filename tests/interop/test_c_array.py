"""
char** interop tests.

Drives StringCollection through a foreign routine with the
``const char** items, size_t count`` signature.
"""

import ctypes

from cstrlist import CStringList, StringCollection
from tests.fixtures import decode_c_arr, entry_addresses


class TestPointerArray:
    """Shape and content of c_arr."""

    def test_c_arr_type(self):
        """c_arr is a POINTER(c_char_p)."""
        coll = StringCollection(["a"])

        assert isinstance(coll.c_arr, ctypes.POINTER(ctypes.c_char_p))

    def test_entries_match_strings(self, topics):
        """Entry i decodes to item i."""
        coll = StringCollection(topics)

        assert decode_c_arr(coll.c_arr, len(coll)) == [t.encode() for t in topics]

    def test_each_entry_nul_terminated(self):
        """Each string is followed by one zero byte not counted in its length."""
        coll = StringCollection(["abc", ""])

        for addr, expected in zip(entry_addresses(coll.c_arr, 2), [b"abc", b""]):
            assert ctypes.string_at(addr, len(expected) + 1) == expected + b"\x00"

    def test_multibyte_content_bit_identical(self, unicode_strings):
        """The bytes behind each pointer are exactly the encoded string."""
        coll = StringCollection(unicode_strings)

        assert decode_c_arr(coll.c_arr, len(coll)) == [s.encode() for s in unicode_strings]

    def test_non_utf8_bytes_preserved(self):
        """Arbitrary non-zero bytes are passed through unchanged."""
        raw = bytes(range(1, 256))
        coll = StringCollection([raw])

        assert decode_c_arr(coll.c_arr, 1) == [raw]

    def test_reading_does_not_rebuild(self, topics):
        """Requesting c_arr repeatedly returns the same array."""
        coll = StringCollection(topics)
        view = coll.view()

        first = ctypes.cast(coll.c_arr, ctypes.c_void_p).value
        second = ctypes.cast(coll.c_arr, ctypes.c_void_p).value

        assert first == second
        assert view.is_valid

    def test_append_relocates_array(self, topics):
        """append() produces a fresh array that covers every entry."""
        coll = StringCollection(topics)
        before = entry_addresses(coll.c_arr, len(coll))

        coll.append("new")

        after = entry_addresses(coll.c_arr, len(coll))
        assert after[: len(before)] == before
        assert len(after) == len(before) + 1

    def test_c_count(self, topics):
        """c_count is a c_size_t holding the length."""
        coll = StringCollection(topics)

        assert isinstance(coll.c_count, ctypes.c_size_t)
        assert coll.c_count.value == len(topics)


class TestForeignCall:
    """Passing the array through libffi to a C-callable routine."""

    def test_pass_c_arr_and_len(self, c_consumer, topics):
        """The routine sees exactly the collection's strings."""
        coll = StringCollection(topics)

        assert c_consumer(coll.c_arr, len(coll)) == len(topics)
        assert c_consumer.last == [t.encode() for t in topics]

    def test_pass_collection_directly(self, c_consumer, topics):
        """A collection converts itself through _as_parameter_."""
        coll = StringCollection(topics)

        c_consumer(coll, coll.c_count)

        assert c_consumer.last == [t.encode() for t in topics]

    def test_pass_empty(self, c_consumer):
        """An empty collection passes a zero count."""
        coll = StringCollection()

        assert c_consumer(coll.c_arr, len(coll)) == 0
        assert c_consumer.last == []

    def test_rerequest_after_mutation(self, c_consumer):
        """Re-requesting after each mutation always gives the current list."""
        coll = StringCollection()

        for item in ["x", "yy"]:
            coll.append(item)
            c_consumer(coll, len(coll))
        coll.clear()
        coll.append("z")
        c_consumer(coll, len(coll))

        assert c_consumer.calls == [[b"x"], [b"x", b"yy"], [b"z"]]

    def test_as_string_list(self, c_consumer, topics):
        """as_string_list packs the array and count in one struct."""
        coll = StringCollection(topics)

        string_list = coll.as_string_list()

        assert isinstance(string_list, CStringList)
        assert string_list.count == len(topics)
        assert c_consumer.consume_list(string_list) == len(topics)
        assert c_consumer.last == [t.encode() for t in topics]


class TestRoundTrip:
    """from_c_array over our own array."""

    def test_from_own_c_arr(self, topics):
        """Copying c_arr back reproduces the collection."""
        coll = StringCollection(topics)

        copy = StringCollection.from_c_array(coll.c_arr, len(coll))

        assert copy == coll
        assert set(entry_addresses(copy.c_arr, len(copy))).isdisjoint(
            entry_addresses(coll.c_arr, len(coll))
        )

    def test_from_string_list_struct(self, topics):
        """A CStringList's fields feed from_c_array."""
        source = StringCollection(topics)
        string_list = source.as_string_list()

        coll = StringCollection.from_c_array(string_list.items, string_list.count)

        assert coll.tolist() == topics
