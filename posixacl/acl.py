"""The access control list: an ordered collection of entries."""

from __future__ import annotations

from typing import Iterator, Optional

from .entry import UNDEFINED_ID, Entry, Perm, Tag

__all__ = ["Acl"]


class Acl:
    """An access control list.

    Entries are kept in canonical order (by tag type, then by qualifier)
    while the list is being manipulated. Entries whose tag is still
    undefined, or USER/GROUP entries without an id, stay where they are
    until they are complete.
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: list[Entry] = []

    def __iter__(self) -> Iterator[Entry]:
        # Iterate over a snapshot, so entries may be deleted while iterating.
        return iter(tuple(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> Entry:
        return self._entries[index]

    def __contains__(self, entry: object) -> bool:
        return self._index_of(entry) is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Acl):
            return NotImplemented
        return self.compare(other) == 0

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Acl({self._entries!r})"

    def _index_of(self, entry: object) -> Optional[int]:
        for index, candidate in enumerate(self._entries):
            if candidate is entry:
                return index
        return None

    def _adopt(self, entry: Entry) -> Entry:
        entry._container = self
        self._entries.append(entry)
        return entry

    def create_entry(
        self,
        tag: int = Tag.UNDEFINED,
        qualifier: int = UNDEFINED_ID,
        perms: int = Perm.NONE,
    ) -> Entry:
        """Add a new entry and return it, placed in canonical order."""
        entry = self._adopt(Entry(tag, qualifier, perms))
        self.reorder_entry(entry)
        return entry

    def delete_entry(self, entry: Entry) -> None:
        """Remove an entry; raise ValueError if it is not in this ACL."""
        index = self._index_of(entry)
        if index is None:
            raise ValueError("entry does not belong to this ACL")
        del self._entries[index]
        entry._container = None

    def reorder_entry(self, entry: Entry) -> None:
        """Move an entry to its canonical place.

        Incomplete entries (undefined tag, or USER/GROUP without an id)
        are left where they are.
        """
        index = self._index_of(entry)
        if index is None:
            raise ValueError("entry does not belong to this ACL")
        if len(self._entries) <= 1:
            return
        if entry.tag == Tag.UNDEFINED:
            return
        if entry.is_qualified and entry.qualifier == UNDEFINED_ID:
            return
        del self._entries[index]
        key = entry.sort_key()
        position = next(
            (
                pos
                for pos, here in enumerate(self._entries)
                if here.sort_key() > key
            ),
            len(self._entries),
        )
        self._entries.insert(position, entry)

    def copy(self) -> "Acl":
        """Return an independent ACL with equal entries in the same order."""
        duplicate = Acl()
        for entry in self._entries:
            duplicate._adopt(Entry(entry.tag, entry.qualifier, entry.perms))
        return duplicate

    def sort(self) -> None:
        """Put all entries into canonical order at once."""
        self._entries.sort(key=Entry.sort_key)

    def compare(self, other: "Acl") -> int:
        """Return 0 if both ACLs hold equivalent entries in order, else 1."""
        if not isinstance(other, Acl):
            raise TypeError(f"cannot compare Acl with {type(other).__name__}")
        if len(self._entries) != len(other._entries):
            return 1
        for mine, theirs in zip(self._entries, other._entries):
            if not mine.equivalent(theirs):
                return 1
        return 0