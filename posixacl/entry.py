"""ACL entries: tag types, permission bits and the entry object itself."""

from __future__ import annotations

from enum import IntEnum, IntFlag
from typing import Optional, Protocol

__all__ = ["Tag", "Perm", "Entry", "UNDEFINED_ID", "VALID_PERMS"]

#: Qualifier value of entries that carry no user or group id.
UNDEFINED_ID = 0xFFFFFFFF


class Tag(IntEnum):
    """Entry tag types, in canonical ACL order."""

    UNDEFINED = 0x00
    USER_OBJ = 0x01
    USER = 0x02
    GROUP_OBJ = 0x04
    GROUP = 0x08
    MASK = 0x10
    OTHER = 0x20


class Perm(IntFlag):
    """Permission bits of an entry."""

    NONE = 0
    EXECUTE = 0x01
    WRITE = 0x02
    READ = 0x04


VALID_PERMS = Perm.READ | Perm.WRITE | Perm.EXECUTE

_SETTABLE_TAGS = frozenset(
    {Tag.USER_OBJ, Tag.USER, Tag.GROUP_OBJ, Tag.GROUP, Tag.MASK, Tag.OTHER}
)
_QUALIFIED_TAGS = frozenset({Tag.USER, Tag.GROUP})


class _Container(Protocol):
    def reorder_entry(self, entry: "Entry") -> None: ...


def _checked_perm(perm: int) -> Perm:
    perm = int(perm)
    if perm & ~int(VALID_PERMS):
        raise ValueError(f"invalid permission bits: {perm:#x}")
    return Perm(perm)


class Entry:
    """One ACL entry: a tag, an optional user or group id and permissions.

    An entry that belongs to an ACL keeps that ACL informed when its tag or
    qualifier changes, so the ACL can keep its entries in canonical order.
    """

    __slots__ = ("_tag", "_qualifier", "_perms", "_container")

    def __init__(
        self,
        tag: int = Tag.UNDEFINED,
        qualifier: int = UNDEFINED_ID,
        perms: int = Perm.NONE,
    ) -> None:
        self._tag = Tag(tag)
        self._qualifier = int(qualifier)
        self._perms = Perm(int(perms))
        self._container: Optional[_Container] = None

    def __repr__(self) -> str:
        return (
            f"Entry(tag={self._tag.name}, qualifier={self._qualifier}, "
            f"perms={int(self._perms):#o})"
        )

    def _reorder(self) -> None:
        if self._container is not None:
            self._container.reorder_entry(self)

    @property
    def tag(self) -> Tag:
        """The entry's tag type."""
        return self._tag

    @tag.setter
    def tag(self, value: int) -> None:
        try:
            tag = Tag(value)
        except ValueError:
            raise ValueError(f"invalid tag type: {value!r}") from None
        if tag not in _SETTABLE_TAGS:
            raise ValueError(f"invalid tag type: {tag.name}")
        self._tag = tag
        self._reorder()

    @property
    def qualifier(self) -> int:
        """The user or group id; UNDEFINED_ID when the entry has none."""
        return self._qualifier

    @qualifier.setter
    def qualifier(self, value: int) -> None:
        if self._tag not in _QUALIFIED_TAGS:
            raise ValueError(f"entries of type {self._tag.name} take no qualifier")
        self._qualifier = int(value)
        self._reorder()

    @property
    def is_qualified(self) -> bool:
        """True for USER and GROUP entries, which carry an id."""
        return self._tag in _QUALIFIED_TAGS

    @property
    def perms(self) -> Perm:
        """The entry's permission set."""
        return self._perms

    @perms.setter
    def perms(self, value: int) -> None:
        self._perms = Perm(int(value))

    def add_perm(self, perm: int) -> None:
        """Add permission bits; raise ValueError for unknown bits."""
        self._perms = Perm(int(self._perms) | int(_checked_perm(perm)))

    def delete_perm(self, perm: int) -> None:
        """Remove permission bits; raise ValueError for unknown bits."""
        self._perms = Perm(int(self._perms) & ~int(_checked_perm(perm)))

    def clear_perms(self) -> None:
        """Remove all permissions."""
        self._perms = Perm.NONE

    def has_perm(self, perm: int) -> bool:
        """Whether any of the given bits is set; ValueError for unknown bits."""
        return bool(int(self._perms) & int(_checked_perm(perm)))

    def copy_from(self, other: "Entry") -> None:
        """Take over tag, qualifier and permissions of another entry."""
        self._tag = other._tag
        self._qualifier = other._qualifier
        self._perms = other._perms
        self._reorder()

    def sort_key(self) -> tuple[int, int]:
        """Key giving the canonical ordering of entries."""
        return (int(self._tag), self._qualifier)

    def equivalent(self, other: "Entry") -> bool:
        """Same tag and permissions, and the same id where the tag uses one."""
        if self._tag != other._tag or int(self._perms) != int(other._perms):
            return False
        if self._tag in _QUALIFIED_TAGS:
            return self._qualifier == other._qualifier
        return True