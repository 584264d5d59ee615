"""Validation of ACLs and computation of the mask entry."""

from __future__ import annotations

from enum import IntEnum
from typing import Optional

from .acl import Acl
from .entry import UNDEFINED_ID, Entry, Perm, Tag

__all__ = [
    "CheckError",
    "InvalidAclError",
    "check",
    "valid",
    "error_message",
    "calc_mask",
]


class CheckError(IntEnum):
    """Reasons an ACL can be invalid."""

    MULTI = 0x1000
    DUPLICATE = 0x2000
    MISS = 0x3000
    ENTRY = 0x4000


_MESSAGES = {
    CheckError.MULTI: "Multiple entries of same type",
    CheckError.DUPLICATE: "Duplicate entries",
    CheckError.MISS: "Missing or wrong entry",
    CheckError.ENTRY: "Invalid entry type",
}

# State reached after the OTHER entry: the ACL is complete.
_DONE = 0


class InvalidAclError(ValueError):
    """Raised when an ACL is not valid.

    ``code`` tells why; ``last`` is the number of entries found valid
    before the offending one.
    """

    def __init__(self, code: CheckError, last: int) -> None:
        super().__init__(f"{_MESSAGES[code]} (after {last} valid entries)")
        self.code = code
        self.last = last


def error_message(code: int) -> Optional[str]:
    """Return the description of a check error code, or None if unknown."""
    try:
        return _MESSAGES[CheckError(code)]
    except ValueError:
        return None


def check(acl: Acl) -> None:
    """Check that an ACL is complete and in canonical order.

    Qualifiers of entries that do not use them are ignored. Raises
    InvalidAclError describing the first problem found.
    """
    qual = 0
    state = int(Tag.USER_OBJ)
    needs_mask = False
    last = 0

    def fail(code: CheckError) -> InvalidAclError:
        return InvalidAclError(code, last)

    for entry in acl:
        tag = entry.tag
        if tag == Tag.USER_OBJ:
            if state != Tag.USER_OBJ:
                raise fail(CheckError.MULTI)
            qual = 0
            state = int(Tag.USER)
        elif tag in (Tag.USER, Tag.GROUP):
            if state != tag:
                raise fail(CheckError.MISS)
            if entry.qualifier < qual or entry.qualifier == UNDEFINED_ID:
                raise fail(CheckError.DUPLICATE)
            qual = entry.qualifier + 1
            needs_mask = True
        elif tag == Tag.GROUP_OBJ:
            if state == Tag.USER:
                qual = 0
                state = int(Tag.GROUP)
            elif state >= Tag.GROUP:
                raise fail(CheckError.MULTI)
            else:
                raise fail(CheckError.MISS)
        elif tag == Tag.MASK:
            if state == Tag.GROUP:
                state = int(Tag.OTHER)
            elif state >= Tag.OTHER:
                raise fail(CheckError.MULTI)
            else:
                raise fail(CheckError.MISS)
        elif tag == Tag.OTHER:
            if state == Tag.OTHER or (state == Tag.GROUP and not needs_mask):
                state = _DONE
            else:
                raise fail(CheckError.MISS)
        else:
            raise fail(CheckError.ENTRY)
        last += 1

    if state != _DONE:
        raise fail(CheckError.MISS)


def valid(acl: Acl) -> bool:
    """Return True if the ACL passes check()."""
    try:
        check(acl)
    except InvalidAclError:
        return False
    return True


def calc_mask(acl: Acl) -> Entry:
    """Set the mask entry to the union of the group-class permissions.

    A mask entry is created if the ACL has none. Returns the mask entry.
    Raises ValueError if the ACL holds an entry with an undefined tag.
    """
    perms = int(Perm.NONE)
    mask: Optional[Entry] = None
    for entry in acl:
        tag = entry.tag
        if tag in (Tag.USER_OBJ, Tag.OTHER):
            continue
        if tag == Tag.MASK:
            mask = entry
        elif tag in (Tag.USER, Tag.GROUP_OBJ, Tag.GROUP):
            perms |= int(entry.perms)
        else:
            raise ValueError(f"invalid entry type: {tag.name}")
    if mask is None:
        mask = acl.create_entry(Tag.MASK)
    mask.perms = perms
    return mask