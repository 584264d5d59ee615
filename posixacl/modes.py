"""Conversion between ACLs and file mode permission bits."""

from __future__ import annotations

import stat
from typing import Optional

from .acl import Acl
from .entry import Entry, Perm, Tag

__all__ = ["equiv_mode", "from_mode", "apply_mask_to_mode"]

_RWX = 0o7


def equiv_mode(acl: Acl) -> tuple[int, bool]:
    """Return the file mode an ACL maps to, and whether it is equivalent.

    The ACL is equivalent to the mode when it holds only the owner,
    owning group and other entries. If there is a mask entry, it supplies
    the group bits. Raises ValueError for entries of undefined type.
    """
    mode = 0
    mask: Optional[Entry] = None
    equivalent = True
    for entry in acl:
        tag = entry.tag
        perms = int(entry.perms) & _RWX
        if tag == Tag.USER_OBJ:
            mode |= perms << 6
        elif tag == Tag.GROUP_OBJ:
            mode |= perms << 3
        elif tag == Tag.OTHER:
            mode |= perms
        elif tag == Tag.MASK:
            mask = entry
            equivalent = False
        elif tag in (Tag.USER, Tag.GROUP):
            equivalent = False
        else:
            raise ValueError(f"invalid entry type: {tag.name}")
    if mask is not None:
        mode = (mode & ~stat.S_IRWXG) | ((int(mask.perms) & _RWX) << 3)
    return mode, equivalent


def from_mode(mode: int) -> Acl:
    """Build the minimal three-entry ACL matching a file mode."""
    acl = Acl()
    acl.create_entry(Tag.USER_OBJ, perms=(mode & stat.S_IRWXU) >> 6)
    acl.create_entry(Tag.GROUP_OBJ, perms=(mode & stat.S_IRWXG) >> 3)
    acl.create_entry(Tag.OTHER, perms=mode & stat.S_IRWXO)
    return acl


def apply_mask_to_mode(mode: int, acl: Acl) -> int:
    """Restrict the group bits of ``mode`` to the ACL's mask entry.

    A minimal three-entry ACL leaves the mode unchanged. An extended ACL
    without a mask entry clears all group bits.
    """
    if len(acl) == 3:
        return mode
    for entry in acl:
        if entry.tag == Tag.MASK:
            if not entry.perms & Perm.READ:
                mode &= ~stat.S_IRGRP
            if not entry.perms & Perm.WRITE:
                mode &= ~stat.S_IWGRP
            if not entry.perms & Perm.EXECUTE:
                mode &= ~stat.S_IXGRP
            return mode
    return mode & ~stat.S_IRWXG