"""Binary representations of ACLs.

The extended-attribute format is the one the kernel stores: a little-endian
header holding the version, followed by one record per entry (tag,
permissions, id). The external format used by copy_ext/copy_int is a
self-contained byte string: a size header followed by one record per entry.
"""

from __future__ import annotations

import struct

from .acl import Acl
from .entry import UNDEFINED_ID, Tag

__all__ = [
    "EA_ACCESS",
    "EA_DEFAULT",
    "EA_VERSION",
    "ea_size",
    "from_xattr",
    "to_xattr",
    "external_size",
    "copy_ext",
    "copy_int",
]

EA_ACCESS = "system.posix_acl_access"
EA_DEFAULT = "system.posix_acl_default"
EA_VERSION = 0x0002

_EA_HEADER = struct.Struct("<I")
_EA_ENTRY = struct.Struct("<HHI")

_EXT_HEADER = struct.Struct("<Q")
_EXT_ENTRY = struct.Struct("<iII")

_UNQUALIFIED = frozenset({Tag.USER_OBJ, Tag.GROUP_OBJ, Tag.MASK, Tag.OTHER})
_QUALIFIED = frozenset({Tag.USER, Tag.GROUP})


def ea_size(count: int) -> int:
    """Size in bytes of an extended attribute holding ``count`` entries."""
    return _EA_HEADER.size + count * _EA_ENTRY.size


def from_xattr(data: bytes) -> Acl:
    """Decode an ACL from its extended-attribute value.

    Raises ValueError for a short or malformed value, a wrong version or
    an unknown entry type. The result is in canonical order.
    """
    data = bytes(data)
    if len(data) < _EA_HEADER.size:
        raise ValueError("extended attribute too short for an ACL header")
    (version,) = _EA_HEADER.unpack_from(data)
    if version != EA_VERSION:
        raise ValueError(f"unsupported ACL version: {version}")
    body = data[_EA_HEADER.size:]
    if len(body) % _EA_ENTRY.size:
        raise ValueError("extended attribute size is not a whole number of entries")

    acl = Acl()
    for tag_value, perm, qualifier in _EA_ENTRY.iter_unpack(body):
        try:
            tag = Tag(tag_value)
        except ValueError:
            raise ValueError(f"invalid entry type: {tag_value:#x}") from None
        if tag in _UNQUALIFIED:
            qualifier = UNDEFINED_ID
        elif tag not in _QUALIFIED:
            raise ValueError(f"invalid entry type: {tag.name}")
        acl.create_entry(tag, qualifier, perm)
    acl.sort()
    return acl


def to_xattr(acl: Acl) -> bytes:
    """Encode an ACL as an extended-attribute value."""
    parts = [_EA_HEADER.pack(EA_VERSION)]
    for entry in acl:
        qualifier = entry.qualifier if entry.tag in _QUALIFIED else UNDEFINED_ID
        parts.append(
            _EA_ENTRY.pack(int(entry.tag), int(entry.perms) & 0xFFFF, qualifier & 0xFFFFFFFF)
        )
    return b"".join(parts)


def external_size(acl: Acl) -> int:
    """Size in bytes of the external representation of an ACL."""
    return _EXT_HEADER.size + len(acl) * _EXT_ENTRY.size


def copy_ext(acl: Acl) -> bytes:
    """Return the external representation of an ACL."""
    parts = [_EXT_HEADER.pack(external_size(acl))]
    parts.extend(
        _EXT_ENTRY.pack(int(entry.tag), entry.qualifier & 0xFFFFFFFF, int(entry.perms))
        for entry in acl
    )
    return b"".join(parts)


def copy_int(data: bytes) -> Acl:
    """Rebuild an ACL from its external representation.

    Raises ValueError if the data is malformed. The result is in
    canonical order.
    """
    data = bytes(data)
    if len(data) < _EXT_HEADER.size:
        raise ValueError("data too short for an ACL header")
    (size,) = _EXT_HEADER.unpack_from(data)
    if size < _EXT_HEADER.size:
        raise ValueError(f"invalid ACL size: {size}")
    body_size = size - _EXT_HEADER.size
    if body_size % _EXT_ENTRY.size:
        raise ValueError("ACL size is not a whole number of entries")
    if len(data) < size:
        raise ValueError("data shorter than the recorded ACL size")

    acl = Acl()
    body = data[_EXT_HEADER.size:size]
    for tag_value, qualifier, perm in _EXT_ENTRY.iter_unpack(body):
        try:
            tag = Tag(tag_value)
        except ValueError:
            raise ValueError(f"invalid entry type: {tag_value:#x}") from None
        acl.create_entry(tag, qualifier, perm)
    acl.sort()
    return acl