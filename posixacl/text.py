"""Conversion between ACLs and their long and short text forms."""

from __future__ import annotations

import grp
import pwd
import re
from enum import IntFlag
from typing import Callable, Optional

from .acl import Acl
from .entry import UNDEFINED_ID, Entry, Perm, Tag

__all__ = ["TextOption", "to_any_text", "to_text", "from_text"]


class TextOption(IntFlag):
    """Options controlling the text form produced by to_any_text()."""

    NONE = 0
    SOME_EFFECTIVE = 0x01
    ALL_EFFECTIVE = 0x02
    SMART_INDENT = 0x04
    NUMERIC_IDS = 0x08
    ABBREVIATE = 0x10


_EFFECTIVE_OPTIONS = TextOption.SOME_EFFECTIVE | TextOption.ALL_EFFECTIVE
_EFFECTIVE_STR = "#effective:"
_TABS = 4
_QUOTE_CHARS = ":, \t\n\r"
_WHITESPACE = " \t\n\r"
_TOKEN_END = "\r\n:,"

_LABELS = {
    Tag.USER_OBJ: "user:",
    Tag.USER: "user:",
    Tag.GROUP_OBJ: "group:",
    Tag.GROUP: "group:",
    Tag.MASK: "mask:",
    Tag.OTHER: "other:",
}
_MASKED_TAGS = frozenset({Tag.USER, Tag.GROUP_OBJ, Tag.GROUP})
_PERM_CHARS = (("r", Perm.READ), ("w", Perm.WRITE), ("x", Perm.EXECUTE))
_PERM_BY_CHAR = dict(_PERM_CHARS)

_NUMERIC_ID = re.compile(
    r"[ \t\n\r\f\v]*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)\Z"
)
_OCTAL_ESCAPE = re.compile(r"\\([0-7]{3})")


def _perm_string(perms: int) -> str:
    return "".join(char if perms & bit else "-" for char, bit in _PERM_CHARS)


def _quote(name: str) -> str:
    """Escape separators and backslashes in a name as backslash-octal."""
    specials = _QUOTE_CHARS + "\\"
    return "".join(
        f"\\{ord(char) & 0xFF:03o}" if char in specials else char for char in name
    )


def _unquote(token: str) -> str:
    return _OCTAL_ESCAPE.sub(lambda match: chr(int(match.group(1), 8) & 0xFF), token)


def _user_name(uid: int) -> Optional[str]:
    try:
        return pwd.getpwuid(uid).pw_name
    except (KeyError, OverflowError):
        return None


def _group_name(gid: int) -> Optional[str]:
    try:
        return grp.getgrgid(gid).gr_name
    except (KeyError, OverflowError):
        return None


def _numeric_id(token: str) -> Optional[int]:
    match = _NUMERIC_ID.match(token)
    if match is None:
        return None
    sign, digits = match.groups()
    if digits[:2] in ("0x", "0X"):
        value = int(digits[2:], 16)
    elif digits.startswith("0"):
        value = int(digits, 8)
    else:
        value = int(digits)
    if sign == "-":
        value = -value
    if not 0 <= value < UNDEFINED_ID:
        return None
    return value


def _lookup_id(token: str, by_name: Callable[[str], int], kind: str) -> int:
    value = _numeric_id(token)
    if value is not None:
        return value
    try:
        return by_name(token)
    except KeyError:
        raise ValueError(f"unknown {kind}: {token!r}") from None


def _uid(name: str) -> int:
    return pwd.getpwnam(name).pw_uid


def _gid(name: str) -> int:
    return grp.getgrnam(name).gr_gid


def _entry_text(
    entry: Entry, mask: Optional[Entry], prefix: Optional[str], options: int
) -> str:
    tag = entry.tag
    label = _LABELS.get(tag)
    if label is None:
        return ""
    parts = [prefix or ""]
    parts.append(label[0] + ":" if options & TextOption.ABBREVIATE else label)
    if tag in (Tag.USER, Tag.GROUP):
        name = None
        if not options & TextOption.NUMERIC_IDS:
            lookup = _user_name if tag == Tag.USER else _group_name
            name = lookup(entry.qualifier)
        parts.append(_quote(name) if name is not None else str(entry.qualifier))
    parts.append(":")
    parts.append(_perm_string(entry.perms))

    if mask is not None and tag in _MASKED_TAGS and options & _EFFECTIVE_OPTIONS:
        effective = int(entry.perms) & int(mask.perms)
        if effective != int(entry.perms) or options & TextOption.ALL_EFFECTIVE:
            if options & TextOption.SMART_INDENT:
                indent = len("".join(parts)) // 8
            else:
                indent = _TABS - 1
            indent = min(indent, _TABS - 1)
            parts.append("\t" * (_TABS - indent))
            parts.append(_EFFECTIVE_STR + _perm_string(effective))
    return "".join(parts)


def _to_any_text(
    acl: Acl,
    prefix: Optional[str],
    separator: str,
    suffix: Optional[str],
    options: int,
) -> str:
    mask = None
    if options & _EFFECTIVE_OPTIONS:
        mask = next((entry for entry in acl if entry.tag == Tag.MASK), None)
    text = separator.join(_entry_text(entry, mask, prefix, options) for entry in acl)
    if text and suffix:
        text += suffix
    return text


def to_any_text(
    acl: Acl,
    prefix: Optional[str] = None,
    separator: str = "\n",
    options: int = TextOption.NONE,
) -> str:
    """Render an ACL as text, one entry per separator-delimited field.

    Every entry is preceded by ``prefix`` if one is given. ``options``
    combines TextOption flags.
    """
    return _to_any_text(acl, prefix, separator, None, int(options))


def to_text(acl: Acl) -> str:
    """Render an ACL in long text form, one entry per line."""
    return _to_any_text(acl, None, "\n", "\n", int(TextOption.SOME_EFFECTIVE))


class _Reader:
    """A position within the text being parsed."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    @property
    def current(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def skip_from(self, pos: int) -> int:
        """Skip whitespace and then one comment, starting at ``pos``."""
        text = self.text
        while pos < len(text) and text[pos] in _WHITESPACE:
            pos += 1
        if pos < len(text) and text[pos] == "#":
            while pos < len(text) and text[pos] != "\n":
                pos += 1
        return pos

    def skip_ws(self) -> None:
        self.pos = self.skip_from(self.pos)

    def skip_colon(self) -> None:
        if self.current == ":":
            self.pos += 1

    def error(self, message: str) -> ValueError:
        return ValueError(f"{message} at position {self.pos} in {self.text!r}")

    def skip_tag_name(self, name: str) -> bool:
        self.skip_ws()
        if self.text.startswith(name, self.pos):
            self.pos += len(name)
        elif self.current == name[0]:
            self.pos += 1
        else:
            return False
        self.skip_ws()
        self.skip_colon()
        return True

    def token(self) -> Optional[str]:
        start = self.pos
        end = self.skip_from(start)
        while end < len(self.text) and self.text[end] not in _TOKEN_END:
            end += 1
        token = self.text[start:end] if end != start else None
        if end < len(self.text) and self.text[end] == ":":
            end += 1
        self.pos = end
        return token


def _parse_entry(reader: _Reader, acl: Acl) -> None:
    qualifier = UNDEFINED_ID
    reader.skip_ws()
    kind = reader.current
    if kind in ("u", "g"):
        name = "user" if kind == "u" else "group"
        if not reader.skip_tag_name(name):
            raise reader.error("invalid entry type")
        token = reader.token()
        if token is None:
            tag = Tag.USER_OBJ if kind == "u" else Tag.GROUP_OBJ
        else:
            tag = Tag.USER if kind == "u" else Tag.GROUP
            by_name = _uid if kind == "u" else _gid
            qualifier = _lookup_id(_unquote(token), by_name, name)
    elif kind in ("m", "o"):
        name = "mask" if kind == "m" else "other"
        if not reader.skip_tag_name(name):
            raise reader.error("invalid entry type")
        reader.skip_ws()
        reader.skip_colon()
        tag = Tag.MASK if kind == "m" else Tag.OTHER
    else:
        raise reader.error("invalid entry type")

    perms = Perm.NONE
    for count in range(3):
        char = reader.current
        bit = _PERM_BY_CHAR.get(char)
        if bit is not None:
            if perms & bit:
                raise reader.error(f"duplicate permission {char!r}")
            perms |= bit
        elif char != "-":
            if count == 0:
                raise reader.error("missing permissions")
            break
        reader.pos += 1

    acl.create_entry(tag, qualifier, perms)


def from_text(text: str) -> Acl:
    """Parse an ACL from its long or short text form.

    Entries are separated by commas or whitespace; '#' starts a comment.
    Raises ValueError for malformed text or unknown user and group names.
    """
    if not isinstance(text, str):
        raise TypeError(f"expected str, got {type(text).__name__}")
    reader = _Reader(text)
    acl = Acl()
    while not reader.at_end:
        _parse_entry(reader, acl)
        reader.skip_ws()
        if reader.current == ",":
            reader.pos += 1
            reader.skip_ws()
    return acl