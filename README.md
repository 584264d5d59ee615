# posixacl

Work with POSIX.1e access control lists from Python: build ACLs in memory,
check them, and convert them to and from text, file mode bits and the
binary extended-attribute format the Linux kernel stores.

## Installation

```
pip install posixacl
```

The package has no dependencies outside the standard library. Text
conversion looks up user and group names, so it needs a POSIX system.

## Building ACLs

An `Acl` (in `posixacl.acl`) keeps its entries in canonical order: owner,
named users, owning group, named groups, mask, other. Entries are `Entry`
objects (in `posixacl.entry`) with a `Tag`, a numeric qualifier for named
users and groups, and a set of `Perm` flags.

```python
from posixacl.acl import Acl
from posixacl.entry import Perm, Tag

acl = Acl()
acl.create_entry(Tag.OTHER, perms=Perm.READ)
acl.create_entry(Tag.USER_OBJ, perms=Perm.READ | Perm.WRITE)
acl.create_entry(Tag.GROUP_OBJ, perms=Perm.READ)
print([entry.tag.name for entry in acl])   # ['USER_OBJ', 'GROUP_OBJ', 'OTHER']
```

Entries can be changed in place (`add_perm`, `delete_perm`, `clear_perms`,
`has_perm`, `copy_from`, or by setting `tag`, `qualifier` and `perms`); the
ACL moves them back into order when their tag or qualifier changes.
`Acl.copy()` gives an independent duplicate, and two ACLs compare equal when
they hold equivalent entries in the same order.

## Checking ACLs

```python
from posixacl.checks import calc_mask, check, valid

calc_mask(acl)   # creates or updates the mask entry
valid(acl)       # True or False
check(acl)       # raises InvalidAclError, whose .code is a CheckError
```

`error_message(code)` returns the description of a `CheckError` code.

## Text form

```python
from posixacl.text import TextOption, from_text, to_any_text, to_text

acl = from_text("u::rw-,u:1000:r--,g::r--,m::r--,o::---")
print(to_text(acl))
print(to_any_text(acl, separator=",", options=TextOption.ABBREVIATE | TextOption.NUMERIC_IDS))
```

`from_text` accepts the long form (one entry per line, `#` comments) and the
short form (comma-separated, abbreviated tags), and raises `ValueError` for
malformed text or unknown user and group names.

## File modes

`posixacl.modes` provides `from_mode(mode)` for the minimal three-entry ACL
of a mode, `equiv_mode(acl)` returning the mode and whether the ACL is
equivalent to it, and `apply_mask_to_mode(mode, acl)`.

## Binary formats

`posixacl.xattr` encodes ACLs as extended-attribute values (`to_xattr`,
`from_xattr`, `ea_size`) and as a self-contained external byte string
(`copy_ext`, `copy_int`, `external_size`). The attribute names are
`EA_ACCESS` and `EA_DEFAULT`.

## What it does not do

This package works on ACLs in memory only. It does not read ACLs from
files or write them to files, does not copy permissions between files,
and installs no command-line programs. To apply an ACL, write the bytes
from `to_xattr` to the `EA_ACCESS` or `EA_DEFAULT` attribute yourself, for
example with `os.setxattr`.

## Running the tests

```
pip install -e ".[test]"
pytest
```