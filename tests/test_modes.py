import pytest

from posixacl.acl import Acl
from posixacl.checks import valid
from posixacl.entry import Perm, Tag
from posixacl.modes import apply_mask_to_mode, equiv_mode, from_mode


@pytest.mark.parametrize("mode", [0o000, 0o644, 0o755, 0o777, 0o4755, 0o1777])
def test_from_mode_round_trip(mode):
    acl = from_mode(mode)
    assert equiv_mode(acl) == (mode & 0o777, True)


def test_from_mode_structure():
    acl = from_mode(0o754)
    assert [e.tag for e in acl] == [Tag.USER_OBJ, Tag.GROUP_OBJ, Tag.OTHER]
    assert [e.perms for e in acl] == [
        Perm.READ | Perm.WRITE | Perm.EXECUTE,
        Perm.READ | Perm.EXECUTE,
        Perm.READ,
    ]
    assert valid(acl)


def test_extended_acl_not_equivalent_mask_gives_group_bits():
    acl = from_mode(0o750)
    acl.create_entry(Tag.USER, 1000, Perm.READ)
    acl.create_entry(Tag.MASK, perms=Perm.READ | Perm.WRITE)
    mode, equivalent = equiv_mode(acl)
    assert equivalent is False
    assert mode == 0o760


def test_named_group_without_mask_not_equivalent():
    acl = from_mode(0o640)
    acl.create_entry(Tag.GROUP, 100, Perm.READ)
    mode, equivalent = equiv_mode(acl)
    assert equivalent is False
    assert mode == 0o640


def test_undefined_entry_raises():
    acl = from_mode(0o600)
    acl.create_entry()
    with pytest.raises(ValueError):
        equiv_mode(acl)


def test_empty_acl():
    assert equiv_mode(Acl()) == (0, True)


@pytest.mark.parametrize("mode", [0o777, 0o640, 0o100755])
def test_apply_mask_minimal_acl_unchanged(mode):
    assert apply_mask_to_mode(mode, from_mode(0o000)) == mode


def test_apply_mask_restricts_group_bits():
    acl = from_mode(0o775)
    acl.create_entry(Tag.USER, 1000, Perm.READ | Perm.WRITE)
    acl.create_entry(Tag.MASK, perms=Perm.READ)
    result = apply_mask_to_mode(0o100775, acl)
    assert result & 0o070 == 0o040
    assert result & ~0o070 == 0o100775 & ~0o070


def test_apply_mask_full_mask_keeps_mode():
    acl = from_mode(0o770)
    acl.create_entry(Tag.GROUP, 5, Perm.WRITE)
    acl.create_entry(Tag.MASK, perms=Perm.READ | Perm.WRITE | Perm.EXECUTE)
    assert apply_mask_to_mode(0o770, acl) == 0o770


def test_apply_mask_without_mask_clears_group():
    acl = from_mode(0o777)
    acl.create_entry(Tag.USER, 1000, Perm.READ)
    result = apply_mask_to_mode(0o777, acl)
    assert result & 0o070 == 0
    assert result & 0o707 == 0o707


def test_apply_mask_agrees_with_equiv_mode():
    acl = from_mode(0o777)
    acl.create_entry(Tag.USER, 1000, Perm.READ)
    acl.create_entry(Tag.MASK, perms=Perm.READ | Perm.EXECUTE)
    mode, _ = equiv_mode(acl)
    assert apply_mask_to_mode(0o777, acl) == mode