import pytest

from posixacl.acl import Acl
from posixacl.entry import UNDEFINED_ID, Perm, Tag
from posixacl.modes import from_mode
from posixacl.text import TextOption, from_text, to_any_text, to_text


def _extended_acl():
    return from_text("u::rwx,u:1000:rwx,g::r-x,g:2000:rw-,m::r--,o::---")


def test_to_text_of_minimal_acl():
    assert to_text(from_mode(0o640)) == "user::rw-\ngroup::r--\nother::---\n"


def test_short_form_parses_like_mode():
    assert from_text("u::rw-,g::r--,o::---") == from_mode(0o640)


def test_abbreviated_output():
    text = to_any_text(from_mode(0o640), None, ",", TextOption.ABBREVIATE)
    assert text == "u::rw-,g::r--,o::---"


@pytest.mark.parametrize("mode", [0o000, 0o640, 0o755, 0o777, 0o421])
def test_round_trip_minimal(mode):
    acl = from_mode(mode)
    assert from_text(to_text(acl)) == acl


def test_round_trip_extended_with_effective_comments():
    acl = _extended_acl()
    assert from_text(to_text(acl)) == acl


def test_round_trip_abbreviated_numeric():
    acl = _extended_acl()
    options = TextOption.ABBREVIATE | TextOption.NUMERIC_IDS
    assert from_text(to_any_text(acl, None, ",", options)) == acl


def test_effective_rights_shown_when_masked():
    acl = from_text("u::rwx,u:1000:rwx,g::r--,m::r--,o::---")
    text = to_any_text(acl, None, "\n", TextOption.NUMERIC_IDS | TextOption.SOME_EFFECTIVE)
    assert "user:1000:rwx\t#effective:r--" in text.split("\n")


def test_some_effective_omits_unchanged_entries():
    acl = from_text("u::rwx,u:1000:rwx,g::r--,m::r--,o::---")
    lines = to_any_text(
        acl, None, "\n", TextOption.NUMERIC_IDS | TextOption.SOME_EFFECTIVE
    ).split("\n")
    assert sum("#effective:" in line for line in lines) == 1


def test_all_effective_on_every_group_class_entry():
    acl = _extended_acl()
    lines = to_any_text(
        acl, None, "\n", TextOption.NUMERIC_IDS | TextOption.ALL_EFFECTIVE
    ).split("\n")
    masked = sum(e.tag in (Tag.USER, Tag.GROUP_OBJ, Tag.GROUP) for e in acl)
    assert sum("#effective:" in line for line in lines) == masked


def test_no_effective_without_option():
    text = to_any_text(_extended_acl(), None, "\n", TextOption.NUMERIC_IDS)
    assert "#effective:" not in text


def test_prefix_on_every_entry():
    acl = _extended_acl()
    lines = to_any_text(acl, "default:", "\n", TextOption.NUMERIC_IDS).split("\n")
    assert len(lines) == len(acl)
    assert all(line.startswith("default:") for line in lines)


def test_empty_acl_gives_empty_text():
    assert to_text(Acl()) == ""


def test_numeric_qualifier_parsed():
    acl = from_text("u::rw-,u:1000:r--,g::r--,m::r--,o::---")
    users = [e for e in acl if e.tag == Tag.USER]
    assert [e.qualifier for e in users] == [1000]
    assert users[0].perms == Perm.READ


def test_hex_qualifier_parsed():
    acl = from_text("g:0x10:rw-")
    assert [(e.tag, e.qualifier) for e in acl] == [(Tag.GROUP, 16)]


def test_unqualified_entries_have_undefined_id():
    acl = from_text("user::rwx group::r-x other::r--")
    assert all(e.qualifier == UNDEFINED_ID for e in acl)
    assert acl == from_mode(0o754)


def test_entries_sorted_canonically():
    acl = from_text("o::---,g::r--,u:2000:rw-,u::rwx,u:1000:r--,m::rw-")
    keys = [e.sort_key() for e in acl]
    assert keys == sorted(keys)


def test_solaris_style_mask_and_other():
    assert from_text("u::rw-,g::r--,m:r--,o:---") == from_text("u::rw-,g::r--,m::r--,o::---")


def test_root_by_name():
    acl = from_text("u:root:r--")
    assert [e.qualifier for e in acl] == [0]


@pytest.mark.parametrize(
    "text",
    ["bogus", "x::rwx", "u::", "u::rrw", "u::rwxw", "g::ww-", "o::q"],
)
def test_invalid_text_raises(text):
    with pytest.raises(ValueError):
        from_text(text)


def test_unknown_user_raises():
    with pytest.raises(ValueError):
        from_text("u:no_such_user_for_acl_tests:rwx")


def test_non_string_raises():
    with pytest.raises(TypeError):
        from_text(None)