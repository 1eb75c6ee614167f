"""Tests for generic component rules, string helpers and the error taxonomy."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from purlkit import (
    COMPONENTS,
    DecodeError,
    EmptyForbidden,
    EmptyInput,
    IllegalCharacter,
    IllegalQualifierKey,
    MalformedInput,
    MissingComponent,
    MissingType,
    PurlDraft,
    PurlError,
    RequiredByType,
    RequiredField,
    TypeSpecificRule,
    normalize_components,
)
from purlkit.components import (
    encode_name,
    encode_namespace,
    encode_qualifiers,
    encode_subpath,
    encode_type,
    encode_version,
    normalize_name,
    normalize_namespace,
    normalize_qualifiers,
    normalize_subpath,
    normalize_type,
    normalize_version,
    validate_qualifier_key,
    validate_qualifiers,
    validate_type,
    validate_strings,
)
from purlkit.errors import format_message, reject
from purlkit.strings import (
    is_blank,
    is_semver,
    is_utf8_encodable,
    normalize_path,
    starts_with_digit,
)

# =============================================================================
# Normalize
# =============================================================================


@pytest.mark.parametrize(
    "raw,expected",
    [(" NPM ", "npm"), ("Maven", "maven"), (None, None)],
)
def test_normalize_type(raw, expected):
    assert normalize_type(raw) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("a//b/", "a/b"),
        ("/./a/", "a"),
        ("Org/Sub", "Org/Sub"),
        ("", None),
        ("/", None),
        (None, None),
    ],
)
def test_normalize_namespace(raw, expected):
    assert normalize_namespace(raw) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("./a/../b/", "b"),
        ("../a", "a"),
        ("a/ /b", "a/b"),
        ("a/b/../../c", "c"),
        ("a/..", None),
        ("/", None),
        (None, None),
    ],
)
def test_normalize_subpath(raw, expected):
    assert normalize_subpath(raw) == expected


def test_normalize_name_and_version():
    assert normalize_name(" foo ") == "foo"
    assert normalize_version(" 1.0 ") == "1.0"
    assert normalize_version("  ") is None
    assert normalize_version(None) is None


def test_normalize_qualifiers():
    assert normalize_qualifiers({"Arch": " x86 ", "empty": "", "none": None}) == {"arch": "x86"}
    assert normalize_qualifiers("B=1&a=2") == {"b": "1", "a": "2"}
    assert normalize_qualifiers({}) is None
    assert normalize_qualifiers(None) is None


def test_normalize_qualifiers_skips_key_check_for_empty_values():
    assert normalize_qualifiers({"1bad": ""}) is None


@pytest.mark.parametrize(
    "raw",
    [{"ab"}, frozenset({"ab"}), ["ab"], [("a", "b", "c")], [["a"]], b"a=b", bytearray(b"a=b")],
    ids=["set", "frozenset", "bare_string_entry", "triple", "single", "bytes", "bytearray"],
)
def test_normalize_qualifiers_rejects_non_pair_entries(raw):
    with pytest.raises(MalformedInput):
        normalize_qualifiers(raw)


def test_normalize_qualifiers_accepts_list_pairs_and_generators():
    assert normalize_qualifiers([["a", "1"]]) == {"a": "1"}
    assert normalize_qualifiers((k, v) for k, v in [("B", "2")]) == {"b": "2"}


def test_normalize_qualifiers_rejects_surrogate_values():
    with pytest.raises(MalformedInput):
        normalize_qualifiers({"a": "x\udc80"})


# =============================================================================
# Validate
# =============================================================================


@pytest.mark.parametrize(
    "value,valid",
    [
        ("npm", True),
        ("c++", True),
        ("a.b-c", True),
        ("1abc", False),
        ("np m", False),
        ("np_m", False),
        ("", False),
        (None, False),
        (5, False),
    ],
)
def test_validate_type(value, valid):
    assert validate_type(value, throws=False) is valid


@pytest.mark.parametrize(
    "value,error",
    [
        ("1abc", IllegalCharacter),
        ("np m", IllegalCharacter),
        (None, RequiredField),
        (5, MalformedInput),
    ],
)
def test_validate_type_raises(value, error):
    with pytest.raises(error):
        validate_type(value)


@pytest.mark.parametrize(
    "key,valid",
    [
        ("repository_url", True),
        ("a.b-c_d", True),
        ("Key", True),
        ("", False),
        ("1key", False),
        ("in production", False),
        ("a/b", False),
        (1, False),
    ],
)
def test_validate_qualifier_key(key, valid):
    assert validate_qualifier_key(key, throws=False) is valid


def test_validate_qualifier_key_error():
    with pytest.raises(IllegalQualifierKey) as exc_info:
        validate_qualifier_key("1key")

    assert isinstance(exc_info.value, IllegalCharacter)
    assert exc_info.value.component == "qualifier"
    assert exc_info.value.value == "1key"
    assert "cannot start with a number" in str(exc_info.value)


def test_validate_qualifiers():
    assert validate_qualifiers(None) is True
    assert validate_qualifiers({"a": "1"}) is True
    assert validate_qualifiers({"a b": "1"}, throws=False) is False
    assert validate_qualifiers("a=1", throws=False) is False


@pytest.mark.parametrize(
    "value,valid",
    [
        (None, True),
        ("caf\u00e9", True),
        ("\U0001f600", True),
        ("\ud800", False),
        ("a\udfffb", False),
        (b"bytes", False),
        (1, False),
    ],
    ids=["none", "latin", "astral", "high_surrogate", "low_surrogate", "bytes", "int"],
)
def test_validate_strings(value, valid):
    assert validate_strings("name", value, throws=False) is valid


def test_validate_strings_rejects_lone_surrogate():
    with pytest.raises(MalformedInput, match="valid Unicode"):
        validate_strings("namespace", "ns\ud800")


# =============================================================================
# Encode
# =============================================================================


def test_encoders_preserve_component_specific_characters():
    assert encode_type("c++") == "c%2B%2B"
    assert encode_namespace("a:b/c d") == "a:b/c%20d"
    assert encode_name("a/b:c+d") == "a%2Fb:c%2Bd"
    assert encode_version("1:2+3 4") == "1:2+3%204"
    assert encode_subpath("a/b:c") == "a/b%3Ac"


def test_encoders_return_empty_for_absent():
    for encode in (encode_type, encode_namespace, encode_name, encode_version, encode_subpath):
        assert encode(None) == ""
    assert encode_qualifiers(None) == ""


def test_encode_qualifiers_sorts_and_encodes():
    qualifiers = {"b": "x/y:z", "a": "1 2", "c": "p+q&r=s"}
    assert encode_qualifiers(qualifiers) == "a=1%202&b=x/y:z&c=p%2Bq%26r%3Ds"


def test_component_table():
    assert set(COMPONENTS) == {
        "type",
        "namespace",
        "name",
        "version",
        "qualifiers",
        "qualifier_key",
        "qualifier_value",
        "subpath",
    }
    assert COMPONENTS["qualifier_value"].encode("a/b c") == "a/b%20c"
    assert COMPONENTS["qualifier_key"].validate("ok", False) is True


# =============================================================================
# normalize_components
# =============================================================================


def test_normalize_components_returns_draft():
    draft = normalize_components(" PyPI ", "//", " Foo ", " 1.0 ", {"A": "b"}, "/x/")
    assert draft == PurlDraft(
        type="pypi",
        namespace=None,
        name="Foo",
        version="1.0",
        qualifiers={"a": "b"},
        subpath="x",
    )


def test_normalize_components_rejects_blank_name():
    with pytest.raises(RequiredField):
        normalize_components("generic", None, "   ")


def test_normalize_components_rejects_non_strings():
    with pytest.raises(MalformedInput):
        normalize_components("generic", ["a"], "x")


# =============================================================================
# String helpers
# =============================================================================


@pytest.mark.parametrize(
    "value,expected",
    [("", True), ("  \t", True), ("a", False), (" a ", False)],
)
def test_is_blank(value, expected):
    assert is_blank(value) is expected


@pytest.mark.parametrize(
    "value,expected",
    [
        ("1.0.0", True),
        ("1.0.0-alpha.1+build.5", True),
        ("0.0.0-20191109021931-daa7c04131f5", True),
        ("1.0", False),
        ("01.0.0", False),
        ("1.0.0-", False),
        (None, False),
    ],
)
def test_is_semver(value, expected):
    assert is_semver(value) is expected


def test_starts_with_digit():
    assert starts_with_digit("1a")
    assert not starts_with_digit("a1")
    assert not starts_with_digit("")


def test_is_utf8_encodable():
    assert is_utf8_encodable("\u00fc\U0001f600")
    assert not is_utf8_encodable("\udc80")


def test_normalize_path_is_bounded(monkeypatch):
    monkeypatch.setattr("purlkit.strings.LOOP_SENTINEL", 3)
    with pytest.raises(MalformedInput):
        normalize_path("a/b/c/d")


# =============================================================================
# Errors
# =============================================================================


@pytest.mark.parametrize(
    "message,expected",
    [
        ("Bad thing.", "Invalid purl: bad thing"),
        ("URL is bad", "Invalid purl: URL is bad"),
        ("trailing dots..", "Invalid purl: trailing dots.."),
    ],
)
def test_format_message(message, expected):
    assert format_message(message) == expected


def test_reject():
    error = RequiredField("name")
    assert reject(error, throws=False) is False
    with pytest.raises(RequiredField):
        reject(error, throws=True)


def test_error_hierarchy():
    assert issubclass(PurlError, ValueError)
    assert issubclass(EmptyInput, MalformedInput)
    assert issubclass(MissingType, MissingComponent)
    assert issubclass(RequiredByType, RequiredField)
    assert issubclass(RequiredByType, TypeSpecificRule)
    assert issubclass(EmptyForbidden, TypeSpecificRule)
    assert issubclass(IllegalQualifierKey, IllegalCharacter)


def test_error_attributes_and_messages():
    assert str(MissingType()) == 'Invalid purl: purl is missing the required "type" component'
    assert str(EmptyInput()) == "Invalid purl: a non-empty purl string is required"

    decode = DecodeError("name", "%zz")
    assert (decode.component, decode.value) == ("name", "%zz")

    forbidden = EmptyForbidden("namespace", "oci")
    assert (forbidden.component, forbidden.type) == ("namespace", "oci")
    assert str(forbidden) == 'Invalid purl: oci "namespace" component must be empty'

    required = RequiredByType("maven", "namespace")
    assert str(required) == 'Invalid purl: maven requires a "namespace" component'

    illegal = IllegalCharacter("name", "A!", "is bad", "pub")
    assert str(illegal) == 'Invalid purl: pub name "A!" is bad'
