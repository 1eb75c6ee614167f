"""Generic rules applied to each purl component regardless of package type.

Rules for each component:
https://github.com/package-url/purl-spec/blob/master/PURL-SPECIFICATION.rst#rules-for-each-purl-component

Normalizers take already-decoded values and return ``None`` for an absent
component. Validators take a ``throws`` flag: when true they raise a
``PurlError``, otherwise they return ``False`` on failure.
"""

import re
from collections.abc import Callable, Iterable, Mapping, Set
from dataclasses import dataclass
from types import MappingProxyType

from .codec import encode_component, parse_qualifier_string
from .errors import (
    IllegalCharacter,
    IllegalQualifierKey,
    MalformedInput,
    RequiredField,
    reject,
)
from .strings import is_blank, is_utf8_encodable, normalize_path, starts_with_digit
from .types import COMPONENT_NAMES, PurlDraft

TYPE_CHARSET = re.compile(r"^[A-Za-z0-9.+-]*$")
QUALIFIER_KEY_CHARSET = re.compile(r"^[A-Za-z0-9._-]*$")
QUALIFIERS_TYPE_MESSAGE = '"qualifiers" must be a mapping, (key, value) pairs or a query string'


# =============================================================================
# Normalize
# =============================================================================


def normalize_type(raw) -> str | None:
    # The type is case insensitive; the canonical form is lowercase.
    return raw.strip().lower() if isinstance(raw, str) else None


def normalize_namespace(raw) -> str | None:
    if not isinstance(raw, str):
        return None
    return normalize_path(raw, drop=lambda segment: segment == ".") or None


def normalize_name(raw) -> str | None:
    return raw.strip() if isinstance(raw, str) else None


def normalize_version(raw) -> str | None:
    if not isinstance(raw, str):
        return None
    return raw.strip() or None


def normalize_qualifiers(raw) -> dict[str, str] | None:
    """Normalize qualifiers given as a mapping, ``(key, value)`` pairs or a query string.

    Values are trimmed and pairs with an empty value are dropped: a key with
    an empty value is the same as no key at all. Keys are validated and
    lowercased.
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        entries = parse_qualifier_string(raw).items()
    elif isinstance(raw, Mapping):
        entries = raw.items()
    elif isinstance(raw, Iterable) and not isinstance(raw, (bytes, bytearray, Set)):
        entries = list(raw)
        if not all(isinstance(entry, (tuple, list)) and len(entry) == 2 for entry in entries):
            raise MalformedInput(QUALIFIERS_TYPE_MESSAGE)
    else:
        raise MalformedInput(QUALIFIERS_TYPE_MESSAGE)

    qualifiers: dict[str, str] = {}
    for key, value in entries:
        if value is None:
            continue
        trimmed = (value if isinstance(value, str) else str(value)).strip()
        if not trimmed:
            continue
        validate_qualifier_key(key, throws=True)
        validate_strings("qualifiers", trimmed)
        qualifiers[key.lower()] = trimmed
    return qualifiers or None


def _is_dot_segment(segment: str) -> bool:
    return segment == "." or is_blank(segment)


def normalize_subpath(raw) -> str | None:
    if not isinstance(raw, str):
        return None
    return normalize_path(raw, drop=_is_dot_segment, resolve_parent=True) or None


# =============================================================================
# Validate
# =============================================================================


def validate_strings(component: str, value, throws: bool = True) -> bool:
    if value is None:
        return True
    if not isinstance(value, str):
        return reject(MalformedInput(f'"{component}" must be a string'), throws)
    # Lone surrogates cannot be percent-encoded.
    if not is_utf8_encodable(value):
        return reject(MalformedInput(f'"{component}" must be valid Unicode text'), throws)
    return True


def validate_required(component: str, value, throws: bool = True) -> bool:
    if value is None or value == "":
        return reject(RequiredField(component), throws)
    return True


def validate_starts_without_number(component: str, value: str, throws: bool = True) -> bool:
    if starts_with_digit(value):
        return reject(
            IllegalCharacter(component, value, "cannot start with a number"), throws
        )
    return True


def validate_type(type, throws: bool = True) -> bool:
    if not (
        validate_required("type", type, throws)
        and validate_strings("type", type, throws)
        and validate_starts_without_number("type", type, throws)
    ):
        return False
    # ASCII letters and numbers, '.', '+' and '-'.
    if not TYPE_CHARSET.match(type):
        return reject(IllegalCharacter("type", type), throws)
    return True


def validate_namespace(namespace, throws: bool = True) -> bool:
    return validate_strings("namespace", namespace, throws)


def validate_name(name, throws: bool = True) -> bool:
    return validate_strings("name", name, throws) and validate_required(
        "name", name, throws
    )


def validate_version(version, throws: bool = True) -> bool:
    return validate_strings("version", version, throws)


def validate_qualifier_key(key, throws: bool = True) -> bool:
    if not isinstance(key, str):
        return reject(MalformedInput("qualifier keys must be strings"), throws)
    if not key:
        return reject(IllegalQualifierKey(key, "cannot be empty"), throws)
    if starts_with_digit(key):
        return reject(IllegalQualifierKey(key, "cannot start with a number"), throws)
    # ASCII letters and numbers, '.', '-' and '_'.
    if not QUALIFIER_KEY_CHARSET.match(key):
        return reject(IllegalQualifierKey(key), throws)
    return True


def validate_qualifiers(qualifiers, throws: bool = True) -> bool:
    if qualifiers is None:
        return True
    if not isinstance(qualifiers, Mapping):
        return reject(MalformedInput('"qualifiers" must be a mapping'), throws)
    return all(validate_qualifier_key(key, throws) for key in qualifiers)


def validate_subpath(subpath, throws: bool = True) -> bool:
    return validate_strings("subpath", subpath, throws)


# =============================================================================
# Encode
# =============================================================================


def encode_type(type) -> str:
    return encode_component(type) if type else ""


def encode_namespace(namespace) -> str:
    return encode_component(namespace, safe=":/") if namespace else ""


def encode_name(name) -> str:
    return encode_component(name, safe=":") if name else ""


def encode_version(version) -> str:
    return encode_component(version, safe=":+") if version else ""


def encode_qualifier_value(value) -> str:
    return encode_component(value, safe=":/") if value else ""


def encode_qualifiers(qualifiers) -> str:
    """Encode qualifiers as ``k=v&k=v`` with keys in lexicographic order."""
    if not qualifiers:
        return ""
    return "&".join(
        f"{encode_component(key)}={encode_qualifier_value(qualifiers[key])}"
        for key in sorted(qualifiers)
    )


def encode_subpath(subpath) -> str:
    return encode_component(subpath, safe="/") if subpath else ""


# =============================================================================
# Component table
# =============================================================================


def _identity(value):
    return value


def _always_valid(value, throws: bool = True) -> bool:
    return True


@dataclass(frozen=True)
class ComponentRules:
    """The encode/normalize/validate functions for one component."""

    encode: Callable[[object], str] = encode_component
    normalize: Callable[[object], object] = _identity
    validate: Callable[..., bool] = _always_valid


COMPONENTS: Mapping[str, ComponentRules] = MappingProxyType({
    "type": ComponentRules(encode_type, normalize_type, validate_type),
    "namespace": ComponentRules(encode_namespace, normalize_namespace, validate_namespace),
    "name": ComponentRules(encode_name, normalize_name, validate_name),
    "version": ComponentRules(encode_version, normalize_version, validate_version),
    "qualifiers": ComponentRules(encode_qualifiers, normalize_qualifiers, validate_qualifiers),
    "qualifier_key": ComponentRules(encode_component, _identity, validate_qualifier_key),
    "qualifier_value": ComponentRules(encode_qualifier_value, _identity, _always_valid),
    "subpath": ComponentRules(encode_subpath, normalize_subpath, validate_subpath),
})


def normalize_components(
    type,
    namespace,
    name,
    version=None,
    qualifiers=None,
    subpath=None,
) -> PurlDraft:
    """Run generic normalization then generic validation over all six components.

    Returns a draft ready for the type-specific rules. Raises ``PurlError``
    on the first failure.
    """
    raw = dict(zip(COMPONENT_NAMES, (type, namespace, name, version, qualifiers, subpath)))
    for component, value in raw.items():
        # Qualifiers may also be a mapping or pairs.
        if component != "qualifiers":
            validate_strings(component, value)

    normalized = {
        component: COMPONENTS[component].normalize(value)
        for component, value in raw.items()
    }
    for component, value in normalized.items():
        COMPONENTS[component].validate(value, True)

    return PurlDraft(**normalized)
