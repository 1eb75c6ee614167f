"""Percent-encoding primitives.

Encoding follows ECMAScript ``encodeURIComponent``: besides ASCII letters,
digits and ``-_.~``, the characters ``!'()*`` stay unescaped. Each component
adds its own exceptions on top (``:``, ``/``, ``+``).

Decoding is strict: a ``%`` that does not start a two-digit hex escape, or
escapes that do not form valid UTF-8, raise ``DecodeError``.
"""

import re
from urllib.parse import quote, unquote

from .errors import DecodeError

UNRESERVED_EXTRA = "!'()*"

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def encode_component(value: str, safe: str = "") -> str:
    """Percent-encode ``value``, leaving the characters in ``safe`` as-is."""
    return quote(value, safe=UNRESERVED_EXTRA + safe)


def decode_component(value: str, component: str) -> str:
    """Percent-decode ``value`` or raise ``DecodeError`` for ``component``."""
    if "%" not in value:
        return value
    if _BAD_ESCAPE.search(value):
        raise DecodeError(component, value)
    try:
        return unquote(value, errors="strict")
    except UnicodeError as exc:
        raise DecodeError(component, value) from exc


def parse_qualifier_string(query: str) -> dict[str, str]:
    """Split an encoded ``k=v&k=v`` query string into a decoded dict.

    Keys keep their case and empty values are kept; normalization lowercases
    keys and drops empty values. Later duplicates win. ``+`` is a literal
    plus sign, not a space.
    """
    qualifiers: dict[str, str] = {}
    for pair in query.split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        qualifiers[decode_component(key, "qualifiers")] = decode_component(
            value, "qualifiers"
        )
    return qualifiers
