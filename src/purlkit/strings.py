"""String helpers shared by the component and type rules."""

import re

from .errors import MalformedInput

# Upper bound on iterations of any scanning loop over untrusted input.
LOOP_SENTINEL = 1_000_000

# SemVer 2.0.0 with numbered groups (https://semver.org).
SEMVER_PATTERN = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


def is_blank(value: str) -> bool:
    """True if ``value`` is empty or whitespace only."""
    return not value or value.isspace()


def is_semver(value) -> bool:
    return isinstance(value, str) and SEMVER_PATTERN.match(value) is not None


def is_utf8_encodable(value: str) -> bool:
    """False for strings holding lone surrogates."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def starts_with_digit(value: str) -> bool:
    return bool(value) and "0" <= value[0] <= "9"


def normalize_path(pathname: str, drop=None, resolve_parent: bool = False) -> str:
    """Collapse a ``/``-separated path into its canonical form.

    Leading, trailing and repeated slashes are removed. Segments for which
    ``drop(segment)`` is true are discarded. With ``resolve_parent``, a
    ``..`` segment removes the previously kept segment.
    """
    segments = pathname.split("/")
    if len(segments) > LOOP_SENTINEL:
        raise MalformedInput(f"path has more than {LOOP_SENTINEL} segments")

    kept: list[str] = []
    for segment in segments:
        if not segment:
            continue
        if resolve_parent and segment == "..":
            if kept:
                kept.pop()
            continue
        if drop is not None and drop(segment):
            continue
        kept.append(segment)
    return "/".join(kept)


def replace_underscores_with_dashes(value: str) -> str:
    return value.replace("_", "-")


def replace_dashes_with_underscores(value: str) -> str:
    return value.replace("-", "_")
