"""Purl decomposer - splits a purl string into its six raw components.

How to parse a purl string into its components:
https://github.com/package-url/purl-spec/blob/master/PURL-SPECIFICATION.rst#how-to-parse-a-purl-string-in-its-components

The scheme is split off by hand, then parsimonious parses the remainder
into type, path, query and fragment. The path is split into namespace,
name and version here, and every piece is percent-decoded exactly once.
"""

import logging

from parsimonious.exceptions import ParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

from .codec import decode_component, parse_qualifier_string
from .errors import (
    ForbiddenAuthority,
    MalformedInput,
    MissingName,
    MissingScheme,
    MissingType,
)
from .strings import LOOP_SENTINEL
from .types import RawComponents

logger = logging.getLogger(__name__)

SCHEME = "pkg"

# =============================================================================
# PEG Grammar (remainder after "pkg:" and any leading slashes)
# =============================================================================

GRAMMAR = Grammar(r"""
remainder       = userinfo? type_segment "/" path query? fragment?
userinfo        = ~"[^/?#@]*@"
type_segment    = ~"[^/?#@]+"
path            = ~"[^?#]*"
query           = "?" ~"[^#]*"
fragment        = "#" ~"[\\s\\S]*"
""")


# =============================================================================
# Helpers to extract values from parse tree
# =============================================================================


def _get_text(node_or_list):
    """Extract text from a node or nested list structure."""
    if isinstance(node_or_list, Node):
        return node_or_list.text
    if isinstance(node_or_list, str):
        return node_or_list
    if isinstance(node_or_list, list):
        return "".join(_get_text(x) for x in node_or_list if x)
    raise TypeError(f"Unexpected type in parse tree: {type(node_or_list).__name__}")


def _is_empty(visited):
    """Check if visited children represent an empty/optional match."""
    assert visited is not None, "unexpected None in parse tree"
    if isinstance(visited, Node):
        return visited.text == ""
    if isinstance(visited, list):
        return len(visited) == 0 or all(_is_empty(x) for x in visited)
    return visited == ""


def _optional(visited) -> str | None:
    """Text of an optional match, None when absent or empty."""
    if _is_empty(visited):
        return None
    return _get_text(visited) or None


# =============================================================================
# Visitor - transforms parse tree to a dict of raw (still encoded) parts
# =============================================================================


class PurlVisitor(NodeVisitor):
    """Visits the remainder parse tree and extracts its parts."""

    def visit_remainder(self, node, visited_children):
        # userinfo? type_segment "/" path query? fragment?
        userinfo, type_segment, _, path, query, fragment = visited_children
        return {
            "userinfo": _optional(userinfo),
            "type": type_segment,
            "path": path,
            "query": _optional(query),
            "fragment": _optional(fragment),
        }

    def visit_userinfo(self, node, visited_children):
        return node.text

    def visit_type_segment(self, node, visited_children):
        return node.text

    def visit_path(self, node, visited_children):
        return node.text

    def visit_query(self, node, visited_children):
        return node.text[1:]  # Remove leading "?"

    def visit_fragment(self, node, visited_children):
        return node.text[1:]  # Remove leading "#"

    def generic_visit(self, node, visited_children):
        return visited_children or node


# =============================================================================
# Path splitting
# =============================================================================


def find_version_delimiter(path: str) -> int:
    """Index of the ``@`` separating name and version, or -1.

    This is the last ``@`` that does not start a path segment: a segment
    starting with ``@`` (an npm scope) is never mistaken for a version.
    """
    index = path.rfind("@")
    iterations = 0
    while index != -1 and (index == 0 or path[index - 1] == "/"):
        iterations += 1
        if iterations > LOOP_SENTINEL:
            raise MalformedInput("too many '@' characters in purl path")
        index = path.rfind("@", 0, index)
    return index


def split_path(path: str) -> tuple[str | None, str, str | None]:
    """Split an encoded path into encoded (namespace, name, version)."""
    at_index = find_version_delimiter(path)
    if at_index == -1:
        before_version, version = path, None
    else:
        before_version, version = path[:at_index], path[at_index + 1:]

    namespace, slash, name = before_version.rpartition("/")
    return (namespace if slash else None), name, version


# =============================================================================
# Public API
# =============================================================================


def parse_string(purl_str: str) -> RawComponents:
    """Decompose a purl string into its six decoded, unnormalized components.

    A blank string yields all-``None`` components rather than an error.
    Absent or empty components are ``None``.

    Raises:
        MalformedInput: not a string, or the remainder does not parse.
        MissingScheme / MissingType / MissingName: required part absent.
        ForbiddenAuthority: a ``user:pass@`` authority is present.
        DecodeError: a component is not validly percent-encoded.
    """
    if not isinstance(purl_str, str):
        raise MalformedInput("a purl string argument is required")

    text = purl_str.strip()
    if not text:
        return RawComponents()

    # The scheme is the lowercased left side of the first ':'.
    scheme, colon, after_scheme = text.partition(":")
    if not colon or scheme.lower() != SCHEME:
        raise MissingScheme()

    # purls have no authority, but "pkg://" and "pkg:///" must be accepted.
    remainder = after_scheme.lstrip("/")
    # The type ends at the first "/"; a "?" or "#" before it leaves no type.
    delimiters = [i for i in (remainder.find(c) for c in "/?#") if i != -1]
    type_end = min(delimiters, default=-1)
    if type_end < 1 or remainder[type_end] != "/":
        raise MissingType()

    try:
        tree = GRAMMAR.parse(remainder)
    except ParseError as exc:
        raise MalformedInput(f"cannot parse {text!r}") from exc
    parts = PurlVisitor().visit(tree)

    if parts["userinfo"] is not None:
        raise ForbiddenAuthority()

    namespace, name, version = split_path(parts["path"])
    if not name:
        raise MissingName()

    raw = RawComponents(
        type=decode_component(parts["type"], "type"),
        namespace=decode_component(namespace, "namespace") or None if namespace else None,
        name=decode_component(name, "name"),
        version=decode_component(version, "version") or None if version else None,
        qualifiers=parse_qualifier_string(parts["query"]) or None if parts["query"] else None,
        subpath=decode_component(parts["fragment"], "subpath") if parts["fragment"] else None,
    )
    logger.debug("Decomposed %r into %r", text, raw)
    return raw
