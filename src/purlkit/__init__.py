"""Parse, validate, normalize and serialize package URLs (purls)."""

from .components import COMPONENTS, ComponentRules, normalize_components
from .ecosystems import TYPES, TypeRegistry, TypeRules, build_type_registry
from .errors import (
    DecodeError,
    EmptyForbidden,
    EmptyInput,
    ForbiddenAuthority,
    IllegalCharacter,
    IllegalQualifierKey,
    MalformedInput,
    MissingComponent,
    MissingName,
    MissingScheme,
    MissingType,
    PurlError,
    RequiredByType,
    RequiredField,
    TypeSpecificRule,
)
from .npm import NpmNameLookup, NpmNames, NpmRules, default_npm_names
from .package_url import PackageURL, compose
from .parser import parse_string
from .types import KnownQualifierNames, PurlDraft, RawComponents

__all__ = [
    # Entity
    "PackageURL",
    "compose",
    "parse_string",
    # Types
    "KnownQualifierNames",
    "PurlDraft",
    "RawComponents",
    # Component rules
    "COMPONENTS",
    "ComponentRules",
    "normalize_components",
    # Type rules
    "TYPES",
    "TypeRegistry",
    "TypeRules",
    "build_type_registry",
    # npm name lookup
    "NpmNameLookup",
    "NpmNames",
    "NpmRules",
    "default_npm_names",
    # Errors
    "PurlError",
    "MalformedInput",
    "EmptyInput",
    "MissingComponent",
    "MissingScheme",
    "MissingType",
    "MissingName",
    "ForbiddenAuthority",
    "DecodeError",
    "RequiredField",
    "RequiredByType",
    "EmptyForbidden",
    "IllegalCharacter",
    "IllegalQualifierKey",
    "TypeSpecificRule",
]
