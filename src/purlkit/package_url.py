"""The PackageURL value type.

A purl identifies a software package across ecosystems:
``pkg:type/namespace/name@version?qualifiers#subpath``.
See https://github.com/package-url/purl-spec

Construction runs one linear pipeline: generic normalize, generic validate,
type normalize, type validate. Any failure raises a ``PurlError`` and no
instance is created.
"""

from collections.abc import Mapping
from dataclasses import InitVar, dataclass
from types import MappingProxyType
from typing import ClassVar

from .components import (
    COMPONENTS,
    encode_name,
    encode_namespace,
    encode_qualifiers,
    encode_subpath,
    encode_type,
    encode_version,
    normalize_components,
)
from .ecosystems import TYPES, TypeRegistry
from .errors import EmptyInput, PurlError
from .parser import parse_string
from .strings import is_blank
from .types import KnownQualifierNames, RawComponents


def compose(type, namespace, name, version=None, qualifiers=None, subpath=None) -> str:
    """Assemble canonical components into a purl string.

    No validation happens here: the components must already be in canonical
    form, as they are on a ``PackageURL``.
    """
    purl = f"pkg:{encode_type(type)}/"
    if namespace:
        purl += f"{encode_namespace(namespace)}/"
    purl += encode_name(name)
    if version:
        purl += f"@{encode_version(version)}"
    if qualifiers:
        purl += f"?{encode_qualifiers(qualifiers)}"
    if subpath:
        purl += f"#{encode_subpath(subpath)}"
    return purl


@dataclass(frozen=True)
class PackageURL:
    """An immutable, canonical package URL.

    Arguments are decoded values; ``qualifiers`` may also be an encoded
    ``k=v&k=v`` query string. ``registry`` selects the type rules (defaults
    to ``TYPES``) and is how an npm name lookup is injected.

    Example:
        >>> PackageURL("pypi", None, "Django_Package", "1.11.1").to_string()
        'pkg:pypi/django-package@1.11.1'
    """

    type: str | None = None
    namespace: str | None = None
    name: str | None = None
    version: str | None = None
    qualifiers: Mapping[str, str] | str | None = None
    subpath: str | None = None
    registry: InitVar[TypeRegistry | None] = None

    KnownQualifierNames: ClassVar = KnownQualifierNames
    Component: ClassVar = COMPONENTS
    Type: ClassVar = TYPES

    def __post_init__(self, registry):
        draft = normalize_components(
            self.type,
            self.namespace,
            self.name,
            self.version,
            self.qualifiers,
            self.subpath,
        )
        draft = (registry if registry is not None else TYPES).apply(draft)
        _set_fields(self, vars(draft))

    def __reduce__(self):
        # Restores the canonical fields without re-running the type rules.
        return _restore, (self.to_dict(),)

    def __hash__(self):
        return hash(self.to_string())

    def __str__(self):
        return self.to_string()

    def to_string(self) -> str:
        """Return the canonical purl string."""
        return compose(
            self.type,
            self.namespace,
            self.name,
            self.version,
            self.qualifiers,
            self.subpath,
        )

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "namespace": self.namespace,
            "name": self.name,
            "version": self.version,
            "qualifiers": dict(self.qualifiers) if self.qualifiers else None,
            "subpath": self.subpath,
        }

    @classmethod
    def from_string(cls, purl: str, registry: TypeRegistry | None = None) -> "PackageURL":
        """Parse and validate a purl string.

        Raises:
            EmptyInput: ``purl`` is blank.
            PurlError: any other grammar, decoding or validation failure.
        """
        if isinstance(purl, str) and is_blank(purl):
            raise EmptyInput()
        return cls(*parse_string(purl), registry=registry)

    @staticmethod
    def parse_string(purl: str) -> RawComponents:
        """Decompose ``purl`` without normalizing or validating it."""
        return parse_string(purl)

    @classmethod
    def is_valid(cls, purl: str, registry: TypeRegistry | None = None) -> bool:
        """True if ``purl`` parses into a valid PackageURL."""
        try:
            cls.from_string(purl, registry=registry)
        except PurlError:
            return False
        return True


def _set_fields(purl: PackageURL, fields: Mapping) -> None:
    object.__setattr__(purl, "type", fields["type"])
    object.__setattr__(purl, "namespace", fields["namespace"] or None)
    object.__setattr__(purl, "name", fields["name"])
    object.__setattr__(purl, "version", fields["version"] or None)
    qualifiers = fields["qualifiers"]
    object.__setattr__(
        purl,
        "qualifiers",
        MappingProxyType(dict(sorted(qualifiers.items()))) if qualifiers else None,
    )
    object.__setattr__(purl, "subpath", fields["subpath"] or None)


def _restore(fields: dict) -> PackageURL:
    """Unpickle a PackageURL from its canonical fields."""
    purl = object.__new__(PackageURL)
    _set_fields(purl, fields)
    return purl
