"""Purl data types shared across the pipeline."""

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

COMPONENT_NAMES = ("type", "namespace", "name", "version", "qualifiers", "subpath")


class KnownQualifierNames(str, Enum):
    """Qualifier keys with a meaning shared by all package types.

    See https://github.com/package-url/purl-spec/blob/master/PURL-SPECIFICATION.rst#known-qualifiers-keyvalue-pairs
    """

    REPOSITORY_URL = "repository_url"
    DOWNLOAD_URL = "download_url"
    VCS_URL = "vcs_url"
    FILE_NAME = "file_name"
    CHECKSUM = "checksum"


class RawComponents(NamedTuple):
    """The six decoded but not yet normalized components of a purl string."""

    type: str | None = None
    namespace: str | None = None
    name: str | None = None
    version: str | None = None
    qualifiers: dict[str, str] | None = None
    subpath: str | None = None


@dataclass
class PurlDraft:
    """Mutable component set that type rules normalize in place.

    Only lives while a PackageURL is being built. Generic normalization has
    already run when a draft is handed to a type rule.
    """

    type: str
    name: str
    namespace: str | None = None
    version: str | None = None
    qualifiers: dict[str, str] | None = None
    subpath: str | None = None
