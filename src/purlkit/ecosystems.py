"""Package-type specific normalize and validate rules.

PURL types: https://github.com/package-url/purl-spec/blob/master/PURL-TYPES.rst

Type rules run after generic normalization and validation. For each type,
``normalize`` runs before ``validate`` so validators see case-folded data.
Types without an entry are valid purls with no extra processing.
"""

import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass

from .errors import (
    EmptyForbidden,
    IllegalCharacter,
    RequiredByType,
    TypeSpecificRule,
    reject,
)
from .npm import NpmNameLookup, NpmRules
from .strings import (
    is_semver,
    replace_dashes_with_underscores,
    replace_underscores_with_dashes,
)
from .types import PurlDraft

logger = logging.getLogger(__name__)

Normalizer = Callable[[PurlDraft], PurlDraft]
Validator = Callable[..., bool]


def _identity(purl: PurlDraft) -> PurlDraft:
    return purl


def _always_valid(purl, throws: bool = True) -> bool:
    return True


@dataclass(frozen=True)
class TypeRules:
    """The normalize/validate pair for one package type."""

    normalize: Normalizer = _identity
    validate: Validator = _always_valid


PASSTHROUGH = TypeRules()


# =============================================================================
# Shared helpers
# =============================================================================


def lower_namespace(purl: PurlDraft) -> None:
    if purl.namespace is not None:
        purl.namespace = purl.namespace.lower()


def lower_name(purl: PurlDraft) -> None:
    purl.name = purl.name.lower()


def lower_version(purl: PurlDraft) -> None:
    if purl.version is not None:
        purl.version = purl.version.lower()


def validate_required_by_type(type: str, component: str, value, throws: bool = True) -> bool:
    if not value:
        return reject(RequiredByType(type, component), throws)
    return True


def validate_empty_by_type(type: str, component: str, value, throws: bool = True) -> bool:
    if value:
        return reject(EmptyForbidden(component, type), throws)
    return True


# =============================================================================
# Normalizers
# =============================================================================


def _lower_namespace_and_name(purl: PurlDraft) -> PurlDraft:
    lower_namespace(purl)
    lower_name(purl)
    return purl


def _lower_name_only(purl: PurlDraft) -> PurlDraft:
    lower_name(purl)
    return purl


def _lower_namespace_only(purl: PurlDraft) -> PurlDraft:
    lower_namespace(purl)
    return purl


def _lower_version_only(purl: PurlDraft) -> PurlDraft:
    lower_version(purl)
    return purl


def normalize_mlflow(purl: PurlDraft) -> PurlDraft:
    # Databricks model registries are case insensitive.
    if "databricks" in (purl.qualifiers or {}).get("repository_url", ""):
        lower_name(purl)
    return purl


def normalize_pub(purl: PurlDraft) -> PurlDraft:
    lower_name(purl)
    purl.name = replace_dashes_with_underscores(purl.name)
    return purl


def normalize_pypi(purl: PurlDraft) -> PurlDraft:
    lower_namespace(purl)
    lower_name(purl)
    purl.name = replace_underscores_with_dashes(purl.name)
    return purl


# =============================================================================
# Validators
# =============================================================================


def validate_conan(purl, throws: bool = True) -> bool:
    channel = (purl.qualifiers or {}).get("channel")
    if not purl.namespace:
        if channel:
            return reject(
                TypeSpecificRule(
                    "conan",
                    'requires a "namespace" component when a "channel" qualifier is present',
                ),
                throws,
            )
    elif not channel:
        return reject(
            TypeSpecificRule(
                "conan",
                'requires a "channel" qualifier when a "namespace" component is present',
            ),
            throws,
        )
    return True


def validate_cran(purl, throws: bool = True) -> bool:
    return validate_required_by_type("cran", "version", purl.version, throws)


def validate_golang(purl, throws: bool = True) -> bool:
    # A "v" prefixed version must be SemVer, which also covers pseudo-versions:
    # https://go.dev/doc/modules/version-numbers#pseudo-version-number
    version = purl.version
    if version and version.startswith("v") and not is_semver(version[1:]):
        return reject(
            TypeSpecificRule(
                "golang",
                '"version" component starting with a "v" must be followed by a valid semver version',
            ),
            throws,
        )
    return True


def validate_maven(purl, throws: bool = True) -> bool:
    return validate_required_by_type("maven", "namespace", purl.namespace, throws)


def validate_mlflow(purl, throws: bool = True) -> bool:
    return validate_empty_by_type("mlflow", "namespace", purl.namespace, throws)


def validate_oci(purl, throws: bool = True) -> bool:
    return validate_empty_by_type("oci", "namespace", purl.namespace, throws)


def validate_pub(purl, throws: bool = True) -> bool:
    name = purl.name
    if not all(c == "_" or "a" <= c <= "z" or "0" <= c <= "9" for c in name):
        return reject(
            IllegalCharacter("name", name, "may only contain [a-z0-9_] characters", "pub"),
            throws,
        )
    return True


def validate_swift(purl, throws: bool = True) -> bool:
    return validate_required_by_type(
        "swift", "namespace", purl.namespace, throws
    ) and validate_required_by_type("swift", "version", purl.version, throws)


# =============================================================================
# Registry
# =============================================================================


class TypeRegistry(Mapping):
    """Read-only mapping of lowercase type name to ``TypeRules``.

    Unknown types resolve to pass-through rules via ``get_rules``. Use
    ``with_rules`` or ``with_npm_names`` to derive a registry with different
    rules; the original is never modified.
    """

    def __init__(self, rules: Mapping[str, TypeRules]):
        self._rules = dict(rules)

    def __getitem__(self, type: str) -> TypeRules:
        return self._rules[type]

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._rules))

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"TypeRegistry({sorted(self._rules)})"

    def get_rules(self, type: str) -> TypeRules:
        return self._rules.get(type, PASSTHROUGH)

    def with_rules(self, type: str, rules: TypeRules) -> "TypeRegistry":
        return TypeRegistry({**self._rules, type: rules})

    def with_npm_names(self, names: NpmNameLookup | None) -> "TypeRegistry":
        npm = NpmRules(names)
        return self.with_rules("npm", TypeRules(npm.normalize, npm.validate))

    def apply(self, purl: PurlDraft) -> PurlDraft:
        """Run the rules for ``purl.type``: normalize first, then validate."""
        rules = self.get_rules(purl.type)
        if rules is PASSTHROUGH:
            return purl
        logger.debug("Applying %s type rules", purl.type)
        purl = rules.normalize(purl)
        rules.validate(purl, True)
        return purl


def build_type_registry(npm_names: NpmNameLookup | None = None) -> TypeRegistry:
    """Build the registry of all known type rules.

    ``npm_names`` is the lookup used by the npm rules; ``None`` defers to
    ``purlkit.npm.default_npm_names()``.
    """
    npm = NpmRules(npm_names)
    return TypeRegistry({
        "alpm": TypeRules(normalize=_lower_namespace_and_name),
        "apk": TypeRules(normalize=_lower_namespace_and_name),
        "bitbucket": TypeRules(normalize=_lower_namespace_and_name),
        "bitnami": TypeRules(normalize=_lower_name_only),
        "composer": TypeRules(normalize=_lower_namespace_and_name),
        "conan": TypeRules(validate=validate_conan),
        "cran": TypeRules(validate=validate_cran),
        "deb": TypeRules(normalize=_lower_namespace_and_name),
        "github": TypeRules(normalize=_lower_namespace_and_name),
        "gitlab": TypeRules(normalize=_lower_namespace_and_name),
        "golang": TypeRules(validate=validate_golang),
        "hex": TypeRules(normalize=_lower_namespace_and_name),
        "huggingface": TypeRules(normalize=_lower_version_only),
        "luarocks": TypeRules(normalize=_lower_version_only),
        "maven": TypeRules(validate=validate_maven),
        "mlflow": TypeRules(normalize=normalize_mlflow, validate=validate_mlflow),
        "npm": TypeRules(normalize=npm.normalize, validate=npm.validate),
        "oci": TypeRules(normalize=_lower_name_only, validate=validate_oci),
        "pub": TypeRules(normalize=normalize_pub, validate=validate_pub),
        "pypi": TypeRules(normalize=normalize_pypi),
        "qpkg": TypeRules(normalize=_lower_namespace_only),
        "rpm": TypeRules(normalize=_lower_namespace_only),
        "swift": TypeRules(validate=validate_swift),
    })


TYPES = build_type_registry()
