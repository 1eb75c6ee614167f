"""npm type rules and the name lookup they depend on.

Validation follows validate-npm-package-name v6
(https://github.com/npm/validate-npm-package-name/tree/v6.0.0, ISC License,
Copyright (c) 2015, npm, Inc).

Whether a name is a grandfathered "legacy" name or a Node.js builtin module
is answered by an ``NpmNameLookup``. The lookup is passed to ``NpmRules``
explicitly; when none is given, ``default_npm_names()`` is used, which is
built once and never mutated.
"""

import functools
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import yaml

from . import config
from .codec import encode_component
from .errors import IllegalCharacter, TypeSpecificRule, reject
from .types import PurlDraft

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 214
RESERVED_NAMES = frozenset({"node_modules", "favicon.ico"})
SPECIAL_CHARACTERS = re.compile(r"[~'!()*]")

# Node.js module.builtinModules (Node 23).
NODE_BUILTIN_MODULES = frozenset({
    "_http_agent", "_http_client", "_http_common", "_http_incoming",
    "_http_outgoing", "_http_server", "_stream_duplex", "_stream_passthrough",
    "_stream_readable", "_stream_transform", "_stream_wrap", "_stream_writable",
    "_tls_common", "_tls_wrap", "assert", "assert/strict", "async_hooks",
    "buffer", "child_process", "cluster", "console", "constants", "crypto",
    "dgram", "diagnostics_channel", "dns", "dns/promises", "domain", "events",
    "fs", "fs/promises", "http", "http2", "https", "inspector",
    "inspector/promises", "module", "net", "node:sea", "node:sqlite",
    "node:test", "node:test/reporters", "os", "path", "path/posix",
    "path/win32", "perf_hooks", "process", "punycode", "querystring",
    "readline", "readline/promises", "repl", "stream", "stream/consumers",
    "stream/promises", "stream/web", "string_decoder", "sys", "timers",
    "timers/promises", "tls", "trace_events", "tty", "url", "util",
    "util/types", "v8", "vm", "wasi", "worker_threads", "zlib",
})


class NpmNameLookup(Protocol):
    """Read-only name sets consulted by the npm rules."""

    def is_known_legacy_name(self, id: str) -> bool: ...

    def is_builtin_runtime_module_name(self, id: str) -> bool: ...


@dataclass(frozen=True)
class NpmNames:
    """Frozen ``NpmNameLookup`` backed by two name sets.

    Legacy names are matched exactly (they may be mixed case); builtin
    module names are matched case-insensitively.
    """

    legacy: frozenset[str] = frozenset()
    builtin: frozenset[str] = NODE_BUILTIN_MODULES

    def is_known_legacy_name(self, id: str) -> bool:
        return id in self.legacy

    def is_builtin_runtime_module_name(self, id: str) -> bool:
        return id.lower() in self.builtin

    @classmethod
    def from_file(cls, path: str | Path) -> "NpmNames":
        """Load name lists from a YAML or JSON file.

        The file holds either a mapping with optional ``legacy`` and
        ``builtin`` lists, or a bare list taken as legacy names. A missing
        ``builtin`` list keeps the bundled Node.js builtins.
        """
        with open(path) as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}
        if isinstance(data, list):
            data = {"legacy": data}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a mapping or a list of names")

        legacy = frozenset(str(name) for name in data.get("legacy") or ())
        builtin = data.get("builtin")
        names = cls(
            legacy=legacy,
            builtin=(
                frozenset(str(name).lower() for name in builtin)
                if builtin is not None
                else NODE_BUILTIN_MODULES
            ),
        )
        logger.info(
            "Loaded %d legacy and %d builtin npm names from %s",
            len(names.legacy),
            len(names.builtin),
            path,
        )
        return names


@functools.lru_cache(maxsize=1)
def default_npm_names() -> NpmNames:
    """Return the process-wide default lookup, loading it on first use."""
    if config.NPM_NAMES_FILE:
        return NpmNames.from_file(config.NPM_NAMES_FILE)
    logger.debug("No npm names file configured, using bundled builtin names")
    return NpmNames()


def npm_id(purl) -> str:
    """The npm package id: ``namespace/name`` or ``name``."""
    if purl.namespace:
        return f"{purl.namespace}/{purl.name}"
    return purl.name


def _is_url_friendly(value: str) -> bool:
    return encode_component(value) == value


class NpmRules:
    """npm normalize/validate pair bound to a name lookup."""

    type = "npm"

    def __init__(self, names: NpmNameLookup | None = None):
        self._names = names

    @property
    def names(self) -> NpmNameLookup:
        return self._names if self._names is not None else default_npm_names()

    def normalize(self, purl: PurlDraft) -> PurlDraft:
        if purl.namespace is not None:
            purl.namespace = purl.namespace.lower()
        # Legacy names may be mixed case and must keep it.
        if not self.names.is_known_legacy_name(npm_id(purl)):
            purl.name = purl.name.lower()
        return purl

    def validate(self, purl, throws: bool = True) -> bool:
        name, namespace = purl.name, purl.namespace
        has_namespace = bool(namespace)
        id = npm_id(purl)
        component = "namespace" if has_namespace else "name"

        if id.startswith("."):
            return self._fail(f'"{component}" component cannot start with a period', throws)
        if id.startswith("_"):
            return self._fail(f'"{component}" component cannot start with an underscore', throws)
        if name.strip() != name:
            return self._fail(
                '"name" component cannot contain leading or trailing spaces', throws
            )
        if not _is_url_friendly(name):
            return reject(
                IllegalCharacter(
                    "name", name, "can only contain URL-friendly characters", self.type
                ),
                throws,
            )
        if has_namespace:
            if namespace.strip() != namespace:
                return self._fail(
                    '"namespace" component cannot contain leading or trailing spaces',
                    throws,
                )
            if not namespace.startswith("@"):
                return reject(
                    IllegalCharacter(
                        "namespace", namespace, 'must start with an "@" character', self.type
                    ),
                    throws,
                )
            if not _is_url_friendly(namespace[1:]):
                return reject(
                    IllegalCharacter(
                        "namespace",
                        namespace,
                        "can only contain URL-friendly characters",
                        self.type,
                    ),
                    throws,
                )

        lowered_id = id.lower()
        if lowered_id in RESERVED_NAMES:
            return self._fail(
                f'"{component}" component of "{lowered_id}" is not allowed', throws
            )

        # The remaining checks only apply to names that are not grandfathered.
        if self.names.is_known_legacy_name(id):
            return True
        if len(id) > MAX_NAME_LENGTH:
            return self._fail(
                f'"namespace" and "name" components can not collectively be more '
                f"than {MAX_NAME_LENGTH} characters",
                throws,
            )
        if lowered_id != id:
            return reject(
                IllegalCharacter("name", id, "can not contain capital letters", self.type),
                throws,
            )
        if SPECIAL_CHARACTERS.search(name):
            return reject(
                IllegalCharacter(
                    "name", name, "can not contain special characters (\"~'!()*\")", self.type
                ),
                throws,
            )
        if self.names.is_builtin_runtime_module_name(id):
            return self._fail('"name" component can not be a core module name', throws)
        return True

    def _fail(self, detail: str, throws: bool) -> bool:
        return reject(TypeSpecificRule(self.type, detail), throws)
