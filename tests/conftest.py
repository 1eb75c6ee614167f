"""Shared test fixtures."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from purlkit import NpmNames, build_type_registry
from purlkit.npm import default_npm_names


class RecordingNpmNames:
    """NpmNameLookup that records every id it is asked about."""

    def __init__(self, legacy=(), builtin=()):
        self.legacy = set(legacy)
        self.builtin = set(builtin)
        self.calls = []

    def is_known_legacy_name(self, id):
        self.calls.append(("legacy", id))
        return id in self.legacy

    def is_builtin_runtime_module_name(self, id):
        self.calls.append(("builtin", id))
        return id.lower() in self.builtin


@pytest.fixture
def legacy_registry():
    """Type registry whose npm rules know a few mixed-case legacy names."""
    names = NpmNames(legacy=frozenset({"JSONStream", "CoffeeScript"}))
    return build_type_registry(npm_names=names)


@pytest.fixture
def fresh_npm_names():
    """Clear the cached default npm lookup before and after a test."""
    default_npm_names.cache_clear()
    yield
    default_npm_names.cache_clear()
