"""Configuration from environment."""

import os

# Optional YAML/JSON file listing npm legacy and builtin module names.
# Read lazily, once, by purlkit.npm.default_npm_names().
NPM_NAMES_FILE = os.environ.get("PURLKIT_NPM_NAMES_FILE") or None
