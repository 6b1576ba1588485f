"""Constants for treesnap."""

# Project marker directory
TREESNAP_DIR = ".treesnap"

# Ignore file at the project root
IGNORE_FILE = ".treesnapignore"

# Files and directories inside TREESNAP_DIR
CONFIG_FILE = "config.yaml"
STORE_FILE = "history.db"
LOCK_FILE = "lock"
HEAD_FILE = "HEAD"
KEYS_DIR = "keys"
REFS_DIR = "refs"
DEFAULT_BRANCH = "main"

# Author recorded on every commit
DEFAULT_AUTHOR = "local-user"

# Cross-project registry (under the user's home)
REGISTRY_DIR = ".treesnap"
REGISTRY_FILE = "registry.json"
REGISTRY_HOME_ENV = "TREESNAP_HOME"

# Dashboard
DEFAULT_UI_PORT = 2718

# Seconds to wait for the commit lock
COMMIT_LOCK_TIMEOUT = 30.0

# Version
TREESNAP_VERSION = "0.1.0"
