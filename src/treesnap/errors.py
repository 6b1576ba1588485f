"""Custom exceptions for treesnap.

Only store-level and whole-operation failures propagate to callers. The
per-file and per-rule errors (ScanIoError, MalformedIgnoreRule) are raised at
their seams and absorbed one level up so scans stay resilient to a changing
filesystem.
"""


class TreesnapError(RuntimeError):
    """Base class for all treesnap errors."""
    pass


class NotInitialized(TreesnapError):
    """No control directory found for the project."""

    def __init__(self, root):
        self.root = root
        super().__init__(f"No treesnap repository found at {root}")


# Store Errors
class StoreError(TreesnapError):
    """Base class for snapshot store errors."""
    pass


class StoreUnavailable(StoreError):
    """Store cannot be opened despite a control directory existing."""

    def __init__(self, db_path, reason: str = ""):
        self.db_path = db_path
        message = f"Snapshot store unavailable at {db_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class WriteFailure(StoreError):
    """Persisting a commit failed; nothing from it was written."""
    pass


class LockTimeout(StoreError):
    """Another process held the commit lock for too long."""

    def __init__(self, lock_path, timeout: float):
        self.lock_path = lock_path
        self.timeout = timeout
        super().__init__(
            f"Could not acquire commit lock {lock_path} within {timeout:g}s. "
            f"Another commit may be in progress."
        )


# Scan Errors
class ScanIoError(TreesnapError):
    """A single file could not be read during a scan."""

    def __init__(self, path, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot read {path}: {cause}")


class MalformedIgnoreRule(TreesnapError):
    """An ignore pattern could not be compiled."""

    def __init__(self, pattern: str, reason: str = ""):
        self.pattern = pattern
        super().__init__(f"Malformed ignore pattern {pattern!r}" + (f": {reason}" if reason else ""))


# Configuration Errors
class ConfigError(TreesnapError):
    """Project configuration is missing or invalid."""
    pass
