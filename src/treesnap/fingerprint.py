"""Fingerprint strategies.

Two interchangeable strategies share one interface. The metadata strategy is
O(1) per file but blind to edits that keep size and mtime; the hash strategy
reads every byte and is exact.
"""

import logging
import os
import stat
from pathlib import Path
from typing import Dict, Iterable, Union

from .core import FileFingerprint, FingerprintStrategy, Snapshot
from .errors import ConfigError, ScanIoError
from .hashing import compute_file_digest
from .scanner import relative_posix

logger = logging.getLogger(__name__)


def _stat_regular(path: Path) -> os.stat_result:
    """Stat a path (following symlinks), requiring a regular file."""
    try:
        st = path.stat()
    except OSError as e:
        raise ScanIoError(path, e) from e
    if not stat.S_ISREG(st.st_mode):
        raise ScanIoError(path, OSError("not a regular file"))
    return st


def _fingerprint_key(root: Path, path: Path) -> str:
    """Project-relative key for path, which must be storable as UTF-8."""
    rel = relative_posix(root, path)
    try:
        rel.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ScanIoError(path, e) from e
    return rel


class MetadataStrategy:
    """Fingerprint by byte size and whole-second modification time."""

    name = FingerprintStrategy.METADATA

    def fingerprint(self, root: Path, path: Path) -> FileFingerprint:
        st = _stat_regular(path)
        return FileFingerprint(
            path=_fingerprint_key(root, path),
            size=st.st_size,
            mtime=int(st.st_mtime),
        )


class ContentHashStrategy:
    """Fingerprint by SHA-256 of the file contents."""

    name = FingerprintStrategy.HASH

    def fingerprint(self, root: Path, path: Path) -> FileFingerprint:
        _stat_regular(path)
        try:
            digest = compute_file_digest(path)
        except OSError as e:
            raise ScanIoError(path, e) from e
        return FileFingerprint(path=_fingerprint_key(root, path), digest=digest)


_STRATEGIES = {
    FingerprintStrategy.METADATA: MetadataStrategy,
    FingerprintStrategy.HASH: ContentHashStrategy,
}


def get_strategy(name: Union[str, FingerprintStrategy]):
    """Return the strategy object for a configured strategy name.

    Raises:
        ConfigError: If the name is not a known strategy
    """
    try:
        key = FingerprintStrategy(name)
    except ValueError:
        valid = ", ".join(s.value for s in FingerprintStrategy)
        raise ConfigError(f"Unknown fingerprint strategy '{name}' (expected one of: {valid})")
    return _STRATEGIES[key]()


def fingerprint_files(root: Path, paths: Iterable[Path], strategy) -> Snapshot:
    """Fingerprint every path, dropping files that cannot be read.

    Args:
        root: Project root the paths live under
        paths: Absolute file paths (as returned by scan_tree)
        strategy: MetadataStrategy or ContentHashStrategy

    Returns:
        Dict mapping project-relative POSIX paths to fingerprints
    """
    root = Path(root).resolve()
    result: Dict[str, FileFingerprint] = {}
    for path in paths:
        try:
            fp = strategy.fingerprint(root, path)
        except ScanIoError as e:
            logger.debug("Skipping file: %s", e)
            continue
        result[fp.path] = fp
    return result
