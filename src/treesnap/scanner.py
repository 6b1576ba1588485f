"""Directory tree scanning."""

import logging
import os
from pathlib import Path
from typing import List, Optional

from .constants import TREESNAP_DIR
from .ignore import IgnoreRuleSet, load_rules

logger = logging.getLogger(__name__)


def relative_posix(root: Path, path: Path) -> str:
    """Project-relative path with forward slashes."""
    return path.relative_to(root).as_posix()


def scan_tree(root: Path, rules: Optional[IgnoreRuleSet] = None) -> List[Path]:
    """Enumerate files under root that are not ignored.

    Directories and files are visited in name order at every level so the
    result is deterministic for a fixed tree. Ignored directories are pruned
    rather than descended, and the control directory is always pruned.
    Symlinked directories are not followed; symlinks to files are returned
    like regular files.

    Unreadable directories are skipped without aborting the scan.

    Args:
        root: Project root directory
        rules: Compiled ignore rules (loaded from the ignore file if None)

    Returns:
        Absolute paths of the files found
    """
    root = Path(root).resolve()
    if rules is None:
        rules = load_rules(root)

    def on_error(error: OSError) -> None:
        logger.debug("Skipping unreadable path %s: %s", error.filename, error)

    files: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error, followlinks=False):
        current = Path(dirpath)
        rel_dir = "" if current == root else relative_posix(root, current)

        # Prune in place so os.walk never descends into excluded directories
        kept = []
        for name in sorted(dirnames):
            if name == TREESNAP_DIR:
                continue
            rel = f"{rel_dir}/{name}" if rel_dir else name
            if rules.matches(rel):
                continue
            if (current / name).is_symlink():
                logger.debug("Not following symlinked directory %s", rel)
                continue
            kept.append(name)
        dirnames[:] = kept

        for name in sorted(filenames):
            rel = f"{rel_dir}/{name}" if rel_dir else name
            if rules.matches(rel):
                continue
            files.append(current / name)

    return files
