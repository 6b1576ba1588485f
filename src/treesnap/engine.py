"""Commit engine: init, status, commit and log for one project root.

status:  scan -> fingerprint -> latest snapshot -> diff   (read-only)
commit:  lock -> scan -> fingerprint -> record snapshot   (one transaction)
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from .config import load_config, save_config
from .constants import DEFAULT_AUTHOR, DEFAULT_BRANCH
from .context import ProjectContext
from .core import (
    Commit,
    CommitResult,
    FingerprintStrategy,
    InitResult,
    ProjectConfig,
    Snapshot,
    StatusReport,
)
from .diffing import compute_diff
from .fingerprint import fingerprint_files, get_strategy
from .ignore import DEFAULT_IGNORE
from .locking import commit_lock
from .scanner import scan_tree
from .store import SnapshotStore
from .utils import get_timestamp

logger = logging.getLogger(__name__)


def _ensure_layout(ctx: ProjectContext) -> None:
    """Create any missing control directory entries, leaving existing ones alone."""
    ctx.storage_dir.mkdir(exist_ok=True)
    ctx.keys_dir.mkdir(exist_ok=True)
    ctx.branch_ref_path.parent.mkdir(parents=True, exist_ok=True)
    ctx.branch_ref_path.touch(exist_ok=True)
    if not ctx.head_path.exists():
        ctx.head_path.write_text(f"ref: refs/heads/{DEFAULT_BRANCH}\n", encoding="utf-8")
    ctx.lock_path.touch(exist_ok=True)


def init_project(
    root: Union[str, Path],
    strategy: Union[str, FingerprintStrategy] = FingerprintStrategy.METADATA,
    project_name: Optional[str] = None,
) -> InitResult:
    """Initialize a project at root.

    Creates the control directory with its config, store, lock marker and
    reserved key/ref locations, plus a default ignore file if none exists.
    An already initialized project keeps its config, history and ignore
    file; entries missing from an interrupted init are recreated.

    Args:
        root: Project root directory (must exist)
        strategy: Fingerprint strategy to fix for this repository
        project_name: Defaults to the root directory name

    Returns:
        InitResult with created=False when the project already existed
    """
    ctx = ProjectContext(root)
    existing = ctx.is_initialized
    if existing and ctx.config_path.exists():
        config = load_config(ctx)
    else:
        config = ProjectConfig(
            project_name=project_name or ctx.project_name,
            created_at=get_timestamp(),
            fingerprint_strategy=get_strategy(strategy).name,
        )

    _ensure_layout(ctx)
    if not ctx.ignore_path.exists() and not existing:
        ctx.ignore_path.write_text(DEFAULT_IGNORE, encoding="utf-8")
    if not ctx.config_path.exists():
        save_config(config, ctx)
    if not ctx.store_path.exists():
        SnapshotStore.create(ctx.store_path).close()

    if existing:
        logger.info("Project already initialized at %s", ctx.storage_dir)
        return InitResult(root=ctx.root, created=False, config=config)

    logger.info("Initialized project %s at %s", config.project_name, ctx.root)
    return InitResult(root=ctx.root, created=True, config=config)


class CommitEngine:
    """Runs status, commit and log against an explicit project root."""

    def __init__(self, root: Union[str, Path, ProjectContext]):
        self.ctx = root if isinstance(root, ProjectContext) else ProjectContext(root)

    @property
    def root(self) -> Path:
        return self.ctx.root

    def _open_store(self, read_only: bool) -> SnapshotStore:
        self.ctx.require_initialized()
        return SnapshotStore.open(self.ctx.store_path, read_only=read_only)

    def current_fingerprints(self) -> Snapshot:
        """Scan the tree and fingerprint every non-ignored file."""
        config = load_config(self.ctx)
        strategy = get_strategy(config.fingerprint_strategy)
        paths = scan_tree(self.root)
        return fingerprint_files(self.root, paths, strategy)

    def status(self) -> StatusReport:
        """Classify the working tree against the latest commit.

        Never writes to the store.

        Raises:
            NotInitialized: If the project has no control directory
            StoreUnavailable: If the store cannot be opened
        """
        self.ctx.require_initialized()
        current = self.current_fingerprints()
        with self._open_store(read_only=True) as store:
            latest = store.latest_commit()
            prior = store.fingerprints_for(latest.id) if latest else {}
            count = store.commit_count()

        diff = compute_diff(prior, current)
        logger.debug("Status for %s: %s", self.root, diff.summary)
        return StatusReport(root=self.root, diff=diff, commit_count=count, latest_commit=latest)

    def commit(self, message: str, timestamp: Optional[int] = None) -> CommitResult:
        """Record a snapshot of every non-ignored file.

        The commit header and all fingerprints are written in one
        transaction while holding the commit lock.

        Raises:
            ValueError: If the message is empty
            NotInitialized: If the project has no control directory
            StoreUnavailable: If the store cannot be opened
            WriteFailure: If persisting failed (nothing was written)
            LockTimeout: If another commit holds the lock too long
        """
        if not message or not message.strip():
            raise ValueError("Commit message must not be empty")
        self.ctx.require_initialized()

        with commit_lock(self.ctx.lock_path):
            current = self.current_fingerprints()
            with self._open_store(read_only=False) as store:
                commit = store.record_snapshot(
                    timestamp=get_timestamp() if timestamp is None else timestamp,
                    message=message,
                    author=DEFAULT_AUTHOR,
                    fingerprints=current.values(),
                )

        logger.info("Commit %d recorded with %d files", commit.id, len(current))
        return CommitResult(commit=commit, file_count=len(current))

    def log(self) -> List[Commit]:
        """All commits in ascending id order."""
        with self._open_store(read_only=True) as store:
            return store.all_commits()
