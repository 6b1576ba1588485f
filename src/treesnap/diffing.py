"""Diff computation logic - stable module for computing differences."""

from typing import Optional

from .core import DiffResult, Snapshot


def compute_diff(prior: Optional[Snapshot], current: Snapshot) -> DiffResult:
    """
    Classify the current working tree against a prior snapshot.

    Args:
        prior: Fingerprints of the latest commit (None or empty if no commit).
        current: Fingerprints of the files on disk now.

    Returns:
        DiffResult with sorted untracked, modified, unchanged and deleted paths.

    Note:
        Files present in prior but gone from disk are listed in `deleted`
        only; they never make `has_changes` true.
    """
    prior = prior or {}

    untracked = []
    modified = []
    unchanged = []

    for path, fp in current.items():
        previous = prior.get(path)
        if previous is None:
            untracked.append(path)
        elif previous.same_state(fp):
            unchanged.append(path)
        else:
            modified.append(path)

    deleted = [path for path in prior if path not in current]

    return DiffResult(
        untracked=sorted(untracked),
        modified=sorted(modified),
        unchanged=sorted(unchanged),
        deleted=sorted(deleted),
    )
