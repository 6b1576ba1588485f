"""Read-only JSON views over a project's snapshot store.

Every function returns plain JSON-ready data and yields an empty list when
the project or its store is unavailable, so the dashboard can render
whatever exists.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .context import ProjectContext
from .errors import StoreUnavailable
from .registry import ProjectRegistry
from .store import SnapshotStore

logger = logging.getLogger(__name__)


def _open_read_only(root: Union[str, Path]) -> Optional[SnapshotStore]:
    ctx = ProjectContext(root)
    try:
        return SnapshotStore.open(ctx.store_path, read_only=True)
    except StoreUnavailable as e:
        logger.debug("No readable store for %s: %s", ctx.root, e)
        return None


def list_commits(root: Union[str, Path]) -> List[Dict[str, Any]]:
    """All commits of a project, ascending by id."""
    store = _open_read_only(root)
    if store is None:
        return []
    with store:
        return [c.model_dump() for c in store.all_commits()]


def latest_files(root: Union[str, Path]) -> List[Dict[str, Any]]:
    """Fingerprints recorded by the project's latest commit, sorted by path."""
    store = _open_read_only(root)
    if store is None:
        return []
    with store:
        snapshot = store.latest_snapshot()
    return [fp.model_dump(exclude_none=True) for fp in snapshot.values()]


def list_projects(registry: Optional[ProjectRegistry] = None) -> List[Dict[str, Any]]:
    """Every project in the cross-project registry."""
    registry = registry or ProjectRegistry()
    return [entry.model_dump() for entry in registry.load()]


def project_commits(name: str, registry: Optional[ProjectRegistry] = None) -> List[Dict[str, Any]]:
    """Commits of a registered project looked up by name."""
    entry = (registry or ProjectRegistry()).find(name)
    return list_commits(entry.path) if entry else []


def project_files(name: str, registry: Optional[ProjectRegistry] = None) -> List[Dict[str, Any]]:
    """Latest fingerprints of a registered project looked up by name."""
    entry = (registry or ProjectRegistry()).find(name)
    return latest_files(entry.path) if entry else []
