"""Project context for managing paths and project discovery."""

from pathlib import Path
from typing import Optional, Union

from .constants import (
    CONFIG_FILE,
    DEFAULT_BRANCH,
    HEAD_FILE,
    IGNORE_FILE,
    KEYS_DIR,
    LOCK_FILE,
    REFS_DIR,
    STORE_FILE,
    TREESNAP_DIR,
)
from .errors import NotInitialized


class ProjectContext:
    """Resolves the control directory layout for one project root.

    The root is always explicit. Only `discover` looks at the working
    directory, and it is meant for the CLI boundary.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    @classmethod
    def discover(cls, start: Optional[Path] = None) -> "ProjectContext":
        """Walk up from start (default: cwd) to the nearest project root.

        Raises:
            NotInitialized: If no ancestor holds a control directory
        """
        origin = (start or Path.cwd()).resolve()
        for candidate in (origin, *origin.parents):
            if (candidate / TREESNAP_DIR).is_dir():
                return cls(candidate)
        raise NotInitialized(origin)

    @property
    def is_initialized(self) -> bool:
        """Check if this root holds a control directory (no traversal)."""
        return self.storage_dir.is_dir()

    def require_initialized(self) -> "ProjectContext":
        if not self.is_initialized:
            raise NotInitialized(self.root)
        return self

    def relative(self, path: Union[str, Path]) -> str:
        """Project-relative POSIX path for an absolute path inside the project."""
        p = Path(path)
        if not p.is_absolute():
            return p.as_posix()
        try:
            return p.relative_to(self.root).as_posix()
        except ValueError:
            raise ValueError(f"Path {p} is outside project")

    @property
    def project_name(self) -> str:
        return self.root.name or "unnamed"

    @property
    def storage_dir(self) -> Path:
        return self.root / TREESNAP_DIR

    @property
    def config_path(self) -> Path:
        return self.storage_dir / CONFIG_FILE

    @property
    def store_path(self) -> Path:
        return self.storage_dir / STORE_FILE

    @property
    def lock_path(self) -> Path:
        return self.storage_dir / LOCK_FILE

    @property
    def head_path(self) -> Path:
        return self.storage_dir / HEAD_FILE

    @property
    def keys_dir(self) -> Path:
        return self.storage_dir / KEYS_DIR

    @property
    def refs_dir(self) -> Path:
        return self.storage_dir / REFS_DIR

    @property
    def branch_ref_path(self) -> Path:
        return self.refs_dir / "heads" / DEFAULT_BRANCH

    @property
    def ignore_path(self) -> Path:
        return self.root / IGNORE_FILE
