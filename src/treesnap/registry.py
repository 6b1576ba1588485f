"""Cross-project registry of initialized projects.

Stored as a JSON list in ~/.treesnap/registry.json (base directory
overridable with TREESNAP_HOME). A missing or corrupt registry reads as
empty; registering the same path twice is a no-op.
"""

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from .constants import REGISTRY_DIR, REGISTRY_FILE, REGISTRY_HOME_ENV
from .utils import atomic_write_text

logger = logging.getLogger(__name__)


class RegistryEntry(BaseModel):
    """One registered project."""

    name: str
    path: str
    created_at: int


_ENTRIES = TypeAdapter(List[RegistryEntry])


def registry_path() -> Path:
    """Location of the registry file."""
    override = os.environ.get(REGISTRY_HOME_ENV)
    base = Path(override) if override else Path.home() / REGISTRY_DIR
    return base / REGISTRY_FILE


class ProjectRegistry:
    """Reads and updates the registry file."""

    def __init__(self, path: Optional[Path] = None):
        self.path = path or registry_path()

    def load(self) -> List[RegistryEntry]:
        if not self.path.exists():
            return []
        try:
            return _ENTRIES.validate_json(self.path.read_bytes())
        except (OSError, ValidationError) as e:
            logger.warning("Ignoring unreadable registry %s: %s", self.path, e)
            return []

    def add(self, name: str, path: Path, created_at: int) -> bool:
        """Register a project. Returns False if the path was already present."""
        path_str = str(Path(path).resolve())
        entries = self.load()
        if any(e.path == path_str for e in entries):
            return False
        entries.append(RegistryEntry(name=name, path=path_str, created_at=created_at))
        atomic_write_text(
            self.path,
            json.dumps([e.model_dump() for e in entries], indent=2) + "\n",
        )
        logger.debug("Registered project %s at %s", name, path_str)
        return True

    def find(self, name: str) -> Optional[RegistryEntry]:
        """First project registered under name."""
        for entry in self.load():
            if entry.name == name:
                return entry
        return None
