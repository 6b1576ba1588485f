"""Core data models for treesnap.

A Commit and its Snapshot (the fingerprints of every file observed at commit
time) are created together and never modified afterwards.
"""

from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .constants import TREESNAP_VERSION


# ============= Configuration =============

class FingerprintStrategy(str, Enum):
    """How files are fingerprinted; fixed per repository at init."""

    METADATA = "metadata"  # size + mtime
    HASH = "hash"          # SHA-256 of contents


class ProjectConfig(BaseModel):
    """Project configuration (stored in .treesnap/config.yaml)."""

    project_name: str
    created_at: int
    version: str = TREESNAP_VERSION
    fingerprint_strategy: FingerprintStrategy = FingerprintStrategy.METADATA


# ============= History =============

class Commit(BaseModel):
    """A recorded snapshot header."""

    model_config = ConfigDict(frozen=True)

    id: int
    timestamp: int  # seconds since epoch
    message: str
    author: str


class FileFingerprint(BaseModel):
    """Compact state of one file, used to detect change.

    Exactly one encoding is set: either size and mtime (metadata), or
    digest (content hash). Fingerprints of different kinds never compare
    equal.
    """

    model_config = ConfigDict(frozen=True)

    path: str  # project-relative, POSIX separators
    size: Optional[int] = Field(default=None, ge=0)
    mtime: Optional[int] = None
    digest: Optional[str] = None

    @model_validator(mode="after")
    def _one_encoding(self) -> "FileFingerprint":
        has_metadata = self.size is not None or self.mtime is not None
        if has_metadata and self.digest is not None:
            raise ValueError("fingerprint cannot carry both metadata and digest")
        if self.digest is None and (self.size is None or self.mtime is None):
            raise ValueError("metadata fingerprint needs both size and mtime")
        return self

    @property
    def kind(self) -> FingerprintStrategy:
        if self.digest is not None:
            return FingerprintStrategy.HASH
        return FingerprintStrategy.METADATA

    def same_state(self, other: "FileFingerprint") -> bool:
        """True if both fingerprints describe the same file state."""
        if self.kind != other.kind:
            return False
        if self.kind == FingerprintStrategy.HASH:
            return self.digest == other.digest
        return self.size == other.size and self.mtime == other.mtime


# path -> fingerprint for one commit (or for the working tree)
Snapshot = Dict[str, FileFingerprint]


# ============= Change Detection =============

class DiffResult(BaseModel):
    """Classification of the working tree against the latest snapshot.

    All lists are sorted. Deleted paths are reported for information only
    and do not count as changes.
    """

    untracked: List[str] = Field(default_factory=list)
    modified: List[str] = Field(default_factory=list)
    unchanged: List[str] = Field(default_factory=list)
    deleted: List[str] = Field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.untracked or self.modified)

    @property
    def summary(self) -> Dict[str, int]:
        """Get counts by category."""
        return {
            "untracked": len(self.untracked),
            "modified": len(self.modified),
            "unchanged": len(self.unchanged),
            "deleted": len(self.deleted),
        }


# ============= Operation Results =============

class StatusReport(BaseModel):
    """Result of a status operation."""

    root: Path
    diff: DiffResult
    commit_count: int = 0
    latest_commit: Optional[Commit] = None


class CommitResult(BaseModel):
    """Result of a commit operation."""

    commit: Commit
    file_count: int

    def summary(self) -> str:
        return f"Commit {self.commit.id}: \"{self.commit.message}\" ({self.file_count} files)"


class InitResult(BaseModel):
    """Result of an init operation."""

    root: Path
    created: bool
    config: ProjectConfig
