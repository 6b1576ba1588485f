"""Utility functions for treesnap."""

import os
import tempfile
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


def get_timestamp() -> int:
    """Get current timestamp as whole seconds since the Unix epoch."""
    return int(time.time())


def atomic_write_text(path: Path, text: str) -> None:
    """Atomically write text to file with crash safety.

    1. Writes to temp file with fsync to ensure content is on disk
    2. Atomic rename to target path (appears all-at-once)
    3. Fsync parent directory to ensure rename is durable

    Directory fsync is best-effort (not supported on Windows).
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="w",
        delete=False,
        dir=path.parent,
        prefix=f".{path.name}.tmp-",
        suffix="",
        encoding="utf-8",
    ) as f:
        f.write(text)
        f.flush()
        os.fsync(f.fileno())
        tmp = Path(f.name)

    try:
        os.replace(tmp, path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise

    try:
        flags = os.O_RDONLY
        if hasattr(os, "O_DIRECTORY"):
            flags |= os.O_DIRECTORY
        dirfd = os.open(str(path.parent), flags)
        try:
            os.fsync(dirfd)
        finally:
            os.close(dirfd)
    except OSError:
        # Expected on Windows or filesystems without directory fsync
        pass


def format_timestamp(epoch: int) -> str:
    """Format epoch seconds for display in UTC.

    Example:
        1724640677 -> "2024-08-26 02:51:17"
    """
    return datetime.fromtimestamp(epoch, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def humanize_age(epoch: int, now: Optional[float] = None) -> str:
    """Convert an epoch timestamp to a relative age.

    Examples:
        two hours before now -> "2 hours ago"
        five days before now -> "5 days ago"
    """
    seconds = (time.time() if now is None else now) - epoch

    if seconds < 60:
        return "just now"
    for limit, size, unit in (
        (3600, 60, "minute"),
        (86400, 3600, "hour"),
        (604800, 86400, "day"),
        (2592000, 604800, "week"),
        (31536000, 2592000, "month"),
    ):
        if seconds < limit:
            count = int(seconds / size)
            return f"{count} {unit}{'s' if count != 1 else ''} ago"
    years = int(seconds / 31536000)
    return f"{years} year{'s' if years != 1 else ''} ago"
