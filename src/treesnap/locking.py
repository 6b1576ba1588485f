"""Exclusive commit lock on the control directory's lock file."""

import contextlib
import logging
from pathlib import Path
from typing import Iterator

import portalocker

from .constants import COMMIT_LOCK_TIMEOUT
from .errors import LockTimeout, StoreUnavailable

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def commit_lock(lock_path: Path, timeout: float = COMMIT_LOCK_TIMEOUT) -> Iterator[None]:
    """Hold an exclusive lock on lock_path for the duration of the block.

    The lock file itself is the advisory marker created by init; it is
    opened in append mode so its contents are never truncated, and it is
    never deleted.

    Raises:
        LockTimeout: If another process holds the lock past the timeout
        StoreUnavailable: If the lock file cannot be opened
    """
    lock = portalocker.Lock(
        str(lock_path),
        mode="a",
        timeout=timeout,
        flags=portalocker.LOCK_EX | portalocker.LOCK_NB,
    )
    try:
        lock.acquire()
    except portalocker.exceptions.LockException as e:
        raise LockTimeout(lock_path, timeout) from e
    except OSError as e:
        raise StoreUnavailable(lock_path, f"cannot open lock file: {e}") from e

    logger.debug("Acquired commit lock %s", lock_path)
    try:
        yield
    finally:
        lock.release()
