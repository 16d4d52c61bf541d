"""Exclusive advisory lock on a repository's comment store.

Uses ``fcntl.flock`` on POSIX and ``msvcrt.locking`` on Windows. Acquisition
blocks without a timeout on both: ``LK_LOCK`` gives up after ten one-second
attempts, so a contended Windows lock is retried until it is granted. The
lock file is left in place after release; deleting it would let a waiting
process lock an orphaned inode.
"""

from __future__ import annotations

import errno
import logging
import os
from pathlib import Path
from types import TracebackType
from typing import IO, Optional, Type

try:
    import fcntl  # POSIX systems

    HAVE_FCNTL = True
except ImportError:
    HAVE_FCNTL = False

try:
    import msvcrt  # Windows

    HAVE_MSVCRT = True
except ImportError:
    HAVE_MSVCRT = False

from tinydiff.errors import IoError

logger = logging.getLogger(__name__)

# errno reported by msvcrt.locking when LK_LOCK runs out of attempts
_LOCK_CONTENDED = {errno.EDEADLK, getattr(errno, "EDEADLOCK", errno.EDEADLK)}


def _lock_msvcrt(handle: IO[bytes], lock_path: Path) -> None:
    while True:
        handle.seek(0)
        try:
            msvcrt.locking(handle.fileno(), msvcrt.LK_LOCK, 1)
            return
        except OSError as exc:
            if exc.errno not in _LOCK_CONTENDED:
                raise
            logger.debug("Still waiting for %s", lock_path)


class RepositoryLock:
    """Context manager holding ``<store dir>/comments.lock`` exclusively."""

    def __init__(self, lock_path: Path) -> None:
        self.lock_path = lock_path
        self._handle: Optional[IO[bytes]] = None

    def __enter__(self) -> "RepositoryLock":
        try:
            self._handle = open(self.lock_path, "a+b")
        except OSError as exc:
            raise IoError(self.lock_path, str(exc)) from exc

        try:
            if HAVE_FCNTL:
                fcntl.flock(self._handle.fileno(), fcntl.LOCK_EX)
            elif HAVE_MSVCRT:
                _lock_msvcrt(self._handle, self.lock_path)
            else:
                raise OSError("file locking is not available on this platform")
        except OSError as exc:
            self._handle.close()
            self._handle = None
            raise IoError(self.lock_path, str(exc)) from exc

        logger.debug("Acquired %s (pid %d)", self.lock_path, os.getpid())
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        if self._handle is None:
            return
        try:
            if HAVE_FCNTL:
                fcntl.flock(self._handle.fileno(), fcntl.LOCK_UN)
            elif HAVE_MSVCRT:
                self._handle.seek(0)
                msvcrt.locking(self._handle.fileno(), msvcrt.LK_UNLCK, 1)
        finally:
            self._handle.close()
            self._handle = None
            logger.debug("Released %s", self.lock_path)
