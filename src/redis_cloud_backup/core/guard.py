"""Single-instance enforcement for backup runs.

A run is admitted only when no other process on the machine is running the
program and the per-host advisory lock file can be taken without waiting.
"""

import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Iterable, Optional

from filelock import FileLock, Timeout

from .. import PROGRAM_NAME, __util__

logger = logging.getLogger(__name__)

ProcessLister = Callable[[], Iterable[tuple[int, str]]]


def list_processes() -> list[tuple[int, str]]:
    """Return ``(pid, command line)`` for every process in the process table."""
    try:
        output = subprocess.check_output(["ps", "-eo", "pid=,args="], text=True)
    except (OSError, subprocess.CalledProcessError) as e:
        logger.error("Failed to read the process table: %s", e)
        raise __util__.AbortError from e

    processes = []
    for line in output.splitlines():
        pid, _, args = line.strip().partition(" ")
        if pid.isdigit():
            processes.append((int(pid), args.strip()))
    return processes


def matches_identity(command_line: str, identity: str) -> bool:
    """Return whether ``identity`` appears in ``command_line`` as a whole token.

    A token matches when it equals the identity or its basename does, so
    ``/usr/local/bin/redis-cloud-backup`` matches but
    ``redis-cloud-backup-report`` or ``grep redis-cloud-backupx`` do not.
    """
    for token in command_line.split():
        if token == identity or os.path.basename(token) == identity:
            return True
    return False


class Lease:
    """Exclusivity token for one run. Process exit also releases it."""

    def __init__(self, hostname: str, lock: FileLock) -> None:
        self.hostname = hostname
        self._lock = lock

    @property
    def is_held(self) -> bool:
        return self._lock.is_locked

    @property
    def lock_file(self) -> str:
        return self._lock.lock_file

    def release(self) -> None:
        if self._lock.is_locked:
            self._lock.release()
            logger.debug("Released run lease for %s", self.hostname)

    def __enter__(self) -> "Lease":
        return self

    def __exit__(self, *exc) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"Lease({self.hostname!r}, held={self.is_held})"


class RunGuard:
    """Admit at most one backup run per host at a time.

    Attributes:
        identity: Program name searched for in the process table
        lock_dir: Directory holding the advisory lock files
        process_lister: Callable returning ``(pid, command line)`` pairs
    """

    def __init__(
        self,
        identity: str = PROGRAM_NAME,
        lock_dir=None,
        process_lister: Optional[ProcessLister] = None,
    ) -> None:
        self.identity = identity
        self.lock_dir = Path(lock_dir or tempfile.gettempdir())
        self.process_lister = process_lister or list_processes

    def lock_path(self, hostname: str) -> Path:
        return self.lock_dir / f"{self.identity}.{hostname}.lock"

    def find_other_instances(self) -> list[int]:
        """Return pids of other processes running this program."""
        own = {os.getpid(), os.getppid()}
        others = []
        for pid, command_line in self.process_lister():
            if pid in own:
                continue
            if matches_identity(command_line, self.identity):
                logger.debug("Found running instance %d: %s", pid, command_line)
                others.append(pid)
        return others

    def acquire(self, hostname: str) -> Lease:
        """Take the run lease for ``hostname``.

        Raises:
            AlreadyRunningError: another instance is running or holds the lock.
        """
        logger.debug("Checking that %s isn't already running", self.identity)
        others = self.find_other_instances()
        if others:
            raise __util__.AlreadyRunningError(
                f"{self.identity} : Process is already running "
                f"(pid {', '.join(map(str, others))}). Aborting"
            )

        self.lock_dir.mkdir(parents=True, exist_ok=True)
        lock = FileLock(str(self.lock_path(hostname)))
        try:
            lock.acquire(timeout=0)
        except Timeout as e:
            raise __util__.AlreadyRunningError(
                f"{self.identity} : Lock {lock.lock_file} is held by another run. "
                "Aborting"
            ) from e

        logger.debug("Acquired run lease %s", lock.lock_file)
        return Lease(hostname, lock)
