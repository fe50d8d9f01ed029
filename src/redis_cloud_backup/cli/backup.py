"""Backup command: copy the RDB snapshot to every configured target."""

import argparse
import contextlib
import logging
import signal
import threading
from datetime import datetime

from .. import __util__
from ..core import BackupAttempt, DestinationPlanner, RunStatus, TransferCoordinator
from ..uploader import default_uploaders
from .common import acquire_lease, setup_run, validate_input

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def cancel_on_signals(
    cancel_event: threading.Event, signals=(signal.SIGTERM, signal.SIGINT)
):
    """Set ``cancel_event`` instead of dying when one of ``signals`` arrives."""

    def handler(signum, frame):
        logger.warning(
            "Received %s, finishing the current transfer and skipping the rest",
            signal.Signals(signum).name,
        )
        cancel_event.set()

    previous = {}
    for signum in signals:
        previous[signum] = signal.signal(signum, handler)
    try:
        yield cancel_event
    finally:
        for signum, old_handler in previous.items():
            signal.signal(signum, old_handler)


def execute_backup(args: argparse.Namespace) -> int:
    """Execute the backup command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    now = datetime.now()
    config = setup_run(args, now)
    if config is None:
        return 1

    lease = acquire_lease(config)
    if lease is None:
        return 1

    with lease:
        uploaders = default_uploaders()
        planner = DestinationPlanner(uploaders, timeout=config.timeout)
        if not validate_input(config, planner):
            return 1

        attempt = BackupAttempt.create(
            hostname=config.hostname,
            source_file=config.source_file,
            suffix=config.suffix,
            dry_run=config.dry_run,
            now=now,
        )
        coordinator = TransferCoordinator(
            uploaders,
            timeout=config.timeout,
            parallel_targets=config.parallel_targets,
        )

        logger.info(__util__.log_heading(f"Started at {now.ctime()}"))
        with cancel_on_signals(threading.Event()) as cancel_event:
            backup_run = coordinator.run(attempt, config.backup_targets(), cancel_event)
        logger.info(__util__.log_heading(f"Finished at {datetime.now().ctime()}"))

    for outcome in backup_run.outcomes:
        logger.info("%s", outcome)

    if backup_run.status is RunStatus.FAILED:
        logger.error(
            "Backup completed with errors: %d of %d target(s) failed",
            len(backup_run.failed),
            len(backup_run.outcomes),
        )
    elif attempt.dry_run:
        logger.info("Dry run complete, nothing was copied")
    else:
        logger.info("Backup copied to all %d target(s)", len(backup_run.outcomes))

    return backup_run.exit_code
