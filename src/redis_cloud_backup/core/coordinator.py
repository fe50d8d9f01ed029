"""Copy one attempt's snapshot to every configured target."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Mapping, Optional, Sequence

from .. import __util__
from .models import BackupAttempt, BackupOutcome, BackupRun, BackupTarget, TargetKind
from .planner import DestinationPlanner

logger = logging.getLogger(__name__)


class TransferCoordinator:
    """Sequence transfers to targets and collect one outcome per target.

    A failed transfer is recorded and the remaining targets are still
    attempted. Outcomes are returned in configured target order, also when
    transfers run in parallel.

    Args:
        uploaders: Uploader instance per target kind
        timeout: Seconds allowed for each transfer, None for no limit
        parallel_targets: Max concurrent transfers
    """

    def __init__(
        self,
        uploaders: Mapping[TargetKind, object],
        timeout: Optional[float] = None,
        parallel_targets: int = 1,
    ) -> None:
        self.uploaders = uploaders
        self.timeout = timeout
        self.parallel_targets = max(1, parallel_targets)

    def run(
        self,
        attempt: BackupAttempt,
        targets: Sequence[BackupTarget],
        cancel_event: Optional[threading.Event] = None,
    ) -> BackupRun:
        """Execute the attempt against ``targets`` and return the aggregate."""
        if self.parallel_targets > 1 and len(targets) > 1:
            with ThreadPoolExecutor(max_workers=self.parallel_targets) as executor:
                futures = [
                    executor.submit(self._transfer, attempt, target, cancel_event)
                    for target in targets
                ]
                outcomes = tuple(future.result() for future in futures)
        else:
            outcomes = tuple(
                self._transfer(attempt, target, cancel_event) for target in targets
            )

        backup_run = BackupRun(attempt=attempt, outcomes=outcomes)
        for outcome in outcomes:
            logger.debug("Outcome: %s", outcome)
        return backup_run

    def _transfer(
        self,
        attempt: BackupAttempt,
        target: BackupTarget,
        cancel_event: Optional[threading.Event],
    ) -> BackupOutcome:
        destination = DestinationPlanner.plan_path(attempt, target)
        logger.info("Will use target backup directory: %s", destination)

        if cancel_event is not None and cancel_event.is_set():
            logger.warning("Run cancelled, not copying to %s", destination)
            return BackupOutcome.failed(target, destination, "cancelled")

        uploader = self.uploaders.get(target.kind)
        if attempt.dry_run:
            if uploader is not None:
                command = uploader.describe_copy(attempt.source_file, destination)
            else:
                command = f"copy {attempt.source_file} {destination}"
            logger.info("DRY RUN: %s", command)
            return BackupOutcome.skipped(target, destination)

        if uploader is None:
            reason = f"no uploader for {target.kind.value} targets"
            logger.error("Transfer to %s failed: %s", destination, reason)
            return BackupOutcome.failed(target, destination, reason)

        try:
            uploader.copy(attempt.source_file, destination, timeout=self.timeout)
        except __util__.TransferError as e:
            logger.error("Transfer to %s failed: %s", destination, e.reason)
            return BackupOutcome.failed(target, destination, e.reason)

        logger.info("Copied %s to %s", attempt.source_file, destination)
        return BackupOutcome.succeeded(target, destination)
