"""Destination planning and up-front target validation."""

import logging
from typing import Iterable, Mapping

from .. import __util__
from ..__util__ import ValidationError, ValidationErrorKind
from .models import BackupAttempt, BackupTarget, TargetKind

logger = logging.getLogger(__name__)


class DestinationPlanner:
    """Compute object paths and check that targets can be written to.

    Args:
        uploaders: Uploader instance per target kind
        timeout: Seconds allowed for each reachability probe, None for no limit
    """

    def __init__(self, uploaders: Mapping[TargetKind, object], timeout=None) -> None:
        self.uploaders = uploaders
        self.timeout = timeout

    @staticmethod
    def plan_path(attempt: BackupAttempt, target: BackupTarget) -> str:
        """Return ``<root>/backups/<host>/<suffix>/<timestamp>/`` for the attempt."""
        prefix = DestinationPlanner.plan_inventory_prefix(
            target, attempt.hostname, attempt.suffix
        )
        return f"{prefix}{attempt.timestamp}/"

    @staticmethod
    def plan_inventory_prefix(target: BackupTarget, hostname: str, suffix: str) -> str:
        """Return ``<root>/backups/<host>/<suffix>/``, the parent of every attempt."""
        return f"{target.bucket_root}/backups/{hostname}/{suffix}/"

    def uploader_for(self, target: BackupTarget):
        uploader = self.uploaders.get(target.kind)
        if uploader is None:
            raise ValidationError(
                ValidationErrorKind.MISSING_CREDENTIAL_OR_TOOL,
                f"No uploader available for {target.kind.value} target {target}",
                target,
            )
        return uploader

    def validate(self, target: BackupTarget) -> None:
        """Check the target's tool is present and its bucket answers a listing.

        Raises:
            ValidationError: MISSING_CREDENTIAL_OR_TOOL or UNREACHABLE_BUCKET.
        """
        uploader = self.uploader_for(target)
        if not uploader.is_available():
            raise ValidationError(
                ValidationErrorKind.MISSING_CREDENTIAL_OR_TOOL,
                f"Cannot find {uploader.tool} utility "
                "please make sure it is in the PATH",
                target,
            )
        try:
            uploader.probe(target.bucket_root, timeout=self.timeout)
        except __util__.TransferError as e:
            logger.debug("Probe of %s failed: %s", target, e.reason)
            raise ValidationError(
                ValidationErrorKind.UNREACHABLE_BUCKET,
                f"Cannot access bucket {target} make sure it exists",
                target,
            ) from e
        logger.debug("Target %s is reachable", target)

    def validate_all(self, targets: Iterable[BackupTarget]) -> None:
        """Validate every target, reporting all problems at once.

        Raises:
            ValidationFailed: with every ValidationError found.
        """
        errors = []
        for target in targets:
            try:
                self.validate(target)
            except ValidationError as e:
                logger.error("%s", e)
                errors.append(e)
        logger.debug("ERROR_COUNT: %d", len(errors))
        if errors:
            raise __util__.ValidationFailed(errors)
