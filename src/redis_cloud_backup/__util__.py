# pyright: standard

"""redis-cloud-backup: redis_cloud_backup/__util__.py
Errors and small helpers shared by all modules.
"""

import enum
import logging
import subprocess
from datetime import datetime

logger = logging.getLogger(__name__)

# Same layout as `date +%F_%H-%M`, existing backup sets depend on it
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M"


class AbortError(Exception):
    """Fatal error, the run stops."""


class AlreadyRunningError(AbortError):
    """Another backup run holds the lease for this host."""


class ValidationErrorKind(enum.Enum):
    MISSING_CREDENTIAL_OR_TOOL = "missing credential or tool"
    MISSING_BUCKET_CONFIG = "missing bucket configuration"
    UNREACHABLE_BUCKET = "unreachable bucket"


class ValidationError(AbortError):
    """A single pre-flight problem with the configuration or a target."""

    def __init__(self, kind, message, target=None) -> None:
        super().__init__(message)
        self.kind = kind
        self.target = target


class ValidationFailed(AbortError):
    """Every pre-flight problem found, raised once validation is complete."""

    def __init__(self, errors) -> None:
        self.errors = list(errors)
        super().__init__(
            f"{len(self.errors)} error(s) while validating input: "
            + "; ".join(str(e) for e in self.errors)
        )


class InventoryError(AbortError):
    """Listing existing backups failed, no partial result is returned."""


class TransferError(Exception):
    """A vendor command failed. Non-fatal for the run."""

    def __init__(self, reason) -> None:
        super().__init__(reason)
        self.reason = reason


def date_stamp(now=None) -> str:
    """Return the attempt timestamp used in object paths and log file names."""
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def log_heading(caption) -> str:
    """Formatted heading for logging output sections."""
    return f"{'*' * 15} {caption} {'*' * 15}"


def exec_subprocess(command, timeout=None, **kwargs) -> subprocess.CompletedProcess:
    """Run ``command`` to completion and return the captured result.

    Raises:
        TransferError: the binary is missing, exits non-zero or exceeds ``timeout``.
    """
    logger.debug("Executing: %s", command)
    kwargs.setdefault("capture_output", True)
    kwargs.setdefault("text", True)
    try:
        return subprocess.run(command, check=True, timeout=timeout, **kwargs)
    except FileNotFoundError as e:
        raise TransferError(f"{command[0]} not found: {e}") from e
    except subprocess.TimeoutExpired as e:
        raise TransferError(
            f"{' '.join(command)} timed out after {timeout} seconds"
        ) from e
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or e.stdout or "").strip()
        reason = f"{' '.join(command)} exited with status {e.returncode}"
        if detail:
            reason += f": {detail}"
        raise TransferError(reason) from e
