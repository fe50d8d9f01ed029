"""Data model for one backup attempt and its per-target outcomes.

Everything here is immutable once built and lives only for the duration of
one run; nothing is persisted locally.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from .. import __util__


class TargetKind(enum.Enum):
    """Remote object store families, each bound to one Uploader."""

    GCS = "gcs"
    S3 = "s3"

    @property
    def scheme(self) -> str:
        return {TargetKind.GCS: "gs://", TargetKind.S3: "s3://"}[self]

    @classmethod
    def from_uri(cls, uri: str) -> "TargetKind":
        """Guess the kind from a bucket URI such as ``gs://bucket``."""
        for kind in cls:
            if uri.startswith(kind.scheme):
                return kind
        raise ValueError(f"Cannot determine storage kind for bucket: {uri}")


@dataclass(frozen=True)
class BackupTarget:
    """One configured remote destination.

    Attributes:
        kind: Object store family
        bucket_root: Bucket URI, trailing slashes are stripped
    """

    kind: TargetKind
    bucket_root: str

    def __post_init__(self):
        root = self.bucket_root.rstrip("/")
        if not root:
            raise ValueError("Backup target bucket root must not be empty")
        object.__setattr__(self, "bucket_root", root)

    def __str__(self) -> str:
        return self.bucket_root


@dataclass(frozen=True)
class BackupAttempt:
    """One invocation of the orchestrator.

    Attributes:
        hostname: Server name used in the object path
        timestamp: Fixed at creation, shared by every destination path
        source_file: Local snapshot file, not checked for existence
        suffix: Tag for the kind of backup
        dry_run: Plan transfers without performing them
    """

    hostname: str
    timestamp: str
    source_file: Path
    suffix: str = "rdb"
    dry_run: bool = False

    @classmethod
    def create(
        cls,
        hostname: str,
        source_file,
        suffix: str = "rdb",
        dry_run: bool = False,
        now: Optional[datetime] = None,
    ) -> "BackupAttempt":
        """Create an attempt stamped with the current time."""
        return cls(
            hostname=hostname,
            timestamp=__util__.date_stamp(now),
            source_file=Path(source_file),
            suffix=suffix,
            dry_run=dry_run,
        )


class OutcomeStatus(enum.Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class BackupOutcome:
    """Result of one attempt against one target."""

    target: BackupTarget
    status: OutcomeStatus
    destination: str
    reason: Optional[str] = None

    @classmethod
    def succeeded(cls, target, destination) -> "BackupOutcome":
        return cls(target, OutcomeStatus.SUCCEEDED, destination)

    @classmethod
    def failed(cls, target, destination, reason) -> "BackupOutcome":
        return cls(target, OutcomeStatus.FAILED, destination, reason)

    @classmethod
    def skipped(cls, target, destination) -> "BackupOutcome":
        return cls(target, OutcomeStatus.SKIPPED, destination, "dry run")

    def __str__(self) -> str:
        text = f"{self.destination}: {self.status.value}"
        if self.status is OutcomeStatus.FAILED and self.reason:
            text += f" ({self.reason})"
        return text


class RunStatus(enum.Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class BackupRun:
    """Aggregate result of one attempt.

    Outcomes keep the configured target order. The overall status is derived:
    FAILED when any outcome failed, SUCCEEDED otherwise.
    """

    attempt: BackupAttempt
    outcomes: tuple[BackupOutcome, ...] = field(default_factory=tuple)

    @property
    def status(self) -> RunStatus:
        if any(o.status is OutcomeStatus.FAILED for o in self.outcomes):
            return RunStatus.FAILED
        return RunStatus.SUCCEEDED

    @property
    def failed(self) -> list[BackupOutcome]:
        return [o for o in self.outcomes if o.status is OutcomeStatus.FAILED]

    @property
    def exit_code(self) -> int:
        return 1 if self.status is RunStatus.FAILED else 0


@dataclass(frozen=True)
class RemoteObject:
    """One entry found under a target's inventory prefix."""

    target: BackupTarget
    uri: str

    @property
    def name(self) -> str:
        """Last path element, the attempt timestamp for attempt directories."""
        return self.uri.rstrip("/").rsplit("/", 1)[-1]

    def __str__(self) -> str:
        return self.uri
