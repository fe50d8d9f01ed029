"""Configuration schema definitions using dataclasses.

Built once from the command line and optional config file, then passed
read-only to every part of a run.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..core.models import BackupTarget, TargetKind

DEFAULT_RDB_DIR = "/var/lib/redis/6379"
DEFAULT_LOG_DIR = "/var/log/redis"
DEFAULT_RDB_FILE = "dump.rdb"
DEFAULT_SUFFIX = "rdb"


@dataclass(frozen=True)
class TargetConfig:
    """Backup target configuration.

    Attributes:
        bucket: Bucket URI (gs://bucket or s3://bucket)
        kind: Storage kind, guessed from the URI scheme when omitted
    """

    bucket: str
    kind: Optional[TargetKind] = None

    def __post_init__(self):
        bucket = self.bucket.rstrip("/")
        if not bucket:
            raise ValueError(f"Bucket must not be empty, got {self.bucket!r}")
        object.__setattr__(self, "bucket", bucket)
        if self.kind is None:
            object.__setattr__(self, "kind", TargetKind.from_uri(self.bucket))

    def to_target(self) -> BackupTarget:
        return BackupTarget(kind=self.kind, bucket_root=self.bucket)


@dataclass(frozen=True)
class BackupConfig:
    """Effective settings for one invocation.

    Attributes:
        hostname: Server name used in the bucket path
        rdb_dir: Directory holding the Redis RDB file
        rdb_file: Name of the RDB file inside rdb_dir
        suffix: Backup kind tag used in the bucket path
        log_dir: Directory for the log file
        log_output: Write log records to a file instead of the console
        dry_run: Only show what would be copied
        verbose: Enable verbose output
        timeout: Seconds allowed for each vendor command (None for no limit)
        parallel_targets: Max concurrent target transfers
        lock_dir: Directory for the run lock file (None for the temp dir)
        targets: Backup targets in transfer order
    """

    hostname: str
    rdb_dir: str = DEFAULT_RDB_DIR
    rdb_file: str = DEFAULT_RDB_FILE
    suffix: str = DEFAULT_SUFFIX
    log_dir: str = DEFAULT_LOG_DIR
    log_output: bool = False
    dry_run: bool = False
    verbose: bool = False
    timeout: Optional[float] = None
    parallel_targets: int = 1
    lock_dir: Optional[str] = None
    targets: tuple[TargetConfig, ...] = field(default_factory=tuple)

    @property
    def source_file(self) -> Path:
        return Path(self.rdb_dir) / self.rdb_file

    def backup_targets(self) -> list[BackupTarget]:
        """Get the configured targets in transfer order."""
        return [t.to_target() for t in self.targets]
