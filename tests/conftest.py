"""Pytest configuration and shared fixtures."""

import logging
from datetime import datetime
from pathlib import Path

import pytest

from redis_cloud_backup import __util__
from redis_cloud_backup.core import BackupAttempt, BackupTarget, TargetKind
from redis_cloud_backup.uploader import Uploader


class FakeUploader(Uploader):
    """Uploader recording every call instead of running a vendor tool."""

    tool = "fake"

    def __init__(
        self,
        kind=TargetKind.GCS,
        available=True,
        probe_error=None,
        copy_errors=None,
        entries=None,
        list_error=None,
    ):
        super().__init__(executable="/usr/bin/fake" if available else None)
        self.kind = kind
        self.available = available
        self.probe_error = probe_error
        self.copy_errors = dict(copy_errors or {})
        self.entries = list(entries or [])
        self.list_error = list_error
        self.probes = []
        self.copies = []
        self.listings = []

    def is_available(self):
        return self.available

    def probe(self, bucket_root, timeout=None):
        self.probes.append((bucket_root, timeout))
        if self.probe_error:
            raise __util__.TransferError(self.probe_error)

    def copy(self, source_file, destination, timeout=None):
        self.copies.append((source_file, destination, timeout))
        for root, reason in self.copy_errors.items():
            if destination.startswith(root):
                raise __util__.TransferError(reason)

    def list_entries(self, prefix, timeout=None):
        self.listings.append((prefix, timeout))
        if self.list_error:
            raise __util__.TransferError(self.list_error)
        return list(self.entries)

    def _build_copy_command(self, source_file, destination):
        return [self.tool, "cp", str(source_file), destination]


@pytest.fixture
def gcs_target():
    return BackupTarget(TargetKind.GCS, "gs://backups")


@pytest.fixture
def s3_target():
    return BackupTarget(TargetKind.S3, "s3://backups")


@pytest.fixture
def attempt():
    """The attempt used throughout the scenarios."""
    return BackupAttempt(
        hostname="redis-01",
        timestamp="2024-01-01_00-00",
        source_file=Path("/var/lib/redis/6379/dump.rdb"),
    )


@pytest.fixture
def dry_run_attempt():
    return BackupAttempt.create(
        hostname="redis-01",
        source_file="/var/lib/redis/6379/dump.rdb",
        dry_run=True,
        now=datetime(2024, 1, 1, 0, 0),
    )


@pytest.fixture
def uploaders():
    """A fake uploader per target kind."""
    return {
        TargetKind.GCS: FakeUploader(TargetKind.GCS),
        TargetKind.S3: FakeUploader(TargetKind.S3),
    }


@pytest.fixture
def sample_config_toml():
    """Return a sample valid TOML configuration string."""
    return """
[global]
hostname = "redis-01"
rdb_dir = "/data/redis"
log_dir = "/var/log/redis"
timeout = 300
parallel_targets = 2

[[targets]]
bucket = "gs://primary-backups/"

[[targets]]
bucket = "s3://secondary-backups"
kind = "s3"
"""


@pytest.fixture
def config_file(tmp_path, sample_config_toml):
    """Create a temporary config file with sample content."""
    config_path = tmp_path / "config.toml"
    config_path.write_text(sample_config_toml)
    return config_path


@pytest.fixture
def make_uploader():
    """Factory for fake uploaders with configurable failures."""
    return FakeUploader


@pytest.fixture
def restore_logging():
    """Put back the root logger handlers replaced by create_logger."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
