"""redis-cloud-backup: redis_cloud_backup/__init__.py."""

__version__ = "1.0.0"

# Name the process table is scanned for and the lock files are keyed on
PROGRAM_NAME = "redis-cloud-backup"
