"""Backup orchestration for redis-cloud-backup.

RunGuard admits the attempt, DestinationPlanner validates targets and plans
object paths, TransferCoordinator performs the copies and BackupRun holds
the aggregated result.
"""

from .coordinator import TransferCoordinator
from .guard import Lease, RunGuard
from .inventory import list_backups
from .models import (
    BackupAttempt,
    BackupOutcome,
    BackupRun,
    BackupTarget,
    OutcomeStatus,
    RemoteObject,
    RunStatus,
    TargetKind,
)
from .planner import DestinationPlanner

__all__ = [
    "BackupAttempt",
    "BackupOutcome",
    "BackupRun",
    "BackupTarget",
    "DestinationPlanner",
    "Lease",
    "OutcomeStatus",
    "RemoteObject",
    "RunGuard",
    "RunStatus",
    "TargetKind",
    "TransferCoordinator",
    "list_backups",
]
