# pyright: standard

"""redis-cloud-backup: redis_cloud_backup/uploader/__init__.py."""

from ..__logger__ import logger
from ..core.models import TargetKind
from .common import Uploader
from .gcs import GsutilUploader
from .s3 import AwsS3Uploader

# Adding a vendor means adding a kind and registering its uploader here
UPLOADERS = {
    TargetKind.GCS: GsutilUploader,
    TargetKind.S3: AwsS3Uploader,
}


def choose_uploader(kind, executable=None) -> Uploader:
    """
    Chooses the uploader bound to a target kind.

    Args:
        kind (TargetKind): The kind of the backup target.
        executable (str): Optional explicit path to the vendor tool.

    Returns:
        Uploader: An instance of the appropriate `Uploader` subclass.

    Raises:
        ValueError: If no uploader is registered for the kind.
    """
    try:
        uploader_class = UPLOADERS[kind]
    except KeyError:
        raise ValueError(f"No uploader registered for target kind: {kind}")
    uploader = uploader_class(executable=executable)
    logger.debug("Uploader for %s: %r", kind.value, uploader)
    return uploader


def default_uploaders() -> dict:
    """Return one uploader instance per registered target kind."""
    return {kind: choose_uploader(kind) for kind in UPLOADERS}


__all__ = [
    "Uploader",
    "GsutilUploader",
    "AwsS3Uploader",
    "UPLOADERS",
    "choose_uploader",
    "default_uploaders",
]
