# pyright: standard

"""redis-cloud-backup: redis_cloud_backup/uploader/gcs.py
Create commands for Google Cloud Storage through gsutil.
"""

from ..core.models import TargetKind
from .common import Uploader


class GsutilUploader(Uploader):
    """Upload to Google Cloud Storage with the gsutil utility."""

    tool = "gsutil"
    kind = TargetKind.GCS

    def _build_probe_command(self, bucket_root):
        return [self.tool, "ls", bucket_root]

    def _build_copy_command(self, source_file, destination):
        return [self.tool, "cp", str(source_file), destination]

    def _build_list_command(self, prefix):
        # -d lists the attempt directories themselves, not their contents
        return [self.tool, "ls", "-d", f"{prefix}*"]
