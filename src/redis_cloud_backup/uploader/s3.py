# pyright: standard

"""redis-cloud-backup: redis_cloud_backup/uploader/s3.py
Create commands for AWS S3 through the aws cli.
"""

from ..core.models import TargetKind
from .common import Uploader


class AwsS3Uploader(Uploader):
    """Upload to AWS S3 with the aws utility."""

    tool = "aws"
    kind = TargetKind.S3

    def _build_probe_command(self, bucket_root):
        return [self.tool, "s3", "ls", bucket_root]

    def _build_copy_command(self, source_file, destination):
        return [self.tool, "s3", "cp", str(source_file), destination]

    def _build_list_command(self, prefix):
        return [self.tool, "s3", "ls", prefix]

    def _parse_listing(self, prefix, output) -> list[str]:
        """Turn ``aws s3 ls`` lines into full URIs.

        Directories are printed as ``PRE name/``, objects as
        ``<date> <time> <size> name``; the name is always the last field.
        """
        entries = []
        for line in output.splitlines():
            fields = line.split()
            if not fields:
                continue
            entries.append(f"{prefix}{fields[-1]}")
        return entries
