# pyright: standard

"""redis-cloud-backup: redis_cloud_backup/uploader/common.py
Common functionality among uploaders.
"""

import shutil

from redis_cloud_backup import __util__
from redis_cloud_backup.__logger__ import logger


class Uploader:
    """Generic structure of a vendor command line uploader.

    Subclasses set ``tool`` and ``kind`` and build the vendor commands; every
    command is executed through ``_exec_command``.
    """

    tool = ""
    kind = None

    def __init__(self, executable=None) -> None:
        """
        Initialize the uploader.

        Args:
            executable (str): Path to the vendor tool, looked up on PATH if None.
        """
        self._executable = executable

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.tool!r})"

    @property
    def executable(self):
        """Resolved path of the vendor tool, None when it cannot be found."""
        if self._executable is None:
            self._executable = shutil.which(self.tool)
        return self._executable

    def is_available(self) -> bool:
        """Return whether the vendor tool can be run."""
        return self.executable is not None

    def probe(self, bucket_root, timeout=None) -> None:
        """Lightweight existence check of the bucket, raises TransferError."""
        self._exec_command(self._build_probe_command(bucket_root), timeout=timeout)

    def copy(self, source_file, destination, timeout=None) -> None:
        """Copy ``source_file`` below the ``destination`` prefix."""
        logger.info("Copying files to %s", destination)
        self._exec_command(
            self._build_copy_command(source_file, destination), timeout=timeout
        )

    def describe_copy(self, source_file, destination) -> str:
        """Human readable form of the copy command, used for dry runs."""
        return " ".join(self._build_copy_command(source_file, destination))

    def list_entries(self, prefix, timeout=None) -> list[str]:
        """Return the URIs of all entries directly below ``prefix``."""
        result = self._exec_command(self._build_list_command(prefix), timeout=timeout)
        return self._parse_listing(prefix, result.stdout)

    # The following methods must be implemented by uploaders.

    def _build_probe_command(self, bucket_root):
        raise NotImplementedError

    def _build_copy_command(self, source_file, destination):
        raise NotImplementedError

    def _build_list_command(self, prefix):
        raise NotImplementedError

    def _parse_listing(self, prefix, output) -> list[str]:
        return [line.strip() for line in output.splitlines() if line.strip()]

    def _exec_command(self, command, timeout=None):
        if not self.is_available():
            raise __util__.TransferError(
                f"Cannot find {self.tool} utility please make sure it is in the PATH"
            )
        return __util__.exec_subprocess(
            [self.executable, *command[1:]], timeout=timeout
        )
