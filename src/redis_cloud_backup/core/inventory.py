"""List the backups already stored under a target."""

import logging
from typing import Iterator, Optional

from .. import __util__
from .models import BackupTarget, RemoteObject

logger = logging.getLogger(__name__)


def list_backups(
    target: BackupTarget,
    prefix: str,
    uploader,
    timeout: Optional[float] = None,
) -> Iterator[RemoteObject]:
    """Yield every entry found directly below ``prefix`` on ``target``.

    The vendor listing runs to completion on the first ``next()`` before
    anything is yielded, so a failure never leaves a partial listing.

    Raises:
        InventoryError: the tool is missing or the listing failed.
    """
    if uploader is None or not uploader.is_available():
        raise __util__.InventoryError(
            f"Cannot list {target}: no {target.kind.value} utility in the PATH"
        )
    logger.debug("Listing %s", prefix)
    try:
        entries = uploader.list_entries(prefix, timeout=timeout)
    except __util__.TransferError as e:
        raise __util__.InventoryError(f"Cannot list {prefix}: {e.reason}") from e

    for uri in entries:
        yield RemoteObject(target=target, uri=uri)
