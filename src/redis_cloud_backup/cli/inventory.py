"""Inventory command: List available backups."""

import argparse
import logging
from datetime import datetime

from .. import __util__
from ..core import DestinationPlanner, list_backups
from ..uploader import default_uploaders
from .common import acquire_lease, setup_run, validate_input

logger = logging.getLogger(__name__)


def execute_inventory(args: argparse.Namespace) -> int:
    """Execute the inventory command.

    Prints one URI per backup found under each target's prefix, and
    nothing at all when any target cannot be listed.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    config = setup_run(args, datetime.now())
    if config is None:
        return 1

    lease = acquire_lease(config)
    if lease is None:
        return 1

    with lease:
        uploaders = default_uploaders()
        planner = DestinationPlanner(uploaders, timeout=config.timeout)
        if not validate_input(config, planner):
            return 1

        listed = []
        for target in config.backup_targets():
            prefix = planner.plan_inventory_prefix(
                target, config.hostname, config.suffix
            )
            try:
                listed.extend(
                    list_backups(
                        target,
                        prefix,
                        uploaders.get(target.kind),
                        timeout=config.timeout,
                    )
                )
            except __util__.InventoryError as e:
                logger.error("%s", e)
                return 1

    logger.info("Available Backups:")
    for remote in listed:
        print(remote.uri)
    return 0
