"""Shared CLI utilities and argument parsers."""

import argparse
import logging
import sys
from datetime import datetime
from typing import Optional

from .. import PROGRAM_NAME, __util__
from ..__logger__ import create_logger, log_file_path
from ..__util__ import ValidationError, ValidationErrorKind
from ..config import (
    BackupConfig,
    ConfigError,
    build_config,
    find_config_file,
    load_config,
)
from ..core import DestinationPlanner, Lease, RunGuard

logger = logging.getLogger(__name__)


class BackupArgumentParser(argparse.ArgumentParser):
    """ArgumentParser exiting with status 1 on unknown or bad options.

    Also records the flags of every option added, in declaration order,
    for the ``options`` command.
    """

    def __init__(self, *args, **kwargs):
        self.option_flags: list[tuple[str, ...]] = []
        super().__init__(*args, **kwargs)

    def add_argument(self, *args, **kwargs):
        action = super().add_argument(*args, **kwargs)
        if action.option_strings:
            self.option_flags.append(tuple(action.option_strings))
        return action

    def error(self, message):
        logger.error(
            "Unknown Option Encountered (%s). For help run '%s --help'",
            message,
            PROGRAM_NAME,
        )
        self.print_usage(sys.stderr)
        sys.exit(1)


def add_verbosity_args(parser: argparse.ArgumentParser) -> None:
    """Add verbosity-related arguments to a parser."""
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="When provided will print additional information to log file",
    )


def get_log_level(args: argparse.Namespace) -> str:
    """Determine log level from parsed arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        Log level string (DEBUG or INFO)
    """
    if getattr(args, "verbose", False):
        return "DEBUG"
    return "INFO"


def setup_run(args: argparse.Namespace, now: datetime) -> Optional[BackupConfig]:
    """Set up logging and build the run configuration.

    Logging starts on the console and moves to the log file once the
    configuration asks for one.

    Returns:
        The configuration, or None when it could not be loaded or the
        log file could not be opened
    """
    create_logger(get_log_level(args))

    try:
        config_path = find_config_file(getattr(args, "config", None))
        file_settings = None
        warnings: list[str] = []
        if config_path is not None:
            logger.debug("Loading configuration from: %s", config_path)
            file_settings, warnings = load_config(config_path)
        config, merge_warnings = build_config(args, file_settings)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return None

    level = "DEBUG" if config.verbose else "INFO"
    if config.log_output:
        log_file = log_file_path(config.log_dir, __util__.date_stamp(now))
        try:
            create_logger(level, log_file)
        except OSError as e:
            logger.error("Cannot write log file %s: %s", log_file, e)
            return None
    else:
        create_logger(level)

    for warning in warnings + merge_warnings:
        logger.warning("Config: %s", warning)
    log_config(config)
    return config


def log_config(config: BackupConfig) -> None:
    """Print out all the effective settings at debug level."""
    logger.debug(__util__.log_heading("PRINTING VARIABLES"))
    logger.debug("HOSTNAME: %s", config.hostname)
    logger.debug("SOURCE_FILE: %s", config.source_file)
    logger.debug("SUFFIX: %s", config.suffix)
    logger.debug("DRY_RUN: %s", config.dry_run)
    logger.debug("LOG_DIR: %s", config.log_dir)
    logger.debug("LOG_OUTPUT: %s", config.log_output)
    logger.debug("TIMEOUT: %s", config.timeout)
    logger.debug("PARALLEL_TARGETS: %s", config.parallel_targets)
    for target in config.targets:
        logger.debug("TARGET: %s (%s)", target.bucket, target.kind.value)
    logger.debug(__util__.log_heading("DONE PRINTING VARIABLES"))


def acquire_lease(
    config: BackupConfig, guard: Optional[RunGuard] = None
) -> Optional[Lease]:
    """Take the single-instance lease, None if another run is active."""
    guard = guard or RunGuard(lock_dir=config.lock_dir)
    try:
        return guard.acquire(config.hostname)
    except __util__.AlreadyRunningError as e:
        logger.error("%s", e)
        return None


def validate_input(config: BackupConfig, planner: DestinationPlanner) -> bool:
    """Validate every configured target before anything is copied.

    Returns:
        True when the run may proceed
    """
    logger.info(__util__.log_heading("VALIDATING INPUT"))

    errors = []
    if not config.targets:
        error = ValidationError(
            ValidationErrorKind.MISSING_BUCKET_CONFIG,
            "Please pass in the GCS Bucket to use with this script",
        )
        logger.error("%s", error)
        errors.append(error)
    else:
        try:
            planner.validate_all(config.backup_targets())
        except __util__.ValidationFailed as e:
            errors.extend(e.errors)

    if errors:
        logger.info(__util__.log_heading("ERRORS WHILE VALIDATING INPUT"))
        return False

    logger.info(__util__.log_heading("SUCCESSFULLY VALIDATED INPUT"))
    return True
