# pyright: standard

"""redis-cloud-backup: redis_cloud_backup/__logger__.py
A common logger writing to a rich console or to a plain log file.
"""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

# Initialize basic console and handler
cons = Console(stderr=True)
rich_handler = RichHandler(console=cons, show_path=False)
# Create a logger directly
logger = logging.Logger("redis-cloud-backup", logging.INFO)

FILE_FORMAT = "%(asctime)s: %(levelname)s: %(message)s"
FILE_DATEFMT = "%Y-%m-%d_%H:%M:%S"


def log_file_path(log_dir, stamp) -> Path:
    """Return the path of the log file for the attempt started at ``stamp``."""
    return Path(log_dir) / f"RedisBackup{stamp}.log"


def create_logger(level="INFO", log_file=None) -> None:
    """Helper function to setup logging for the console or a log file.

    With ``log_file`` every record goes to that file instead of the console.
    """
    # pylint: disable=global-statement
    global cons, rich_handler, logger

    handler: logging.Handler
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        log_file.touch(exist_ok=True)
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
    else:
        cons = Console(stderr=True)
        rich_handler = RichHandler(console=cons, show_path=False)
        handler = rich_handler

    logger.handlers.clear()
    logger.propagate = False
    logger.setLevel(level)
    logger.addHandler(handler)

    logging.basicConfig(
        format="%(message)s",
        datefmt=FILE_DATEFMT,
        level=level,
        handlers=[handler],
        force=True,
    )
