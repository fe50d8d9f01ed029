"""CLI dispatcher: option parsing and routing to command handlers."""

import argparse
import enum
import sys
from typing import Callable

from .. import PROGRAM_NAME, __version__
from ..config.schema import DEFAULT_LOG_DIR, DEFAULT_RDB_DIR
from .common import BackupArgumentParser, add_verbosity_args


class Command(enum.Enum):
    BACKUP = "backup"
    INVENTORY = "inventory"
    COMMANDS = "commands"
    OPTIONS = "options"


COMMAND_HELP = {
    Command.BACKUP: "Backup Redis based on passed in options",
    Command.INVENTORY: "List available backups",
    Command.COMMANDS: "List available commands",
    Command.OPTIONS: "List available options",
}


def positive_float(value: str) -> float:
    """Argparse type for a strictly positive number of seconds."""
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}")
    if not seconds > 0:
        raise argparse.ArgumentTypeError(f"must be a positive number, got {value}")
    return seconds


def create_parser() -> BackupArgumentParser:
    """Create the argument parser for ``[options] <command>``."""
    epilog = "commands:\n" + "\n".join(
        f"  {command.value:<20}{text}" for command, text in COMMAND_HELP.items()
    )
    parser = BackupArgumentParser(
        prog=PROGRAM_NAME,
        description=(
            f"Redis Backup to Google Cloud Storage Version: {__version__}\n\n"
            "Utility for creating Redis Backups with Google Cloud Storage.\n"
            "Run with admin level privileges."
        ),
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "command",
        nargs="?",
        choices=[c.value for c in Command],
        metavar="command",
        help="One of: " + ", ".join(c.value for c in Command) + " (default: backup)",
    )
    parser.add_argument(
        "-a",
        "--alt-hostname",
        metavar="NAME",
        help="Specify an alternate server name to be used in the bucket path "
        "construction. Used to create or retrieve backups from different servers",
    )
    parser.add_argument(
        "-A",
        "--awsbucket",
        metavar="URI",
        help="AWS bucket used in deployment and by the cluster",
    )
    parser.add_argument(
        "-b",
        "--gcsbucket",
        metavar="URI",
        help="Google Cloud Storage bucket used in deployment and by the cluster",
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        help="Path to configuration file",
    )
    parser.add_argument(
        "-d",
        "--rdbdir",
        metavar="PATH",
        help=f"The directory in which the redis RDB file is stored "
        f"(default: {DEFAULT_RDB_DIR})",
    )
    parser.add_argument(
        "-l",
        "--log-dir",
        nargs="?",
        const="",
        metavar="PATH",
        help="Activate logging to file 'RedisBackup<DATE>.log' instead of stdout. "
        "Include an optional directory path to write the file "
        f"(default: {DEFAULT_LOG_DIR})",
    )
    parser.add_argument(
        "-n",
        "--noop",
        action="store_true",
        help="Will attempt a dry run and verify all the settings are correct",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=positive_float,
        metavar="SECONDS",
        help="Time limit for each gsutil/aws call (default: no limit)",
    )
    add_verbosity_args(parser)
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"{PROGRAM_NAME} {__version__}",
    )
    return parser


def resolve_command(args: argparse.Namespace) -> Command:
    """Return the requested command, ``backup`` when none was given.

    ``-l`` takes an optional path, so ``-l backup`` hands the command to
    the option; take it back.
    """
    if args.command is None and args.log_dir in {c.value for c in Command}:
        args.command, args.log_dir = args.log_dir, ""
    return Command(args.command or Command.BACKUP.value)


def list_commands() -> int:
    """Print the available commands, one per line."""
    for command in Command:
        print(command.value)
    return 0


def list_options(parser: BackupArgumentParser) -> int:
    """Print the available options, one flag set per line."""
    for flags in parser.option_flags:
        print(" ".join(flags))
    return 0


def cmd_backup(args: argparse.Namespace) -> int:
    """Execute backup command."""
    from .backup import execute_backup

    return execute_backup(args)


def cmd_inventory(args: argparse.Namespace) -> int:
    """Execute inventory command."""
    from .inventory import execute_inventory

    return execute_inventory(args)


HANDLERS: dict[Command, Callable[[argparse.Namespace], int]] = {
    Command.BACKUP: cmd_backup,
    Command.INVENTORY: cmd_inventory,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point for redis-cloud-backup CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)
    command = resolve_command(args)

    if command is Command.COMMANDS:
        return list_commands()
    if command is Command.OPTIONS:
        return list_options(parser)

    return HANDLERS[command](args)
