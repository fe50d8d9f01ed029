"""TOML configuration loading and merging with command line options.

Handles config file discovery, parsing, and validation with helpful error
messages. Command line flags always win over config file values.
"""

import socket
import tomllib
from pathlib import Path
from typing import Any, Optional

from ..core.models import TargetKind
from .schema import (
    DEFAULT_LOG_DIR,
    DEFAULT_RDB_DIR,
    DEFAULT_RDB_FILE,
    DEFAULT_SUFFIX,
    BackupConfig,
    TargetConfig,
)


class ConfigError(Exception):
    """Configuration loading or validation error."""

    pass


# Config file search paths in priority order
CONFIG_PATHS = [
    Path.home() / ".config" / "redis-cloud-backup" / "config.toml",
    Path("/etc/redis-cloud-backup/config.toml"),
]


def find_config_file(explicit_path: str | None = None) -> Path | None:
    """Find configuration file.

    Args:
        explicit_path: Explicitly specified config path (highest priority)

    Returns:
        Path to config file, or None if not found
    """
    if explicit_path:
        path = Path(explicit_path)
        if path.exists():
            return path
        raise ConfigError(f"Config file not found: {explicit_path}")

    for path in CONFIG_PATHS:
        if path.exists():
            return path

    return None


def _parse_target(data: dict[str, Any]) -> TargetConfig:
    """Parse target configuration from dict."""
    if "bucket" not in data:
        raise ConfigError("Target missing required 'bucket' field")

    kind = None
    if "kind" in data:
        try:
            kind = TargetKind(data["kind"])
        except ValueError:
            choices = ", ".join(k.value for k in TargetKind)
            raise ConfigError(
                f"Target '{data['bucket']}' has unknown kind '{data['kind']}' "
                f"(expected one of: {choices})"
            )

    try:
        return TargetConfig(bucket=data["bucket"], kind=kind)
    except ValueError as e:
        raise ConfigError(str(e))


def _parse_global(data: dict[str, Any]) -> dict[str, Any]:
    """Parse global settings, keeping only the keys that are present."""
    settings: dict[str, Any] = {}
    for key in ("hostname", "rdb_dir", "rdb_file", "suffix", "log_dir", "lock_dir"):
        if key in data:
            settings[key] = str(data[key])

    if "timeout" in data:
        timeout = data["timeout"]
        if not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigError(f"timeout must be a positive number, got {timeout!r}")
        settings["timeout"] = float(timeout)

    if "parallel_targets" in data:
        parallel = data["parallel_targets"]
        if not isinstance(parallel, int) or parallel < 1:
            raise ConfigError(
                f"parallel_targets must be a positive integer, got {parallel!r}"
            )
        settings["parallel_targets"] = parallel

    if "log_output" in data:
        settings["log_output"] = bool(data["log_output"])
    if "verbose" in data:
        settings["verbose"] = bool(data["verbose"])

    return settings


def _dedupe_targets(
    targets: list[TargetConfig],
) -> tuple[list[TargetConfig], list[str]]:
    """Drop repeated buckets, keeping the first occurrence."""
    seen = set()
    unique = []
    warnings = []
    for target in targets:
        if target.bucket in seen:
            warnings.append(f"Duplicate target '{target.bucket}' ignored")
            continue
        seen.add(target.bucket)
        unique.append(target)
    return unique, warnings


def load_config(path: Path | str) -> tuple[dict[str, Any], list[str]]:
    """Load and validate configuration from TOML file.

    Args:
        path: Path to configuration file

    Returns:
        Tuple of (settings dict, list of warnings)

    Raises:
        ConfigError: If config is invalid or cannot be parsed
    """
    path = Path(path)

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML syntax: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read config file: {e}")

    settings = _parse_global(data.get("global", {}))
    targets = [_parse_target(t) for t in data.get("targets", [])]
    targets, warnings = _dedupe_targets(targets)
    settings["targets"] = targets

    if not targets:
        warnings.append("No targets configured in config file")

    return settings, warnings


def build_config(
    args, file_settings: Optional[dict[str, Any]] = None
) -> tuple[BackupConfig, list[str]]:
    """Merge parsed command line options over config file settings.

    The ``-b`` and ``-A`` buckets come first in target order, followed by
    the config file targets.

    Args:
        args: Parsed command line arguments
        file_settings: Settings returned by ``load_config``

    Returns:
        Tuple of (BackupConfig, list of warnings)
    """
    settings = dict(file_settings or {})
    warnings: list[str] = []

    cli_targets = []
    try:
        if getattr(args, "gcsbucket", None):
            cli_targets.append(TargetConfig(bucket=args.gcsbucket, kind=TargetKind.GCS))
        if getattr(args, "awsbucket", None):
            cli_targets.append(TargetConfig(bucket=args.awsbucket, kind=TargetKind.S3))
    except ValueError as e:
        raise ConfigError(str(e))
    targets, dupes = _dedupe_targets(cli_targets + list(settings.get("targets", [])))
    warnings.extend(dupes)

    log_output = settings.get("log_output", False)
    log_dir = DEFAULT_LOG_DIR
    requested_log_dir = settings.get("log_dir")
    if getattr(args, "log_dir", None) is not None:
        log_output = True
        requested_log_dir = args.log_dir or requested_log_dir
    if requested_log_dir:
        if Path(requested_log_dir).is_dir():
            log_dir = requested_log_dir.rstrip("/") or "/"
        else:
            warnings.append(
                f"Log directory '{requested_log_dir}' does not exist, using {log_dir}"
            )

    timeout = getattr(args, "timeout", None)
    if timeout is None:
        timeout = settings.get("timeout")

    config = BackupConfig(
        hostname=(
            getattr(args, "alt_hostname", None)
            or settings.get("hostname")
            or socket.gethostname()
        ),
        rdb_dir=(
            getattr(args, "rdbdir", None) or settings.get("rdb_dir", DEFAULT_RDB_DIR)
        ),
        rdb_file=settings.get("rdb_file", DEFAULT_RDB_FILE),
        suffix=settings.get("suffix", DEFAULT_SUFFIX),
        log_dir=log_dir,
        log_output=log_output,
        dry_run=bool(getattr(args, "noop", False)),
        verbose=bool(getattr(args, "verbose", False)) or settings.get("verbose", False),
        timeout=timeout,
        parallel_targets=settings.get("parallel_targets", 1),
        lock_dir=settings.get("lock_dir"),
        targets=tuple(targets),
    )
    return config, warnings
