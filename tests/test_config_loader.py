"""Tests for config loader module."""

import argparse
import socket
from pathlib import Path

import pytest

from redis_cloud_backup.config.loader import (
    ConfigError,
    build_config,
    find_config_file,
    load_config,
)
from redis_cloud_backup.config.schema import BackupConfig, TargetConfig
from redis_cloud_backup.core import BackupTarget, TargetKind


def make_args(**kwargs):
    """Namespace with every option unset, as argparse would build it."""
    defaults = {
        "alt_hostname": None,
        "awsbucket": None,
        "gcsbucket": None,
        "config": None,
        "rdbdir": None,
        "log_dir": None,
        "noop": False,
        "timeout": None,
        "verbose": False,
    }
    defaults.update(kwargs)
    return argparse.Namespace(**defaults)


class TestFindConfigFile:
    """Tests for find_config_file function."""

    def test_explicit_path_exists(self, config_file):
        """Test finding explicitly specified config file."""
        assert find_config_file(str(config_file)) == config_file

    def test_explicit_path_not_exists(self, tmp_path):
        """Test error when explicit path doesn't exist."""
        with pytest.raises(ConfigError, match="not found"):
            find_config_file(str(tmp_path / "nonexistent.toml"))

    def test_search_paths(self, tmp_path, monkeypatch, config_file):
        """Test the first existing search path wins."""
        missing = tmp_path / "missing.toml"
        monkeypatch.setattr(
            "redis_cloud_backup.config.loader.CONFIG_PATHS", [missing, config_file]
        )
        assert find_config_file(None) == config_file

    def test_no_config_found(self, tmp_path, monkeypatch):
        monkeypatch.setattr(
            "redis_cloud_backup.config.loader.CONFIG_PATHS", [tmp_path / "none.toml"]
        )
        assert find_config_file(None) is None


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_valid_config(self, config_file):
        settings, warnings = load_config(config_file)

        assert warnings == []
        assert settings["hostname"] == "redis-01"
        assert settings["rdb_dir"] == "/data/redis"
        assert settings["timeout"] == 300.0
        assert settings["parallel_targets"] == 2
        assert settings["targets"] == [
            TargetConfig("gs://primary-backups", TargetKind.GCS),
            TargetConfig("s3://secondary-backups", TargetKind.S3),
        ]

    def test_kind_guessed_from_scheme(self, tmp_path):
        path = tmp_path / "c.toml"
        path.write_text('[[targets]]\nbucket = "s3://b"\n')
        settings, _ = load_config(path)
        assert settings["targets"][0].kind is TargetKind.S3

    def test_no_targets_warns(self, tmp_path):
        path = tmp_path / "c.toml"
        path.write_text('[global]\nhostname = "x"\n')
        settings, warnings = load_config(path)
        assert settings["targets"] == []
        assert "No targets configured in config file" in warnings

    def test_duplicate_targets_warn(self, tmp_path):
        path = tmp_path / "c.toml"
        path.write_text(
            '[[targets]]\nbucket = "gs://b"\n\n[[targets]]\nbucket = "gs://b/"\n'
        )
        settings, warnings = load_config(path)
        assert len(settings["targets"]) == 1
        assert any("Duplicate target" in w for w in warnings)

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[global\nhostname = ")
        with pytest.raises(ConfigError, match="Invalid TOML syntax"):
            load_config(path)

    def test_nonexistent_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Cannot read config file"):
            load_config(tmp_path / "nonexistent.toml")

    def test_target_missing_bucket(self, tmp_path):
        path = tmp_path / "c.toml"
        path.write_text('[[targets]]\nkind = "gcs"\n')
        with pytest.raises(ConfigError, match="missing required 'bucket'"):
            load_config(path)

    def test_unknown_kind(self, tmp_path):
        path = tmp_path / "c.toml"
        path.write_text('[[targets]]\nbucket = "gs://b"\nkind = "azure"\n')
        with pytest.raises(ConfigError, match="unknown kind 'azure'"):
            load_config(path)

    def test_unknown_scheme(self, tmp_path):
        path = tmp_path / "c.toml"
        path.write_text('[[targets]]\nbucket = "/mnt/backups"\n')
        with pytest.raises(ConfigError, match="Cannot determine storage kind"):
            load_config(path)

    def test_slash_only_bucket(self, tmp_path):
        path = tmp_path / "c.toml"
        path.write_text('[[targets]]\nbucket = "/"\nkind = "gcs"\n')
        with pytest.raises(ConfigError, match="must not be empty"):
            load_config(path)

    @pytest.mark.parametrize("value", ["0", "-5", '"soon"'])
    def test_bad_timeout(self, tmp_path, value):
        path = tmp_path / "c.toml"
        path.write_text(f"[global]\ntimeout = {value}\n")
        with pytest.raises(ConfigError, match="timeout"):
            load_config(path)

    def test_bad_parallel_targets(self, tmp_path):
        path = tmp_path / "c.toml"
        path.write_text("[global]\nparallel_targets = 0\n")
        with pytest.raises(ConfigError, match="parallel_targets"):
            load_config(path)


class TestBuildConfig:
    """Tests for merging command line options over config file settings."""

    def test_defaults(self):
        config, warnings = build_config(make_args(gcsbucket="gs://backups/"))

        assert isinstance(config, BackupConfig)
        assert warnings == []
        assert config.hostname == socket.gethostname()
        assert config.source_file == Path("/var/lib/redis/6379/dump.rdb")
        assert config.suffix == "rdb"
        assert config.log_dir == "/var/log/redis"
        assert config.log_output is False
        assert config.dry_run is False
        assert config.timeout is None
        assert config.backup_targets() == [BackupTarget(TargetKind.GCS, "gs://backups")]

    def test_cli_flags(self, tmp_path):
        config, _ = build_config(
            make_args(
                alt_hostname="redis-02",
                gcsbucket="gs://g",
                awsbucket="s3://a/",
                rdbdir="/data",
                noop=True,
                verbose=True,
                timeout=12.5,
                log_dir=str(tmp_path) + "/",
            )
        )

        assert config.hostname == "redis-02"
        assert config.source_file == Path("/data/dump.rdb")
        assert config.dry_run is True
        assert config.verbose is True
        assert config.timeout == 12.5
        assert config.log_output is True
        assert config.log_dir == str(tmp_path)
        assert [t.kind for t in config.targets] == [TargetKind.GCS, TargetKind.S3]

    def test_bucket_kind_follows_flag_not_scheme(self):
        config, _ = build_config(make_args(gcsbucket="my-bucket"))
        assert config.targets[0].kind is TargetKind.GCS

    def test_log_dir_flag_without_path(self):
        config, warnings = build_config(make_args(log_dir=""))
        assert config.log_output is True
        assert config.log_dir == "/var/log/redis"
        assert warnings == []

    def test_missing_log_dir_falls_back(self, tmp_path):
        config, warnings = build_config(make_args(log_dir=str(tmp_path / "nope")))
        assert config.log_output is True
        assert config.log_dir == "/var/log/redis"
        assert any("does not exist" in w for w in warnings)

    @pytest.mark.parametrize("flag", ["gcsbucket", "awsbucket"])
    def test_slash_only_bucket_flag(self, flag):
        with pytest.raises(ConfigError, match="must not be empty"):
            build_config(make_args(**{flag: "//"}))

    def test_file_log_dir_used_when_it_exists(self, tmp_path):
        settings = {"log_dir": str(tmp_path), "log_output": True}
        config, warnings = build_config(make_args(), settings)
        assert config.log_output is True
        assert config.log_dir == str(tmp_path)
        assert warnings == []

    def test_missing_file_log_dir_falls_back(self, tmp_path):
        settings = {"log_dir": str(tmp_path / "nope"), "log_output": True}
        config, warnings = build_config(make_args(), settings)
        assert config.log_dir == "/var/log/redis"
        assert any("does not exist" in w for w in warnings)

    def test_cli_overrides_file(self, config_file):
        settings, _ = load_config(config_file)
        config, _ = build_config(
            make_args(alt_hostname="cli-host", rdbdir="/cli", timeout=5.0), settings
        )
        assert config.hostname == "cli-host"
        assert config.rdb_dir == "/cli"
        assert config.timeout == 5.0
        assert config.parallel_targets == 2

    def test_file_settings_used(self, config_file):
        settings, _ = load_config(config_file)
        config, _ = build_config(make_args(), settings)
        assert config.hostname == "redis-01"
        assert config.rdb_dir == "/data/redis"
        assert config.timeout == 300.0

    def test_cli_targets_come_first(self, config_file):
        settings, _ = load_config(config_file)
        config, warnings = build_config(
            make_args(gcsbucket="gs://cli", awsbucket="s3://secondary-backups"),
            settings,
        )
        assert [t.bucket for t in config.targets] == [
            "gs://cli",
            "s3://secondary-backups",
            "gs://primary-backups",
        ]
        assert any("Duplicate target" in w for w in warnings)

    def test_config_is_immutable(self):
        config, _ = build_config(make_args())
        with pytest.raises(AttributeError):
            config.dry_run = True
