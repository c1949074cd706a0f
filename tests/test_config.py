"""Tests for kernel settings loading (request_kernel/config.py)."""

import pytest
import yaml

from request_kernel.config import (
    ENV_DATABASE_URL,
    ENV_LOG_LEVEL,
    KernelSettings,
    load_settings,
    load_yaml_file,
    parse_settings,
)


class TestParseSettings:

    def test_empty_mapping_gives_defaults(self):
        assert parse_settings({}) == KernelSettings()

    def test_known_keys_applied(self):
        settings = parse_settings({"database_url": "postgresql://db/requests", "pool_size": 5})
        assert settings.database_url == "postgresql://db/requests"
        assert settings.pool_size == 5
        assert settings.max_overflow == 10

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValueError, match="Unknown setting"):
            parse_settings({"database_url": "sqlite://", "pool": 3})


class TestLoadYamlFile:

    def test_mapping_loaded(self, tmp_path):
        path = tmp_path / "kernel.yaml"
        path.write_text("log_level: DEBUG\necho: true\n")
        assert load_yaml_file(path) == {"log_level": "DEBUG", "echo": True}

    def test_empty_file_is_empty_mapping(self, tmp_path):
        path = tmp_path / "kernel.yaml"
        path.write_text("")
        assert load_yaml_file(path) == {}

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "kernel.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="expected a mapping"):
            load_yaml_file(path)

    def test_malformed_yaml_propagates(self, tmp_path):
        path = tmp_path / "kernel.yaml"
        path.write_text("database_url: [unclosed\n")
        with pytest.raises(yaml.YAMLError):
            load_yaml_file(path)


class TestLoadSettings:

    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "absent.yaml", environ={})
        assert settings == KernelSettings()

    def test_file_values_used(self, tmp_path):
        path = tmp_path / "kernel.yaml"
        path.write_text("database_url: sqlite:///club.db\nmax_overflow: 2\n")
        settings = load_settings(path, environ={})
        assert settings.database_url == "sqlite:///club.db"
        assert settings.max_overflow == 2

    def test_environment_overrides_file(self, tmp_path):
        path = tmp_path / "kernel.yaml"
        path.write_text("database_url: sqlite:///club.db\nlog_level: INFO\n")
        settings = load_settings(path, environ={
            ENV_DATABASE_URL: "postgresql://prod/requests",
            ENV_LOG_LEVEL: "debug",
        })
        assert settings.database_url == "postgresql://prod/requests"
        assert settings.log_level == "DEBUG"

    def test_blank_environment_values_ignored(self, tmp_path):
        settings = load_settings(tmp_path / "absent.yaml", environ={ENV_DATABASE_URL: ""})
        assert settings.database_url == KernelSettings().database_url

    def test_settings_are_frozen(self):
        settings = KernelSettings()
        with pytest.raises(AttributeError):
            settings.pool_size = 1
