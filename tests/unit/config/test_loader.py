"""Unit tests for the TOML layer loader."""

from pathlib import Path

import pytest

from threadwarden.config.loader import (
    config_layers,
    get_config_dir,
    get_environment,
    load_config,
    merge_layers,
    read_layer,
)
from threadwarden.config.settings import ConfigurationError


class TestMergeLayers:
    def test_tables_merge_key_by_key(self) -> None:
        lower = {"policy": {"kick_threshold": 10, "warning_threshold": 7}, "debug": False}
        upper = {"policy": {"kick_threshold": 12}}

        assert merge_layers(lower, upper) == {
            "policy": {"kick_threshold": 12, "warning_threshold": 7},
            "debug": False,
        }

    def test_scalar_replaces_table(self) -> None:
        assert merge_layers({"policy": {"ttl_hours": 24}}, {"policy": "off"}) == {
            "policy": "off"
        }

    def test_role_list_is_replaced_not_appended(self) -> None:
        lower = {"policy": {"exempt_role_ids": ["400000000000000000"]}}
        upper = {"policy": {"exempt_role_ids": ["500000000000000000"]}}

        merged = merge_layers(lower, upper)

        assert merged["policy"]["exempt_role_ids"] == ["500000000000000000"]
        assert lower["policy"]["exempt_role_ids"] == ["400000000000000000"]


class TestReadLayer:
    def test_reads_tables(self, tmp_path: Path) -> None:
        layer = tmp_path / "default.toml"
        layer.write_text("[sweeper]\ninterval_seconds = 60\nenabled = true")

        assert read_layer(layer) == {"sweeper": {"interval_seconds": 60, "enabled": True}}

    def test_syntax_error_names_the_file(self, tmp_path: Path) -> None:
        layer = tmp_path / "production.toml"
        layer.write_text("exempt_role_ids = [unclosed")

        with pytest.raises(ConfigurationError, match="production.toml"):
            read_layer(layer)


class TestGetEnvironment:
    def test_returns_env_var_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("THREADWARDEN_ENV", "production")
        assert get_environment() == "production"

    @pytest.mark.parametrize("value", [None, "", "  "])
    def test_defaults_to_development(
        self, monkeypatch: pytest.MonkeyPatch, value: str | None
    ) -> None:
        if value is None:
            monkeypatch.delenv("THREADWARDEN_ENV", raising=False)
        else:
            monkeypatch.setenv("THREADWARDEN_ENV", value)
        assert get_environment() == "development"

    def test_path_like_name_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("THREADWARDEN_ENV", "../secrets")

        with pytest.raises(ConfigurationError, match="THREADWARDEN_ENV"):
            get_environment()


class TestGetConfigDir:
    def test_uses_env_var_when_set(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("THREADWARDEN_CONFIG_DIR", str(test_config_dir))
        assert get_config_dir() == test_config_dir

    def test_missing_override_is_fatal(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("THREADWARDEN_CONFIG_DIR", str(tmp_path / "missing"))

        with pytest.raises(ConfigurationError, match="THREADWARDEN_CONFIG_DIR"):
            get_config_dir()

    def test_prefers_working_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "config").mkdir()
        monkeypatch.delenv("THREADWARDEN_CONFIG_DIR", raising=False)
        monkeypatch.chdir(tmp_path)

        assert get_config_dir() == tmp_path / "config"


class TestConfigLayers:
    def test_only_existing_files(self, test_config_dir: Path, mock_toml_files) -> None:
        mock_toml_files({"default.toml": "debug = true"})

        assert config_layers(test_config_dir, "staging") == [test_config_dir / "default.toml"]

    def test_default_environment_is_not_read_twice(
        self, test_config_dir: Path, mock_toml_files
    ) -> None:
        mock_toml_files({"default.toml": "debug = true"})

        assert config_layers(test_config_dir, "default") == [test_config_dir / "default.toml"]


class TestLoadConfig:
    def test_environment_layer_wins(
        self,
        test_config_dir: Path,
        mock_toml_files,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        mock_toml_files({
            "default.toml": "app_name = 'test'\n[sweeper]\ninterval_seconds = 300",
            "staging.toml": "[sweeper]\ninterval_seconds = 30",
        })
        monkeypatch.setenv("THREADWARDEN_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("THREADWARDEN_ENV", "staging")

        assert load_config() == {"app_name": "test", "sweeper": {"interval_seconds": 30}}

    def test_explicit_arguments(self, test_config_dir: Path, mock_toml_files) -> None:
        mock_toml_files({
            "default.toml": "[policy]\nkick_threshold = 10",
            "production.toml": "[policy]\nkick_mode = 'reaches'",
        })

        assert load_config(test_config_dir, "production") == {
            "policy": {"kick_threshold": 10, "kick_mode": "reaches"}
        }

    def test_empty_directory_gives_empty_config(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without any TOML file the model defaults apply."""
        monkeypatch.setenv("THREADWARDEN_CONFIG_DIR", str(test_config_dir))
        assert load_config() == {}
