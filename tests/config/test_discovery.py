"""Tests for config discovery and loading."""

from pathlib import Path

import pytest

from barrowctl.config.discovery import CONFIG_FILENAME, find_config, load_config
from barrowctl.config.models import BarrowctlConfig


class TestFindConfig:
    def test_finds_in_current_dir(self, workspace: Path) -> None:
        config_file = workspace / CONFIG_FILENAME
        config_file.write_text('[barrow]\ndefault_name = "test"\n')
        assert find_config(workspace) == config_file

    def test_walks_up(self, workspace: Path) -> None:
        config_file = workspace / CONFIG_FILENAME
        config_file.write_text("")
        child = workspace / "a" / "b" / "c"
        child.mkdir(parents=True)
        assert find_config(child) == config_file.resolve()

    def test_returns_none_when_not_found(self, workspace: Path) -> None:
        child = workspace / "empty"
        child.mkdir()
        assert find_config(child) is None

    def test_env_var_override(self, workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = workspace / "custom.toml"
        config_file.write_text("")
        monkeypatch.setenv("BARROWCTL_CONFIG", str(config_file))
        assert find_config(workspace / "nowhere") == config_file

    def test_env_var_pointing_nowhere(
        self, workspace: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (workspace / CONFIG_FILENAME).write_text("")
        monkeypatch.setenv("BARROWCTL_CONFIG", str(workspace / "missing.toml"))
        assert find_config(workspace) is None


class TestLoadConfig:
    def test_loads_from_file(self, workspace: Path) -> None:
        config_file = workspace / CONFIG_FILENAME
        config_file.write_text(
            '[barrow]\ndefault_name = "Deepdelve"\n[layout]\nring_min_radius = 20.0\n'
        )
        cfg = load_config(config_file)
        assert cfg.barrow.default_name == "Deepdelve"
        assert cfg.layout.ring_min_radius == 20.0
        assert cfg.layout.margin == 2.0  # default

    def test_returns_defaults_when_no_file(self, workspace: Path) -> None:
        assert load_config(cwd=workspace) == BarrowctlConfig()

    def test_empty_file_returns_defaults(self, workspace: Path) -> None:
        config_file = workspace / CONFIG_FILENAME
        config_file.write_text("")
        assert load_config(config_file) == BarrowctlConfig()
