"""BarrowSettings: one frozen object for flags, env vars and TOML.

Precedence, strongest first: CLI flags (init kwargs), ``BARROWCTL_*``
env vars (``__`` separates nested keys, e.g.
``BARROWCTL_LAYOUT__MARGIN``), the discovered ``barrowctl.toml``, then
the defaults on the section models.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from barrowctl.config.discovery import find_config
from barrowctl.config.models import BarrowConfig, LayoutConfig

# TOML path handed from from_cli() to settings_customise_sources().
_pending = threading.local()


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise click.ClickException(f"Invalid TOML in {path}: {exc}") from exc


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by one ``barrowctl.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data = _read_toml(toml_path) if toml_path and toml_path.is_file() else {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


class BarrowSettings(BaseSettings):
    """Resolved configuration for one CLI invocation.

    Attributes:
        workspace_root: Directory the barrow file is relative to; the
            parent of ``barrowctl.toml``, or CWD when there is none.
        config_path: The TOML file in effect, or None.
        barrow_file: ``--file`` override for the snapshot location.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "BARROWCTL_",
        "env_nested_delimiter": "__",
    }

    workspace_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None
    barrow_file: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    barrow: BarrowConfig = Field(default_factory=BarrowConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml = TomlSettingsSource(settings_cls, getattr(_pending, "toml_path", None))
        return init_settings, env_settings, toml

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        workspace_root: Path | None = None,
        **cli_flags: Any,
    ) -> BarrowSettings:
        """Build settings for a CLI run.

        An explicit *config_path* that does not exist is ignored rather
        than falling back to discovery.
        """
        if config_path:
            explicit = Path(config_path)
            toml_path = explicit if explicit.is_file() else None
        else:
            toml_path = find_config(workspace_root)

        if workspace_root is None:
            workspace_root = toml_path.parent if toml_path else Path.cwd()

        _pending.toml_path = toml_path
        try:
            return cls(workspace_root=workspace_root, config_path=toml_path, **cli_flags)
        finally:
            _pending.toml_path = None

    @property
    def barrow_path(self) -> Path:
        """Absolute path of the barrow snapshot file."""
        path = self.barrow_file or Path(self.barrow.file)
        return path if path.is_absolute() else self.workspace_root / path
