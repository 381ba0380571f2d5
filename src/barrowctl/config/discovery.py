"""Locating and reading ``barrowctl.toml``.

Resolution order: the ``BARROWCTL_CONFIG`` env var when set (no fallback
if it names a missing file), otherwise the nearest ``barrowctl.toml`` in
the start directory or any of its parents.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

from barrowctl.config.models import BarrowctlConfig

CONFIG_FILENAME = "barrowctl.toml"
CONFIG_ENV_VAR = "BARROWCTL_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file in effect for *start* (default: cwd), or None."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        explicit = Path(override)
        return explicit if explicit.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None = None, cwd: Path | None = None) -> BarrowctlConfig:
    """Parse and validate the TOML config.

    Discovers the file from *cwd* when *path* is not given; with no file
    anywhere the defaults apply.
    """
    source = path if path is not None else find_config(cwd)
    if source is None:
        return BarrowctlConfig()
    with source.open("rb") as fh:
        return BarrowctlConfig.model_validate(tomllib.load(fh))
