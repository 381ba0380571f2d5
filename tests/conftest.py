"""Shared pytest fixtures and test helpers for barrowctl tests."""

from __future__ import annotations

import math
from pathlib import Path

import pytest
from click.testing import CliRunner

from barrowctl.config.models import BarrowctlConfig, LayoutConfig
from barrowctl.domain.model import Barrow, Position
from barrowctl.infrastructure.store import BarrowStore
from barrowctl.services.barrow import BarrowService


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary workspace directory with no config file in effect."""
    monkeypatch.delenv("BARROWCTL_CONFIG", raising=False)
    return tmp_path


@pytest.fixture
def store(workspace: Path) -> BarrowStore:
    return BarrowStore(workspace / "barrow.json")


@pytest.fixture
def service(store: BarrowStore) -> BarrowService:
    """BarrowService over an empty workspace with default config."""
    return BarrowService(store, BarrowctlConfig())


@pytest.fixture
def _isolated_workspace(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp workspace so the CLI writes an isolated barrow.

    Use via ``@pytest.mark.usefixtures("_isolated_workspace")`` on command
    test classes.
    """
    monkeypatch.chdir(workspace)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------

HALL_ARMORY = """\
BARROW name "Khaz Dum"
CAVERN hall NAME "Great Hall" ROLE central SIZE large
CAVERN armory NAME "Armory" AT E OF hall
LINK hall armory DIR E TYPE door
CARDDON "Anvil" IN armory
"""


def xyz(pos: Position) -> tuple[float, float, float]:
    return (pos.x, pos.y, pos.z)


def position(barrow: Barrow, cavern_id: str) -> tuple[float, float, float]:
    cavern = barrow.get_cavern(cavern_id)
    assert cavern is not None and cavern.position is not None
    return xyz(cavern.position)


def assert_no_overlap(barrow: Barrow, config: LayoutConfig | None = None) -> None:
    """Every pair of caverns keeps at least r_a + r_b + margin apart."""
    cfg = config or LayoutConfig()
    caverns = barrow.caverns
    for i, a in enumerate(caverns):
        for b in caverns[i + 1 :]:
            assert a.position is not None and b.position is not None
            gap = math.dist(xyz(a.position), xyz(b.position))
            need = cfg.radius_for(a.size_class) + cfg.radius_for(b.size_class) + cfg.margin
            assert gap >= need - 1e-6, f"{a.id} and {b.id} overlap ({gap:.3f} < {need:.3f})"
