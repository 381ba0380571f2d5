"""Tests for config models: defaults and sparse overrides."""

import pytest
from pydantic import ValidationError

from barrowctl.config.models import BarrowConfig, BarrowctlConfig, LayoutConfig
from barrowctl.domain.types import SizeClass


class TestBarrowctlConfig:
    def test_full_defaults(self) -> None:
        """Fresh BarrowctlConfig has sensible defaults for all sections."""
        cfg = BarrowctlConfig()
        assert cfg.barrow.file == "barrow.json"
        assert cfg.barrow.default_name == "Your Barrow"
        assert cfg.barrow.auto_layout is True
        assert cfg.layout.radius_small == 2.0
        assert cfg.layout.radius_medium == 3.0
        assert cfg.layout.radius_large == 4.5
        assert cfg.layout.margin == 2.0
        assert cfg.layout.ring_min_radius == 12.0
        assert cfg.layout.carddon_lift == 1.2

    def test_sparse_override(self) -> None:
        """Only override fields you care about; the rest keep defaults."""
        cfg = BarrowctlConfig.model_validate({"layout": {"margin": 1.0}})
        assert cfg.layout.margin == 1.0
        assert cfg.layout.radius_medium == 3.0  # default preserved
        assert cfg.barrow == BarrowConfig()

    def test_json_round_trip(self) -> None:
        cfg = BarrowctlConfig()
        restored = BarrowctlConfig.model_validate_json(cfg.model_dump_json())
        assert restored == cfg

    def test_frozen(self) -> None:
        cfg = BarrowctlConfig()
        with pytest.raises(ValidationError):
            cfg.barrow = BarrowConfig()  # type: ignore[misc]


class TestLayoutConfig:
    def test_radius_for(self) -> None:
        cfg = LayoutConfig()
        assert cfg.radius_for(SizeClass.SMALL) == 2.0
        assert cfg.radius_for(SizeClass.MEDIUM) == 3.0
        assert cfg.radius_for(SizeClass.LARGE) == 4.5

    def test_radii_must_grow(self) -> None:
        with pytest.raises(ValidationError, match="footprint radii"):
            LayoutConfig(radius_small=3.0, radius_medium=3.0)

    def test_radii_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            LayoutConfig(radius_small=0.0)

    def test_negative_margin(self) -> None:
        with pytest.raises(ValidationError, match="margin"):
            LayoutConfig(margin=-1.0)

    def test_zero_margin_allowed(self) -> None:
        assert LayoutConfig(margin=0.0).margin == 0.0
