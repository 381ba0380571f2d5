"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, barrowctl.toml only contains
overrides. A fresh workspace needs no config file at all.
"""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, Field, model_validator

from barrowctl.domain.types import SizeClass


class BarrowConfig(BaseModel):
    """[barrow] section."""

    model_config = {"frozen": True}

    file: str = "barrow.json"
    default_name: str = "Your Barrow"
    auto_layout: bool = True


class LayoutConfig(BaseModel):
    """[layout] section.

    Footprint radii must grow with size class; ``margin`` is the gap
    kept between the footprints of neighbouring caverns.
    """

    model_config = {"frozen": True}

    radius_small: float = 2.0
    radius_medium: float = 3.0
    radius_large: float = 4.5
    margin: float = 2.0
    ring_min_radius: float = 12.0
    carddon_radius: float = 0.5
    carddon_lift: float = 1.2
    carddon_spacing: float = 0.9

    @model_validator(mode="after")
    def _check_radii(self) -> Self:
        if not 0 < self.radius_small < self.radius_medium < self.radius_large:
            msg = "footprint radii must satisfy 0 < small < medium < large"
            raise ValueError(msg)
        if self.margin < 0:
            msg = "margin must not be negative"
            raise ValueError(msg)
        return self

    def radius_for(self, size_class: SizeClass) -> float:
        """Footprint radius for a cavern of *size_class*."""
        return {
            SizeClass.SMALL: self.radius_small,
            SizeClass.MEDIUM: self.radius_medium,
            SizeClass.LARGE: self.radius_large,
        }[size_class]


class BarrowctlConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    barrow: BarrowConfig = Field(default_factory=BarrowConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
