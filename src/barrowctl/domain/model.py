"""Barrow model — caverns, links, carddons, and metadata.

Pure data. Mutation happens only through :mod:`barrowctl.domain.merge`,
which applies commands to a deep copy; layout positions are written by
the layout resolver.

Snapshot keys are camelCase (``sizeClass``, ``anchorId``, ``fromId``,
``ownerCavernId``); Python attributes are snake_case.
:meth:`Barrow.from_snapshot` also reads the older short-key shape
(``spaces``, ``size``, ``pos``, ``from``/``to``, ``cavernId``).
"""

from __future__ import annotations

from typing import Any, Self

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

from barrowctl.domain.types import CavernRole, Direction, LinkType, SizeClass

DEFAULT_BARROW_ID = "Your Barrow"

_MODEL_CONFIG: dict[str, Any] = {
    "alias_generator": to_camel,
    "populate_by_name": True,
}


def default_meta() -> dict[str, Any]:
    """Fresh barrow metadata with the baked-in defaults."""
    return {"units": "m", "voxelSize": 1.0, "version": 1}


def _rename_keys(data: Any, legacy: dict[str, str]) -> Any:
    """Map legacy snapshot keys onto canonical ones (canonical keys win)."""
    if not isinstance(data, dict):
        return data
    out = dict(data)
    for old, new in legacy.items():
        if old in out:
            value = out.pop(old)
            out.setdefault(new, value)
    return out


class Position(BaseModel):
    """A resolved point in world space."""

    model_config = _MODEL_CONFIG

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class Placement(BaseModel):
    """Symbolic placement intent: *direction* of the anchor cavern."""

    model_config = _MODEL_CONFIG

    direction: Direction
    anchor_id: str


class Cavern(BaseModel):
    """A named spatial node of the barrow."""

    model_config = _MODEL_CONFIG

    id: str
    name: str
    role: CavernRole = CavernRole.NORMAL
    size_class: SizeClass = SizeClass.MEDIUM
    placement: Placement | None = None
    tags: list[str] = Field(default_factory=list)
    position: Position | None = None

    @model_validator(mode="before")
    @classmethod
    def _legacy_keys(cls, data: Any) -> Any:
        return _rename_keys(data, {"size": "sizeClass", "pos": "position"})


class Link(BaseModel):
    """A navigational edge (tunnel or door) between two caverns."""

    model_config = _MODEL_CONFIG

    from_id: str
    to_id: str
    direction: Direction | None = None
    link_type: LinkType = LinkType.TUNNEL

    @model_validator(mode="before")
    @classmethod
    def _legacy_keys(cls, data: Any) -> Any:
        return _rename_keys(data, {"from": "fromId", "to": "toId", "type": "linkType"})


class Carddon(BaseModel):
    """A named object or prop, optionally owned by a cavern."""

    model_config = _MODEL_CONFIG

    id: str
    name: str
    owner_cavern_id: str | None = None
    position: Position | None = None

    @model_validator(mode="before")
    @classmethod
    def _legacy_keys(cls, data: Any) -> Any:
        return _rename_keys(data, {"cavernId": "ownerCavernId", "pos": "position"})


class Barrow(BaseModel):
    """The full settlement graph being edited.

    INVARIANT: cavern ids are unique. Link endpoints, carddon owners and
    placement anchors may reference caverns that do not exist yet.
    """

    model_config = _MODEL_CONFIG

    id: str = DEFAULT_BARROW_ID
    meta: dict[str, Any] = Field(default_factory=default_meta)
    caverns: list[Cavern] = Field(default_factory=list)
    links: list[Link] = Field(default_factory=list)
    carddons: list[Carddon] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _legacy_keys(cls, data: Any) -> Any:
        return _rename_keys(data, {"spaces": "caverns"})

    # --- Lookups ---

    def get_cavern(self, cavern_id: str) -> Cavern | None:
        for cavern in self.caverns:
            if cavern.id == cavern_id:
                return cavern
        return None

    def get_carddon(self, carddon_id: str) -> Carddon | None:
        for carddon in self.carddons:
            if carddon.id == carddon_id:
                return carddon
        return None

    def cavern_ids(self) -> list[str]:
        """Cavern ids in creation order."""
        return [c.id for c in self.caverns]

    # --- Snapshot interchange ---

    @classmethod
    def from_snapshot(cls, data: dict[str, Any]) -> Self:
        """Build a barrow from its persisted JSON shape."""
        return cls.model_validate(data)

    def to_snapshot(self) -> dict[str, Any]:
        """Return the persisted/rendered JSON shape (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
