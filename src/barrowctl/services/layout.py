"""Directional layout resolver — turn placement intents into positions.

Deterministic and pure: the same barrow and config always produce
bit-identical positions. Work proceeds over a :class:`PlacementGraph`
with an explicit worklist, never recursion:

1. The seed (central cavern, else the first) sits at the origin.
2. Dependents are projected from their anchor along the unit vector of
   their direction at ``r_anchor + r_self + margin``. A candidate that
   would overlap an already placed footprint is pushed further along the
   same direction, one spacing at a time.
3. When the worklist drains, the root of the earliest unresolved cavern
   goes on the fallback ring around the seed, and the worklist resumes
   from it.
4. Carddons stack above their owner; ownerless ones use the ring.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from dataclasses import dataclass, field

from barrowctl.config.models import LayoutConfig
from barrowctl.domain.directions import Vec3, unit_vector
from barrowctl.domain.model import Barrow, Position
from barrowctl.infrastructure.graph.engine import PlacementGraph

logger = logging.getLogger(__name__)

ORIGIN: Vec3 = (0.0, 0.0, 0.0)

# Tolerance for float error on diagonal projections.
_EPS = 1e-9


@dataclass
class LayoutReport:
    """What the resolver had to improvise."""

    ring_caverns: list[str] = field(default_factory=list)
    ring_carddons: list[str] = field(default_factory=list)
    pushed: list[str] = field(default_factory=list)
    dangling: list[str] = field(default_factory=list)
    cycles: list[list[str]] = field(default_factory=list)


def _along(origin: Vec3, unit: Vec3, length: float) -> Vec3:
    return (
        origin[0] + unit[0] * length,
        origin[1] + unit[1] * length,
        origin[2] + unit[2] * length,
    )


class _Resolver:
    """Mutable state for one layout run."""

    def __init__(self, barrow: Barrow, config: LayoutConfig) -> None:
        self.barrow = barrow
        self.config = config
        self.graph = PlacementGraph(barrow)
        self.report = LayoutReport()
        self.radius = {c.id: config.radius_for(c.size_class) for c in barrow.caverns}
        self.order = {c.id: i for i, c in enumerate(barrow.caverns)}
        self.slots = max(1, len(barrow.caverns) + len(barrow.carddons))
        self.placed: dict[str, Vec3] = {}
        # Everything that must not be overlapped: (centre, radius).
        self.footprints: list[tuple[Vec3, float]] = []
        self.seed_pos: Vec3 = ORIGIN

    # --- Geometry ---

    def _is_clear(self, pos: Vec3, radius: float) -> bool:
        margin = self.config.margin
        return all(
            math.dist(pos, other) >= radius + r + margin - _EPS
            for other, r in self.footprints
        )

    def _ring_position(self, slot: int, radius: float) -> Vec3:
        cfg = self.config
        reach = max(
            (math.dist(self.seed_pos, pos) + r for pos, r in self.footprints),
            default=0.0,
        )
        chord = 0.0
        if self.slots > 1:
            chord = (2 * cfg.radius_large + cfg.margin) / (2 * math.sin(math.pi / self.slots))
        ring = max(reach + radius + cfg.margin, chord, cfg.ring_min_radius)
        angle = 2 * math.pi * slot / self.slots
        sx, sy, sz = self.seed_pos
        return (sx + ring * math.cos(angle), sy, sz + ring * math.sin(angle))

    def _project(self, cavern_id: str, anchor_id: str) -> Vec3:
        direction = self.graph.graph.edges[anchor_id, cavern_id]["direction"]
        unit = unit_vector(direction)
        r_self = self.radius[cavern_id]
        spacing = self.radius[anchor_id] + r_self + self.config.margin
        origin = self.placed[anchor_id]

        steps = 1
        pos = _along(origin, unit, spacing)
        while not self._is_clear(pos, r_self):
            steps += 1
            pos = _along(origin, unit, spacing * steps)
        if steps > 1:
            self.report.pushed.append(cavern_id)
            logger.debug("Pushed %s %d spacings from %s", cavern_id, steps, anchor_id)
        return pos

    # --- Caverns ---

    def _place(self, cavern_id: str, pos: Vec3, queue: deque[str]) -> None:
        self.placed[cavern_id] = pos
        self.footprints.append((pos, self.radius[cavern_id]))
        queue.append(cavern_id)

    def _root_of(self, cavern_id: str) -> str:
        """Walk anchors up from *cavern_id* to an unanchored cavern or a cycle."""
        seen: list[str] = []
        node = cavern_id
        while node not in seen:
            seen.append(node)
            anchor = self.graph.anchor_of(node)
            if anchor is None:
                return node
            node = anchor
        cycle = seen[seen.index(node) :]
        return min(cycle, key=self.order.__getitem__)

    def resolve_caverns(self) -> None:
        queue: deque[str] = deque()
        seed = self.graph.seed_id()
        if seed is not None:
            self._place(seed, ORIGIN, queue)

        while True:
            while queue:
                anchor = queue.popleft()
                for child in self.graph.dependents(anchor):
                    if child not in self.placed:
                        self._place(child, self._project(child, anchor), queue)

            pending = next((c.id for c in self.barrow.caverns if c.id not in self.placed), None)
            if pending is None:
                break
            root = self._root_of(pending)
            pos = self._ring_position(self.order[root], self.radius[root])
            self.report.ring_caverns.append(root)
            logger.debug("Placed %s on the fallback ring", root)
            self._place(root, pos, queue)

        for cavern in self.barrow.caverns:
            x, y, z = self.placed[cavern.id]
            cavern.position = Position(x=x, y=y, z=z)

    # --- Carddons ---

    def resolve_carddons(self) -> None:
        cfg = self.config
        stacked: dict[str, int] = {}
        for index, carddon in enumerate(self.barrow.carddons):
            owner = carddon.owner_cavern_id
            if owner is not None and owner in self.placed:
                k = stacked.get(owner, 0)
                stacked[owner] = k + 1
                x, y, z = self.placed[owner]
                lift = cfg.carddon_lift + k * cfg.carddon_spacing
                carddon.position = Position(x=x, y=y + lift, z=z)
                continue

            slot = len(self.barrow.caverns) + index
            pos = self._ring_position(slot, cfg.carddon_radius)
            self.footprints.append((pos, cfg.carddon_radius))
            self.report.ring_carddons.append(carddon.id)
            x, y, z = pos
            carddon.position = Position(x=x, y=y, z=z)


def layout_barrow_report(
    barrow: Barrow, config: LayoutConfig | None = None
) -> tuple[Barrow, LayoutReport]:
    """Position every cavern and carddon of a copy of *barrow*.

    Returns the positioned copy together with a :class:`LayoutReport`
    naming ring fallbacks, pushed caverns, dangling anchors and cycles.
    """
    out = barrow.model_copy(deep=True)
    for cavern in out.caverns:
        cavern.position = None
    for carddon in out.carddons:
        carddon.position = None

    resolver = _Resolver(out, config or LayoutConfig())
    resolver.report.dangling = resolver.graph.dangling()
    resolver.report.cycles = resolver.graph.cycles()
    resolver.resolve_caverns()
    resolver.resolve_carddons()
    logger.debug(
        "Laid out %d caverns and %d carddons (%d on ring)",
        len(out.caverns),
        len(out.carddons),
        len(resolver.report.ring_caverns) + len(resolver.report.ring_carddons),
    )
    return out, resolver.report


def layout_barrow(barrow: Barrow, config: LayoutConfig | None = None) -> Barrow:
    """Return a positioned deep copy of *barrow*."""
    positioned, _ = layout_barrow_report(barrow, config)
    return positioned
