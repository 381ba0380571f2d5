"""PlacementGraph — lazy-built NetworkX graph of placement intents.

Nodes are caverns in creation order; an edge ``anchor -> cavern`` exists
for every placement whose anchor is a known cavern. Link edges are
navigation, not geometry, and are deliberately absent.
Built once per layout run; a changed barrow needs a new PlacementGraph.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeAlias

import networkx as nx

from barrowctl.domain.types import CavernRole

if TYPE_CHECKING:
    from barrowctl.domain.model import Barrow

_Graph: TypeAlias = nx.DiGraph


class PlacementGraph:
    """Lazy-loading placement graph over a barrow's caverns."""

    def __init__(self, barrow: Barrow) -> None:
        self._barrow = barrow
        self._graph: _Graph | None = None

    @property
    def graph(self) -> _Graph:
        """Return the graph, building from the barrow on first access."""
        if self._graph is None:
            self._graph = self._build()
        return self._graph

    def _build(self) -> _Graph:
        """Build the DiGraph.

        All caverns are added first (so unplaced caverns appear as
        isolated nodes), then one edge per resolvable placement, in
        cavern creation order so successor iteration is deterministic.
        """
        g: _Graph = nx.DiGraph()
        for order, cavern in enumerate(self._barrow.caverns):
            g.add_node(cavern.id, order=order, size_class=cavern.size_class)

        for cavern in self._barrow.caverns:
            placement = cavern.placement
            if placement is None or placement.anchor_id not in g:
                continue
            g.add_edge(placement.anchor_id, cavern.id, direction=placement.direction)
        return g

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def seed_id(self) -> str | None:
        """The layout seed.

        The first central cavern; failing that, the first cavern with no
        placement. None when every cavern declares a placement.

        Skipping placed caverns in the fallback departs from a plain
        "first cavern in creation order" rule on purpose: a placed cavern
        whose anchor is missing goes to the ring instead of the origin.
        """
        caverns = self._barrow.caverns
        for cavern in caverns:
            if cavern.role == CavernRole.CENTRAL:
                return cavern.id
        for cavern in caverns:
            if cavern.placement is None:
                return cavern.id
        return None

    def dependents(self, anchor_id: str) -> list[str]:
        """Caverns placed relative to *anchor_id*, in creation order."""
        g = self.graph
        return sorted(g.successors(anchor_id), key=lambda n: g.nodes[n]["order"])

    def anchor_of(self, cavern_id: str) -> str | None:
        """The resolvable anchor of *cavern_id*, if any."""
        preds = list(self.graph.predecessors(cavern_id))
        return preds[0] if preds else None

    def dangling(self) -> list[str]:
        """Caverns whose placement names an anchor that does not exist."""
        g = self.graph
        return [
            c.id
            for c in self._barrow.caverns
            if c.placement is not None and c.placement.anchor_id not in g
        ]

    def cycles(self) -> list[list[str]]:
        """Placement cycles, each a list of cavern ids."""
        return [sorted(cycle) for cycle in nx.simple_cycles(self.graph)]
