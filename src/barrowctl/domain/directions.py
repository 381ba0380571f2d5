"""Direction vocabulary and unit vectors.

Right-handed, Y-up space. Compass directions lie in the X/Z plane with
east along +X and north along -Z; diagonals are normalized to unit
length. ``UP``/``DOWN`` are +Y/-Y.
"""

from __future__ import annotations

import math
from typing import TypeAlias

from barrowctl.domain.types import Direction

Vec3: TypeAlias = tuple[float, float, float]

_D = math.sqrt(0.5)

UNIT_VECTORS: dict[Direction, Vec3] = {
    Direction.N: (0.0, 0.0, -1.0),
    Direction.S: (0.0, 0.0, 1.0),
    Direction.E: (1.0, 0.0, 0.0),
    Direction.W: (-1.0, 0.0, 0.0),
    Direction.NE: (_D, 0.0, -_D),
    Direction.NW: (-_D, 0.0, -_D),
    Direction.SE: (_D, 0.0, _D),
    Direction.SW: (-_D, 0.0, _D),
    Direction.UP: (0.0, 1.0, 0.0),
    Direction.DOWN: (0.0, -1.0, 0.0),
}

# Long and short spellings accepted from JSON and editor phrases.
DIRECTION_ALIASES: dict[str, Direction] = {
    "n": Direction.N,
    "north": Direction.N,
    "s": Direction.S,
    "south": Direction.S,
    "e": Direction.E,
    "east": Direction.E,
    "w": Direction.W,
    "west": Direction.W,
    "ne": Direction.NE,
    "northeast": Direction.NE,
    "north-east": Direction.NE,
    "nw": Direction.NW,
    "northwest": Direction.NW,
    "north-west": Direction.NW,
    "se": Direction.SE,
    "southeast": Direction.SE,
    "south-east": Direction.SE,
    "sw": Direction.SW,
    "southwest": Direction.SW,
    "south-west": Direction.SW,
    "up": Direction.UP,
    "u": Direction.UP,
    "down": Direction.DOWN,
    "d": Direction.DOWN,
}


def parse_direction(token: object) -> Direction | None:
    """Resolve a direction token, or None when it names no direction."""
    if isinstance(token, Direction):
        return token
    if not isinstance(token, str):
        return None
    return DIRECTION_ALIASES.get(token.strip().lower())


def unit_vector(direction: Direction) -> Vec3:
    """Return the unit vector for *direction*."""
    return UNIT_VECTORS[direction]
