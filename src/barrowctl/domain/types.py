"""Classification enums for barrows and their commands.

Wire values match the snapshot and command-array JSON exactly, so the
enums double as the serialization vocabulary.
"""

from __future__ import annotations

from enum import StrEnum


class CavernRole(StrEnum):
    """Role of a cavern in layout; exactly one central cavern seeds it."""

    NORMAL = "normal"
    CENTRAL = "central"


class SizeClass(StrEnum):
    """Cavern size class, mapped to a footprint radius at layout time."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class LinkType(StrEnum):
    """Navigational edge kinds between caverns."""

    TUNNEL = "tunnel"
    DOOR = "door"


class Direction(StrEnum):
    """The ten symbolic placement directions."""

    N = "N"
    S = "S"
    E = "E"
    W = "W"
    NE = "NE"
    NW = "NW"
    SE = "SE"
    SW = "SW"
    UP = "UP"
    DOWN = "DOWN"


class CommandType(StrEnum):
    """Tags of the closed command union."""

    CREATE_BARROW = "createBarrow"
    RENAME_BARROW = "renameBarrow"
    ADD_CAVERN = "addCavern"
    RENAME_CAVERN = "renameCavern"
    ADD_LINK = "addLink"
    ADD_CARDDON = "addCarddon"
    RENAME_CARDDON = "renameCarddon"
    LIST_CAVERNS = "listCaverns"
    LIST_CARDDONS = "listCarddons"
    SHOW_BARROW = "showBarrow"
    MERGE_META = "mergeMeta"


# Read-only commands never mutate the barrow.
READ_ONLY_COMMANDS: frozenset[CommandType] = frozenset(
    {
        CommandType.LIST_CAVERNS,
        CommandType.LIST_CARDDONS,
        CommandType.SHOW_BARROW,
    }
)
