"""Editor phrases: imperative one-liners typed into the command box.

``add cavern Dento as central size large``, ``add link Dento to Forge
(north)``, ``list caverns`` and friends. The whole input is one phrase
and yields at most one command; anything unrecognized yields none.
This is a fixed phrase grammar, not natural-language understanding.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from barrowctl.domain.commands import (
    AddCarddon,
    AddCavern,
    AddLink,
    Command,
    CreateBarrow,
    ListCaverns,
    ListCarddons,
    RenameBarrow,
    RenameCarddon,
    RenameCavern,
    ShowBarrow,
)
from barrowctl.domain.directions import parse_direction

_NAME = r"[A-Za-z][\w '-]*?"
_DIR_WORD = (
    r"northeast|northwest|southeast|southwest|north|south|east|west|ne|nw|se|sw|up|down"
)


def _opt(m: re.Match[str], group: str) -> str | None:
    value = m.group(group)
    return value.strip() if value else None


def _create_barrow(m: re.Match[str]) -> Command:
    return CreateBarrow(name=_opt(m, "name"))


def _rename_barrow(m: re.Match[str]) -> Command:
    return RenameBarrow(name=m.group("name").strip())


def _add_cavern(m: re.Match[str]) -> Command:
    return AddCavern(
        name=m.group("name").strip(),
        role=_opt(m, "role"),
        size=_opt(m, "size"),
        direction=parse_direction(m.group("dir")),
        anchor=_opt(m, "anchor"),
    )


def _rename_cavern(m: re.Match[str]) -> Command:
    return RenameCavern(source=m.group("src").strip(), target=m.group("dst").strip())


def _add_link(m: re.Match[str]) -> Command:
    return AddLink(
        source=m.group("src").strip(),
        target=m.group("dst").strip(),
        direction=parse_direction(m.group("dir")),
    )


def _add_carddon(m: re.Match[str]) -> Command:
    return AddCarddon(name=m.group("name").strip(), cavern=_opt(m, "cavern"))


def _rename_carddon(m: re.Match[str]) -> Command:
    return RenameCarddon(source=m.group("src").strip(), target=m.group("dst").strip())


def _p(regex: str) -> re.Pattern[str]:
    return re.compile(regex, re.IGNORECASE)


PHRASES: list[tuple[re.Pattern[str], Callable[[re.Match[str]], Command]]] = [
    (
        _p(r"^create\s+(?:a\s+)?new\s+barrow(?:\s+(?:named|called|as)\s+(?P<name>.+))?$"),
        _create_barrow,
    ),
    (
        _p(r"^rename\s+(?:current\s+)?barrow\s+(?:to\s+)?(?P<name>.+)$"),
        _rename_barrow,
    ),
    (
        _p(
            rf"^add\s+cavern\s+(?P<name>{_NAME})"
            r"(?:\s+as\s+(?P<role>central))?"
            r"(?:\s+size\s+(?P<size>small|medium|large))?"
            rf"(?:\s+(?P<dir>{_DIR_WORD})\s+of\s+(?P<anchor>{_NAME}))?$"
        ),
        _add_cavern,
    ),
    (_p(r"^rename\s+cavern\s+(?P<src>\S.*?)\s+to\s+(?P<dst>.+)$"), _rename_cavern),
    (
        _p(r"^add\s+link\s+(?P<src>\S.*?)\s+to\s+(?P<dst>\S.*?)(?:\s*\((?P<dir>[^)]+)\))?$"),
        _add_link,
    ),
    (
        _p(r"^add\s+carddon\s+(?P<name>.+?)(?:\s+to\s+cavern\s+(?P<cavern>.+))?$"),
        _add_carddon,
    ),
    (_p(r"^rename\s+carddon\s+(?P<src>\S.*?)\s+to\s+(?P<dst>.+)$"), _rename_carddon),
    (_p(r"^list\s+caverns?$"), lambda _m: ListCaverns()),
    (_p(r"^list\s+carddons?$"), lambda _m: ListCarddons()),
    (_p(r"^(?:show|print|dump)\s+barrow$"), lambda _m: ShowBarrow()),
]


def parse_phrases(text: str) -> list[Command]:
    """Parse one editor phrase into zero or one command."""
    phrase = re.sub(r"[\r\n]+", " ", str(text or "")).strip().rstrip(".!?").strip()
    if not phrase:
        return []
    for pattern, build in PHRASES:
        m = pattern.match(phrase)
        if m:
            return [build(m)]
    return []
