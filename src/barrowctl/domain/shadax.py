"""Shadax (Shield & Axe) — the line-oriented barrow build language.

One statement per line, keywords case-insensitive::

    # the seed of the barrow
    BARROW name "Khaz Dum"
    CAVERN hall NAME "Great Hall" ROLE central SIZE large
    CAVERN armory NAME "Armory" AT E OF hall
    LINK hall armory DIR E TYPE door
    CARDDON "Anvil" IN armory
    RENAME CAVERN armory TO forge
    RENAME CARDDON "Anvil" TO "Great Anvil"
    Dento is the central cavern

Rules are tried top to bottom and the first match wins. Lines matching
no rule are skipped without error; so are unknown modifiers in a
matched line's tail. Parsing never raises.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import TypeAlias
from dataclasses import dataclass, field

from barrowctl.domain.commands import (
    AddCarddon,
    AddCavern,
    AddLink,
    Command,
    RenameBarrow,
    RenameCarddon,
    RenameCavern,
)
from barrowctl.domain.types import CavernRole

logger = logging.getLogger(__name__)

_ID = r"[A-Za-z0-9_-]+"
# Two-letter directions first so "NE" is never read as "N".
_DIR = r"NE|NW|SE|SW|UP|DOWN|N|S|E|W"

_NAME_MOD = re.compile(r'\bNAME\s+"([^"]*)"', re.IGNORECASE)
_ROLE_MOD = re.compile(r"\bROLE\s+(central|normal)\b", re.IGNORECASE)
_SIZE_MOD = re.compile(r"\bSIZE\s+(small|medium|large)\b", re.IGNORECASE)
_AT_MOD = re.compile(rf"\bAT\s+({_DIR})\s+OF\s+({_ID})", re.IGNORECASE)
_DIR_MOD = re.compile(rf"\bDIR\s+({_DIR})\b", re.IGNORECASE)
_TYPE_MOD = re.compile(r"\bTYPE\s+(tunnel|door)\b", re.IGNORECASE)
_IN_MOD = re.compile(rf"\bIN\s+({_ID})", re.IGNORECASE)


@dataclass(frozen=True)
class SkippedLine:
    """A non-comment line that matched no rule."""

    line_no: int
    text: str


@dataclass
class ParseReport:
    """Commands produced by a parse, plus the lines it skipped."""

    commands: list[Command] = field(default_factory=list)
    skipped: list[SkippedLine] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Builders: one per rule, each turning a match into a command
# ---------------------------------------------------------------------------


def _barrow(m: re.Match[str]) -> Command:
    return RenameBarrow(name=m.group(1))


def _cavern(m: re.Match[str]) -> Command:
    tail = m.group(2) or ""
    display_name: str | None = None
    name_match = _NAME_MOD.search(tail)
    if name_match:
        display_name = name_match.group(1)
        # Quoted text must not be scanned for modifiers.
        tail = tail[: name_match.start()] + tail[name_match.end() :]

    role_match = _ROLE_MOD.search(tail)
    size_match = _SIZE_MOD.search(tail)
    at_match = _AT_MOD.search(tail)
    return AddCavern(
        name=m.group(1),
        display_name=display_name,
        role=role_match.group(1) if role_match else None,
        size=size_match.group(1) if size_match else None,
        direction=at_match.group(1) if at_match else None,
        anchor=at_match.group(2) if at_match else None,
    )


def _link(m: re.Match[str]) -> Command:
    tail = m.group(3) or ""
    dir_match = _DIR_MOD.search(tail)
    type_match = _TYPE_MOD.search(tail)
    return AddLink(
        source=m.group(1),
        target=m.group(2),
        direction=dir_match.group(1) if dir_match else None,
        link_type=type_match.group(1) if type_match else None,
    )


def _carddon(m: re.Match[str]) -> Command:
    in_match = _IN_MOD.search(m.group(2) or "")
    return AddCarddon(name=m.group(1), cavern=in_match.group(1) if in_match else None)


def _rename_cavern(m: re.Match[str]) -> Command:
    return RenameCavern(source=m.group(1), target=m.group(2))


def _rename_carddon(m: re.Match[str]) -> Command:
    return RenameCarddon(source=m.group(1), target=m.group(2))


def _central_sentence(m: re.Match[str]) -> Command:
    return AddCavern(name=m.group(1).strip(), role=CavernRole.CENTRAL)


_Builder: TypeAlias = Callable[[re.Match[str]], Command]

RULES: list[tuple[re.Pattern[str], _Builder]] = [
    (re.compile(r'^BARROW\s+name\s+"([^"]+)"', re.IGNORECASE), _barrow),
    (re.compile(rf"^CAVERN\s+({_ID})(.*)$", re.IGNORECASE), _cavern),
    (re.compile(rf"^LINK\s+({_ID})\s+({_ID})(.*)$", re.IGNORECASE), _link),
    (re.compile(r'^CARDDON\s+"([^"]+)"(.*)$', re.IGNORECASE), _carddon),
    (re.compile(rf"^RENAME\s+CAVERN\s+({_ID})\s+TO\s+({_ID})", re.IGNORECASE), _rename_cavern),
    (
        re.compile(r'^RENAME\s+CARDDON\s+"([^"]+)"\s+TO\s+"([^"]+)"', re.IGNORECASE),
        _rename_carddon,
    ),
    (
        re.compile(r"^([A-Za-z][A-Za-z0-9 _'-]*?)\s+is\s+the\s+central\s+cavern\b", re.IGNORECASE),
        _central_sentence,
    ),
]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_shadax_report(text: str) -> ParseReport:
    """Parse Shadax *text*, keeping track of skipped lines.

    Blank lines and ``#`` comments are neither commands nor skips.
    """
    report = ParseReport()
    for line_no, raw in enumerate(str(text or "").splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        for pattern, build in RULES:
            m = pattern.match(line)
            if m:
                report.commands.append(build(m))
                break
        else:
            logger.debug("Skipping unrecognized Shadax line %d: %s", line_no, line)
            report.skipped.append(SkippedLine(line_no=line_no, text=line))
    return report


def parse_shadax(text: str) -> list[Command]:
    """Parse Shadax *text* into an ordered command list. Never raises."""
    return parse_shadax_report(text).commands

