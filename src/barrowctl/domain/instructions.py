"""Instruction documents: the structured alternative to Shadax.

Assistants that answer in JSON produce a document shaped like::

    {
      "caverns": [{"id": "hall", "name": "Great Hall", "role": "central",
                   "tags": ["ornate"], "size": "large"}],
      "links": [{"from": "hall", "to": "crypt", "direction": "N", "type": "door"}],
      "meta": {"units": "m"}
    }

:func:`normalize_instructions` lowers it into the same command list the
Shadax parser would produce, so both channels share one execution path.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from barrowctl.domain.commands import AddCavern, AddLink, Command, MergeMeta, RenameBarrow
from barrowctl.domain.errors import InstructionError

logger = logging.getLogger(__name__)


def _require_list(doc: Mapping[str, Any], key: str) -> list[Any]:
    value = doc.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        msg = f"'{key}' must be a list, got {type(value).__name__}"
        raise InstructionError(msg)
    return value


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _cavern_command(entry: Any) -> AddCavern | None:
    if not isinstance(entry, Mapping):
        return None
    cavern_id = _text(entry.get("id"))
    name = _text(entry.get("name"))
    seed = cavern_id or name
    if seed is None:
        return None
    return AddCavern(
        name=seed,
        display_name=name,
        role=entry.get("role"),
        size=entry.get("size", entry.get("sizeClass")),
        direction=entry.get("direction"),
        anchor=_text(entry.get("anchor")),
        tags=entry.get("tags") or [],
    )


def _link_command(entry: Any) -> AddLink | None:
    if not isinstance(entry, Mapping):
        return None
    source = _text(entry.get("from"))
    target = _text(entry.get("to"))
    if source is None or target is None:
        return None
    return AddLink(
        source=source,
        target=target,
        direction=entry.get("direction"),
        link_type=entry.get("type", entry.get("linkType")),
    )


def normalize_instructions(doc: Any) -> list[Command]:
    """Lower an instruction document into an ordered command list.

    Order: one ``addCavern`` per cavern entry, one ``addLink`` per link
    entry, ``mergeMeta`` when the document carries ``meta``, and finally
    ``renameBarrow`` when it carries a string ``id``. Malformed entries
    are skipped.

    Raises:
        InstructionError: the document is not a mapping, ``caverns`` or
            ``links`` is not a list, or ``meta`` is not a mapping.
    """
    if not isinstance(doc, Mapping):
        msg = f"Instruction document must be an object, got {type(doc).__name__}"
        raise InstructionError(msg)

    caverns = _require_list(doc, "caverns")
    links = _require_list(doc, "links")
    meta = doc.get("meta")
    if meta is not None and not isinstance(meta, Mapping):
        msg = f"'meta' must be an object, got {type(meta).__name__}"
        raise InstructionError(msg)

    commands: list[Command] = []
    for index, entry in enumerate(caverns):
        cmd = _cavern_command(entry)
        if cmd is None:
            logger.debug("Skipping cavern entry %d: no id or name", index)
            continue
        commands.append(cmd)

    for index, entry in enumerate(links):
        link = _link_command(entry)
        if link is None:
            logger.debug("Skipping link entry %d: missing endpoint", index)
            continue
        commands.append(link)

    if meta is not None:
        commands.append(MergeMeta(meta=dict(meta)))

    barrow_id = _text(doc.get("id"))
    if barrow_id is not None:
        commands.append(RenameBarrow(name=barrow_id))

    return commands
