"""Merge engine: apply commands to a barrow with upsert semantics.

``apply_commands(barrow, commands)`` works on a deep copy and returns it
together with human-readable messages and the payloads of read-only
commands. No state survives between calls and nothing here does I/O.

Cavern references (anchors, link endpoints, carddon owners, rename
sources) resolve to an existing cavern by id or case-insensitive name;
otherwise they become the slug of the token. Forward references are
legal: nothing is checked for existence at apply time, and layout
copes with anchors that never appear.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from barrowctl.domain.commands import (
    AddCarddon,
    AddCavern,
    AddLink,
    Command,
    CreateBarrow,
    MergeMeta,
    RenameBarrow,
    RenameCarddon,
    RenameCavern,
)
from barrowctl.domain.ids import slugify
from barrowctl.domain.model import (
    DEFAULT_BARROW_ID,
    Barrow,
    Carddon,
    Cavern,
    Link,
    Placement,
)
from barrowctl.domain.types import READ_ONLY_COMMANDS, CommandType, LinkType

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """Outcome of :func:`apply_commands`."""

    barrow: Barrow
    messages: list[str] = field(default_factory=list)
    responses: list[dict[str, Any]] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Reference resolution
# ---------------------------------------------------------------------------


def find_cavern(barrow: Barrow, token: str) -> Cavern | None:
    """Find an existing cavern by id, name (case-insensitive) or slug."""
    t = token.strip()
    if not t:
        return None
    found = barrow.get_cavern(t)
    if found is not None:
        return found
    lowered = t.lower()
    for cavern in barrow.caverns:
        if cavern.name.lower() == lowered:
            return cavern
    return barrow.get_cavern(slugify(t))


def resolve_cavern_ref(barrow: Barrow, token: str) -> str:
    """Resolve a cavern reference to an id, slugging unknown tokens."""
    found = find_cavern(barrow, token)
    return found.id if found is not None else slugify(token)


def find_carddon(barrow: Barrow, token: str) -> Carddon | None:
    """Find an existing carddon by slug id or case-insensitive name."""
    slug = slugify(token)
    lowered = token.strip().lower()
    for carddon in barrow.carddons:
        if carddon.id == slug or carddon.name.lower() == lowered:
            return carddon
    return None


# ---------------------------------------------------------------------------
# Executor
# ---------------------------------------------------------------------------


class _Execution:
    """Mutable state for one ``apply_commands`` call."""

    def __init__(self, barrow: Barrow) -> None:
        self.barrow = barrow
        self.messages: list[str] = []
        self.responses: list[dict[str, Any]] = []

    def say(self, message: str) -> None:
        self.messages.append(message)

    # --- Barrow-level ---

    def create_barrow(self, cmd: CreateBarrow) -> None:
        name = (cmd.name or "").strip() or DEFAULT_BARROW_ID
        self.barrow = Barrow(id=name)
        self.say(f"Created new barrow '{name}'.")

    def rename_barrow(self, cmd: RenameBarrow) -> None:
        name = cmd.name.strip()
        if not name:
            self.say("Rename barrow failed: missing name.")
            return
        self.barrow.id = name
        self.say(f"Renamed barrow to '{name}'.")

    def merge_meta(self, cmd: MergeMeta) -> None:
        self.barrow.meta.update(copy.deepcopy(cmd.meta))
        self.say(f"Merged meta keys: {', '.join(sorted(cmd.meta)) or '(none)'}.")

    # --- Caverns ---

    def add_cavern(self, cmd: AddCavern) -> None:
        cavern_id = slugify(cmd.name)
        if not cavern_id:
            self.say(f"Add cavern failed: '{cmd.name}' has no usable id.")
            return

        placement: Placement | None = None
        if cmd.direction is not None and cmd.anchor:
            anchor_id = resolve_cavern_ref(self.barrow, cmd.anchor)
            placement = Placement(direction=cmd.direction, anchor_id=anchor_id)

        cavern = self.barrow.get_cavern(cavern_id)
        if cavern is None:
            cavern = Cavern(
                id=cavern_id,
                name=(cmd.display_name or cmd.name).strip(),
                tags=list(dict.fromkeys(cmd.tags)),
            )
            if cmd.role is not None:
                cavern.role = cmd.role
            if cmd.size is not None:
                cavern.size_class = cmd.size
            cavern.placement = placement
            self.barrow.caverns.append(cavern)
            self.say(f"Added cavern '{cavern.name}' ({cavern.id}).")
            return

        if cmd.display_name:
            cavern.name = cmd.display_name.strip()
        if cmd.role is not None:
            cavern.role = cmd.role
        if cmd.size is not None:
            cavern.size_class = cmd.size
        if placement is not None:
            cavern.placement = placement
        if cmd.tags:
            cavern.tags = list(dict.fromkeys([*cavern.tags, *cmd.tags]))
        cavern.position = None
        self.say(f"Updated cavern '{cavern.name}' ({cavern.id}).")

    def rename_cavern(self, cmd: RenameCavern) -> None:
        cavern = find_cavern(self.barrow, cmd.source)
        if cavern is None:
            self.say(f"Rename cavern failed: '{cmd.source}' not found.")
            return
        new_id = slugify(cmd.target)
        if not new_id:
            self.say(f"Rename cavern failed: '{cmd.target}' has no usable id.")
            return
        if new_id != cavern.id and self.barrow.get_cavern(new_id) is not None:
            self.say(f"Rename cavern failed: '{new_id}' already exists.")
            return

        old_id = cavern.id
        cavern.id = new_id
        cavern.name = cmd.target.strip()
        for link in self.barrow.links:
            if link.from_id == old_id:
                link.from_id = new_id
            if link.to_id == old_id:
                link.to_id = new_id
        for carddon in self.barrow.carddons:
            if carddon.owner_cavern_id == old_id:
                carddon.owner_cavern_id = new_id
        for other in self.barrow.caverns:
            if other.placement is not None and other.placement.anchor_id == old_id:
                other.placement.anchor_id = new_id
        self.say(f"Renamed cavern '{old_id}' to '{new_id}'.")

    # --- Links ---

    def add_link(self, cmd: AddLink) -> None:
        from_id = resolve_cavern_ref(self.barrow, cmd.source)
        to_id = resolve_cavern_ref(self.barrow, cmd.target)
        if not from_id or not to_id:
            self.say(f"Add link failed: '{cmd.source}' -> '{cmd.target}' has no usable ids.")
            return
        link = Link(
            from_id=from_id,
            to_id=to_id,
            direction=cmd.direction,
            link_type=cmd.link_type or LinkType.TUNNEL,
        )
        self.barrow.links.append(link)
        direction = cmd.direction or "?"
        self.say(f"Linked '{from_id}' -> '{to_id}' ({link.link_type}, {direction}).")

    # --- Carddons ---

    def add_carddon(self, cmd: AddCarddon) -> None:
        name = cmd.name.strip()
        carddon_id = slugify(name)
        if not carddon_id:
            self.say(f"Add carddon failed: '{cmd.name}' has no usable id.")
            return
        owner = resolve_cavern_ref(self.barrow, cmd.cavern) if cmd.cavern else None

        carddon = self.barrow.get_carddon(carddon_id)
        if carddon is None:
            carddon = Carddon(id=carddon_id, name=name, owner_cavern_id=owner or None)
            self.barrow.carddons.append(carddon)
            where = f" in '{carddon.owner_cavern_id}'" if carddon.owner_cavern_id else ""
            self.say(f"Added carddon '{name}'{where}.")
            return

        if owner:
            carddon.owner_cavern_id = owner
        carddon.position = None
        self.say(f"Updated carddon '{carddon.name}' ({carddon.id}).")

    def rename_carddon(self, cmd: RenameCarddon) -> None:
        carddon = find_carddon(self.barrow, cmd.source)
        if carddon is None:
            self.say(f"Rename carddon failed: '{cmd.source}' not found.")
            return
        new_id = slugify(cmd.target)
        if not new_id:
            self.say(f"Rename carddon failed: '{cmd.target}' has no usable id.")
            return
        clash = self.barrow.get_carddon(new_id)
        if clash is not None and clash is not carddon:
            self.say(f"Rename carddon failed: '{new_id}' already exists.")
            return
        old_name = carddon.name
        carddon.id = new_id
        carddon.name = cmd.target.strip()
        self.say(f"Renamed carddon '{old_name}' to '{carddon.name}'.")

    # --- Read-only ---

    def list_caverns(self, _cmd: Command) -> None:
        items = [
            {
                "id": c.id,
                "name": c.name,
                "role": str(c.role),
                "sizeClass": str(c.size_class),
            }
            for c in self.barrow.caverns
        ]
        self.responses.append({"type": "listCaverns", "caverns": items})
        listing = ", ".join(f"{c.id} ({c.name})" for c in self.barrow.caverns)
        self.say(f"Caverns: {listing or '(none)'}")

    def list_carddons(self, _cmd: Command) -> None:
        items = [
            {"id": cd.id, "name": cd.name, "ownerCavernId": cd.owner_cavern_id}
            for cd in self.barrow.carddons
        ]
        self.responses.append({"type": "listCarddons", "carddons": items})
        listing = ", ".join(
            f"{cd.id} ({cd.name})" + (f" @{cd.owner_cavern_id}" if cd.owner_cavern_id else "")
            for cd in self.barrow.carddons
        )
        self.say(f"Carddons: {listing or '(none)'}")

    def show_barrow(self, _cmd: Command) -> None:
        b = self.barrow
        self.responses.append({"type": "showBarrow", "barrow": b.to_snapshot()})
        self.say(
            f"Barrow '{b.id}': {len(b.caverns)} caverns, "
            f"{len(b.links)} links, {len(b.carddons)} carddons."
        )


_Handler: TypeAlias = Callable[[_Execution, Any], None]

_HANDLERS: dict[CommandType, _Handler] = {
    CommandType.CREATE_BARROW: _Execution.create_barrow,
    CommandType.RENAME_BARROW: _Execution.rename_barrow,
    CommandType.ADD_CAVERN: _Execution.add_cavern,
    CommandType.RENAME_CAVERN: _Execution.rename_cavern,
    CommandType.ADD_LINK: _Execution.add_link,
    CommandType.ADD_CARDDON: _Execution.add_carddon,
    CommandType.RENAME_CARDDON: _Execution.rename_carddon,
    CommandType.LIST_CAVERNS: _Execution.list_caverns,
    CommandType.LIST_CARDDONS: _Execution.list_carddons,
    CommandType.SHOW_BARROW: _Execution.show_barrow,
    CommandType.MERGE_META: _Execution.merge_meta,
}


def apply_commands(barrow: Barrow, commands: Iterable[Command]) -> ExecutionResult:
    """Apply *commands* in order to a copy of *barrow*.

    The input barrow is never mutated. Unknown rename targets and blank
    names produce a message instead of an error.
    """
    run = _Execution(barrow.model_copy(deep=True))
    for cmd in commands:
        handler = _HANDLERS.get(CommandType(cmd.type))
        if handler is None:
            logger.debug("No handler for command type %r", cmd.type)
            continue
        handler(run, cmd)
        logger.debug("Applied %s", cmd.type)
    return ExecutionResult(barrow=run.barrow, messages=run.messages, responses=run.responses)


def is_read_only(commands: Iterable[Command]) -> bool:
    """True when *commands* is non-empty and only queries the barrow."""
    types = [cmd.type for cmd in commands]
    return bool(types) and all(t in READ_ONLY_COMMANDS for t in types)
