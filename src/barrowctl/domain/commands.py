"""Command model: the closed set of operations that mutate a barrow.

Every input channel (Shadax text, editor phrases, instruction documents,
raw command arrays) lowers to ``list[Command]``; the merge engine is the
only consumer that applies them.

Wire format is camelCase with a ``type`` tag, e.g.
``{"type": "addLink", "from": "hall", "to": "armory", "linkType": "door"}``.
Optional enum fields are coerced leniently: an unrecognized value is
dropped rather than rejecting the whole command.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from barrowctl.domain.directions import parse_direction
from barrowctl.domain.errors import InstructionError
from barrowctl.domain.types import CavernRole, Direction, LinkType, SizeClass

logger = logging.getLogger(__name__)


def _enum_or_none(enum: type[StrEnum]) -> Callable[[Any], StrEnum | None]:
    def coerce(value: Any) -> StrEnum | None:
        if isinstance(value, enum):
            return value
        if isinstance(value, str):
            try:
                return enum(value.strip().lower())
            except ValueError:
                return None
        return None

    return coerce


def _coerce_tags(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(tag) for tag in value if isinstance(tag, (str, int, float))]


LenientDirection = Annotated[Direction | None, BeforeValidator(parse_direction)]
LenientRole = Annotated[CavernRole | None, BeforeValidator(_enum_or_none(CavernRole))]
LenientSize = Annotated[SizeClass | None, BeforeValidator(_enum_or_none(SizeClass))]
LenientLinkType = Annotated[LinkType | None, BeforeValidator(_enum_or_none(LinkType))]


class _Command(BaseModel):
    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the command-array JSON shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CreateBarrow(_Command):
    type: Literal["createBarrow"] = "createBarrow"
    name: str | None = None


class RenameBarrow(_Command):
    type: Literal["renameBarrow"] = "renameBarrow"
    name: str


class AddCavern(_Command):
    """Upsert a cavern. ``name`` seeds the slug id."""

    type: Literal["addCavern"] = "addCavern"
    name: str
    display_name: str | None = None
    role: LenientRole = None
    size: LenientSize = None
    direction: LenientDirection = None
    anchor: str | None = None
    tags: Annotated[list[str], BeforeValidator(_coerce_tags)] = Field(default_factory=list)


class RenameCavern(_Command):
    type: Literal["renameCavern"] = "renameCavern"
    source: str = Field(alias="from")
    target: str = Field(alias="to")


class AddLink(_Command):
    type: Literal["addLink"] = "addLink"
    source: str = Field(alias="from")
    target: str = Field(alias="to")
    direction: LenientDirection = None
    link_type: LenientLinkType = None


class AddCarddon(_Command):
    type: Literal["addCarddon"] = "addCarddon"
    name: str
    cavern: str | None = None


class RenameCarddon(_Command):
    type: Literal["renameCarddon"] = "renameCarddon"
    source: str = Field(alias="from")
    target: str = Field(alias="to")


class ListCaverns(_Command):
    type: Literal["listCaverns"] = "listCaverns"


class ListCarddons(_Command):
    type: Literal["listCarddons"] = "listCarddons"


class ShowBarrow(_Command):
    type: Literal["showBarrow"] = "showBarrow"


class MergeMeta(_Command):
    """Shallow-merge keys into the barrow metadata."""

    type: Literal["mergeMeta"] = "mergeMeta"
    meta: dict[str, Any] = Field(default_factory=dict)


Command = Annotated[
    CreateBarrow
    | RenameBarrow
    | AddCavern
    | RenameCavern
    | AddLink
    | AddCarddon
    | RenameCarddon
    | ListCaverns
    | ListCarddons
    | ShowBarrow
    | MergeMeta,
    Field(discriminator="type"),
]

_COMMAND_ADAPTER: TypeAdapter[Command] = TypeAdapter(Command)


def decode_command(data: Any) -> Command | None:
    """Validate one command-array entry, or None if it is not a command."""
    if not isinstance(data, dict):
        return None
    try:
        return _COMMAND_ADAPTER.validate_python(data)
    except ValidationError as exc:
        logger.debug("Skipping command entry %r: %s", data.get("type"), exc.error_count())
        return None


def decode_command_array(data: Any) -> list[Command]:
    """Decode a command array, skipping entries that are not valid commands.

    Raises:
        InstructionError: *data* is not a list.
    """
    if not isinstance(data, list):
        msg = f"Command array must be a list, got {type(data).__name__}"
        raise InstructionError(msg)
    commands: list[Command] = []
    for entry in data:
        cmd = decode_command(entry)
        if cmd is not None:
            commands.append(cmd)
    return commands


def commands_to_wire(commands: list[Command]) -> list[dict[str, Any]]:
    """Serialize commands to the canonical command-array shape."""
    return [cmd.to_wire() for cmd in commands]
