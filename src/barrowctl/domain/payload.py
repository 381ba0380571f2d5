"""Payload decoding: one entry point for every input channel.

Hand-written Shadax, a remote assistant's JSON and a local assistant's
JSON all arrive as text. ``auto`` sniffs the shape: text opening with
``[`` is a command array, ``{`` an instruction document, anything else
(including JSON that fails to decode) is Shadax.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from barrowctl.domain.commands import Command, decode_command_array
from barrowctl.domain.errors import InstructionError
from barrowctl.domain.instructions import normalize_instructions
from barrowctl.domain.phrases import parse_phrases
from barrowctl.domain.shadax import SkippedLine, parse_shadax_report

# Assistants like to wrap JSON in a markdown fence.
_FENCE = re.compile(r"^```[A-Za-z]*\s*\n(.*?)\n?```\s*$", re.DOTALL)


class PayloadFormat(StrEnum):
    """Input formats accepted by :func:`decode_payload`."""

    AUTO = "auto"
    SHADAX = "shadax"
    PHRASES = "phrases"
    INSTRUCTIONS = "instructions"
    COMMANDS = "commands"


@dataclass
class DecodedPayload:
    """Commands decoded from a payload and the format that produced them."""

    format: PayloadFormat
    commands: list[Command] = field(default_factory=list)
    skipped: list[SkippedLine] = field(default_factory=list)


def _unfence(text: str) -> str:
    stripped = text.strip()
    m = _FENCE.match(stripped)
    return m.group(1).strip() if m else stripped


def _load_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})"
        raise InstructionError(msg) from exc


def _from_json(data: Any, fmt: PayloadFormat) -> DecodedPayload:
    if fmt is PayloadFormat.COMMANDS:
        return DecodedPayload(format=fmt, commands=decode_command_array(data))
    return DecodedPayload(format=fmt, commands=normalize_instructions(data))


def decode_payload(text: str, fmt: PayloadFormat | str = PayloadFormat.AUTO) -> DecodedPayload:
    """Decode *text* into commands according to *fmt*.

    Raises:
        InstructionError: explicit JSON formats with undecodable JSON, or
            any JSON payload that is structurally invalid.
    """
    fmt = PayloadFormat(fmt)
    body = _unfence(str(text or ""))

    if fmt is PayloadFormat.SHADAX:
        report = parse_shadax_report(body)
        return DecodedPayload(format=fmt, commands=report.commands, skipped=report.skipped)
    if fmt is PayloadFormat.PHRASES:
        return DecodedPayload(format=fmt, commands=parse_phrases(body))
    if fmt in (PayloadFormat.INSTRUCTIONS, PayloadFormat.COMMANDS):
        return _from_json(_load_json(body), fmt)

    if body[:1] in ("[", "{"):
        try:
            data = json.loads(body)
        except json.JSONDecodeError:
            data = None
        if isinstance(data, list):
            return _from_json(data, PayloadFormat.COMMANDS)
        if isinstance(data, dict):
            return _from_json(data, PayloadFormat.INSTRUCTIONS)

    report = parse_shadax_report(body)
    return DecodedPayload(
        format=PayloadFormat.SHADAX, commands=report.commands, skipped=report.skipped
    )
