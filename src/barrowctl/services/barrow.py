"""BarrowService — decode, merge, lay out and persist a barrow.

Each mutating operation is one load → apply → layout → save cycle over
the snapshot file. Parse skips, ring fallbacks and dangling references
become warnings; structurally invalid payloads and unreadable snapshots
become ``ok=False`` results.
"""

from __future__ import annotations

import logging
from typing import Any

from barrowctl.domain.commands import (
    Command,
    CreateBarrow,
    ListCarddons,
    ListCaverns,
    commands_to_wire,
)
from barrowctl.domain.errors import InstructionError
from barrowctl.domain.merge import ExecutionResult, apply_commands, is_read_only
from barrowctl.domain.model import Barrow
from barrowctl.domain.payload import DecodedPayload, PayloadFormat, decode_payload
from barrowctl.domain.phrases import parse_phrases
from barrowctl.domain.shadax import SkippedLine
from barrowctl.services.base import BaseService
from barrowctl.services.layout import LayoutReport, layout_barrow_report
from barrowctl.services.result import ServiceResult
from barrowctl.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


def _skip_warnings(skipped: list[SkippedLine]) -> list[str]:
    return [f"Skipped line {s.line_no}: {s.text}" for s in skipped]


def _layout_warnings(barrow: Barrow, report: LayoutReport) -> list[str]:
    warnings: list[str] = []
    dangling = set(report.dangling)
    for cavern_id in report.ring_caverns:
        cavern = barrow.get_cavern(cavern_id)
        placement = cavern.placement if cavern is not None else None
        if cavern_id in dangling and placement is not None:
            reason = f"anchor '{placement.anchor_id}' not found"
        elif placement is not None:
            reason = "placement cycle"
        else:
            reason = "no placement"
        warnings.append(f"Cavern '{cavern_id}' placed on fallback ring ({reason})")
    for carddon_id in report.ring_carddons:
        warnings.append(f"Carddon '{carddon_id}' has no placed owner; placed on fallback ring")
    known = set(barrow.cavern_ids())
    for link in barrow.links:
        missing = [end for end in (link.from_id, link.to_id) if end not in known]
        if missing:
            warnings.append(
                f"Link '{link.from_id}' -> '{link.to_id}' references unknown "
                f"cavern {', '.join(repr(m) for m in missing)}"
            )
    return warnings


def _positions(barrow: Barrow) -> dict[str, list[dict[str, Any]]]:
    def row(item_id: str, pos: Any) -> dict[str, Any]:
        return {"id": item_id, "x": pos.x, "y": pos.y, "z": pos.z}

    return {
        "caverns": [row(c.id, c.position) for c in barrow.caverns if c.position is not None],
        "carddons": [row(cd.id, cd.position) for cd in barrow.carddons if cd.position is not None],
    }


class BarrowService(BaseService):
    """Operations over the workspace barrow."""

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def _summary(self, barrow: Barrow) -> dict[str, Any]:
        return {
            "id": barrow.id,
            "path": str(self._store.path),
            "caverns": len(barrow.caverns),
            "links": len(barrow.links),
            "carddons": len(barrow.carddons),
        }

    def _execute(
        self,
        op: str,
        commands: list[Command],
        *,
        warnings: list[str],
        layout: bool | None = None,
        fmt: PayloadFormat | None = None,
    ) -> ServiceResult:
        """Apply *commands* to the stored barrow, lay out, and save.

        Pure queries (list, show) read the stored barrow and skip layout
        and save, so they never create or rewrite the file.
        """
        read_only = is_read_only(commands)
        barrow, failure = self._load(op, missing_ok=not read_only)
        if failure is not None:
            return failure
        if read_only:
            result = apply_commands(barrow, commands)
            return self._outcome(op, barrow, result, len(commands), False, warnings, fmt)

        with trace_span("merge") as span:
            result = apply_commands(barrow, commands)
            if span:
                span.annotate("commands", len(commands))

        merged = result.barrow
        do_layout = self._config.barrow.auto_layout if layout is None else layout
        if do_layout:
            with trace_span("layout"):
                merged, report = layout_barrow_report(merged, self._config.layout)
            warnings.extend(_layout_warnings(merged, report))

        with trace_span("save"):
            self._store.save(merged)

        return self._outcome(op, merged, result, len(commands), do_layout, warnings, fmt)

    def _outcome(
        self,
        op: str,
        barrow: Barrow,
        result: ExecutionResult,
        applied: int,
        laid_out: bool,
        warnings: list[str],
        fmt: PayloadFormat | None,
    ) -> ServiceResult:
        data: dict[str, Any] = {
            **self._summary(barrow),
            "applied": applied,
            "messages": result.messages,
            "responses": result.responses,
            "laid_out": laid_out,
        }
        if fmt is not None:
            data["format"] = str(fmt)
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    def _decode(
        self, op: str, text: str, fmt: PayloadFormat | str
    ) -> DecodedPayload | ServiceResult:
        try:
            return decode_payload(text, fmt)
        except InstructionError as exc:
            return ServiceResult.failure(op, "INVALID_INSTRUCTIONS", str(exc))
        except ValueError as exc:
            # Unknown format name.
            return ServiceResult.failure(op, "INVALID_INSTRUCTIONS", str(exc), format=str(fmt))

    # ------------------------------------------------------------------
    # init
    # ------------------------------------------------------------------

    @traced
    def init(self, name: str | None = None, *, force: bool = False) -> ServiceResult:
        """Write a fresh barrow snapshot.

        Refuses to overwrite an existing snapshot unless *force* is set.
        """
        if self._store.exists() and not force:
            return ServiceResult.failure(
                "init",
                "ALREADY_EXISTS",
                f"Barrow file already exists at {self._store.path} (use --force to replace it)",
                path=str(self._store.path),
            )
        name = name or self._config.barrow.default_name
        result = apply_commands(Barrow(), [CreateBarrow(name=name)])
        self._store.save(result.barrow)
        logger.debug("Initialized barrow %r", result.barrow.id)
        return ServiceResult(
            ok=True,
            op="init",
            data={**self._summary(result.barrow), "messages": result.messages},
        )

    # ------------------------------------------------------------------
    # apply / parse / say
    # ------------------------------------------------------------------

    @traced
    def apply(
        self,
        text: str,
        fmt: PayloadFormat | str = PayloadFormat.AUTO,
        *,
        layout: bool | None = None,
    ) -> ServiceResult:
        """Decode *text*, merge it into the stored barrow and save.

        Args:
            text: Shadax, editor phrase, instruction document or command array.
            fmt: Payload format; ``auto`` sniffs JSON versus Shadax.
            layout: Recompute positions; defaults to ``[barrow] auto_layout``.
        """
        with trace_span("decode"):
            decoded = self._decode("apply", text, fmt)
        if isinstance(decoded, ServiceResult):
            return decoded
        warnings = _skip_warnings(decoded.skipped)
        if not decoded.commands:
            warnings.append("No commands recognized in input")
        return self._execute(
            "apply", decoded.commands, warnings=warnings, layout=layout, fmt=decoded.format
        )

    @traced
    def parse(self, text: str, fmt: PayloadFormat | str = PayloadFormat.AUTO) -> ServiceResult:
        """Decode *text* into the command array without touching the barrow."""
        decoded = self._decode("parse", text, fmt)
        if isinstance(decoded, ServiceResult):
            return decoded
        return ServiceResult(
            ok=True,
            op="parse",
            data={
                "format": str(decoded.format),
                "count": len(decoded.commands),
                "commands": commands_to_wire(decoded.commands),
                "skipped": [{"line": s.line_no, "text": s.text} for s in decoded.skipped],
            },
            warnings=_skip_warnings(decoded.skipped),
        )

    @traced
    def say(self, phrase: str, *, layout: bool | None = None) -> ServiceResult:
        """Apply one editor phrase such as ``add cavern Hall``."""
        commands = parse_phrases(phrase)
        if not commands:
            return ServiceResult.failure(
                "say", "INVALID_INSTRUCTIONS", f"Unrecognized phrase: {phrase.strip()!r}"
            )
        return self._execute("say", commands, warnings=[], layout=layout)

    # ------------------------------------------------------------------
    # layout
    # ------------------------------------------------------------------

    @traced
    def layout(self) -> ServiceResult:
        """Recompute and save every position of the stored barrow."""
        barrow, failure = self._load("layout")
        if failure is not None:
            return failure
        positioned, report = layout_barrow_report(barrow, self._config.layout)
        self._store.save(positioned)
        return ServiceResult(
            ok=True,
            op="layout",
            data={
                **self._summary(positioned),
                **_positions(positioned),
                "ring": [*report.ring_caverns, *report.ring_carddons],
                "pushed": report.pushed,
            },
            warnings=_layout_warnings(positioned, report),
        )

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    @traced
    def show(self) -> ServiceResult:
        """Return the stored snapshot."""
        barrow, failure = self._load("show")
        if failure is not None:
            return failure
        return ServiceResult(
            ok=True,
            op="show",
            data={**self._summary(barrow), "barrow": barrow.to_snapshot()},
        )

    def _listing(self, op: str, cmd: Command, key: str) -> ServiceResult:
        barrow, failure = self._load(op)
        if failure is not None:
            return failure
        response = apply_commands(barrow, [cmd]).responses[0]
        items = response[key]
        return ServiceResult(ok=True, op=op, data={"count": len(items), "items": items})

    @traced
    def list_caverns(self) -> ServiceResult:
        """List caverns with id, name, role and size class."""
        return self._listing("list_caverns", ListCaverns(), "caverns")

    @traced
    def list_carddons(self) -> ServiceResult:
        """List carddons with id, name and owner."""
        return self._listing("list_carddons", ListCarddons(), "carddons")
