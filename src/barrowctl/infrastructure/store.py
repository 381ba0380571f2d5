"""Barrow file storage — one JSON snapshot per workspace.

INVARIANT: The snapshot file is truth. Everything the CLI shows is read
back from it; nothing is cached between invocations.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from barrowctl.domain.model import Barrow

logger = logging.getLogger(__name__)


class BarrowFileError(ValueError):
    """The barrow file exists but does not hold a readable snapshot."""


class BarrowStore:
    """Load and save the barrow snapshot at *path*."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Barrow:
        """Read the snapshot.

        Raises:
            FileNotFoundError: No barrow file at ``self.path``.
            BarrowFileError: The file is not UTF-8, not valid JSON, or not
                a barrow.
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            msg = f"{self.path}: not UTF-8 text (bad byte at offset {exc.start})"
            raise BarrowFileError(msg) from exc
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            msg = f"{self.path}: not valid JSON ({exc.msg} at line {exc.lineno})"
            raise BarrowFileError(msg) from exc
        if not isinstance(data, dict):
            msg = f"{self.path}: expected a JSON object, got {type(data).__name__}"
            raise BarrowFileError(msg)
        try:
            barrow = Barrow.from_snapshot(data)
        except ValidationError as exc:
            msg = f"{self.path}: not a barrow snapshot ({exc.error_count()} errors)"
            raise BarrowFileError(msg) from exc
        logger.debug("Loaded barrow %r from %s", barrow.id, self.path)
        return barrow

    def save(self, barrow: Barrow) -> Path:
        """Write *barrow* as an indented snapshot, creating parent dirs."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        rendered = json.dumps(barrow.to_snapshot(), indent=2, ensure_ascii=False)
        self.path.write_text(rendered + "\n", encoding="utf-8")
        logger.debug("Saved barrow %r to %s", barrow.id, self.path)
        return self.path
