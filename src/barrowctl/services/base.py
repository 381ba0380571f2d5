"""BaseService — shared foundation for barrowctl services.

Every service receives a :class:`BarrowStore` and the resolved
configuration at construction time. Services load the snapshot, work on
pure domain functions, and write the result back in one step.
"""

from __future__ import annotations

import logging

from barrowctl.config.models import BarrowctlConfig
from barrowctl.domain.model import Barrow
from barrowctl.infrastructure.store import BarrowFileError, BarrowStore
from barrowctl.services.result import ServiceResult

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class BarrowService(BaseService):
            def show(self) -> ServiceResult:
                barrow, failure = self._load("show")
                if failure is not None:
                    return failure
                ...
    """

    def __init__(self, store: BarrowStore, config: BarrowctlConfig | None = None) -> None:
        self._store = store
        self._config = config or BarrowctlConfig()

    def _load(
        self, op: str, *, missing_ok: bool = False
    ) -> tuple[Barrow, None] | tuple[None, ServiceResult]:
        """Load the snapshot, or return the failure result explaining why not.

        With *missing_ok*, a missing file yields a fresh barrow named after
        ``[barrow] default_name``.
        """
        if not self._store.exists():
            if missing_ok:
                return Barrow(id=self._config.barrow.default_name), None
            return None, ServiceResult.failure(
                op,
                "NOT_FOUND",
                f"No barrow file at {self._store.path}; run 'barrowctl init' first",
                path=str(self._store.path),
            )
        try:
            return self._store.load(), None
        except BarrowFileError as exc:
            logger.debug("Unreadable barrow file", exc_info=True)
            return None, ServiceResult.failure(
                op, "INVALID_BARROW", str(exc), path=str(self._store.path)
            )
