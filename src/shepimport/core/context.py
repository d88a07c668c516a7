"""
Per-run import context.

One `ImportContext` is created for each import request and passed by
reference through every stage. It owns the run's logger, the diagnostics
collected from recovered failures and the cancellation flag. Nothing here is
process-global.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .config import ImportConfig
from .errors import Diagnostic, ImportCancelled, Severity


class _RunLoggerAdapter(logging.LoggerAdapter):
    """Attach the run id to every record."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("run_id", self.extra["run_id"])  # type: ignore[index]
        kwargs["extra"] = extra
        return msg, kwargs


@dataclass
class ImportContext:
    """State owned by a single import run."""

    root: Path
    config: ImportConfig = field(default_factory=ImportConfig)
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    diagnostics: list[Diagnostic] = field(default_factory=list)
    cancel_event: threading.Event = field(default_factory=threading.Event)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        self.logger = _RunLoggerAdapter(
            logging.getLogger("shepimport.run"), {"run_id": self.run_id}
        )

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def add_diagnostics(self, diagnostics: list[Diagnostic]) -> None:
        """Record diagnostics from one parse task."""
        if not diagnostics:
            return
        with self._lock:
            self.diagnostics.extend(diagnostics)
        for diagnostic in diagnostics:
            level = logging.WARNING if diagnostic.severity != Severity.INFO else logging.INFO
            self.logger.log(level, diagnostic.format())

    def warn(self, message: str, file: Path | None = None, line: int | None = None) -> None:
        self.add_diagnostics([Diagnostic(Severity.WARNING, message, file, line)])

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity != Severity.INFO]

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def cancel(self) -> None:
        """Request cancellation; honoured at the next stage or file boundary."""
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def check_cancelled(self, stage: str) -> None:
        """Raise `ImportCancelled` if cancellation was requested."""
        if self.cancel_event.is_set():
            self.logger.info("Import cancelled before %s", stage)
            raise ImportCancelled(f"Import cancelled before {stage}")
