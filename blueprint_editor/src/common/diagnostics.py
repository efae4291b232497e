import logging
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional

"""Diagnostics shared by the codec, graph, history, layout and session stages.

Records are kept on the collector for the caller to inspect and are also sent
to the ``blueprint_editor.<stage>`` logger as they arrive.
"""


class DiagnosticSeverity(Enum):
    DEBUG = ("debug", logging.DEBUG)
    INFO = ("info", logging.INFO)
    WARNING = ("warning", logging.WARNING)
    ERROR = ("error", logging.ERROR)

    def __init__(self, label: str, log_level: int) -> None:
        self.label = label
        self.log_level = log_level

    def __ge__(self, other: "DiagnosticSeverity") -> bool:
        return self.log_level >= other.log_level


@dataclass(frozen=True)
class Diagnostic:
    severity: DiagnosticSeverity
    message: str
    stage: str
    entity_id: Optional[int] = None
    kind: Optional[str] = None
    detail: Optional[Any] = None

    def location(self) -> str:
        if self.entity_id is None:
            return self.stage
        return f"{self.stage}:#{self.entity_id}"

    def __str__(self) -> str:
        return f"{self.severity.label.upper()} [{self.location()}]: {self.message}"


class EditorDiagnostics:
    """Collects what happened during one decode, edit or layout run.

    Warnings and errors are always kept. Info records are kept with
    ``verbose`` and debug records with ``debug``; dropped records still reach
    the logger.

    >>> diagnostics = EditorDiagnostics()
    >>> diagnostics.warning("Skipped dangling wire", stage="codec")
    >>> diagnostics.get_messages()
    ['WARNING [codec]: Skipped dangling wire']
    """

    def __init__(self, verbose: bool = False, debug: bool = False) -> None:
        self.diagnostics: List[Diagnostic] = []
        self.verbose = verbose
        self.debug_enabled = debug
        self.default_stage = "unknown"

    def _threshold(self) -> DiagnosticSeverity:
        if self.debug_enabled:
            return DiagnosticSeverity.DEBUG
        if self.verbose:
            return DiagnosticSeverity.INFO
        return DiagnosticSeverity.WARNING

    def record(
        self, severity: DiagnosticSeverity, message: str, stage: Optional[str] = None, **context
    ) -> None:
        diagnostic = Diagnostic(severity, message, stage or self.default_stage, **context)
        logging.getLogger(f"blueprint_editor.{diagnostic.stage}").log(severity.log_level, message)
        if severity >= self._threshold():
            self.diagnostics.append(diagnostic)

    def debug(self, message: str, stage: Optional[str] = None, **context) -> None:
        self.record(DiagnosticSeverity.DEBUG, message, stage, **context)

    def info(self, message: str, stage: Optional[str] = None, **context) -> None:
        self.record(DiagnosticSeverity.INFO, message, stage, **context)

    def warning(self, message: str, stage: Optional[str] = None, **context) -> None:
        """Something was skipped or adjusted; the operation went on."""
        self.record(DiagnosticSeverity.WARNING, message, stage, **context)

    def error(self, message: str, stage: Optional[str] = None, **context) -> None:
        """The operation could not complete."""
        self.record(DiagnosticSeverity.ERROR, message, stage, **context)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _counts(self) -> Counter:
        return Counter(diagnostic.severity for diagnostic in self.diagnostics)

    def error_count(self) -> int:
        return self._counts()[DiagnosticSeverity.ERROR]

    def warning_count(self) -> int:
        return self._counts()[DiagnosticSeverity.WARNING]

    def has_errors(self) -> bool:
        return self.error_count() > 0

    def has_warnings(self) -> bool:
        return self.warning_count() > 0

    def select(self, min_severity: DiagnosticSeverity) -> Iterable[Diagnostic]:
        return (d for d in self.diagnostics if d.severity >= min_severity)

    def get_messages(
        self, min_severity: DiagnosticSeverity = DiagnosticSeverity.WARNING
    ) -> List[str]:
        return [str(diagnostic) for diagnostic in self.select(min_severity)]

    def format_for_user(self) -> str:
        """All kept records followed by an error/warning tally."""
        if not self.diagnostics:
            return "No diagnostics."
        lines = self.get_messages(self._threshold())
        lines.append("")
        lines.append(
            f"Summary: {self.error_count()} error(s), {self.warning_count()} warning(s)"
        )
        return "\n".join(lines)

    def merge(self, other: "EditorDiagnostics") -> None:
        self.diagnostics.extend(other.diagnostics)
