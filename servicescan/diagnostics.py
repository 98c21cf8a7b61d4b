"""Diagnostics sink interface and structlog-backed implementation."""

from abc import ABC, abstractmethod
from typing import List, Optional

import structlog

from servicescan.models import Diagnostic, DiagnosticKind

logger = structlog.get_logger()


class Messager(ABC):
    """
    Abstract diagnostics sink.

    The processor reports notes, warnings and errors here instead of
    raising, so one bad registry file never aborts the host.
    """

    @abstractmethod
    def print_message(
        self, kind: DiagnosticKind, message: str, path: Optional[str] = None
    ) -> None:
        """
        Report a diagnostic.

        Args:
            kind: Severity of the message
            message: Human-readable text
            path: File the message concerns, if any
        """
        pass


class LoggingMessager(Messager):
    """Record diagnostics and forward them to structlog."""

    def __init__(self) -> None:
        self.diagnostics: List[Diagnostic] = []

    def print_message(
        self, kind: DiagnosticKind, message: str, path: Optional[str] = None
    ) -> None:
        self.diagnostics.append(Diagnostic(kind=kind, message=message, path=path))

        if kind == DiagnosticKind.ERROR:
            logger.error("diagnostic", kind=kind.value, message=message, path=path)
        elif kind == DiagnosticKind.WARNING:
            logger.warning("diagnostic", kind=kind.value, message=message, path=path)
        else:
            logger.info("diagnostic", kind=kind.value, message=message, path=path)

    def of_kind(self, kind: DiagnosticKind) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.kind == kind]

    @property
    def has_errors(self) -> bool:
        return any(d.kind == DiagnosticKind.ERROR for d in self.diagnostics)
