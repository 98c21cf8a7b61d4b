"""Pydantic schemas for servicescan diagnostics and reports."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class DiagnosticKind(str, Enum):
    """Severity of a diagnostic."""

    NOTE = "note"
    WARNING = "warning"
    ERROR = "error"


class ProcessorState(str, Enum):
    """Lifecycle state of a service processor."""

    CREATED = "created"
    INITIALIZED = "initialized"
    FINISHED = "finished"


class Diagnostic(BaseModel):
    """A message reported to the diagnostics sink."""

    kind: DiagnosticKind
    message: str
    path: Optional[str] = Field(
        default=None, description="Registry or source file the message concerns"
    )


class ScanReport(BaseModel):
    """Summary of one complete scan run."""

    contracts: List[str] = Field(default_factory=list)
    providers: Dict[str, List[str]] = Field(
        default_factory=dict, description="Contract binary name -> provider binary names"
    )
    written_files: List[str] = Field(default_factory=list)
    diagnostics: List[Diagnostic] = Field(default_factory=list)
    rounds: int = 0
    state: ProcessorState = ProcessorState.CREATED

    @property
    def error_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.kind == DiagnosticKind.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.kind == DiagnosticKind.WARNING)

    @property
    def provider_count(self) -> int:
        return sum(len(names) for names in self.providers.values())
