"""Core data models for servicescan."""

from .schemas import (
    Diagnostic,
    DiagnosticKind,
    ProcessorState,
    ScanReport,
)
from .types import (
    ConstructorDecl,
    Modifier,
    NestingKind,
    TypeDecl,
    TypeKind,
    TypeRef,
)

__all__ = [
    "ConstructorDecl",
    "Diagnostic",
    "DiagnosticKind",
    "Modifier",
    "NestingKind",
    "ProcessorState",
    "ScanReport",
    "TypeDecl",
    "TypeKind",
    "TypeRef",
]
