"""Type-graph analysis for service provider discovery."""

from .names import DEFAULT_NESTED_SEPARATOR, NameResolver
from .supertypes import SupertypeGraph
from .matcher import SubtypeMatcher
from .candidates import has_default_constructor, is_candidate
from .registry import ProviderRegistry
from .scanner import ScanDriver
from .source_model import (
    SourceModule,
    SourceProgram,
    discover_source_files,
    load_program,
    parse_module,
    program_from_sources,
)

__all__ = [
    # Naming
    "DEFAULT_NESTED_SEPARATOR",
    "NameResolver",
    # Supertypes and matching
    "SupertypeGraph",
    "SubtypeMatcher",
    # Candidates
    "has_default_constructor",
    "is_candidate",
    # Registry and traversal
    "ProviderRegistry",
    "ScanDriver",
    # Python sources
    "SourceModule",
    "SourceProgram",
    "discover_source_files",
    "load_program",
    "parse_module",
    "program_from_sources",
]
