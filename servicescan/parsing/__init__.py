"""Option parsing, registry emission and report export."""

from servicescan.parsing.emitter import (
    DEFAULT_REGISTRY_PREFIX,
    RegistryEmitter,
    format_registry,
    registry_path,
)
from servicescan.parsing.filer import DirectoryFiler, Filer, MemoryFiler
from servicescan.parsing.options import (
    SERVICES_OPTION,
    SUPPORTED_OPTIONS,
    parse_contract_list,
    parse_processor_options,
)
from servicescan.parsing.report import ReportExporter, export_report

__all__ = [
    "DEFAULT_REGISTRY_PREFIX",
    "RegistryEmitter",
    "format_registry",
    "registry_path",
    "DirectoryFiler",
    "Filer",
    "MemoryFiler",
    "SERVICES_OPTION",
    "SUPPORTED_OPTIONS",
    "parse_contract_list",
    "parse_processor_options",
    "ReportExporter",
    "export_report",
]
