"""Logging setup and programmatic entry point for servicescan."""

import logging
import sys
from pathlib import Path
from typing import Mapping, Optional, Sequence, Union

import structlog

from servicescan.analysis.source_model import load_program
from servicescan.config import Settings, settings as default_settings
from servicescan.diagnostics import LoggingMessager
from servicescan.models import ScanReport
from servicescan.parsing.filer import DirectoryFiler, Filer
from servicescan.parsing.options import SERVICES_OPTION
from servicescan.pipeline.processor import ServiceProcessor

logger = structlog.get_logger()


def _drop_event(logger, method_name, event_dict):
    raise structlog.DropEvent


def configure_logging(
    settings: Optional[Settings] = None, quiet: bool = False
) -> None:
    """Configure structlog from settings. ``quiet`` drops every event."""
    settings = settings or default_settings
    if quiet:
        level = logging.CRITICAL
        processors = [_drop_event]
    else:
        level = logging.getLevelName(settings.log_level.upper())
        if not isinstance(level, int):
            level = logging.INFO
        processors = [
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer()
            if settings.log_format == "json"
            else structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def run_scan(
    roots: Sequence[Union[str, Path]],
    options: Optional[Mapping[str, str]] = None,
    settings: Optional[Settings] = None,
    filer: Optional[Filer] = None,
) -> ScanReport:
    """
    Scan source roots and write the service registry files.

    Args:
        roots: Source roots (or single files) to scan
        options: Processor options; ``services`` falls back to settings
        settings: Settings to use instead of the environment defaults
        filer: Output collaborator; defaults to ``settings.output_dir``

    Returns:
        ScanReport for the run

    Raises:
        SourceLoadError: If a source file cannot be read or parsed
    """
    settings = settings or default_settings
    options = dict(options or {})
    if SERVICES_OPTION not in options and settings.services:
        options[SERVICES_OPTION] = settings.services

    program = load_program(
        roots,
        encoding=settings.source_encoding,
        exclude_dirs=settings.exclude_dirs,
    )

    processor = ServiceProcessor(
        filer or DirectoryFiler(settings.output_dir),
        LoggingMessager(),
        registry_prefix=settings.registry_prefix,
        nested_separator=settings.nested_separator,
        continue_on_error=settings.continue_on_error,
    )
    processor.init(options)
    for round_types in program.rounds():
        processor.process(round_types)
    processor.finish()

    report = processor.report()
    logger.info(
        "scan_complete",
        contracts=len(report.contracts),
        providers=report.provider_count,
        errors=report.error_count,
    )
    return report
