"""Command-line interface for servicescan."""

import argparse
import sys
from typing import Dict, Optional

import structlog

from servicescan import __version__
from servicescan.config import Settings, settings as default_settings
from servicescan.errors import OptionError, SourceLoadError
from servicescan.main import configure_logging, run_scan
from servicescan.models import ScanReport
from servicescan.parsing.filer import MemoryFiler
from servicescan.parsing.options import parse_processor_options
from servicescan.parsing.report import export_report

logger = structlog.get_logger()


def main() -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if args.version:
        print_version()
        return

    if args.command == "scan":
        scan_command(args)
    elif args.command == "list":
        list_command(args)
    else:
        parser.print_help()
        sys.exit(1)


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="servicescan",
        description="servicescan - Static discovery of service providers",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Options shared by scan and list
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "paths",
        nargs="+",
        help="Source roots (like sys.path entries) or single Python files",
    )
    common.add_argument(
        "-A",
        dest="options",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Processor option, e.g. -A services=com.acme.Plugin,com.acme.Codec",
    )
    common.add_argument(
        "-f", "--format",
        type=str,
        choices=["console", "json"],
        default="console",
        help="Report format (default: console)",
    )
    common.add_argument(
        "--report",
        type=str,
        metavar="PATH",
        help="Save the report to PATH instead of printing it",
    )
    common.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress log output",
    )

    # Scan command
    scan_parser = subparsers.add_parser(
        "scan", parents=[common], help="Scan sources and write registry files"
    )
    scan_parser.add_argument(
        "-o", "--output-dir",
        type=str,
        help="Directory registry files are written under (default: settings)",
    )
    scan_parser.add_argument(
        "--continue-on-error",
        action="store_true",
        help="Keep writing other registry files after a failed write",
    )

    # List command
    subparsers.add_parser(
        "list", parents=[common], help="Scan sources and print providers without writing"
    )

    return parser


def print_version() -> None:
    """Print version information."""
    print(f"servicescan v{__version__}")
    print("Static discovery of service provider implementations")


def _settings_for(args: argparse.Namespace) -> Settings:
    overrides: Dict[str, object] = {}
    if getattr(args, "output_dir", None):
        overrides["output_dir"] = args.output_dir
    if getattr(args, "continue_on_error", False):
        overrides["continue_on_error"] = True
    return default_settings.model_copy(update=overrides)


def _parse_options(args: argparse.Namespace) -> Dict[str, str]:
    try:
        return parse_processor_options(args.options)
    except OptionError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


def _run(args: argparse.Namespace, dry_run: bool) -> Optional[ScanReport]:
    settings = _settings_for(args)
    configure_logging(settings, quiet=args.quiet)
    options = _parse_options(args)

    try:
        return run_scan(
            args.paths,
            options=options,
            settings=settings,
            filer=MemoryFiler() if dry_run else None,
        )
    except SourceLoadError as e:
        logger.error("cli_scan_failed", paths=args.paths, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _print_report(report: ScanReport, args: argparse.Namespace) -> None:
    output = export_report(report, format=args.format, output_path=args.report)
    if args.report:
        print(f"Report saved to: {args.report}")
    else:
        print(output)


def scan_command(args: argparse.Namespace) -> None:
    """Execute scan command."""
    report = _run(args, dry_run=False)
    _print_report(report, args)
    if report.error_count:
        sys.exit(1)


def list_command(args: argparse.Namespace) -> None:
    """Execute list command."""
    report = _run(args, dry_run=True)
    report = report.model_copy(update={"written_files": []})
    _print_report(report, args)
    if report.error_count:
        sys.exit(1)


if __name__ == "__main__":
    main()
