"""Scan report export for the command line."""

from pathlib import Path
from typing import List, Optional

from servicescan.models import DiagnosticKind, ScanReport


class ReportExporter:
    """Export a scan report as JSON or console text."""

    def __init__(self, report: ScanReport) -> None:
        self.report = report

    def to_json(self, indent: int = 2) -> str:
        return self.report.model_dump_json(indent=indent)

    def to_console(self) -> str:
        """
        Format the report for a terminal.

        Returns:
            Multi-line text: providers per contract, then diagnostics
        """
        report = self.report
        lines: List[str] = []

        if not report.contracts:
            lines.append("No services configured.")
        for contract in report.contracts:
            providers = report.providers.get(contract, [])
            lines.append(f"{contract} ({len(providers)} provider(s))")
            for provider in providers:
                lines.append(f"  {provider}")

        if report.written_files:
            lines.append("")
            lines.append("Written:")
            for path in report.written_files:
                lines.append(f"  {path}")

        problems = [d for d in report.diagnostics if d.kind != DiagnosticKind.NOTE]
        if problems:
            lines.append("")
            for diagnostic in problems:
                lines.append(f"{diagnostic.kind.value.upper()}: {diagnostic.message}")

        return "\n".join(lines)


def export_report(
    report: ScanReport,
    format: str = "console",
    output_path: Optional[str] = None,
) -> str:
    """
    Export a scan report in the given format.

    Args:
        report: ScanReport to export
        format: Output format (console or json)
        output_path: Optional path to save the report

    Returns:
        Report content

    Raises:
        ValueError: If the format is unknown
    """
    exporter = ReportExporter(report)

    if format == "json":
        content = exporter.to_json()
    elif format == "console":
        content = exporter.to_console()
    else:
        raise ValueError(f"Unknown format: {format}")

    if output_path:
        Path(output_path).write_text(content, encoding="utf-8")

    return content
