"""Serialization of provider registries into service registry files.

Each configured contract gets one file at ``<prefix><contract>`` holding
one provider binary name per line, sorted, each line terminated by a
newline. A contract without providers still gets an (empty) file.
"""

from typing import List

import structlog

from servicescan.analysis.registry import ProviderRegistry
from servicescan.diagnostics import Messager
from servicescan.models import DiagnosticKind
from servicescan.parsing.filer import Filer

logger = structlog.get_logger()

DEFAULT_REGISTRY_PREFIX = "META-INF/services/"


def format_registry(providers: List[str]) -> str:
    """Render provider names as registry file content."""
    return "".join(f"{provider}\n" for provider in providers)


def registry_path(contract: str, prefix: str = DEFAULT_REGISTRY_PREFIX) -> str:
    return f"{prefix}{contract}"


class RegistryEmitter:
    """Write one registry file per configured contract."""

    def __init__(
        self,
        filer: Filer,
        messager: Messager,
        prefix: str = DEFAULT_REGISTRY_PREFIX,
        continue_on_error: bool = False,
    ):
        """
        Initialize the emitter.

        Args:
            filer: Where registry files are written
            messager: Diagnostics sink for notes, warnings and write errors
            prefix: Directory prefix prepended to each contract name
            continue_on_error: Keep writing the remaining contracts after a
                failed write instead of stopping at the first failure
        """
        self.filer = filer
        self.messager = messager
        self.prefix = prefix
        self.continue_on_error = continue_on_error

    def emit(self, registry: ProviderRegistry) -> List[str]:
        """
        Write the registry files.

        Args:
            registry: Providers accumulated over the whole run

        Returns:
            Paths of the files written successfully
        """
        written: List[str] = []
        for contract, providers in registry.items():
            self.messager.print_message(
                DiagnosticKind.NOTE,
                f"Found providers {providers} for service {contract}",
            )
            path = registry_path(contract, self.prefix)

            if self.filer.file_exists(path):
                self.messager.print_message(
                    DiagnosticKind.WARNING, f"Overwriting file {path}", path=path
                )

            try:
                self.filer.write_text(path, format_registry(providers))
            except OSError as e:
                self.messager.print_message(DiagnosticKind.ERROR, str(e), path=path)
                if self.continue_on_error:
                    continue
                logger.warning(
                    "registry_emission_aborted",
                    failed=path,
                    remaining=len(registry) - len(written) - 1,
                )
                break

            written.append(path)
            logger.info("registry_written", path=path, provider_count=len(providers))

        return written
