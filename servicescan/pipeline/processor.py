"""Service processor lifecycle: init once, scan each round, finish once."""

from typing import Iterable, List, Mapping, Optional

import structlog

from servicescan.analysis.names import DEFAULT_NESTED_SEPARATOR, NameResolver
from servicescan.analysis.registry import ProviderRegistry
from servicescan.analysis.scanner import ScanDriver
from servicescan.diagnostics import LoggingMessager, Messager
from servicescan.errors import ProcessorStateError
from servicescan.models import DiagnosticKind, ProcessorState, ScanReport, TypeDecl
from servicescan.parsing.emitter import DEFAULT_REGISTRY_PREFIX, RegistryEmitter
from servicescan.parsing.filer import Filer
from servicescan.parsing.options import (
    SERVICES_OPTION,
    SUPPORTED_OPTIONS,
    parse_contract_list,
)

logger = structlog.get_logger()


class ServiceProcessor:
    """
    Discover service providers across compilation rounds.

    The host drives ``init`` once, ``process`` once per round of newly
    seen root declarations, then ``finish`` once. Providers accumulate in a
    single registry owned by the processor for the whole run.

    Example:
        processor = ServiceProcessor(DirectoryFiler("build"))
        processor.init({"services": "com.acme.Plugin"})
        for round_types in program.rounds():
            processor.process(round_types)
        processor.finish()
    """

    def __init__(
        self,
        filer: Filer,
        messager: Optional[Messager] = None,
        registry_prefix: str = DEFAULT_REGISTRY_PREFIX,
        nested_separator: str = DEFAULT_NESTED_SEPARATOR,
        continue_on_error: bool = False,
    ):
        self.filer = filer
        self.messager = messager or LoggingMessager()
        self.driver = ScanDriver(resolver=NameResolver(nested_separator))
        self.emitter = RegistryEmitter(
            filer,
            self.messager,
            prefix=registry_prefix,
            continue_on_error=continue_on_error,
        )
        self.registry = ProviderRegistry()
        self.state = ProcessorState.CREATED
        self.round_count = 0
        self.written_files: List[str] = []

    def init(self, options: Mapping[str, str]) -> None:
        """
        Read the configured contracts from processor options.

        A missing or empty ``services`` option is reported as a warning and
        leaves the processor with no contracts: nothing is scanned and no
        file is written.

        Args:
            options: Processor options, ``services`` among them
        """
        self._require(ProcessorState.CREATED, "init")

        for name in sorted(set(options) - SUPPORTED_OPTIONS):
            self.messager.print_message(
                DiagnosticKind.WARNING, f"Unrecognized processor option {name!r} ignored"
            )

        contracts = parse_contract_list(options.get(SERVICES_OPTION, ""))
        if not contracts:
            self.messager.print_message(
                DiagnosticKind.WARNING,
                "No services added. Add services by passing their fully qualified "
                "binary names in the following format:",
            )
            self.messager.print_message(
                DiagnosticKind.WARNING,
                f"-A {SERVICES_OPTION}=com.example.Service1,com.example.Service2",
            )

        self.registry = ProviderRegistry(contracts)
        self.state = ProcessorState.INITIALIZED
        logger.info("processor_initialized", contracts=contracts)

    def process(self, roots: Iterable[TypeDecl]) -> None:
        """
        Scan one round of root declarations into the registry.

        Args:
            roots: Root declarations first seen in this round
        """
        self._require(ProcessorState.INITIALIZED, "process")
        self.round_count += 1
        if self.registry.is_empty():
            return

        roots = list(roots)
        self.driver.scan(roots, self.registry)
        logger.debug("round_scanned", round=self.round_count, root_count=len(roots))

    def finish(self) -> List[str]:
        """
        Write the registry files for every configured contract.

        Returns:
            Paths written successfully
        """
        self._require(ProcessorState.INITIALIZED, "finish")
        self.state = ProcessorState.FINISHED
        if self.registry.is_empty():
            return []

        self.written_files = self.emitter.emit(self.registry)
        logger.info(
            "processor_finished",
            rounds=self.round_count,
            written=len(self.written_files),
            contracts=len(self.registry),
        )
        return self.written_files

    def report(self) -> ScanReport:
        """Summarize the run so far."""
        diagnostics = getattr(self.messager, "diagnostics", [])
        return ScanReport(
            contracts=self.registry.contracts(),
            providers=self.registry.as_dict(),
            written_files=list(self.written_files),
            diagnostics=list(diagnostics),
            rounds=self.round_count,
            state=self.state,
        )

    def _require(self, expected: ProcessorState, operation: str) -> None:
        if self.state != expected:
            raise ProcessorStateError(
                f"Cannot {operation} a processor in state {self.state.value!r}"
            )
