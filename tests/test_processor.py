"""Tests for the service processor lifecycle."""

import pytest

from servicescan.analysis.source_model import load_program
from servicescan.diagnostics import LoggingMessager
from servicescan.errors import ProcessorStateError
from servicescan.models import DiagnosticKind, ProcessorState
from servicescan.parsing.filer import DirectoryFiler, MemoryFiler
from servicescan.pipeline.processor import ServiceProcessor


@pytest.fixture
def messager() -> LoggingMessager:
    return LoggingMessager()


class TestInit:
    """Test reading the configured contracts."""

    def test_contracts_configured(self, messager):
        """Configured contracts each get an empty registry entry."""
        processor = ServiceProcessor(MemoryFiler(), messager)

        processor.init({"services": "com.acme.Plugin,com.acme.Codec"})

        assert processor.registry.contracts() == ["com.acme.Codec", "com.acme.Plugin"]
        assert processor.state == ProcessorState.INITIALIZED
        assert messager.diagnostics == []

    @pytest.mark.parametrize("options", [{}, {"services": ""}])
    def test_missing_services_warns(self, messager, options):
        """No contracts is a warning, not a failure."""
        processor = ServiceProcessor(MemoryFiler(), messager)

        processor.init(options)

        warnings = messager.of_kind(DiagnosticKind.WARNING)
        assert len(warnings) == 2
        assert warnings[0].message.startswith("No services added")
        assert "-A services=com.example.Service1,com.example.Service2" in warnings[1].message
        assert processor.registry.is_empty()

    def test_unrecognized_option_warns(self, messager):
        """Options other than services are reported and ignored."""
        processor = ServiceProcessor(MemoryFiler(), messager)

        processor.init({"services": "a.B", "verbose": "true"})

        warnings = messager.of_kind(DiagnosticKind.WARNING)
        assert [w.message for w in warnings] == ["Unrecognized processor option 'verbose' ignored"]


class TestLifecycle:
    """Test the init, process and finish sequence."""

    def test_rounds_accumulate(self, make_type, plugin_contract, messager):
        """Providers from every round end up in the registry."""
        filer = MemoryFiler()
        processor = ServiceProcessor(filer, messager)
        processor.init({"services": "com.acme.Plugin"})

        processor.process([make_type("First", interfaces=[plugin_contract.ref()])])
        processor.process([])
        processor.process([make_type("Second", interfaces=[plugin_contract.ref()])])
        written = processor.finish()

        assert written == ["META-INF/services/com.acme.Plugin"]
        assert filer.files["META-INF/services/com.acme.Plugin"] == (
            "com.acme.First\ncom.acme.Second\n"
        )
        assert processor.round_count == 3
        assert processor.state == ProcessorState.FINISHED

    def test_no_contracts_writes_nothing(self, make_type, plugin_contract, messager):
        """Without contracts no registry file is produced."""
        filer = MemoryFiler()
        processor = ServiceProcessor(filer, messager)
        processor.init({})

        processor.process([make_type("First", interfaces=[plugin_contract.ref()])])

        assert processor.finish() == []
        assert filer.files == {}
        assert len(messager.of_kind(DiagnosticKind.WARNING)) == 2

    def test_contract_without_providers_gets_empty_file(self, messager):
        """Configured contracts with no providers still produce a file."""
        filer = MemoryFiler()
        processor = ServiceProcessor(filer, messager)
        processor.init({"services": "com.acme.Plugin"})

        processor.finish()

        assert filer.files == {"META-INF/services/com.acme.Plugin": ""}

    def test_process_before_init_rejected(self, messager):
        """Rounds cannot be processed before init."""
        processor = ServiceProcessor(MemoryFiler(), messager)

        with pytest.raises(ProcessorStateError):
            processor.process([])

    def test_finish_twice_rejected(self, messager):
        """finish runs exactly once."""
        processor = ServiceProcessor(MemoryFiler(), messager)
        processor.init({"services": "a.B"})
        processor.finish()

        with pytest.raises(ProcessorStateError):
            processor.finish()
        with pytest.raises(ProcessorStateError):
            processor.process([])

    def test_init_twice_rejected(self, messager):
        """init runs exactly once."""
        processor = ServiceProcessor(MemoryFiler(), messager)
        processor.init({"services": "a.B"})

        with pytest.raises(ProcessorStateError):
            processor.init({"services": "c.D"})

    def test_report(self, make_type, plugin_contract, messager):
        """The report summarizes providers, files and diagnostics."""
        processor = ServiceProcessor(MemoryFiler(), messager)
        processor.init({"services": "com.acme.Plugin"})
        processor.process([make_type("First", interfaces=[plugin_contract.ref()])])
        processor.finish()

        report = processor.report()

        assert report.providers == {"com.acme.Plugin": ["com.acme.First"]}
        assert report.written_files == ["META-INF/services/com.acme.Plugin"]
        assert report.rounds == 1
        assert report.state == ProcessorState.FINISHED
        assert report.provider_count == 1
        assert report.error_count == 0

    def test_custom_nested_separator(self, make_type, plugin_contract, messager):
        """The nested separator flows through to emitted names."""
        from servicescan.models import ConstructorDecl, Modifier, TypeDecl

        outer = make_type("Outer")
        outer.add_member(
            TypeDecl(
                simple_name="Inner",
                modifiers={Modifier.PUBLIC, Modifier.STATIC},
                interfaces=[plugin_contract.ref()],
                constructors=[ConstructorDecl()],
            )
        )
        filer = MemoryFiler()
        processor = ServiceProcessor(filer, messager, nested_separator=".")
        processor.init({"services": "com.acme.Plugin"})
        processor.process([outer])
        processor.finish()

        assert filer.files["META-INF/services/com.acme.Plugin"] == "com.acme.Outer.Inner\n"


class TestSourceRun:
    """Test a full run over Python sources."""

    def test_acme_scenario(self, acme_sources, write_sources, tmp_path, messager):
        """The acme sources produce the expected registry file."""
        program = load_program([write_sources(acme_sources)])
        output = tmp_path / "out"
        processor = ServiceProcessor(DirectoryFiler(output), messager)

        processor.init({"services": "com.acme.api.Plugin"})
        for round_types in program.rounds():
            processor.process(round_types)
        processor.finish()

        content = (output / "META-INF" / "services" / "com.acme.api.Plugin").read_text(
            encoding="utf-8"
        )
        assert content == "com.acme.impl.FooPlugin\ncom.acme.outer.Outer$Inner\n"
