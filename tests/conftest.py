"""Pytest configuration and fixtures for servicescan tests."""

from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

import pytest
import structlog

from servicescan.models import (
    ConstructorDecl,
    Modifier,
    NestingKind,
    TypeDecl,
    TypeKind,
    TypeRef,
)
from servicescan.parsing.filer import Filer


class FailingFiler(Filer):
    """Filer whose writes fail for selected paths."""

    def __init__(self, failing: Iterable[str], existing: Iterable[str] = ()):
        self.failing = set(failing)
        self.existing = set(existing)
        self.files: Dict[str, str] = {}
        self.attempts: List[str] = []

    def file_exists(self, path: str) -> bool:
        return path in self.existing or path in self.files

    def write_text(self, path: str, content: str) -> None:
        self.attempts.append(path)
        if path in self.failing:
            raise OSError(f"Disk full while writing {path}")
        self.files[path] = content


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo logging configuration done by CLI runs."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def make_type() -> Callable[..., TypeDecl]:
    """Factory for hand-built type declarations.

    Defaults describe an eligible provider: a public concrete top-level
    class with an implicit no-argument constructor.
    """

    def _make(
        name: str,
        package: str = "com.acme",
        kind: TypeKind = TypeKind.CLASS,
        modifiers: Optional[Iterable[Modifier]] = None,
        superclass: Optional[TypeRef] = None,
        interfaces: Iterable[TypeRef] = (),
        constructors: Optional[List[ConstructorDecl]] = None,
    ) -> TypeDecl:
        return TypeDecl(
            simple_name=name,
            package=package,
            kind=kind,
            modifiers=set(modifiers) if modifiers is not None else {Modifier.PUBLIC},
            nesting=NestingKind.TOP_LEVEL,
            superclass=superclass,
            interfaces=list(interfaces),
            constructors=constructors if constructors is not None else [ConstructorDecl()],
        )

    return _make


@pytest.fixture
def plugin_contract(make_type) -> TypeDecl:
    """The com.acme.Plugin interface."""
    return make_type("Plugin", kind=TypeKind.INTERFACE, constructors=[])


@pytest.fixture
def failing_filer_factory() -> Callable[..., FailingFiler]:
    return FailingFiler


@pytest.fixture
def acme_sources() -> Dict[str, str]:
    """Python sources reproducing the com.acme plugin layout."""
    return {
        "com/__init__.py": "",
        "com/acme/__init__.py": "from com.acme.api import Plugin\n",
        "com/acme/api.py": '''
from typing import Protocol


class Plugin(Protocol):
    """Service contract."""

    def run(self) -> None:
        ...
''',
        "com/acme/impl.py": '''
from abc import abstractmethod

from com.acme import Plugin


class FooPlugin(Plugin):
    def run(self) -> None:
        print("foo")


class BasePlugin(Plugin):
    @abstractmethod
    def configure(self) -> None:
        ...
''',
        "com/acme/outer.py": '''
from com.acme.api import Plugin


class Outer:
    class Inner(Plugin):
        def run(self) -> None:
            pass

    class _Hidden(Plugin):
        def run(self) -> None:
            pass
''',
    }


@pytest.fixture
def write_sources(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """Write a mapping of relative path -> source below a fresh source root."""

    def _write(sources: Dict[str, str]) -> Path:
        root = tmp_path / "src"
        for relative, content in sources.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return _write
