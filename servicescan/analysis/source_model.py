"""Build the declared-type model from Python source files.

Sources are parsed with :mod:`ast`, never imported. Every module-level class
becomes a top-level declaration and classes in a class body become member
types. Base-class expressions are linked to scanned declarations through
module-local names, imports and package re-exports; anything that cannot be
linked stays an external reference carrying its qualified name.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Union

import structlog

from servicescan.errors import SourceLoadError
from servicescan.models import (
    ConstructorDecl,
    Modifier,
    NestingKind,
    TypeDecl,
    TypeKind,
    TypeRef,
)

logger = structlog.get_logger()

PROTOCOL_BASES = {"typing.Protocol", "typing_extensions.Protocol"}
ENUM_BASES = {
    "enum.Enum",
    "enum.IntEnum",
    "enum.StrEnum",
    "enum.Flag",
    "enum.IntFlag",
    "enum.ReprEnum",
}
IGNORED_BASES = {
    "object",
    "builtins.object",
    "typing.Generic",
    "typing_extensions.Generic",
} | PROTOCOL_BASES

ABSTRACT_DECORATORS = {
    "abstractmethod",
    "abstractproperty",
    "abstractclassmethod",
    "abstractstaticmethod",
}
FINAL_DECORATORS = {"final", "typing.final", "typing_extensions.final"}
DATACLASS_DECORATORS = {"dataclass", "dataclasses.dataclass"}
FIELD_FUNCTIONS = {"field", "dataclasses.field"}

DEFAULT_EXCLUDE_DIRS = (
    ".git",
    "__pycache__",
    ".venv",
    "venv",
    ".tox",
    ".mypy_cache",
    ".pytest_cache",
    "build",
    "dist",
    "node_modules",
)


@dataclass
class SourceModule:
    """A parsed Python module and the root declarations it contains."""

    name: str
    path: str
    is_package: bool = False
    imports: Dict[str, str] = field(default_factory=dict)
    exports: Optional[Set[str]] = None
    types: List[TypeDecl] = field(default_factory=list)

    @property
    def package(self) -> str:
        """Package used as the base for relative imports."""
        if self.is_package:
            return self.name
        return self.name.rpartition(".")[0]


@dataclass
class _PendingClass:
    """A declaration waiting for its bases and constructors to be linked."""

    decl: TypeDecl
    node: ast.ClassDef
    module: SourceModule
    own_init: Optional[ConstructorDecl] = None
    dataclass_fields: Optional[Dict[str, bool]] = None
    bases: List[TypeRef] = field(default_factory=list)


@dataclass
class SourceProgram:
    """All modules loaded for one run, linked into a single type model."""

    modules: Dict[str, SourceModule] = field(default_factory=dict)
    index: Dict[str, TypeDecl] = field(default_factory=dict)

    def rounds(self) -> Iterator[List[TypeDecl]]:
        """Yield the root declarations of each module, in module-name order."""
        for name in sorted(self.modules):
            module = self.modules[name]
            if module.types:
                yield list(module.types)

    def find(self, dotted_name: str) -> Optional[TypeDecl]:
        """Look up a declaration by its dotted qualified name."""
        return self.index.get(dotted_name)

    @property
    def type_count(self) -> int:
        return len(self.index)


def _dotted(expr: ast.expr) -> Optional[str]:
    """Get ``a.b.C`` for a name/attribute chain, reducing ``X[T]`` to ``X``."""
    if isinstance(expr, ast.Subscript):
        return _dotted(expr.value)
    if isinstance(expr, ast.Name):
        return expr.id
    if isinstance(expr, ast.Attribute):
        owner = _dotted(expr.value)
        if owner is None:
            return None
        return f"{owner}.{expr.attr}"
    return None


def _annotation_name(annotation: ast.expr) -> Optional[str]:
    """Dotted name of an annotation, unquoting string annotations first."""
    if isinstance(annotation, ast.Constant) and isinstance(annotation.value, str):
        try:
            annotation = ast.parse(annotation.value.strip(), mode="eval").body
        except SyntaxError:
            return None
    return _dotted(annotation)


def _decorator_name(decorator: ast.expr) -> Optional[str]:
    if isinstance(decorator, ast.Call):
        return _dotted(decorator.func)
    return _dotted(decorator)


def _is_abstract_method(node: ast.AST) -> bool:
    if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
        return False
    for decorator in node.decorator_list:
        name = _decorator_name(decorator)
        if name is None:
            continue
        head, _, last = name.rpartition(".")
        if last in ABSTRACT_DECORATORS and head in ("", "abc"):
            return True
    return False


def _init_constructor(node: ast.FunctionDef | ast.AsyncFunctionDef) -> ConstructorDecl:
    """Build a constructor from ``__init__``, keeping only required arguments."""
    positional = list(node.args.posonlyargs) + list(node.args.args)
    defaults_start = len(positional) - len(node.args.defaults)

    required = []
    for index, arg in enumerate(positional):
        if index == 0:
            continue  # self
        if index < defaults_start:
            required.append(arg.arg)

    for arg, default in zip(node.args.kwonlyargs, node.args.kw_defaults):
        if default is None:
            required.append(arg.arg)

    return ConstructorDecl(modifiers={Modifier.PUBLIC}, parameters=required)


def _dataclass_decorator(node: ast.ClassDef) -> Optional[ast.expr]:
    for decorator in node.decorator_list:
        if _decorator_name(decorator) in DATACLASS_DECORATORS:
            return decorator
    return None


def _dataclass_generates_init(decorator: ast.expr) -> bool:
    if not isinstance(decorator, ast.Call):
        return True
    for keyword in decorator.keywords:
        if keyword.arg == "init" and isinstance(keyword.value, ast.Constant):
            return bool(keyword.value.value)
    return True


def _dataclass_fields(node: ast.ClassDef) -> Dict[str, bool]:
    """Map each ``__init__`` field of a dataclass body to whether it is required."""
    fields: Dict[str, bool] = {}
    for stmt in node.body:
        if not isinstance(stmt, ast.AnnAssign) or not isinstance(stmt.target, ast.Name):
            continue
        annotation = _annotation_name(stmt.annotation) or ""
        if annotation.rpartition(".")[2] in ("ClassVar", "KW_ONLY"):
            continue

        name = stmt.target.id
        value = stmt.value
        if value is None:
            fields[name] = True
            continue

        if isinstance(value, ast.Call) and _dotted(value.func) in FIELD_FUNCTIONS:
            keywords = {kw.arg: kw.value for kw in value.keywords if kw.arg}
            init = keywords.get("init")
            if isinstance(init, ast.Constant) and init.value is False:
                continue
            fields[name] = "default" not in keywords and "default_factory" not in keywords
            continue

        fields[name] = False
    return fields


def _literal_exports(tree: ast.Module) -> Optional[Set[str]]:
    """Read a literal ``__all__`` list or tuple, if the module defines one."""
    for stmt in tree.body:
        if not isinstance(stmt, ast.Assign):
            continue
        if not any(isinstance(t, ast.Name) and t.id == "__all__" for t in stmt.targets):
            continue
        if isinstance(stmt.value, (ast.List, ast.Tuple)):
            return {
                elt.value
                for elt in stmt.value.elts
                if isinstance(elt, ast.Constant) and isinstance(elt.value, str)
            }
    return None


class ImportCollector(ast.NodeVisitor):
    """Collect module-level import bindings as ``local name -> qualified name``."""

    def __init__(self, module: SourceModule):
        self.module = module
        self.bindings: Dict[str, str] = {}

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        pass

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        pass

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        pass

    def visit_Import(self, node: ast.Import) -> None:
        for alias in node.names:
            if alias.asname:
                self.bindings[alias.asname] = alias.name
            else:
                head = alias.name.partition(".")[0]
                self.bindings[head] = head

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        source = self._absolute_module(node.module, node.level)
        for alias in node.names:
            if alias.name == "*":
                continue
            local = alias.asname or alias.name
            self.bindings[local] = f"{source}.{alias.name}" if source else alias.name

    def _absolute_module(self, module: Optional[str], level: int) -> str:
        if level == 0:
            return module or ""
        parts = self.module.package.split(".") if self.module.package else []
        if level - 1 > 0:
            parts = parts[: max(len(parts) - (level - 1), 0)]
        if module:
            parts.append(module)
        return ".".join(parts)


class ModuleClassFinder(ast.NodeVisitor):
    """Collect module-level class statements.

    Classes under module-level ``if``, ``try`` and ``with`` blocks count as
    module-level; function and class bodies are not entered.
    """

    def __init__(self):
        self.classes: List[ast.ClassDef] = []

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        pass

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        pass

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        self.classes.append(node)


class ClassDeclBuilder:
    """Turn the class statements of one module into type declarations."""

    def __init__(self, module: SourceModule):
        self.module = module
        self.pending: List[_PendingClass] = []

    def build(self, tree: ast.Module) -> List[TypeDecl]:
        """
        Build the top-level declarations of a module.

        Args:
            tree: Parsed module

        Returns:
            Root declarations, member types attached
        """
        finder = ModuleClassFinder()
        finder.visit(tree)
        return [self._build_class(node, enclosing=None) for node in finder.classes]

    def _build_class(self, node: ast.ClassDef, enclosing: Optional[TypeDecl]) -> TypeDecl:
        decl = TypeDecl(
            simple_name=node.name,
            package=self.module.name,
            modifiers=self._modifiers(node, enclosing),
            nesting=NestingKind.TOP_LEVEL if enclosing is None else NestingKind.MEMBER,
            source_file=self.module.path,
            line=node.lineno,
        )
        if enclosing is not None:
            enclosing.add_member(decl)

        pending = _PendingClass(decl=decl, node=node, module=self.module)
        for stmt in node.body:
            if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)) and stmt.name == "__init__":
                pending.own_init = _init_constructor(stmt)

        decorator = _dataclass_decorator(node)
        if decorator is not None and _dataclass_generates_init(decorator):
            pending.dataclass_fields = _dataclass_fields(node)

        self.pending.append(pending)

        for stmt in node.body:
            if isinstance(stmt, ast.ClassDef):
                self._build_class(stmt, enclosing=decl)

        logger.debug(
            "class_declared",
            name=decl.dotted_name,
            nesting=decl.nesting.value,
            modifiers=sorted(m.value for m in decl.modifiers),
        )
        return decl

    def _modifiers(self, node: ast.ClassDef, enclosing: Optional[TypeDecl]) -> Set[Modifier]:
        modifiers: Set[Modifier] = set()

        exported = True
        if enclosing is None and self.module.exports is not None:
            exported = node.name in self.module.exports
        if exported and not node.name.startswith("_"):
            modifiers.add(Modifier.PUBLIC)
        else:
            modifiers.add(Modifier.PRIVATE)

        # Nested classes never capture an instance of their enclosing class
        if enclosing is not None:
            modifiers.add(Modifier.STATIC)

        if any(_is_abstract_method(stmt) for stmt in node.body):
            modifiers.add(Modifier.ABSTRACT)

        if any(_decorator_name(d) in FINAL_DECORATORS for d in node.decorator_list):
            modifiers.add(Modifier.FINAL)

        return modifiers


class ProgramLinker:
    """Resolve base classes, declaration kinds and constructors across modules."""

    def __init__(self, program: SourceProgram, pending: Sequence[_PendingClass]):
        self.program = program
        self.pending = list(pending)
        self._by_decl: Dict[int, _PendingClass] = {id(p.decl): p for p in self.pending}
        self._constructors: Dict[int, Optional[ConstructorDecl]] = {}

    def link(self) -> None:
        for pending in self.pending:
            self._link_bases(pending)
        for pending in self.pending:
            inherited = self._explicit_constructor(pending, set())
            constructor = inherited or ConstructorDecl(modifiers={Modifier.PUBLIC})
            pending.decl.constructors = [constructor]

        unresolved = sum(
            1 for p in self.pending for ref in p.bases if not ref.is_resolved
        )
        logger.info(
            "program_linked",
            type_count=len(self.pending),
            external_bases=unresolved,
        )

    def _link_bases(self, pending: _PendingClass) -> None:
        decl = pending.decl
        refs: List[TypeRef] = []
        for base in pending.node.bases:
            dotted = _dotted(base)
            if dotted is None:
                refs.append(TypeRef(name=ast.unparse(base)))
                continue
            qualified = self.qualify(pending, dotted)
            if qualified in PROTOCOL_BASES:
                decl.kind = TypeKind.INTERFACE
            elif qualified in ENUM_BASES:
                decl.kind = TypeKind.ENUM
            if qualified in IGNORED_BASES:
                continue
            refs.append(TypeRef(name=qualified, declaration=self.lookup(qualified)))

        pending.bases = refs
        if decl.kind == TypeKind.INTERFACE:
            decl.interfaces = refs
        elif refs:
            decl.superclass = refs[0]
            decl.interfaces = refs[1:]

    def qualify(self, pending: _PendingClass, dotted: str) -> str:
        """
        Qualify a base expression in the scope the class statement runs in.

        The enclosing class body is searched first, then module globals,
        then import bindings. Unknown names (builtins included) are returned
        unchanged.
        """
        head, _, rest = dotted.partition(".")
        suffix = f".{rest}" if rest else ""

        enclosing = pending.decl.enclosing
        if enclosing is not None:
            for member in enclosing.members:
                if member.simple_name == head and member is not pending.decl:
                    return member.dotted_name + suffix

        module = pending.module
        for decl in module.types:
            if decl.simple_name == head:
                return decl.dotted_name + suffix

        if head in module.imports:
            return module.imports[head] + suffix
        return dotted

    def lookup(self, qualified: str, seen: Optional[Set[str]] = None) -> Optional[TypeDecl]:
        """
        Find the declaration for a qualified name, following re-exports.

        ``from .impl import Plugin`` in ``pkg/__init__.py`` makes
        ``pkg.Plugin`` resolve to ``pkg.impl.Plugin``.
        """
        decl = self.program.index.get(qualified)
        if decl is not None:
            return decl

        seen = seen if seen is not None else {qualified}
        parts = qualified.split(".")
        for split in range(len(parts) - 1, 0, -1):
            module = self.program.modules.get(".".join(parts[:split]))
            if module is None:
                continue
            target = module.imports.get(parts[split])
            if target is None:
                return None
            rewritten = ".".join([target] + parts[split + 1:])
            if rewritten in seen:
                return None
            seen.add(rewritten)
            return self.lookup(rewritten, seen)
        return None

    def _explicit_constructor(
        self, pending: _PendingClass, visiting: Set[int]
    ) -> Optional[ConstructorDecl]:
        """Constructor defined by the class itself or the first base that has one."""
        key = id(pending.decl)
        if key in self._constructors:
            return self._constructors[key]
        if key in visiting:
            return None
        visiting.add(key)

        constructor: Optional[ConstructorDecl] = None
        if pending.own_init is not None:
            constructor = pending.own_init
        elif pending.dataclass_fields is not None:
            fields = self._inherited_dataclass_fields(pending, set())
            required = [name for name, is_required in fields.items() if is_required]
            constructor = ConstructorDecl(modifiers={Modifier.PUBLIC}, parameters=required)
        else:
            for base in pending.bases:
                base_pending = self._pending_for(base)
                if base_pending is None:
                    continue
                constructor = self._explicit_constructor(base_pending, visiting)
                if constructor is not None:
                    break

        self._constructors[key] = constructor
        return constructor

    def _inherited_dataclass_fields(
        self, pending: _PendingClass, visiting: Set[int]
    ) -> Dict[str, bool]:
        if id(pending.decl) in visiting:
            return {}
        visiting.add(id(pending.decl))

        fields: Dict[str, bool] = {}
        for base in reversed(pending.bases):
            base_pending = self._pending_for(base)
            if base_pending is not None and base_pending.dataclass_fields is not None:
                fields.update(self._inherited_dataclass_fields(base_pending, visiting))
        fields.update(pending.dataclass_fields or {})
        return fields

    def _pending_for(self, ref: TypeRef) -> Optional[_PendingClass]:
        if ref.declaration is None:
            return None
        return self._by_decl.get(id(ref.declaration))


def parse_module(
    source_code: str,
    module_name: str,
    path: str = "<string>",
    is_package: bool = False,
) -> tuple[SourceModule, List[_PendingClass]]:
    """
    Parse one module into declarations that still need linking.

    Args:
        source_code: Python source code
        module_name: Dotted module name the source is loaded as
        path: File path used in diagnostics
        is_package: Whether the source is a package ``__init__``

    Returns:
        Tuple of (module with root declarations, declarations to link)

    Raises:
        SourceLoadError: If the source has syntax errors
    """
    try:
        tree = ast.parse(source_code, filename=path)
    except SyntaxError as e:
        logger.error(
            "source_parsing_failed",
            path=path,
            error=str(e),
            line=e.lineno,
            offset=e.offset,
        )
        raise SourceLoadError(path, e.msg or str(e), line=e.lineno) from e

    module = SourceModule(name=module_name, path=path, is_package=is_package)
    collector = ImportCollector(module)
    collector.visit(tree)
    module.imports = collector.bindings
    module.exports = _literal_exports(tree)

    builder = ClassDeclBuilder(module)
    module.types = builder.build(tree)
    return module, builder.pending


def _assemble(parsed: Iterable[tuple[SourceModule, List[_PendingClass]]]) -> SourceProgram:
    program = SourceProgram()
    pending: List[_PendingClass] = []
    for module, module_pending in parsed:
        if module.name in program.modules:
            logger.warning("duplicate_module_skipped", module=module.name, path=module.path)
            continue
        program.modules[module.name] = module
        pending.extend(module_pending)
        for item in module_pending:
            program.index[item.decl.dotted_name] = item.decl

    ProgramLinker(program, pending).link()
    return program


def program_from_sources(sources: Dict[str, str]) -> SourceProgram:
    """
    Build a linked program from in-memory sources keyed by module name.

    A module whose name prefixes another module's name is treated as a
    package, so relative imports inside it resolve like ``__init__.py``.
    """
    names = set(sources)
    parsed = []
    for name in sorted(sources):
        is_package = any(other.startswith(f"{name}.") for other in names)
        parsed.append(
            parse_module(sources[name], name, path=f"<{name}>", is_package=is_package)
        )
    return _assemble(parsed)


def _module_name(path: Path, root: Path) -> tuple[str, bool]:
    relative = path.relative_to(root).with_suffix("")
    parts = list(relative.parts)
    is_package = parts[-1] == "__init__"
    if is_package:
        parts = parts[:-1]
    return ".".join(parts), is_package


def discover_source_files(
    root: Path, exclude_dirs: Sequence[str] = DEFAULT_EXCLUDE_DIRS
) -> List[Path]:
    """List the ``.py`` files under a source root, in sorted order."""
    if root.is_file():
        return [root]
    excluded = set(exclude_dirs)
    files = []
    for path in sorted(root.rglob("*.py")):
        relative_dirs = path.relative_to(root).parts[:-1]
        if any(part in excluded for part in relative_dirs):
            continue
        files.append(path)
    return files


def load_program(
    roots: Sequence[Union[str, Path]],
    encoding: str = "utf-8",
    exclude_dirs: Sequence[str] = DEFAULT_EXCLUDE_DIRS,
) -> SourceProgram:
    """
    Load and link every Python module under the given source roots.

    Module names are dotted paths relative to their root, so a root plays
    the part of a ``sys.path`` entry. A root may also be a single file.

    Args:
        roots: Source root directories or files
        encoding: Encoding used to read source files
        exclude_dirs: Directory names skipped while walking roots

    Returns:
        Linked SourceProgram

    Raises:
        SourceLoadError: If a root is missing or a file cannot be read or parsed
    """
    parsed = []
    for raw_root in roots:
        root = Path(raw_root)
        if not root.exists():
            raise SourceLoadError(str(root), "source root does not exist")

        base = root.parent if root.is_file() else root
        for path in discover_source_files(root, exclude_dirs):
            module_name, is_package = _module_name(path, base)
            if not module_name:
                logger.warning(
                    "source_file_skipped",
                    path=str(path),
                    reason="package root has no module name; pass its parent directory",
                )
                continue
            try:
                source_code = path.read_text(encoding=encoding)
            except (OSError, UnicodeDecodeError) as e:
                logger.error("source_read_failed", path=str(path), error=str(e))
                raise SourceLoadError(str(path), str(e)) from e
            parsed.append(
                parse_module(source_code, module_name, path=str(path), is_package=is_package)
            )

    program = _assemble(parsed)
    logger.info(
        "source_program_loaded",
        roots=[str(r) for r in roots],
        module_count=len(program.modules),
        type_count=program.type_count,
    )
    return program
