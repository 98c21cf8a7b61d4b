"""Declared-type model scanned for service providers.

Declarations are plain dataclasses compared by identity: supertype edges
may form cycles in malformed programs, so structural equality would never
terminate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set


class TypeKind(str, Enum):
    """Kind of a type declaration."""

    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    ANNOTATION = "annotation"


class NestingKind(str, Enum):
    """Where a type is declared relative to other types."""

    TOP_LEVEL = "top_level"
    MEMBER = "member"
    LOCAL = "local"
    ANONYMOUS = "anonymous"


class Modifier(str, Enum):
    """Declaration modifiers."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"
    ABSTRACT = "abstract"
    STATIC = "static"
    FINAL = "final"


@dataclass(eq=False)
class ConstructorDecl:
    """A constructor of a declared type.

    ``parameters`` holds the names of the arguments a caller must supply.
    """

    modifiers: Set[Modifier] = field(default_factory=lambda: {Modifier.PUBLIC})
    parameters: List[str] = field(default_factory=list)

    @property
    def is_public(self) -> bool:
        return Modifier.PUBLIC in self.modifiers


@dataclass(eq=False)
class TypeRef:
    """Reference to a supertype.

    ``declaration`` is set when the referenced type belongs to the scanned
    program; external types keep only their best-effort qualified ``name``.
    """

    name: str
    declaration: Optional["TypeDecl"] = None

    @property
    def is_resolved(self) -> bool:
        return self.declaration is not None

    def __repr__(self) -> str:
        state = "resolved" if self.declaration is not None else "external"
        return f"TypeRef({self.name!r}, {state})"


@dataclass(eq=False)
class TypeDecl:
    """A declared type: class, interface, enum or annotation type."""

    simple_name: str
    package: str = ""
    kind: TypeKind = TypeKind.CLASS
    modifiers: Set[Modifier] = field(default_factory=set)
    nesting: NestingKind = NestingKind.TOP_LEVEL
    enclosing: Optional["TypeDecl"] = None
    superclass: Optional[TypeRef] = None
    interfaces: List[TypeRef] = field(default_factory=list)
    constructors: List[ConstructorDecl] = field(default_factory=list)
    members: List["TypeDecl"] = field(default_factory=list)
    source_file: Optional[str] = None
    line: int = 0

    def add_member(self, member: "TypeDecl") -> "TypeDecl":
        """Attach a nested type declared in this type's body."""
        member.enclosing = self
        member.package = self.package
        if member.nesting == NestingKind.TOP_LEVEL:
            member.nesting = NestingKind.MEMBER
        self.members.append(member)
        return member

    def has_modifier(self, modifier: Modifier) -> bool:
        return modifier in self.modifiers

    def ref(self) -> TypeRef:
        """Build a resolved reference pointing at this declaration."""
        return TypeRef(name=self.dotted_name, declaration=self)

    @property
    def dotted_name(self) -> str:
        """Qualified name with every segment joined by a dot."""
        parts = []
        current: Optional[TypeDecl] = self
        while current is not None:
            parts.append(current.simple_name)
            current = current.enclosing
        parts.reverse()
        if self.package:
            parts.insert(0, self.package)
        return ".".join(parts)

    def __repr__(self) -> str:
        return f"TypeDecl({self.dotted_name!r}, kind={self.kind.value})"
