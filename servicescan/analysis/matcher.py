"""Transitive subtype matching against contract binary names."""

from typing import Hashable, List, Optional, Set, Union

import structlog

from servicescan.analysis.names import NameResolver
from servicescan.analysis.supertypes import SupertypeGraph
from servicescan.models import TypeDecl, TypeRef

logger = structlog.get_logger()

TypeLike = Union[TypeDecl, TypeRef]


class SubtypeMatcher:
    """
    Decide whether a type extends or implements a contract.

    The search walks the reflexive-transitive supertype closure depth-first,
    superclass before interfaces, and stops at the first type whose binary
    name equals the contract. A visited set per query keeps cyclic graphs
    finite; an explicit stack keeps deep hierarchies off the call stack.
    """

    def __init__(
        self,
        resolver: Optional[NameResolver] = None,
        graph: Optional[SupertypeGraph] = None,
    ):
        self.resolver = resolver or NameResolver()
        self.graph = graph or SupertypeGraph()

    def is_subtype(self, target: TypeLike, contract: str) -> bool:
        """
        Check whether ``target`` is ``contract`` or transitively derives from it.

        Args:
            target: Declaration or reference to start from
            contract: Binary name of the contract type

        Returns:
            True if the contract is in the supertype closure
        """
        visited: Set[Hashable] = set()
        stack: List[TypeLike] = [target]

        while stack:
            current = stack.pop()
            key = _visit_key(current)
            if key in visited:
                continue
            visited.add(key)

            if self.resolver.binary_name(current) == contract:
                return True

            # Reversed so the first declared supertype is explored first
            stack.extend(reversed(self.graph.direct_supertypes(current)))

        return False


def _visit_key(target: TypeLike) -> Hashable:
    if isinstance(target, TypeRef):
        if target.declaration is None:
            return ("external", target.name)
        target = target.declaration
    return ("declared", id(target))
