"""Traversal of declared types and provider matching."""

from typing import Iterable, List, Optional

import structlog

from servicescan.analysis.candidates import is_candidate
from servicescan.analysis.matcher import SubtypeMatcher
from servicescan.analysis.names import NameResolver
from servicescan.analysis.registry import ProviderRegistry
from servicescan.models import TypeDecl

logger = structlog.get_logger()


class ScanDriver:
    """Walk root declarations and their member types, recording providers."""

    def __init__(
        self,
        resolver: Optional[NameResolver] = None,
        matcher: Optional[SubtypeMatcher] = None,
    ):
        self.resolver = resolver or NameResolver()
        self.matcher = matcher or SubtypeMatcher(resolver=self.resolver)

    def scan(
        self, roots: Iterable[TypeDecl], registry: ProviderRegistry
    ) -> ProviderRegistry:
        """
        Scan declarations depth-first and record matches into the registry.

        Member types are visited whether or not their enclosing type
        matched; each is evaluated on its own.

        Args:
            roots: Root type declarations of the current round
            registry: Long-lived registry to accumulate into

        Returns:
            The same registry, for chaining
        """
        contracts = registry.contracts()
        visited = 0

        for root in roots:
            stack: List[TypeDecl] = [root]
            while stack:
                decl = stack.pop()
                visited += 1
                self._check(decl, contracts, registry)
                stack.extend(reversed(decl.members))

        logger.debug("declarations_scanned", count=visited, contracts=len(contracts))
        return registry

    def _check(
        self, decl: TypeDecl, contracts: List[str], registry: ProviderRegistry
    ) -> None:
        if not is_candidate(decl):
            return
        for contract in contracts:
            if self.matcher.is_subtype(decl, contract):
                provider = self.resolver.binary_name(decl)
                if registry.add(contract, provider):
                    logger.debug("provider_found", contract=contract, provider=provider)
