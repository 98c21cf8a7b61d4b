"""Accumulated provider sets, one per configured contract."""

from typing import Dict, Iterable, Iterator, List, Set, Tuple


class ProviderRegistry:
    """
    Ordered mapping from contract binary name to provider binary names.

    Every configured contract has an entry from the start, so a contract
    without providers is still reported (and emitted as an empty file).
    Contracts and providers are always returned in lexicographic order.
    """

    def __init__(self, contracts: Iterable[str] = ()):
        self._providers: Dict[str, Set[str]] = {}
        for contract in contracts:
            self._providers.setdefault(contract, set())

    def contracts(self) -> List[str]:
        """Get configured contracts in lexicographic order."""
        return sorted(self._providers)

    def providers(self, contract: str) -> List[str]:
        """Get the sorted providers found for a contract."""
        return sorted(self._providers[contract])

    def add(self, contract: str, provider: str) -> bool:
        """
        Record a provider for a configured contract.

        Args:
            contract: Contract binary name (must be configured)
            provider: Provider binary name

        Returns:
            True if the provider was not recorded before

        Raises:
            KeyError: If the contract was never configured
        """
        providers = self._providers[contract]
        if provider in providers:
            return False
        providers.add(provider)
        return True

    def items(self) -> Iterator[Tuple[str, List[str]]]:
        for contract in self.contracts():
            yield contract, self.providers(contract)

    def as_dict(self) -> Dict[str, List[str]]:
        return dict(self.items())

    def is_empty(self) -> bool:
        """True when no contract is configured."""
        return not self._providers

    def __contains__(self, contract: object) -> bool:
        return contract in self._providers

    def __len__(self) -> int:
        return len(self._providers)

    def __repr__(self) -> str:
        return f"ProviderRegistry({self.as_dict()!r})"
