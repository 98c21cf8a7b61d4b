"""Parsing of ``key=value`` processor options and contract lists."""

from typing import Dict, Iterable, List

from servicescan.errors import OptionError

SERVICES_OPTION = "services"
SUPPORTED_OPTIONS = frozenset({SERVICES_OPTION})


def parse_processor_options(raw_options: Iterable[str]) -> Dict[str, str]:
    """
    Parse ``key=value`` option strings, as passed with ``-A``.

    A bare ``key`` maps to an empty value; later occurrences win.

    Raises:
        OptionError: If an option has an empty key
    """
    options: Dict[str, str] = {}
    for raw in raw_options:
        key, _, value = raw.partition("=")
        key = key.strip()
        if not key:
            raise OptionError(raw, "missing option name before '='")
        options[key] = value.strip()
    return options


def parse_contract_list(value: str) -> List[str]:
    """Split a comma separated contract list into sorted unique names."""
    if not value:
        return []
    return sorted({name.strip() for name in value.split(",") if name.strip()})
