"""Exception hierarchy for servicescan."""

from typing import Optional


class ServiceScanError(Exception):
    """Base class for all servicescan errors."""


class OptionError(ServiceScanError):
    """Raised when a processor option string is malformed."""

    def __init__(self, option: str, reason: str):
        self.option = option
        self.reason = reason
        super().__init__(f"Invalid processor option {option!r}: {reason}")


class SourceLoadError(ServiceScanError):
    """Raised when a source file cannot be read or parsed."""

    def __init__(self, path: str, message: str, line: Optional[int] = None):
        self.path = path
        self.message = message
        self.line = line
        location = f"{path}:{line}" if line else path
        super().__init__(f"{location}: {message}")


class ProcessorStateError(ServiceScanError):
    """Raised when the processor lifecycle is driven out of order."""
