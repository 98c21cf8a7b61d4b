"""Processor lifecycle for servicescan."""

from .processor import ServiceProcessor

__all__ = [
    "ServiceProcessor",
]
