"""servicescan - static discovery of service provider implementations."""

__version__ = "0.1.0"
