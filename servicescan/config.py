"""Configuration management for servicescan."""

from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from servicescan.analysis.names import DEFAULT_NESTED_SEPARATOR
from servicescan.analysis.source_model import DEFAULT_EXCLUDE_DIRS
from servicescan.parsing.emitter import DEFAULT_REGISTRY_PREFIX


class Settings(BaseSettings):
    """servicescan configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="SERVICESCAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Comma separated contract binary names, overridden by -A services=...
    services: str = ""

    # Output
    output_dir: str = "."
    registry_prefix: str = DEFAULT_REGISTRY_PREFIX
    continue_on_error: bool = False  # keep writing other registries after a failed write

    # Naming
    nested_separator: str = DEFAULT_NESTED_SEPARATOR

    # Source loading
    source_encoding: str = "utf-8"
    exclude_dirs: List[str] = list(DEFAULT_EXCLUDE_DIRS)

    # Logging
    log_level: str = "WARNING"
    log_format: Literal["json", "console"] = "console"


settings = Settings()
