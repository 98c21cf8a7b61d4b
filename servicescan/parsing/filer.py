"""Output file collaborators used when writing registry files."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Union

import structlog

logger = structlog.get_logger()


class Filer(ABC):
    """Abstract output location for generated registry files."""

    @abstractmethod
    def file_exists(self, path: str) -> bool:
        """Check whether a generated file already exists at ``path``."""
        pass

    @abstractmethod
    def write_text(self, path: str, content: str) -> None:
        """
        Create or replace a generated file.

        Raises:
            OSError: If the file cannot be written
        """
        pass


class DirectoryFiler(Filer):
    """Write generated files below an output directory, as UTF-8."""

    def __init__(self, root: Union[str, Path], encoding: str = "utf-8"):
        self.root = Path(root)
        self.encoding = encoding

    def resolve(self, path: str) -> Path:
        return self.root / path

    def file_exists(self, path: str) -> bool:
        return self.resolve(path).exists()

    def write_text(self, path: str, content: str) -> None:
        target = self.resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps "\n" line endings on every platform
        with open(target, "w", encoding=self.encoding, newline="") as f:
            f.write(content)
        logger.debug("file_written", path=str(target), size=len(content))


class MemoryFiler(Filer):
    """Keep generated files in memory, for dry runs."""

    def __init__(self) -> None:
        self.files: Dict[str, str] = {}

    def file_exists(self, path: str) -> bool:
        return path in self.files

    def write_text(self, path: str, content: str) -> None:
        self.files[path] = content
