"""
File Loader Module

Reads resources from a document root. Paths are always resolved relative to
the root, and anything that would land outside it is reported as missing.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)


@dataclass
class FileData:
    """Contents of a loaded file."""
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class FileLoader:
    """
    Load files below a fixed document root.

    Usage:
        loader = FileLoader("./serverroot")
        file = loader.load("index.html")
        if file is None:
            ...  # respond 404

    Attributes:
        root: Resolved document root
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    def resolve(self, path: str) -> Optional[Path]:
        """
        Map a request-relative path to an absolute path under root.

        Returns:
            The resolved path, or None if it escapes the root
        """
        try:
            candidate = (self.root / path.lstrip("/")).resolve()
        except (OSError, ValueError) as exc:
            logger.warning(f"Rejected unresolvable path {path!r}: {exc}")
            return None

        if not candidate.is_relative_to(self.root):
            logger.warning(f"Rejected path outside document root: {path}")
            return None
        return candidate

    def load(self, path: str) -> Optional[FileData]:
        """
        Read a file from disk.

        Args:
            path: Path relative to the document root

        Returns:
            FileData with the file's bytes, or None if the file does not
            exist, is not a regular file, cannot be read, or lies outside
            the root
        """
        resolved = self.resolve(path)
        if resolved is None or not resolved.is_file():
            return None

        try:
            return FileData(data=resolved.read_bytes())
        except OSError as exc:
            logger.warning(f"Could not read {resolved}: {exc}")
            return None
