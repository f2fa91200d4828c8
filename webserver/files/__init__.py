"""File system collaborators: content loading and MIME lookup."""

from .loader import FileData, FileLoader
from .mime import DEFAULT_MIME_TYPE, MimeResolver

__all__ = ["DEFAULT_MIME_TYPE", "FileData", "FileLoader", "MimeResolver"]
