"""
FileSystem abstraction for Driver Monitor Analytics.

PURPOSE: Injectable file system interface for testability.
AI CONTEXT: Lets the JSON event store run against memory in unit tests.

DESIGN:
- Protocol defines the interface
- RealFileSystem uses actual os operations
- MockFileSystem in tests/conftest.py stores data in memory for tests

USAGE:
    # Production
    store = JsonEventStore(filesystem=RealFileSystem())

    # Tests (MockFileSystem from conftest.py)
    store = JsonEventStore(storage_dir="/test", filesystem=mock_fs)
"""

from __future__ import annotations

import os
from typing import Protocol

__all__ = ["FileSystem", "RealFileSystem"]


class FileSystem(Protocol):
    """
    Protocol for the file operations the event store needs.

    All paths are strings. Implementations include RealFileSystem for
    production and MockFileSystem for testing.

    Business context: The JSON store stands in for the hosted database
    during development and demos. Keeping its I/O behind this protocol
    lets every table operation be tested without touching disk.
    """

    def exists(self, path: str) -> bool:
        """
        Check if path exists (file or directory).

        Args:
            path: Path to check.

        Returns:
            True if the path exists. Never raises.
        """
        ...

    def makedirs(self, path: str, exist_ok: bool = False) -> None:
        """
        Create directory and all parent directories.

        Args:
            path: Directory to create.
            exist_ok: If True, don't raise if directory exists.

        Raises:
            OSError: If directory exists and exist_ok is False.
        """
        ...

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """
        Read file contents as text.

        Args:
            path: File to read.
            encoding: Text encoding (default utf-8).

        Returns:
            File contents as a string.

        Raises:
            FileNotFoundError: If file doesn't exist.
        """
        ...

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """
        Write text content to file, creating or overwriting.

        Args:
            path: File to write.
            content: Text to write.
            encoding: Text encoding (default utf-8).

        Raises:
            OSError: If the file cannot be written.
        """
        ...

    def rename(self, src: str, dst: str) -> None:
        """
        Move src over dst, replacing dst if present.

        Used to publish a table file only after it was fully written.

        Raises:
            FileNotFoundError: If src doesn't exist.
        """
        ...


class RealFileSystem:
    """
    Production file system implementation using os operations.

    Thin wrapper around the os module. Used by default in JsonEventStore.
    """

    def exists(self, path: str) -> bool:  # pragma: no cover
        """Delegate to os.path.exists()."""
        return os.path.exists(path)

    def makedirs(self, path: str, exist_ok: bool = False) -> None:  # pragma: no cover
        """Delegate to os.makedirs()."""
        os.makedirs(path, exist_ok=exist_ok)

    def read_text(self, path: str, encoding: str = "utf-8") -> str:  # pragma: no cover
        """Read a whole text file."""
        with open(path, encoding=encoding) as f:
            return f.read()

    def write_text(
        self, path: str, content: str, encoding: str = "utf-8"
    ) -> None:  # pragma: no cover
        """Write a whole text file, truncating any previous content."""
        with open(path, "w", encoding=encoding) as f:
            f.write(content)

    def rename(self, src: str, dst: str) -> None:  # pragma: no cover
        """Delegate to os.replace() so dst is overwritten on every platform."""
        os.replace(src, dst)
