"""Destinations for rendered sources."""

from __future__ import annotations

from pathlib import Path
import threading
from typing import Dict, Protocol

from .errors import WriteFailure
from .logging import get_logger


class Sink(Protocol):
    """Persists one rendered module."""

    def write(self, target_name: str, relative_path: str, text: str) -> None:
        """Store ``text``; raise WriteFailure when it cannot be persisted."""


class FileSystemSink:
    """Writes rendered modules below an output directory."""

    def __init__(self, directory: Path, *, overwrite: bool = False) -> None:
        self.directory = directory
        self.overwrite = overwrite
        self.logger = get_logger("sinks")

    def write(self, target_name: str, relative_path: str, text: str) -> None:
        path = self.directory / relative_path
        if path.exists() and not self.overwrite:
            raise WriteFailure(target_name, f"{path} already exists")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise WriteFailure(target_name, str(exc)) from exc
        self.logger.debug("Wrote %s to %s", target_name, path)


class MemorySink:
    """Keeps rendered modules in memory, keyed by relative path."""

    def __init__(self) -> None:
        self.files: Dict[str, str] = {}
        self._lock = threading.Lock()

    def write(self, target_name: str, relative_path: str, text: str) -> None:
        with self._lock:
            self.files[relative_path] = text


__all__ = ["FileSystemSink", "MemorySink", "Sink"]
