"""Exception taxonomy for recgen."""

from __future__ import annotations

from typing import Sequence


class RecgenError(RuntimeError):
    """Base class for errors raised by recgen."""

    reason = "error"


class UnsupportedContainerShape(RecgenError):
    """Raised when a parameterized type cannot be converted."""

    reason = "unsupported_container_shape"

    def __init__(self, type_name: str, detail: str) -> None:
        super().__init__(f"Unsupported container type '{type_name}': {detail}")
        self.type_name = type_name
        self.detail = detail


class CyclicReferenceError(RecgenError):
    """Raised for registry members on a reference cycle when cycles are forbidden."""

    reason = "cyclic_reference"

    def __init__(self, cycle: Sequence[str]) -> None:
        super().__init__("Cyclic reference between " + " -> ".join(cycle))
        self.cycle = list(cycle)


class WriteFailure(RecgenError):
    """Raised by sinks when a rendered target cannot be persisted."""

    reason = "write_failure"

    def __init__(self, target_name: str, detail: str) -> None:
        super().__init__(f"Failed to write {target_name}: {detail}")
        self.target_name = target_name
        self.detail = detail


class ManifestError(RecgenError):
    """Raised when a type manifest cannot be parsed."""


class TypeSyntaxError(ManifestError):
    """Raised when a type expression cannot be parsed."""

    def __init__(self, text: str, position: int, detail: str) -> None:
        super().__init__(f"Invalid type expression '{text}' at offset {position}: {detail}")
        self.text = text
        self.position = position


class ConfigError(RecgenError):
    """Raised when the configuration file cannot be parsed."""


__all__ = [
    "ConfigError",
    "CyclicReferenceError",
    "ManifestError",
    "RecgenError",
    "TypeSyntaxError",
    "UnsupportedContainerShape",
    "WriteFailure",
]
