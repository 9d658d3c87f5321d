"""Type substitution and model synthesis for generated immutable types."""

from .builder import build_model
from .conversions import build_conversion
from .fields import build_fields
from .merge import aggregate
from .resolver import resolve
from .types import analyze_container, parse_type

__all__ = [
    "aggregate",
    "analyze_container",
    "build_conversion",
    "build_fields",
    "build_model",
    "parse_type",
    "resolve",
]
