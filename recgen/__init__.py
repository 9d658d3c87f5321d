"""recgen: immutable counterpart type generation."""

from .models import (
    Accessor,
    GeneratedTypeModel,
    GenerationRequest,
    ParameterizedType,
    SimpleType,
    TypeDescriptor,
    TypeKind,
    Variant,
)
from .registry import TypeRegistry

__version__ = "0.1.0"

__all__ = [
    "Accessor",
    "GeneratedTypeModel",
    "GenerationRequest",
    "ParameterizedType",
    "SimpleType",
    "TypeDescriptor",
    "TypeKind",
    "TypeRegistry",
    "Variant",
    "__version__",
]
