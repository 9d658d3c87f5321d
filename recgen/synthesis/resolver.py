"""Type substitution for generated field types."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..models import ParameterizedType, SimpleType, TypeRef
from .types import mentions

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..registry import TypeRegistry


def resolve(ref: TypeRef, registry: "TypeRegistry") -> TypeRef:
    """Return the type to declare in the generated field for ``ref``.

    Registry members are replaced by their generated names; parameters of
    parameterized types are resolved independently of each other. Everything
    else is returned unchanged.
    """
    if isinstance(ref, SimpleType):
        if registry.contains(ref.name):
            return SimpleType(registry.generated_name_of(ref.name))
        return ref
    params = tuple(resolve(param, registry) for param in ref.params)
    if params == ref.params:
        return ref
    return ParameterizedType(name=ref.name, params=params)


def needs_conversion(ref: TypeRef, registry: "TypeRegistry") -> bool:
    """True when ``ref`` references a registry member anywhere."""
    return mentions(ref, registry.contains)


__all__ = ["needs_conversion", "resolve"]
