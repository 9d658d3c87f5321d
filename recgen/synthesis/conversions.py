"""Conversion expression construction for generated fields."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..errors import UnsupportedContainerShape
from ..models import (
    Accessor,
    AccessorCall,
    CollectionTransform,
    ContainerShape,
    Expr,
    SimpleType,
    TypeRef,
    Var,
    Wrap,
)
from .resolver import needs_conversion
from .types import analyze_container

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..registry import TypeRegistry


def build_conversion(source_var: str, accessor: Accessor, registry: "TypeRegistry") -> Expr:
    """Return the expression computing a field value from ``source_var``.

    Raises UnsupportedContainerShape when the accessor type references a
    registry member through a parameterized type that is not a list, set or
    map, since no conversion can be derived for it.
    """
    read = AccessorCall(target=Var(source_var), accessor=accessor.name, attribute=accessor.attribute)
    return convert_value(read, accessor.declared_type, registry)


def convert_value(value: Expr, declared: TypeRef, registry: "TypeRegistry", depth: int = 0) -> Expr:
    """Map ``value`` of type ``declared`` onto its generated counterpart."""
    if isinstance(declared, SimpleType):
        if registry.contains(declared.name):
            return Wrap(generated_type=registry.generated_name_of(declared.name), value=value)
        return value

    info = analyze_container(declared)
    if not needs_conversion(declared, registry):
        return value
    if info is None:
        raise UnsupportedContainerShape(
            str(declared),
            "references a converted type but is not a list, set or map",
        )

    suffix = str(depth) if depth else ""
    if info.shape is ContainerShape.MAP:
        key_var = f"key{suffix}"
        value_var = f"value{suffix}"
        return CollectionTransform(
            shape=info.shape,
            source=value,
            key=convert_value(Var(key_var), info.key, registry, depth + 1),
            value=convert_value(Var(value_var), info.value, registry, depth + 1),
            key_var=key_var,
            value_var=value_var,
        )
    item_var = f"item{suffix}"
    return CollectionTransform(
        shape=info.shape,
        source=value,
        element=convert_value(Var(item_var), info.element, registry, depth + 1),
        item_var=item_var,
    )


__all__ = ["build_conversion", "convert_value"]
