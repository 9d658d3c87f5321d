"""Field model construction from source accessors."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Iterable, List, Optional, Set

from ..config import AccessorConfig
from ..models import Field, TypeDescriptor
from .naming import field_name_for, safe_identifier
from .resolver import resolve

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..registry import TypeRegistry


def build_fields(
    descriptor: TypeDescriptor,
    registry: "TypeRegistry",
    accessors: AccessorConfig | None = None,
    *,
    suffix: Optional[str] = None,
) -> List[Field]:
    """Return one field per accessor, in accessor declaration order.

    ``suffix`` is appended to every field name; merge sources other than the
    primary one pass their simple type name to keep field names distinct.
    Names that are Python keywords get a trailing underscore.
    """
    accessor_config = accessors or AccessorConfig()
    fields: List[Field] = []
    for accessor in descriptor.accessors:
        name = field_name_for(accessor, descriptor.kind, accessor_config)
        if suffix:
            name = f"{name}{suffix}"
        fields.append(
            Field(
                name=safe_identifier(name),
                type=resolve(accessor.declared_type, registry),
                declared_type=accessor.declared_type,
                accessor=accessor,
                origin=descriptor.qualified_name,
            )
        )
    return fields


def unique_fields(fields: Iterable[Field]) -> List[Field]:
    """Number repeated field names, ``name``, ``name2``, ``name3``, keeping order."""
    used: Set[str] = set()
    result: List[Field] = []
    for field in fields:
        candidate = field.name
        counter = 2
        while candidate in used:
            candidate = f"{field.name}{counter}"
            counter += 1
        used.add(candidate)
        result.append(field if candidate == field.name else replace(field, name=candidate))
    return result


__all__ = ["build_fields", "unique_fields"]
