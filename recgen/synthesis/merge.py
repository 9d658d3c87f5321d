"""Merge variant: one generated type aggregating several source types."""

from __future__ import annotations

import keyword
from typing import TYPE_CHECKING, Iterable, List, Sequence, Set

from ..config import AccessorConfig
from ..models import (
    Expr,
    Field,
    GeneratedTypeModel,
    GenerationRequest,
    Param,
    SimpleType,
    TypeDescriptor,
    Variant,
)
from .auxiliary import build_interfaces
from .conversions import build_conversion
from .fields import build_fields, unique_fields
from .naming import merged_name_for, snake_case

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..registry import TypeRegistry


def aggregate(
    request: GenerationRequest,
    registry: "TypeRegistry",
    accessors: AccessorConfig | None = None,
    builtin_interfaces: Iterable[str] = ("object",),
) -> GeneratedTypeModel:
    """Build the merged model for ``request``.

    Primary fields come first without a suffix, followed by the fields of each
    merge source in request order, each suffixed with that source's simple
    name. A source listed more than once is merged once, and field names
    that still collide are numbered. The conversion constructor takes one
    instance per source.
    """
    sources: List[TypeDescriptor] = []
    for source in (request.source, *request.merge_with):
        if source not in sources:
            sources.append(source)
    param_names = _param_names([source.simple_name for source in sources])

    fields: List[Field] = []
    conversions: List[Expr] = []
    params: List[Param] = []
    for index, (source, param_name) in enumerate(zip(sources, param_names)):
        suffix = None if index == 0 else source.simple_name
        source_fields = build_fields(source, registry, accessors, suffix=suffix)
        fields.extend(source_fields)
        conversions.extend(
            build_conversion(param_name, field.accessor, registry) for field in source_fields
        )
        params.append(Param(param_name, SimpleType(source.qualified_name)))

    return GeneratedTypeModel(
        target_name=merged_name_for(request.source.qualified_name, registry.naming),
        source_name=request.source.qualified_name,
        variant=Variant.MERGE,
        fields=tuple(unique_fields(fields)),
        constructor_params=tuple(params),
        conversion_exprs=tuple(conversions),
        interfaces=build_interfaces(request.interfaces, builtin_interfaces),
        merge_sources=tuple(source.qualified_name for source in sources[1:]),
    )


def _param_names(simple_names: Sequence[str]) -> List[str]:
    """Snake-cased parameter names, numbered when two sources share a simple name."""
    names: List[str] = []
    used: Set[str] = set()
    for simple in simple_names:
        base = snake_case(simple) or "source"
        if keyword.iskeyword(base) or base in {"cls", "self"}:
            base = f"{base}_source"
        candidate = base
        counter = 2
        while candidate in used:
            candidate = f"{base}{counter}"
            counter += 1
        used.add(candidate)
        names.append(candidate)
    return names


__all__ = ["aggregate"]
