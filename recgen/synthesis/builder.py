"""Assemble generated type models, one pipeline for every variant."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from ..config import AccessorConfig
from ..models import GeneratedTypeModel, GenerationRequest, Param, SimpleType, Variant
from .auxiliary import SOURCE_PARAM, build_constants, build_factory_methods, build_interfaces
from .conversions import build_conversion
from .fields import build_fields, unique_fields
from .merge import aggregate

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..registry import TypeRegistry


def build_model(
    request: GenerationRequest,
    registry: "TypeRegistry",
    accessors: AccessorConfig | None = None,
    builtin_interfaces: Iterable[str] = ("object",),
) -> GeneratedTypeModel:
    """Build the model for one request.

    The source must be a registry member. Raises UnsupportedContainerShape when
    any field cannot be converted; nothing is returned for partial models.
    """
    if request.variant is Variant.MERGE:
        return aggregate(request, registry, accessors, builtin_interfaces)

    source = request.source
    fields = tuple(unique_fields(build_fields(source, registry, accessors)))
    conversions = tuple(build_conversion(SOURCE_PARAM, field.accessor, registry) for field in fields)
    target_name = registry.generated_name_of(source.qualified_name)

    constants = ()
    factory_methods = ()
    if request.variant.builds_auxiliaries:
        constants = build_constants(fields)
        factory_methods = build_factory_methods(
            source.qualified_name, target_name, fields, conversions, constants
        )

    return GeneratedTypeModel(
        target_name=target_name,
        source_name=source.qualified_name,
        variant=request.variant,
        fields=fields,
        constructor_params=(Param(SOURCE_PARAM, SimpleType(source.qualified_name)),),
        conversion_exprs=conversions,
        constants=constants,
        interfaces=build_interfaces(request.interfaces, builtin_interfaces),
        factory_methods=factory_methods,
    )


__all__ = ["build_model"]
