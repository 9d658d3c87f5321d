"""Field-name constants, interface lists and factory methods."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Set, Tuple

from ..models import (
    Expr,
    FactoryKind,
    FactoryMethod,
    Field,
    FieldConstant,
    FieldRead,
    MappingLookup,
    Param,
    ParameterizedType,
    SimpleType,
    TypeDefault,
    TypeRef,
    Var,
)
from .naming import constant_name_for, snake_case

SOURCE_PARAM = "source"
VALUES_PARAM = "values"
INSTANCE_PARAM = "instance"
VALUE_PARAM = "value"

VALUES_TYPE = ParameterizedType(name="Mapping", params=(SimpleType("str"), SimpleType("Any")))


def build_constants(fields: Sequence[Field]) -> Tuple[FieldConstant, ...]:
    """One string constant per field, holding the field name.

    Fields whose names fold to the same constant, such as ``fooBar`` and
    ``foo_bar``, or that equal a field name, get numbered constant names.
    """
    used: Set[str] = {field.name for field in fields}
    constants: List[FieldConstant] = []
    for field in fields:
        base = constant_name_for(field.name)
        name = base
        counter = 2
        while name in used:
            name = f"{base}_{counter}"
            counter += 1
        used.add(name)
        constants.append(FieldConstant(name=name, value=field.name, type=field.type))
    return tuple(constants)


def build_interfaces(requested: Iterable[TypeRef], builtin: Iterable[str] = ("object",)) -> Tuple[TypeRef, ...]:
    """Return the requested interfaces in order, without duplicates or built-ins."""
    seen: Set[str] = set(builtin)
    interfaces: List[TypeRef] = []
    for ref in requested:
        key = str(ref)
        if key in seen:
            continue
        seen.add(key)
        interfaces.append(ref)
    return tuple(interfaces)


def build_factory_methods(
    source_name: str,
    target_name: str,
    fields: Sequence[Field],
    conversions: Sequence[Expr],
    constants: Sequence[FieldConstant],
) -> Tuple[FactoryMethod, ...]:
    """Derive the factory and single-field mutator methods of a generated type.

    ``conversions`` must be bound to the ``source`` parameter, which is how
    single-source models are built.
    """
    source_param = Param(SOURCE_PARAM, SimpleType(source_name))
    values_param = Param(VALUES_PARAM, VALUES_TYPE)
    instance_param = Param(INSTANCE_PARAM, SimpleType(target_name))
    values = Var(VALUES_PARAM)

    methods: List[FactoryMethod] = [
        FactoryMethod(
            kind=FactoryKind.FROM_SOURCE,
            name="of",
            params=(source_param,),
            values=tuple(conversions),
        ),
        FactoryMethod(
            kind=FactoryKind.FROM_MAPPING,
            name="from_mapping",
            params=(values_param,),
            values=tuple(
                MappingLookup(mapping=values, key_constant=constant.name, default=TypeDefault(field.type))
                for field, constant in zip(fields, constants)
            ),
        ),
        FactoryMethod(
            kind=FactoryKind.FROM_SOURCE_WITH_MAPPING,
            name="from_source_with_mapping",
            params=(source_param, values_param),
            values=tuple(
                MappingLookup(mapping=values, key_constant=constant.name, default=conversion)
                for conversion, constant in zip(conversions, constants)
            ),
        ),
        FactoryMethod(
            kind=FactoryKind.FROM_GENERATED_WITH_MAPPING,
            name="from_instance_with_mapping",
            params=(instance_param, values_param),
            values=tuple(
                MappingLookup(
                    mapping=values,
                    key_constant=constant.name,
                    default=FieldRead(target=Var(INSTANCE_PARAM), field=field.name),
                )
                for field, constant in zip(fields, constants)
            ),
        ),
    ]
    for field in fields:
        methods.append(
            FactoryMethod(
                kind=FactoryKind.WITH_FIELD,
                name=f"with_{snake_case(field.name)}",
                params=(Param(VALUE_PARAM, field.type),),
                values=(Var(VALUE_PARAM),),
                field=field.name,
            )
        )
    return tuple(methods)


__all__ = [
    "INSTANCE_PARAM",
    "SOURCE_PARAM",
    "VALUES_PARAM",
    "VALUE_PARAM",
    "build_constants",
    "build_factory_methods",
    "build_interfaces",
]
