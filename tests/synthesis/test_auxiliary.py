"""Constants, interfaces and factory methods derived from the field model."""

from __future__ import annotations

from recgen.models import (
    FactoryKind,
    FieldRead,
    MappingLookup,
    SimpleType,
    TypeDefault,
    Var,
    Variant,
)
from recgen.synthesis.auxiliary import build_constants, build_interfaces
from recgen.synthesis.builder import build_model
from recgen.synthesis.types import parse_type
from tests._fixtures.builders import aggregate, getter, holder, registry_for, request


def _model():
    person = holder("shop.Person", getter("getFirstName", "str"), getter("getAge", "int"))
    req = request(person)
    return build_model(req, registry_for(req))


def test_one_constant_per_field() -> None:
    model = _model()

    assert [(constant.name, constant.value) for constant in model.constants] == [
        ("FIRST_NAME", "firstName"),
        ("AGE", "age"),
    ]
    assert build_constants(model.fields) == model.constants


def test_interfaces_are_deduplicated_in_order_and_against_builtins() -> None:
    requested = [parse_type(name) for name in ["a.Named", "object", "b.Tagged", "a.Named"]]

    assert build_interfaces(requested) == (SimpleType("a.Named"), SimpleType("b.Tagged"))
    assert build_interfaces(requested, builtin=["a.Named"]) == (SimpleType("object"), SimpleType("b.Tagged"))


def test_factory_method_shapes() -> None:
    model = _model()

    assert [method.kind for method in model.factory_methods] == [
        FactoryKind.FROM_SOURCE,
        FactoryKind.FROM_MAPPING,
        FactoryKind.FROM_SOURCE_WITH_MAPPING,
        FactoryKind.FROM_GENERATED_WITH_MAPPING,
        FactoryKind.WITH_FIELD,
        FactoryKind.WITH_FIELD,
    ]
    assert [method.name for method in model.factory_methods][-2:] == ["with_first_name", "with_age"]


def test_factory_values_default_per_shape() -> None:
    model = _model()
    methods = {method.kind: method for method in model.factory_methods}

    assert methods[FactoryKind.FROM_SOURCE].values == model.conversion_exprs
    assert methods[FactoryKind.FROM_MAPPING].values[0] == MappingLookup(
        mapping=Var("values"), key_constant="FIRST_NAME", default=TypeDefault(SimpleType("str"))
    )
    assert methods[FactoryKind.FROM_SOURCE_WITH_MAPPING].values[1] == MappingLookup(
        mapping=Var("values"), key_constant="AGE", default=model.conversion_exprs[1]
    )
    assert methods[FactoryKind.FROM_GENERATED_WITH_MAPPING].values[1] == MappingLookup(
        mapping=Var("values"), key_constant="AGE", default=FieldRead(Var("instance"), "age")
    )
    assert methods[FactoryKind.FROM_GENERATED_WITH_MAPPING].params[0].type == SimpleType("shop.PersonRecord")


def test_merge_variant_has_no_constants_or_factories() -> None:
    person = holder("shop.Person", getter("getName", "str"))
    extra = holder("shop.Extra", getter("getNote", "str"))
    req = request(person, Variant.MERGE, merge_with=[extra], interfaces=["shop.api.Named"])

    model = build_model(req, registry_for(req))

    assert model.constants == ()
    assert model.factory_methods == ()
    assert model.interfaces == (SimpleType("shop.api.Named"),)


def test_constants_that_fold_together_are_numbered() -> None:
    odd = holder("shop.Odd", getter("getFooBar", "str"), getter("get_foo_bar", "str"))
    req = request(odd)

    model = build_model(req, registry_for(req))

    assert [(constant.name, constant.value) for constant in model.constants] == [
        ("FOO_BAR", "fooBar"),
        ("FOO_BAR_2", "foo_bar"),
    ]


def test_constant_never_shadows_a_field() -> None:
    point = aggregate("geo.Grid", getter("X", "int", attribute=True), getter("x", "int", attribute=True))
    req = request(point)

    model = build_model(req, registry_for(req))

    assert [constant.name for constant in model.constants] == ["X_2", "X_3"]
