"""Merge variant aggregation."""

from __future__ import annotations

from recgen.models import AccessorCall, Param, SimpleType, Var, Variant, Wrap
from recgen.synthesis.merge import aggregate
from tests._fixtures.builders import aggregate as aggregate_type
from tests._fixtures.builders import getter, holder, registry_for, request


def test_colliding_field_names_are_disambiguated() -> None:
    a = holder("shop.A", getter("getX", "str"))
    c = holder("shop.C", getter("getX", "int"))
    req = request(a, Variant.MERGE, merge_with=[c])

    model = aggregate(req, registry_for(req))

    assert model.target_name == "shop.ASuperRecord"
    assert model.variant is Variant.MERGE
    assert [field.name for field in model.fields] == ["x", "xC"]
    assert [field.type for field in model.fields] == [SimpleType("str"), SimpleType("int")]
    assert model.constructor_params == (
        Param("a", SimpleType("shop.A")),
        Param("c", SimpleType("shop.C")),
    )
    assert model.conversion_exprs == (
        AccessorCall(Var("a"), "getX"),
        AccessorCall(Var("c"), "getX"),
    )
    assert model.merge_sources == ("shop.C",)


def test_primary_fields_precede_merge_sources_in_request_order() -> None:
    primary = holder("shop.Primary", getter("getA", "str"), getter("getB", "str"))
    second = aggregate_type("shop.Second", getter("c", "int", attribute=True))
    third = holder("shop.Third", getter("getD", "int"))
    req = request(primary, Variant.MERGE, merge_with=[second, third])

    model = aggregate(req, registry_for(req))

    assert [field.name for field in model.fields] == ["a", "b", "cSecond", "dThird"]
    assert [param.name for param in model.constructor_params] == ["primary", "second", "third"]
    assert [field.origin for field in model.fields] == [
        "shop.Primary",
        "shop.Primary",
        "shop.Second",
        "shop.Third",
    ]


def test_merge_fields_still_substitute_registry_members() -> None:
    item = holder("shop.Item", getter("getSku", "str"))
    a = holder("shop.A", getter("getItem", "shop.Item"))
    c = holder("shop.C", getter("getItem", "shop.Item"))
    req = request(a, Variant.MERGE, merge_with=[c], also_convert=[item])

    model = aggregate(req, registry_for(req))

    assert [field.type for field in model.fields] == [SimpleType("shop.ItemRecord")] * 2
    assert model.conversion_exprs[1] == Wrap("shop.ItemRecord", AccessorCall(Var("c"), "getItem"))


def test_sources_sharing_a_simple_name_get_distinct_parameters() -> None:
    a = holder("shop.Note", getter("getText", "str"))
    b = holder("crm.Note", getter("getText", "str"))
    req = request(a, Variant.MERGE, merge_with=[b])

    model = aggregate(req, registry_for(req))

    assert [param.name for param in model.constructor_params] == ["note", "note2"]
    assert [field.name for field in model.fields] == ["text", "textNote"]


def test_repeated_merge_source_is_merged_once() -> None:
    a = holder("shop.A", getter("getX", "str"))
    c = holder("shop.C", getter("getY", "int"))
    req = request(a, Variant.MERGE, merge_with=[c, c])

    model = aggregate(req, registry_for(req))

    assert [field.name for field in model.fields] == ["x", "yC"]
    assert [param.name for param in model.constructor_params] == ["a", "c"]
    assert model.merge_sources == ("shop.C",)


def test_suffixed_name_already_on_the_primary_is_numbered() -> None:
    a = holder("shop.A", getter("getXC", "str"))
    c = holder("shop.C", getter("getX", "int"))
    req = request(a, Variant.MERGE, merge_with=[c])

    model = aggregate(req, registry_for(req))

    assert [field.name for field in model.fields] == ["xC", "xC2"]
    assert model.conversion_exprs == (
        AccessorCall(Var("a"), "getXC"),
        AccessorCall(Var("c"), "getX"),
    )
