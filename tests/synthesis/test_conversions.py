"""Conversion expressions for passthrough, wrapped and collection fields."""

from __future__ import annotations

import pytest

from recgen.errors import UnsupportedContainerShape
from recgen.models import AccessorCall, CollectionTransform, ContainerShape, Var, Wrap
from recgen.synthesis.conversions import build_conversion
from tests._fixtures.builders import aggregate, getter, holder, registry_for, request

ITEM = holder("shop.Item", getter("getSku", "str"))
POINT = aggregate("geo.Point", getter("x", "float", attribute=True))
ORDER = holder("shop.Order")
REGISTRY = registry_for(request(ORDER, also_convert=[ITEM, POINT]))


def _read(name: str, *, attribute: bool = False) -> AccessorCall:
    return AccessorCall(target=Var("source"), accessor=name, attribute=attribute)


def test_unsubstituted_simple_type_is_passthrough() -> None:
    expr = build_conversion("source", getter("getName", "str"), REGISTRY)

    assert expr == _read("getName")


def test_registry_member_is_wrapped() -> None:
    expr = build_conversion("source", getter("getItem", "shop.Item"), REGISTRY)

    assert expr == Wrap(generated_type="shop.ItemRecord", value=_read("getItem"))


def test_aggregate_member_uses_prefixed_name_and_attribute_access() -> None:
    expr = build_conversion("source", getter("origin", "geo.Point", attribute=True), REGISTRY)

    assert expr == Wrap(generated_type="geo.ImmutablePoint", value=_read("origin", attribute=True))


def test_list_of_members_becomes_element_wise_transform() -> None:
    expr = build_conversion("source", getter("getItems", "list[shop.Item]"), REGISTRY)

    assert expr == CollectionTransform(
        shape=ContainerShape.LIST,
        source=_read("getItems"),
        element=Wrap("shop.ItemRecord", Var("item")),
        item_var="item",
    )


def test_set_of_members_keeps_set_shape() -> None:
    expr = build_conversion("source", getter("getItems", "java.util.Set<shop.Item>"), REGISTRY)

    assert isinstance(expr, CollectionTransform)
    assert expr.shape is ContainerShape.SET


def test_container_without_members_is_passthrough() -> None:
    expr = build_conversion("source", getter("getTags", "list[str]"), REGISTRY)

    assert expr == _read("getTags")


def test_map_key_and_value_are_converted_independently() -> None:
    expr = build_conversion("source", getter("getByPoint", "dict[geo.Point, str]"), REGISTRY)

    assert expr == CollectionTransform(
        shape=ContainerShape.MAP,
        source=_read("getByPoint"),
        key=Wrap("geo.ImmutablePoint", Var("key")),
        value=Var("value"),
    )


def test_nested_containers_bind_distinct_variables() -> None:
    expr = build_conversion("source", getter("getGroups", "dict[str, list[shop.Item]]"), REGISTRY)

    assert isinstance(expr, CollectionTransform)
    assert expr.value == CollectionTransform(
        shape=ContainerShape.LIST,
        source=Var("value"),
        element=Wrap("shop.ItemRecord", Var("item1")),
        item_var="item1",
    )


def test_conversion_is_bound_to_the_given_variable() -> None:
    expr = build_conversion("order", getter("getItem", "shop.Item"), REGISTRY)

    assert expr == Wrap("shop.ItemRecord", AccessorCall(Var("order"), "getItem"))


def test_opaque_type_mentioning_member_is_rejected() -> None:
    with pytest.raises(UnsupportedContainerShape) as excinfo:
        build_conversion("source", getter("getMaybe", "Optional[shop.Item]"), REGISTRY)

    assert excinfo.value.reason == "unsupported_container_shape"
    assert "Optional[shop.Item]" in str(excinfo.value)


def test_opaque_type_without_members_is_passthrough() -> None:
    expr = build_conversion("source", getter("getMaybe", "Optional[str]"), REGISTRY)

    assert expr == _read("getMaybe")


@pytest.mark.parametrize("type_text", ["Offset[shop.Item]", "Playlist[shop.Item]", "Bitmap[str, shop.Item]"])
def test_container_like_names_are_opaque(type_text: str) -> None:
    with pytest.raises(UnsupportedContainerShape):
        build_conversion("source", getter("getValue", type_text), REGISTRY)
