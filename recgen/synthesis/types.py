"""Type reference parsing and container shape analysis."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Callable, Iterator, List, Optional, Tuple

from ..errors import TypeSyntaxError, UnsupportedContainerShape
from ..models import ContainerShape, ParameterizedType, SimpleType, TypeRef

_NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_.$]*|\.\.\.")
_CLOSERS = {"<": ">", "[": "]"}

_ARITY = {
    ContainerShape.LIST: 1,
    ContainerShape.SET: 1,
    ContainerShape.MAP: 2,
}

# Lower-cased last segment of a container name, Python and Java spellings.
_SHAPES_BY_NAME = {
    **dict.fromkeys(
        (
            "list",
            "sequence",
            "mutablesequence",
            "arraylist",
            "linkedlist",
            "copyonwritearraylist",
            "immutablelist",
        ),
        ContainerShape.LIST,
    ),
    **dict.fromkeys(
        (
            "set",
            "frozenset",
            "abstractset",
            "mutableset",
            "hashset",
            "linkedhashset",
            "treeset",
            "sortedset",
            "navigableset",
            "enumset",
            "immutableset",
        ),
        ContainerShape.SET,
    ),
    **dict.fromkeys(
        (
            "dict",
            "map",
            "mapping",
            "mutablemapping",
            "ordereddict",
            "defaultdict",
            "hashmap",
            "linkedhashmap",
            "treemap",
            "sortedmap",
            "navigablemap",
            "concurrentmap",
            "concurrenthashmap",
            "enummap",
            "immutablemap",
        ),
        ContainerShape.MAP,
    ),
}


@dataclass(frozen=True)
class ContainerInfo:
    """Shape and element references of a recognised container type."""

    shape: ContainerShape
    params: Tuple[TypeRef, ...]

    @property
    def element(self) -> TypeRef:
        return self.params[0]

    @property
    def key(self) -> TypeRef:
        return self.params[0]

    @property
    def value(self) -> TypeRef:
        return self.params[-1]


def parse_type(text: str) -> TypeRef:
    """Parse ``Map<String, List<B>>`` or ``dict[str, list[B]]`` into a TypeRef.

    Parameter lists are split at bracket depth zero only, so commas nested in
    inner parameter lists never split an outer parameter.
    """
    parser = _TypeParser(text)
    ref = parser.parse()
    return ref


class _TypeParser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def parse(self) -> TypeRef:
        self._skip_ws()
        if self.pos >= len(self.text):
            raise TypeSyntaxError(self.text, self.pos, "empty type expression")
        ref = self._parse_ref()
        self._skip_ws()
        if self.pos != len(self.text):
            raise TypeSyntaxError(self.text, self.pos, f"unexpected '{self.text[self.pos]}'")
        return ref

    def _parse_ref(self) -> TypeRef:
        self._skip_ws()
        match = _NAME_PATTERN.match(self.text, self.pos)
        if not match:
            raise TypeSyntaxError(self.text, self.pos, "expected a type name")
        name = match.group(0)
        self.pos = match.end()
        self._skip_ws()
        if self.pos < len(self.text) and self.text[self.pos] in _CLOSERS:
            closer = _CLOSERS[self.text[self.pos]]
            self.pos += 1
            params = self._parse_params(closer)
            return ParameterizedType(name=name, params=tuple(params))
        return SimpleType(name)

    def _parse_params(self, closer: str) -> List[TypeRef]:
        params: List[TypeRef] = []
        while True:
            params.append(self._parse_ref())
            self._skip_ws()
            if self.pos >= len(self.text):
                raise TypeSyntaxError(self.text, self.pos, f"missing '{closer}'")
            char = self.text[self.pos]
            self.pos += 1
            if char == ",":
                continue
            if char == closer:
                return params
            raise TypeSyntaxError(self.text, self.pos - 1, f"expected ',' or '{closer}'")

    def _skip_ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1


def container_shape_of(name: str) -> Optional[ContainerShape]:
    """Return the shape implied by a raw container name, if any."""
    return _SHAPES_BY_NAME.get(name.rsplit(".", 1)[-1].lower())


def analyze_container(ref: TypeRef) -> Optional[ContainerInfo]:
    """Return the container shape of ``ref`` or None for bare and opaque types.

    Raises UnsupportedContainerShape when a recognised container name carries
    the wrong number of type parameters.
    """
    if not isinstance(ref, ParameterizedType):
        return None
    shape = container_shape_of(ref.name)
    if shape is None:
        return None
    expected = _ARITY[shape]
    if len(ref.params) != expected:
        raise UnsupportedContainerShape(
            str(ref),
            f"{shape.value} types take {expected} type parameter(s), got {len(ref.params)}",
        )
    return ContainerInfo(shape=shape, params=ref.params)


def iter_simple_names(ref: TypeRef) -> Iterator[str]:
    """Yield every bare type name referenced anywhere inside ``ref``."""
    if isinstance(ref, SimpleType):
        yield ref.name
        return
    for param in ref.params:
        yield from iter_simple_names(param)


def mentions(ref: TypeRef, predicate: Callable[[str], bool]) -> bool:
    """Return True when any bare name inside ``ref`` satisfies ``predicate``."""
    return any(predicate(name) for name in iter_simple_names(ref))


__all__ = [
    "ContainerInfo",
    "analyze_container",
    "container_shape_of",
    "iter_simple_names",
    "mentions",
    "parse_type",
]
