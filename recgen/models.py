"""Core data models shared across recgen components."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


class TypeKind(str, Enum):
    """Kind of a source type as reported by the scanner."""

    MUTABLE_HOLDER = "holder"
    IMMUTABLE_AGGREGATE = "aggregate"


class ContainerShape(str, Enum):
    """Container shapes the synthesis core knows how to convert."""

    LIST = "list"
    SET = "set"
    MAP = "map"


@dataclass(frozen=True)
class SimpleType:
    """A bare type reference such as ``int`` or ``shop.model.Address``."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ParameterizedType:
    """A generic type reference such as ``list[shop.model.Item]``."""

    name: str
    params: Tuple["TypeRef", ...]

    def __str__(self) -> str:
        inner = ", ".join(str(param) for param in self.params)
        return f"{self.name}[{inner}]"


TypeRef = Union[SimpleType, ParameterizedType]


@dataclass(frozen=True)
class Accessor:
    """Zero-argument method exposing one logical field of a source type.

    ``attribute`` accessors are read as plain attributes instead of called.
    """

    name: str
    declared_type: TypeRef
    boolean_style: bool = False
    attribute: bool = False


@dataclass(frozen=True, eq=False)
class TypeDescriptor:
    """Scanner-produced description of a source type.

    Two descriptors with the same qualified name are the same entity.
    """

    qualified_name: str
    kind: TypeKind
    accessors: Tuple[Accessor, ...] = ()

    @property
    def simple_name(self) -> str:
        return self.qualified_name.rsplit(".", 1)[-1]

    @property
    def namespace(self) -> Optional[str]:
        if "." not in self.qualified_name:
            return None
        return self.qualified_name.rsplit(".", 1)[0]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeDescriptor):
            return NotImplemented
        return self.qualified_name == other.qualified_name

    def __hash__(self) -> int:
        return hash(self.qualified_name)


class Variant(str, Enum):
    """Generation flavour requested for a source type."""

    STANDARD = "standard"
    IMMUTABLE = "immutable"
    MERGE = "merge"

    @property
    def accepted_kinds(self) -> Tuple[TypeKind, ...]:
        if self is Variant.STANDARD:
            return (TypeKind.MUTABLE_HOLDER,)
        if self is Variant.IMMUTABLE:
            return (TypeKind.IMMUTABLE_AGGREGATE,)
        return (TypeKind.MUTABLE_HOLDER, TypeKind.IMMUTABLE_AGGREGATE)

    @property
    def builds_auxiliaries(self) -> bool:
        return self is not Variant.MERGE

    @classmethod
    def for_kind(cls, kind: TypeKind) -> "Variant":
        """Return the single-source variant matching a descriptor kind."""
        if kind is TypeKind.IMMUTABLE_AGGREGATE:
            return cls.IMMUTABLE
        return cls.STANDARD


@dataclass(frozen=True)
class GenerationRequest:
    """One unit of work producing exactly one generated type."""

    source: TypeDescriptor
    variant: Variant = Variant.STANDARD
    merge_with: Tuple[TypeDescriptor, ...] = ()
    also_convert: Tuple[TypeDescriptor, ...] = ()
    interfaces: Tuple[TypeRef, ...] = ()
    derived: bool = False


# Conversion expression AST ---------------------------------------------------


@dataclass(frozen=True)
class Var:
    """Reference to a parameter or a bound loop variable."""

    name: str


@dataclass(frozen=True)
class AccessorCall:
    """Read an accessor on a source instance."""

    target: "Expr"
    accessor: str
    attribute: bool = False


@dataclass(frozen=True)
class FieldRead:
    """Read a field on a generated instance."""

    target: "Expr"
    field: str


@dataclass(frozen=True)
class Wrap:
    """Construct a generated type from a source value."""

    generated_type: str
    value: "Expr"


@dataclass(frozen=True)
class CollectionTransform:
    """Null-safe, element-wise conversion of a container into an immutable copy.

    For lists and sets ``element`` maps the bound ``item_var``. For maps ``key``
    and ``value`` map the bound ``key_var`` and ``value_var``.
    """

    shape: ContainerShape
    source: "Expr"
    element: Optional["Expr"] = None
    key: Optional["Expr"] = None
    value: Optional["Expr"] = None
    item_var: str = "item"
    key_var: str = "key"
    value_var: str = "value"


@dataclass(frozen=True)
class MappingLookup:
    """Fetch ``key_constant`` from a name-to-value mapping, else ``default``."""

    mapping: "Expr"
    key_constant: str
    default: "Expr"


@dataclass(frozen=True)
class TypeDefault:
    """Neutral default value for a field type (zero, false, empty, absent)."""

    type: TypeRef


Expr = Union[Var, AccessorCall, FieldRead, Wrap, CollectionTransform, MappingLookup, TypeDefault]


# Generated type model -------------------------------------------------------


@dataclass(frozen=True)
class Field:
    """One field of a generated type."""

    name: str
    type: TypeRef
    declared_type: TypeRef
    accessor: Accessor
    origin: str

    @property
    def substituted(self) -> bool:
        return self.type != self.declared_type


@dataclass(frozen=True)
class Param:
    """Constructor or factory parameter."""

    name: str
    type: TypeRef


@dataclass(frozen=True)
class FieldConstant:
    """Named string constant holding a field name."""

    name: str
    value: str
    type: TypeRef


class FactoryKind(str, Enum):
    FROM_SOURCE = "from_source"
    FROM_MAPPING = "from_mapping"
    FROM_SOURCE_WITH_MAPPING = "from_source_with_mapping"
    FROM_GENERATED_WITH_MAPPING = "from_generated_with_mapping"
    WITH_FIELD = "with_field"


@dataclass(frozen=True)
class FactoryMethod:
    """Factory or mutator method derived from the field model.

    ``values`` holds one expression per field, in field order. ``WITH_FIELD``
    methods carry a single value for ``field``.
    """

    kind: FactoryKind
    name: str
    params: Tuple[Param, ...]
    values: Tuple[Expr, ...]
    field: Optional[str] = None


@dataclass(frozen=True)
class GeneratedTypeModel:
    """Fully resolved model of one generated type, ready for rendering."""

    target_name: str
    source_name: str
    variant: Variant
    fields: Tuple[Field, ...]
    constructor_params: Tuple[Param, ...]
    conversion_exprs: Tuple[Expr, ...]
    constants: Tuple[FieldConstant, ...] = ()
    interfaces: Tuple[TypeRef, ...] = ()
    factory_methods: Tuple[FactoryMethod, ...] = ()
    merge_sources: Tuple[str, ...] = ()

    @property
    def simple_name(self) -> str:
        return self.target_name.rsplit(".", 1)[-1]

    @property
    def namespace(self) -> Optional[str]:
        if "." not in self.target_name:
            return None
        return self.target_name.rsplit(".", 1)[0]
