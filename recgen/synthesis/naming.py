"""Naming conventions for generated types, fields and constants."""

from __future__ import annotations

import keyword
import re
from typing import Sequence

from ..config import AccessorConfig, NamingConfig
from ..models import Accessor, TypeKind

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def _split_qualified(qualified_name: str) -> tuple[str, str]:
    if "." not in qualified_name:
        return "", qualified_name
    namespace, simple = qualified_name.rsplit(".", 1)
    return namespace + ".", simple


def generated_name_for(qualified_name: str, kind: TypeKind, naming: NamingConfig) -> str:
    """Derive the generated type name, keeping the source namespace.

    Mutable holders get the record suffix appended, immutable aggregates get the
    immutable prefix prepended.
    """
    namespace, simple = _split_qualified(qualified_name)
    if kind is TypeKind.IMMUTABLE_AGGREGATE:
        return f"{namespace}{naming.immutable_prefix}{simple}"
    return f"{namespace}{simple}{naming.record_suffix}"


def merged_name_for(qualified_name: str, naming: NamingConfig) -> str:
    namespace, simple = _split_qualified(qualified_name)
    return f"{namespace}{simple}{naming.merge_suffix}"


def simple_name(qualified_name: str) -> str:
    return qualified_name.rsplit(".", 1)[-1]


def lower_first(text: str) -> str:
    return text[:1].lower() + text[1:]


def _strip_prefix(name: str, prefixes: Sequence[str]) -> str | None:
    # Longest prefix first so "is_" wins over "is".
    for prefix in sorted(prefixes, key=len, reverse=True):
        if not prefix or not name.startswith(prefix) or len(name) == len(prefix):
            continue
        remainder = name[len(prefix):]
        if remainder.startswith("_"):
            return remainder.lstrip("_") or None
        if remainder[0].isupper() or remainder[0].isdigit():
            return remainder
    return None


def field_name_for(accessor: Accessor, kind: TypeKind, accessors: AccessorConfig) -> str:
    """Derive a field name from an accessor name.

    ``getFirstName`` and ``get_first_name`` become ``firstName`` and
    ``first_name``; boolean-style accessors use the boolean prefixes instead.
    Immutable aggregates expose their components under the field name already.
    """
    if kind is TypeKind.IMMUTABLE_AGGREGATE:
        return accessor.name
    if accessor.boolean_style:
        preferred, fallback = accessors.boolean_prefixes, accessors.prefixes
    else:
        preferred, fallback = accessors.prefixes, accessors.boolean_prefixes
    stripped = _strip_prefix(accessor.name, preferred)
    if stripped is None:
        stripped = _strip_prefix(accessor.name, fallback)
    return lower_first(stripped if stripped is not None else accessor.name)


def safe_identifier(name: str) -> str:
    """Append an underscore to names that are Python keywords."""
    return f"{name}_" if keyword.iskeyword(name) else name


def constant_name_for(field_name: str) -> str:
    """Return the UPPER_SNAKE constant name for a field name."""
    words = _CAMEL_BOUNDARY.sub("_", field_name)
    return re.sub(r"_+", "_", words).strip("_").upper()


def snake_case(name: str) -> str:
    words = _CAMEL_BOUNDARY.sub("_", name)
    return re.sub(r"_+", "_", words).strip("_").lower()


__all__ = [
    "constant_name_for",
    "field_name_for",
    "generated_name_for",
    "lower_first",
    "merged_name_for",
    "safe_identifier",
    "simple_name",
    "snake_case",
]
