"""Registry of source types that must be substituted wherever referenced."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Set

from .config import NamingConfig
from .models import GenerationRequest, TypeDescriptor, TypeKind
from .synthesis.naming import generated_name_for
from .synthesis.types import iter_simple_names


class TypeRegistry:
    """Closure of all type descriptors converted during one round.

    Membership is by qualified name. The registry is read-only once built, so
    it can be shared freely between model builders running in parallel.
    """

    def __init__(
        self,
        descriptors: Iterable[TypeDescriptor] = (),
        naming: NamingConfig | None = None,
    ) -> None:
        self.naming = naming or NamingConfig()
        self._members: Dict[str, TypeDescriptor] = {}
        for descriptor in descriptors:
            self._members.setdefault(descriptor.qualified_name, descriptor)

    @classmethod
    def from_requests(
        cls,
        requests: Iterable[GenerationRequest],
        naming: NamingConfig | None = None,
    ) -> "TypeRegistry":
        """Union every request source with its also-convert and merge-with lists.

        Referenced types are added one level deep: their own attributes are not
        expanded further.
        """
        descriptors: List[TypeDescriptor] = []
        for request in requests:
            descriptors.append(request.source)
            descriptors.extend(request.also_convert)
            descriptors.extend(request.merge_with)
        return cls(descriptors, naming=naming)

    def __contains__(self, qualified_name: object) -> bool:
        return qualified_name in self._members

    def __iter__(self) -> Iterator[TypeDescriptor]:
        return iter(self._members.values())

    def __len__(self) -> int:
        return len(self._members)

    def contains(self, qualified_name: str) -> bool:
        return qualified_name in self._members

    def kind_of(self, qualified_name: str) -> Optional[TypeKind]:
        descriptor = self._members.get(qualified_name)
        return descriptor.kind if descriptor else None

    def descriptor(self, qualified_name: str) -> Optional[TypeDescriptor]:
        return self._members.get(qualified_name)

    def generated_name_of(self, qualified_name: str) -> str:
        """Return the generated type name of a registry member."""
        descriptor = self._members.get(qualified_name)
        if descriptor is None:
            raise KeyError(f"{qualified_name} is not a registry member")
        return generated_name_for(descriptor.qualified_name, descriptor.kind, self.naming)

    def references(self, qualified_name: str) -> Set[str]:
        """Members referenced by the accessors of ``qualified_name``."""
        descriptor = self._members.get(qualified_name)
        if descriptor is None:
            return set()
        found: Set[str] = set()
        for accessor in descriptor.accessors:
            for name in iter_simple_names(accessor.declared_type):
                if name in self._members:
                    found.add(name)
        return found

    def find_cycles(self) -> List[List[str]]:
        """Return groups of members that reference each other, directly or not.

        Uses Tarjan's strongly connected components; a member referencing itself
        forms a cycle of one.
        """
        index_of: Dict[str, int] = {}
        lowlink: Dict[str, int] = {}
        on_stack: Set[str] = set()
        stack: List[str] = []
        cycles: List[List[str]] = []
        counter = 0

        def _visit(name: str) -> None:
            nonlocal counter
            index_of[name] = lowlink[name] = counter
            counter += 1
            stack.append(name)
            on_stack.add(name)
            for target in sorted(self.references(name)):
                if target not in index_of:
                    _visit(target)
                    lowlink[name] = min(lowlink[name], lowlink[target])
                elif target in on_stack:
                    lowlink[name] = min(lowlink[name], index_of[target])
            if lowlink[name] != index_of[name]:
                return
            component: List[str] = []
            while True:
                member = stack.pop()
                on_stack.discard(member)
                component.append(member)
                if member == name:
                    break
            if len(component) > 1 or name in self.references(name):
                cycles.append(sorted(component))

        for name in sorted(self._members):
            if name not in index_of:
                _visit(name)
        return cycles


__all__ = ["TypeRegistry"]
