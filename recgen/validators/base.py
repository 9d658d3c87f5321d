"""Core validation data structures and helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Protocol, Sequence, Tuple

from recgen.models import GenerationRequest, TypeKind, Variant


@dataclass(frozen=True)
class UsageIssue:
    """A single request rejected before model building."""

    request: GenerationRequest
    expected_kinds: Tuple[TypeKind, ...]
    detail: str

    @property
    def variant(self) -> Variant:
        return self.request.variant

    @property
    def element(self) -> str:
        return self.request.source.qualified_name


@dataclass
class InvalidAnnotationUsage:
    """Batch diagnostic grouping rejected requests by variant and expected kinds."""

    variant: Variant
    expected_kinds: Tuple[TypeKind, ...]
    elements: List[str] = field(default_factory=list)

    def message(self) -> str:
        kinds = " or ".join(kind.value for kind in self.expected_kinds)
        return (
            f"Skipped {len(self.elements)} element(s) requested as '{self.variant.value}' "
            f"(expected {kinds} source): {', '.join(self.elements)}"
        )


class Validator(Protocol):
    """Protocol implemented by request validators."""

    name: str

    def validate(self, requests: Sequence[GenerationRequest]) -> List[UsageIssue]:
        """Run validation and return any issues."""


def group_issues(issues: Sequence[UsageIssue]) -> List[InvalidAnnotationUsage]:
    """Group issues by (variant, expected kinds), keeping first-seen order."""
    groups: Dict[Tuple[Variant, Tuple[TypeKind, ...]], InvalidAnnotationUsage] = {}
    for issue in issues:
        key = (issue.variant, issue.expected_kinds)
        group = groups.get(key)
        if group is None:
            group = groups[key] = InvalidAnnotationUsage(variant=issue.variant, expected_kinds=issue.expected_kinds)
        if issue.element not in group.elements:
            group.elements.append(issue.element)
    return list(groups.values())
