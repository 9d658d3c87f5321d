"""Validator rejecting requests whose source kind does not fit the variant."""

from __future__ import annotations

from typing import List, Sequence

from recgen.models import GenerationRequest

from .base import UsageIssue, Validator


class AnnotationUsageValidator(Validator):
    """Checks every request source against the kinds its variant accepts."""

    name = "annotation_usage"

    def validate(self, requests: Sequence[GenerationRequest]) -> List[UsageIssue]:
        issues: List[UsageIssue] = []
        for request in requests:
            expected = request.variant.accepted_kinds
            if request.source.kind in expected:
                continue
            issues.append(
                UsageIssue(
                    request=request,
                    expected_kinds=expected,
                    detail=(
                        f"{request.source.qualified_name} is a {request.source.kind.value} type; "
                        f"'{request.variant.value}' requires {' or '.join(kind.value for kind in expected)}"
                    ),
                )
            )
        return issues
