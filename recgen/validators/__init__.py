"""Validation package for generation requests."""

from .base import InvalidAnnotationUsage, UsageIssue, Validator, group_issues
from .usage import AnnotationUsageValidator

__all__ = [
    "AnnotationUsageValidator",
    "InvalidAnnotationUsage",
    "UsageIssue",
    "Validator",
    "group_issues",
]
