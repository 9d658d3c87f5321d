"""Linting utilities for generated Python source."""

from __future__ import annotations

from typing import List


class SourceLinter:
    """Normalizes line endings, trailing whitespace and blank-line runs."""

    max_blank_lines = 2

    def lint(self, source: str) -> str:
        normalized = source.replace("\r\n", "\n").replace("\r", "\n").expandtabs(4)
        cleaned: List[str] = []
        blank_run = 0

        for line in normalized.split("\n"):
            stripped = line.rstrip()
            if not stripped:
                blank_run += 1
                if blank_run > self.max_blank_lines or not cleaned:
                    continue
                cleaned.append("")
                continue
            blank_run = 0
            cleaned.append(stripped)

        while cleaned and cleaned[-1] == "":
            cleaned.pop()

        return "\n".join(cleaned) + "\n"
