"""Emit-once bookkeeping and the per-pass report."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import threading
from typing import Callable, Dict, List, Sequence, Set

from .errors import WriteFailure
from .logging import get_logger


class EmissionStatus(str, Enum):
    PENDING = "pending"
    EMITTED = "emitted"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class FailedTarget:
    """A request that produced nothing, with its reason tag."""

    name: str
    reason: str
    detail: str = ""


@dataclass
class PassReport:
    """Outcome of one pass: emitted, skipped and failed target names."""

    emitted: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[FailedTarget] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> Dict[str, object]:
        return {
            "emitted": list(self.emitted),
            "skipped": list(self.skipped),
            "failed": [
                {"name": item.name, "reason": item.reason, "detail": item.detail}
                for item in self.failed
            ],
        }


class EmissionController:
    """Decides whether a target is emitted, skipped as already existing, or failed.

    The produced-names set outlives individual passes so later rounds never
    re-emit a target. ``claim`` is an atomic check-and-insert.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._produced: Set[str] = set()
        self.report = PassReport()
        self.logger = get_logger("emission")

    def begin_pass(self) -> PassReport:
        with self._lock:
            self.report = PassReport()
            return self.report

    def produced(self, target: str) -> bool:
        with self._lock:
            return target in self._produced

    def claim(self, target: str) -> bool:
        """Reserve ``target``; False when it was already produced."""
        with self._lock:
            if target in self._produced:
                return False
            self._produced.add(target)
            return True

    def release(self, target: str) -> None:
        with self._lock:
            self._produced.discard(target)

    def emit(self, target: str, write: Callable[[], None]) -> EmissionStatus:
        """Run ``write`` for a claimed target and record the outcome.

        Write failures are recorded in the report and release the claim; they
        never propagate to the caller.
        """
        statuses = self.emit_group([target], lambda _claimed: write())
        return statuses[target]

    def emit_group(
        self,
        targets: Sequence[str],
        write: Callable[[List[str]], None],
    ) -> Dict[str, EmissionStatus]:
        """Claim every target, then persist the claimed ones with a single write.

        Used when several targets share one output, as in the bundle layout.
        A failed write fails and releases every claimed target.
        """
        statuses: Dict[str, EmissionStatus] = {}
        claimed: List[str] = []
        for target in targets:
            if target in statuses or not self.claim(target):
                self.record_skipped(target)
                statuses.setdefault(target, EmissionStatus.SKIPPED)
                continue
            claimed.append(target)
            statuses[target] = EmissionStatus.PENDING
        if not claimed:
            return statuses
        try:
            write(claimed)
        except WriteFailure as exc:
            for target in claimed:
                self.release(target)
                self.record_failed(target, exc.reason, exc.detail)
                statuses[target] = EmissionStatus.FAILED
            return statuses
        for target in claimed:
            with self._lock:
                self.report.emitted.append(target)
            self.logger.info("Emitted %s", target)
            statuses[target] = EmissionStatus.EMITTED
        return statuses

    def record_skipped(self, target: str) -> None:
        with self._lock:
            self.report.skipped.append(target)
        self.logger.debug("Skipped %s: already exists", target)

    def record_failed(self, target: str, reason: str, detail: str = "") -> None:
        with self._lock:
            self.report.failed.append(FailedTarget(name=target, reason=reason, detail=detail))
        self.logger.error("Failed to generate %s (%s): %s", target, reason, detail)


__all__ = ["EmissionController", "EmissionStatus", "FailedTarget", "PassReport"]
