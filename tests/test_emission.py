"""Emit-once bookkeeping."""

from __future__ import annotations

import threading

from recgen.emission import EmissionController, EmissionStatus
from recgen.errors import WriteFailure


def test_second_emission_of_a_target_is_skipped() -> None:
    controller = EmissionController()
    report = controller.begin_pass()
    writes = []

    first = controller.emit("a.ARecord", lambda: writes.append("a"))
    second = controller.emit("a.ARecord", lambda: writes.append("again"))

    assert first is EmissionStatus.EMITTED
    assert second is EmissionStatus.SKIPPED
    assert writes == ["a"]
    assert report.emitted == ["a.ARecord"]
    assert report.skipped == ["a.ARecord"]
    assert report.failed == []


def test_write_failure_is_reported_and_releases_the_claim() -> None:
    controller = EmissionController()
    report = controller.begin_pass()

    def _fail() -> None:
        raise WriteFailure("a.ARecord", "disk full")

    status = controller.emit("a.ARecord", _fail)

    assert status is EmissionStatus.FAILED
    assert [(item.name, item.reason, item.detail) for item in report.failed] == [
        ("a.ARecord", "write_failure", "disk full")
    ]
    assert not controller.produced("a.ARecord")
    assert controller.emit("a.ARecord", lambda: None) is EmissionStatus.EMITTED


def test_produced_names_survive_new_passes() -> None:
    controller = EmissionController()
    controller.begin_pass()
    controller.emit("a.ARecord", lambda: None)

    report = controller.begin_pass()

    assert controller.emit("a.ARecord", lambda: None) is EmissionStatus.SKIPPED
    assert report.emitted == []
    assert report.skipped == ["a.ARecord"]


def test_emit_group_writes_claimed_targets_once() -> None:
    controller = EmissionController()
    report = controller.begin_pass()
    controller.emit("a.Old", lambda: None)
    seen = []

    statuses = controller.emit_group(["a.New", "a.Old", "a.New", "a.Other"], seen.append)

    assert seen == [["a.New", "a.Other"]]
    assert statuses == {
        "a.New": EmissionStatus.EMITTED,
        "a.Old": EmissionStatus.SKIPPED,
        "a.Other": EmissionStatus.EMITTED,
    }
    assert report.emitted == ["a.Old", "a.New", "a.Other"]
    assert report.skipped == ["a.Old", "a.New"]


def test_claim_is_atomic_across_threads() -> None:
    controller = EmissionController()
    results = []
    barrier = threading.Barrier(8)

    def _claim() -> None:
        barrier.wait()
        results.append(controller.claim("a.Shared"))

    threads = [threading.Thread(target=_claim) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count(True) == 1
    assert results.count(False) == 7


def test_report_serialises_to_plain_data() -> None:
    controller = EmissionController()
    report = controller.begin_pass()
    controller.record_failed("a.Bad", "unsupported_container_shape", "nope")

    assert report.to_dict() == {
        "emitted": [],
        "skipped": [],
        "failed": [{"name": "a.Bad", "reason": "unsupported_container_shape", "detail": "nope"}],
    }
    assert not report.ok
