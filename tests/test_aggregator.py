from __future__ import annotations

import pytest

from qr_attendance.services import NotFoundError, PercentageAggregator, attendance_percentage


def _record(ledger, reg_no: str, subject: str, date: str) -> None:
    ledger.insert_if_absent(reg_no=reg_no, subject=subject, class_name="ClassA", date=date, time="09:00:00")


@pytest.fixture
def aggregator(service) -> PercentageAggregator:
    return PercentageAggregator(service.directory, service.ledger)


def test_attendance_percentage_rounds_to_two_places() -> None:
    assert attendance_percentage(3, 4) == 75.0
    assert attendance_percentage(1, 3) == 33.33
    assert attendance_percentage(2, 3) == 66.67
    assert attendance_percentage(0, 1) == 0.0


def test_three_of_four_classes_is_seventy_five_percent(service, aggregator) -> None:
    for day in ("2024-01-08", "2024-01-09", "2024-01-10"):
        _record(service.ledger, "S1", "Math", day)
    # S3 alone attended on the 11th, which still counts as a class held.
    _record(service.ledger, "S3", "Math", "2024-01-11")

    summary = aggregator.summarize("S1")

    math = summary.subjects["Math"]
    assert math.attended == 3
    assert math.total_classes == 4
    assert math.percentage == 75.0


def test_subject_without_sessions_reports_zero_over_one(aggregator) -> None:
    summary = aggregator.summarize("S1")

    physics = summary.subjects["Physics"]
    assert physics.attended == 0
    assert physics.total_classes == 1
    assert physics.percentage == 0.0


def test_summary_covers_every_enrolled_subject(service, aggregator) -> None:
    _record(service.ledger, "S2", "Physics", "2024-01-10")

    summary = aggregator.summarize("S1")

    assert set(summary.subjects) == {"Math", "Physics"}
    assert summary.subjects["Physics"].total_classes == 1
    assert summary.subjects["Physics"].percentage == 0.0
    assert summary.to_dict()["subjects"]["Physics"] == {"attended": 0, "totalClasses": 1, "percentage": 0.0}


def test_records_outside_enrollment_are_ignored(service, aggregator) -> None:
    _record(service.ledger, "S2", "Math", "2024-01-10")

    summary = aggregator.summarize("S2")

    assert set(summary.subjects) == {"Physics"}


def test_unknown_student_is_not_found(aggregator) -> None:
    with pytest.raises(NotFoundError):
        aggregator.summarize("NOPE")
