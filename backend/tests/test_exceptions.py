from slotguard.core.exceptions import (
    AppError,
    ConflictError,
    RaceLossError,
    StoreTimeoutError,
    StoreUnavailableError,
    ValidationError,
)
from slotguard.services.conflict_rules import ConflictReason, ConflictReport, ConflictType


def test_validation_error_structure():
    err = ValidationError("Invalid schedule entry", [{"field": "dayOfWeek", "message": "out of range"}])
    assert err.status_code == 400
    assert err.details == {"errors": [{"field": "dayOfWeek", "message": "out of range"}]}
    assert err.retryable is False
    assert isinstance(err, AppError)


def test_conflict_error_carries_full_report():
    report = ConflictReport(
        reasons=(
            ConflictReason(ConflictType.room, "e1", "Room R1 is already booked"),
            ConflictReason(ConflictType.faculty, "e1", "Instructor F1 is already assigned"),
        )
    )
    err = ConflictError(report)

    assert err.status_code == 409
    assert err.report is report
    assert [item["type"] for item in err.details["conflicts"]] == ["room", "faculty"]
    assert "Room R1 is already booked" in err.message
    assert "Instructor F1 is already assigned" in err.message


def test_transient_errors_are_retryable_and_distinct_from_conflicts():
    timeout = StoreTimeoutError()
    assert isinstance(timeout, StoreUnavailableError)
    assert timeout.retryable is True
    assert timeout.status_code == 503
    assert not isinstance(timeout, ConflictError)


def test_race_loss_is_not_a_conflict_error():
    err = RaceLossError()
    assert err.status_code == 409
    assert not isinstance(err, ConflictError)


def test_app_error_defaults():
    err = AppError("Generic error")
    assert err.status_code == 500
    assert err.details == {}
