import pytest

from slotguard.core.exceptions import StoreUnavailableError
from slotguard.services.conflict_query import ConflictQuery
from slotguard.services.conflict_rules import UNASSIGNED, Assigned


def test_returns_same_semester_and_day_ordered_by_start(fake_store):
    fake_store.seed(id="late", day_of_week=3, start_time="13:00", end_time="14:00", room_id="R1")
    fake_store.seed(id="early", day_of_week=3, start_time="08:00", end_time="09:00")
    fake_store.seed(id="other-day", day_of_week=4, start_time="08:00", end_time="09:00")
    fake_store.seed(id="other-term", semester="2025-Spring", day_of_week=3, start_time="08:00", end_time="09:00")

    candidates = ConflictQuery(fake_store).find_candidates("2024-Fall", 3)

    assert [slot.entry_id for slot in candidates] == ["early", "late"]
    assert candidates[0].start == 480 and candidates[0].end == 540
    assert candidates[0].room is UNASSIGNED
    assert candidates[1].room == Assigned("R1")


def test_does_not_filter_by_time(fake_store):
    fake_store.seed(id="morning", day_of_week=1, start_time="07:00", end_time="08:00")
    fake_store.seed(id="evening", day_of_week=1, start_time="19:00", end_time="20:00")

    candidates = ConflictQuery(fake_store).find_candidates("2024-Fall", 1)

    assert {slot.entry_id for slot in candidates} == {"morning", "evening"}


def test_excludes_own_entry(fake_store):
    fake_store.seed(id="self", day_of_week=2, start_time="09:00", end_time="10:00")
    fake_store.seed(id="neighbour", day_of_week=2, start_time="09:00", end_time="10:00")

    candidates = ConflictQuery(fake_store).find_candidates("2024-Fall", 2, exclude_id="self")

    assert [slot.entry_id for slot in candidates] == ["neighbour"]


def test_store_failure_is_surfaced_not_treated_as_empty(fake_store):
    fake_store.query_error = StoreUnavailableError()

    with pytest.raises(StoreUnavailableError):
        ConflictQuery(fake_store).find_candidates("2024-Fall", 2)


def test_missing_result_is_surfaced(fake_store, monkeypatch):
    monkeypatch.setattr(fake_store, "query", lambda semester, day_of_week: None)

    with pytest.raises(StoreUnavailableError):
        ConflictQuery(fake_store).find_candidates("2024-Fall", 2)
