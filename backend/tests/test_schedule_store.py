import pytest
from sqlalchemy.exc import OperationalError

from slotguard.core.config import Settings
from slotguard.core.exceptions import RaceLossError, StoreTimeoutError, StoreUnavailableError
from slotguard.models.schedule_slot_claim import ScheduleSlotClaim
from slotguard.services.conflict_rules import ScheduleSlot, resource_ref
from slotguard.services.schedule_store import SqlScheduleStore


def make_slot(*, section="S1", day=3, start=540, end=600, room="R1", faculty=None):
    return ScheduleSlot(
        entry_id=None,
        section_id=section,
        semester="2024-Fall",
        day_of_week=day,
        start=start,
        end=end,
        room=resource_ref(room),
        faculty=resource_ref(faculty),
    )


def test_insert_persists_entry_and_claims(db_session):
    store = SqlScheduleStore(db_session, Settings())

    with store.transaction():
        record = store.insert(make_slot(faculty="F1"))

    assert (record.start_time, record.end_time, record.room_id, record.faculty_id) == ("09:00", "10:00", "R1", "F1")
    assert db_session.query(ScheduleSlotClaim).count() == 60 * 3


def test_query_filters_semester_and_day_in_start_order(db_session):
    store = SqlScheduleStore(db_session, Settings())
    with store.transaction():
        late = store.insert(make_slot(section="S1", start=780, end=840))
        early = store.insert(make_slot(section="S2", start=480, end=540))
        store.insert(make_slot(section="S3", day=4))

    assert [record.id for record in store.query("2024-Fall", 3)] == [early.id, late.id]
    assert store.query("2025-Spring", 3) == []


def test_overlapping_claim_is_a_lost_race(db_session):
    store = SqlScheduleStore(db_session, Settings())
    with store.transaction():
        store.insert(make_slot(section="S1"))

    # Bypasses the validator, as a writer in another process without advisory locks would.
    with pytest.raises(RaceLossError):
        with store.transaction():
            store.insert(make_slot(section="S2", start=570, end=630))

    assert len(store.query("2024-Fall", 3)) == 1


def test_claims_can_be_disabled(db_session):
    store = SqlScheduleStore(db_session, Settings(enable_slot_claims=False))

    with store.transaction():
        store.insert(make_slot())

    assert db_session.query(ScheduleSlotClaim).count() == 0


def test_delete_removes_claims(db_session):
    store = SqlScheduleStore(db_session, Settings())
    with store.transaction():
        record = store.insert(make_slot())

    with store.transaction():
        store.delete(record.id)

    assert store.get(record.id) is None
    assert db_session.query(ScheduleSlotClaim).count() == 0


def test_advisory_locks_are_skipped_outside_postgres(db_session, monkeypatch):
    store = SqlScheduleStore(db_session, Settings(advisory_locks=True))
    calls = []
    monkeypatch.setattr(db_session, "execute", lambda *args, **kwargs: calls.append(args))

    store.lock_resources(["room:R1|2024-Fall|3"])

    assert calls == []


def test_statement_timeout_maps_to_timeout_error(db_session, monkeypatch):
    store = SqlScheduleStore(db_session, Settings())

    def boom(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("canceling statement due to statement timeout"))

    monkeypatch.setattr(db_session, "execute", boom)

    with pytest.raises(StoreTimeoutError):
        store.query("2024-Fall", 3)


def test_connection_failure_maps_to_unavailable(db_session, monkeypatch):
    store = SqlScheduleStore(db_session, Settings())

    def boom(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("could not connect to server"))

    monkeypatch.setattr(db_session, "execute", boom)

    with pytest.raises(StoreUnavailableError) as exc_info:
        store.query("2024-Fall", 3)

    assert not isinstance(exc_info.value, StoreTimeoutError)
    assert "could not connect" not in exc_info.value.message
