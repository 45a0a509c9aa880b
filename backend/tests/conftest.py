import os

# Must be set before slotguard.db.session builds its engine.
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from collections import Counter
from contextlib import contextmanager
import threading
import time
import uuid

import pytest
from fastapi.testclient import TestClient #fake http client that calls the routes without a real server
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import slotguard.models  # noqa: F401
from slotguard.api.deps import get_db
from slotguard.core.exceptions import RaceLossError, ResourceNotFoundError
from slotguard.db.base import Base
from slotguard.main import app
from slotguard.models.schedule_entry import ScheduleEntry
from slotguard.services.conflict_rules import Assigned
from slotguard.services.intervals import format_minutes


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


class FakeScheduleStore:
    """In-memory ScheduleStore that counts calls and can inject failures."""

    def __init__(self) -> None:
        self.entries: dict[str, ScheduleEntry] = {}
        self.calls: Counter = Counter()
        self.locked_keys: list[str] = []
        self.query_error: Exception | None = None
        self.query_delay: float = 0.0
        self.race_winner: ScheduleEntry | None = None
        self._mutex = threading.Lock()

    def seed(self, **fields) -> ScheduleEntry:
        fields.setdefault("id", str(uuid.uuid4()))
        fields.setdefault("section_id", f"sec-{fields['id']}")
        fields.setdefault("semester", "2024-Fall")
        fields.setdefault("room_id", None)
        fields.setdefault("faculty_id", None)
        record = ScheduleEntry(**fields)
        self.entries[record.id] = record
        return record

    def query(self, semester, day_of_week):
        self.calls["query"] += 1
        if self.query_error is not None:
            raise self.query_error
        if self.query_delay:
            time.sleep(self.query_delay)
        with self._mutex:
            matches = [
                record
                for record in self.entries.values()
                if record.semester == semester and record.day_of_week == day_of_week
            ]
        return sorted(matches, key=lambda record: (record.start_time, record.id))

    def get(self, entry_id):
        self.calls["get"] += 1
        return self.entries.get(entry_id)

    def insert(self, slot):
        self.calls["insert"] += 1
        if self.race_winner is not None:
            winner, self.race_winner = self.race_winner, None
            self.entries[winner.id] = winner
            raise RaceLossError()
        record = ScheduleEntry(id=str(uuid.uuid4()))
        self._apply(record, slot)
        with self._mutex:
            self.entries[record.id] = record
        return record

    def update(self, entry_id, slot):
        self.calls["update"] += 1
        record = self.entries.get(entry_id)
        if record is None:
            raise ResourceNotFoundError("Schedule entry", entry_id)
        self._apply(record, slot)
        return record

    def delete(self, entry_id):
        self.calls["delete"] += 1
        self.entries.pop(entry_id, None)

    @contextmanager
    def transaction(self, deadline=None):
        self.calls["transaction"] += 1
        try:
            yield self
        except Exception:
            self.calls["rollback"] += 1
            raise

    def lock_resources(self, keys):
        self.locked_keys.extend(keys)

    @staticmethod
    def _apply(record, slot):
        record.section_id = slot.section_id
        record.semester = slot.semester
        record.day_of_week = slot.day_of_week
        record.start_time = format_minutes(slot.start)
        record.end_time = format_minutes(slot.end)
        record.room_id = slot.room.id if isinstance(slot.room, Assigned) else None
        record.faculty_id = slot.faculty.id if isinstance(slot.faculty, Assigned) else None


@pytest.fixture()
def fake_store():
    return FakeScheduleStore()
