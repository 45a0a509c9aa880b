from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from slotguard.core.config import get_settings
from slotguard.db.session import SessionLocal
from slotguard.services.locks import get_lock_manager
from slotguard.services.reference_lookup import ReferenceLookup
from slotguard.services.schedule_store import SqlScheduleStore
from slotguard.services.schedule_validation import ScheduleValidator


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_schedule_store(db: Session = Depends(get_db)) -> SqlScheduleStore:
    return SqlScheduleStore(db, get_settings())


def get_reference_lookup(db: Session = Depends(get_db)) -> ReferenceLookup:
    return ReferenceLookup(db)


def get_schedule_validator(
    store: SqlScheduleStore = Depends(get_schedule_store),
    labels: ReferenceLookup = Depends(get_reference_lookup),
) -> ScheduleValidator:
    return ScheduleValidator(store, labels=labels, locks=get_lock_manager(), settings=get_settings())
