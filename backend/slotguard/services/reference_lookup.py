from __future__ import annotations

from sqlalchemy.orm import Session

from slotguard.models.reference import Faculty, Room, Section
from slotguard.services.schedule_store import translate_store_errors


class ReferenceLookup:
    """Display names for conflict messages. Never consulted by the conflict rules themselves."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self._names: dict[tuple[type, str], str] = {}

    def _label(self, model: type, key: str, attribute: str) -> str:
        cache_key = (model, key)
        if cache_key not in self._names:
            with translate_store_errors("reference lookup"):
                record = self.db.get(model, key)
            self._names[cache_key] = getattr(record, attribute) if record is not None else key
        return self._names[cache_key]

    def room_name(self, room_id: str) -> str:
        return self._label(Room, room_id, "name")

    def faculty_name(self, faculty_id: str) -> str:
        return self._label(Faculty, faculty_id, "name")

    def section_code(self, section_id: str) -> str:
        return self._label(Section, section_id, "code")
