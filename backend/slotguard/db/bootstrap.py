from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Connection, Engine

import slotguard.models  # noqa: F401
from slotguard.db.base import Base
from slotguard.db.session import engine as default_engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "schedule_entries": {
        "id",
        "section_id",
        "semester",
        "day_of_week",
        "start_time",
        "end_time",
        "room_id",
        "faculty_id",
    },
    "schedule_slot_claims": {"id", "entry_id", "resource_key", "semester", "day_of_week", "minute"},
    "rooms": {"id", "name"},
    "faculty": {"id", "name"},
    "sections": {"id", "code"},
}


def inspect_schema(connection: Connection) -> tuple[list[str], dict[str, list[str]]]:
    inspector = inspect(connection)
    table_names = set(inspector.get_table_names())
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    for table_name, columns in REQUIRED_COLUMNS.items():
        if table_name not in table_names:
            missing_tables.append(table_name)
            continue
        existing = {item["name"] for item in inspector.get_columns(table_name)}
        missing = sorted(columns - existing)
        if missing:
            missing_columns[table_name] = missing
    return missing_tables, missing_columns


def ensure_schema(engine: Engine | None = None) -> None:
    target = engine or default_engine
    Base.metadata.create_all(bind=target)
    with target.connect() as connection:
        missing_tables, missing_columns = inspect_schema(connection)
    if missing_tables or missing_columns:
        # create_all never alters existing tables; those need an alembic upgrade.
        logger.warning(
            "Database schema is out of date (missing tables: %s, missing columns: %s); run `alembic upgrade head`",
            missing_tables,
            missing_columns,
        )
