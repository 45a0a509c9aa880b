from __future__ import annotations

from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from slotguard.api.deps import get_db
from slotguard.db.bootstrap import inspect_schema

router = APIRouter()

logger = logging.getLogger(__name__)


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/health/live")
def health_live() -> dict:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/health/ready")
def health_ready(db: Session = Depends(get_db)) -> JSONResponse:
    db_ok = True
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}

    try:
        connection = db.connection()
        connection.execute(text("SELECT 1"))
        missing_tables, missing_columns = inspect_schema(connection)
    except SQLAlchemyError:
        logger.exception("Readiness check could not reach the schedule store")
        db_ok = False

    schema_ok = db_ok and not missing_tables and not missing_columns
    ready = db_ok and schema_ok

    payload = {
        "status": "ok" if ready else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": {
            "ok": db_ok,
            "schema_ok": schema_ok,
            "missing_tables": missing_tables,
            "missing_columns": missing_columns,
        },
    }
    return JSONResponse(status_code=200 if ready else 503, content=payload)
