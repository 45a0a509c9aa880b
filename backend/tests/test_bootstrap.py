from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from slotguard.core.config import Settings
from slotguard.db import bootstrap


def _memory_engine():
    return create_engine("sqlite+pysqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)


def test_ensure_schema_creates_every_required_table():
    engine = _memory_engine()

    bootstrap.ensure_schema(engine)

    with engine.connect() as connection:
        assert bootstrap.inspect_schema(connection) == ([], {})


def test_inspect_schema_reports_missing_tables_and_columns():
    engine = _memory_engine()
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE rooms (id VARCHAR(36) PRIMARY KEY)"))

    with engine.connect() as connection:
        missing_tables, missing_columns = bootstrap.inspect_schema(connection)

    assert "schedule_entries" in missing_tables
    assert missing_columns == {"rooms": ["name"]}


def test_cors_origins_accept_comma_separated_string():
    settings = Settings(cors_origins="http://a.test, http://b.test", log_level=" debug ")

    assert settings.cors_origins == ["http://a.test", "http://b.test"]
    assert settings.log_level == "DEBUG"
