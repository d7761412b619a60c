"""Integration tests for the portal database."""

import tempfile
import threading
from pathlib import Path

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import OperationalError

from examportal.store.database import Database


@pytest.fixture
def temp_db_path() -> str:
    """Create a temporary database path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        return f.name


@pytest.fixture
def database(temp_db_path: str) -> Database:
    """Create a database instance with tables."""
    db = Database(temp_db_path, busy_timeout=0.2)
    db.create_tables()
    yield db
    db.close()
    # Cleanup
    Path(temp_db_path).unlink(missing_ok=True)
    Path(f"{temp_db_path}-wal").unlink(missing_ok=True)
    Path(f"{temp_db_path}-shm").unlink(missing_ok=True)


@pytest.mark.integration
class TestDatabaseSetup:
    """Tests for database setup."""

    def test_database_creates_tables(self, database: Database) -> None:
        """All tables exist after init."""
        tables = set(inspect(database.engine).get_table_names())

        assert {
            "students",
            "courses",
            "exams",
            "attendance",
            "registration_entries",
            "hall_tickets",
            "audit_log",
        } <= tables

    def test_database_wal_mode(self, database: Database) -> None:
        """WAL mode is enabled."""
        assert database.is_wal_mode()

    def test_registration_pair_is_unique(self, database: Database) -> None:
        """The ledger table carries the (student, exam) unique constraint."""
        constraints = inspect(database.engine).get_unique_constraints("registration_entries")

        assert any(
            sorted(c["column_names"]) == ["exam_id", "student_id"] for c in constraints
        )


@pytest.mark.integration
class TestWriteSessions:
    """Tests for BEGIN IMMEDIATE write sessions."""

    def test_write_session_holds_lock(self, database: Database) -> None:
        """A second writer times out while the first holds the lock."""
        first = database.begin_write_session()
        try:
            with pytest.raises(OperationalError, match="database is locked"):
                database.begin_write_session()
        finally:
            first.rollback()
            first.close()

    def test_lock_released_after_commit(self, database: Database) -> None:
        """The next writer proceeds once the first commits."""
        first = database.begin_write_session()
        released = threading.Event()

        def finish() -> None:
            first.execute(text("INSERT INTO audit_log (id, actor, action) VALUES ('1', 'a', 'b')"))
            first.commit()
            first.close()
            released.set()

        worker = threading.Thread(target=finish)
        worker.start()
        worker.join(timeout=5)

        assert released.is_set()
        second = database.begin_write_session()
        try:
            count = second.execute(text("SELECT COUNT(*) FROM audit_log")).scalar_one()
            assert count == 1
        finally:
            second.rollback()
            second.close()

    def test_readers_not_blocked_by_writer(self, database: Database) -> None:
        """WAL lets a plain session read while a writer holds the lock."""
        writer = database.begin_write_session()
        reader = database.get_session()
        try:
            assert reader.execute(text("SELECT COUNT(*) FROM students")).scalar_one() == 0
        finally:
            reader.close()
            writer.rollback()
            writer.close()
