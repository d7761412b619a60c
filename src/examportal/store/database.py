"""Database connection manager for the portal store."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from examportal.store.models import Base

if TYPE_CHECKING:
    from sqlalchemy import Connection, Engine

# Execution option naming the SQLite BEGIN mode for a transaction
BEGIN_MODE_OPTION = "sqlite_begin_mode"
BEGIN_MODES = ("DEFERRED", "IMMEDIATE", "EXCLUSIVE")


class Database:
    """Database connection manager.

    Manages SQLite database connections with WAL mode enabled. Transactions
    are begun explicitly so a session can ask for ``BEGIN IMMEDIATE`` and take
    the write lock before it reads anything.
    """

    def __init__(self, db_path: str = "examportal.db", busy_timeout: float = 5.0) -> None:
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file. Use ":memory:" for in-memory DB.
            busy_timeout: Seconds to wait for a locked database before failing.
        """
        self.db_path = db_path
        self.busy_timeout = busy_timeout
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine:
        """Get or create the database engine."""
        if self._engine is None:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

            # For in-memory databases, use StaticPool to share connection across threads
            # and allow cross-thread access (needed for testing with TestClient)
            if self.db_path == ":memory:":
                self._engine = create_engine(
                    "sqlite:///:memory:",
                    echo=False,
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False, "timeout": self.busy_timeout},
                )
            else:
                self._engine = create_engine(
                    f"sqlite:///{self.db_path}",
                    echo=False,
                    connect_args={"check_same_thread": False, "timeout": self.busy_timeout},
                )

            @event.listens_for(self._engine, "connect")
            def set_sqlite_pragma(dbapi_connection: object, _connection_record: object) -> None:
                # Hand transaction control to the "begin" listener below
                dbapi_connection.isolation_level = None  # type: ignore[attr-defined]
                cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
                cursor.execute("PRAGMA journal_mode=WAL")
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

            @event.listens_for(self._engine, "begin")
            def do_begin(conn: Connection) -> None:
                mode = conn.get_execution_options().get(BEGIN_MODE_OPTION, "DEFERRED")
                if mode not in BEGIN_MODES:
                    raise ValueError(f"Unsupported SQLite begin mode: {mode}")
                conn.exec_driver_sql(f"BEGIN {mode}")

        return self._engine

    @property
    def session_factory(self) -> sessionmaker[Session]:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                expire_on_commit=False,
            )
        return self._session_factory

    def create_tables(self) -> None:
        """Create all tables if they don't exist."""
        Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        """Drop all tables. Use with caution!"""
        Base.metadata.drop_all(self.engine)

    def get_session(self) -> Session:
        """Get a new database session.

        Returns:
            A new SQLAlchemy session.
        """
        return self.session_factory()

    def begin_write_session(self) -> Session:
        """Get a session whose transaction holds the write lock from the start.

        Returns:
            A new session already inside ``BEGIN IMMEDIATE``.
        """
        session = self.session_factory()
        try:
            session.connection(execution_options={BEGIN_MODE_OPTION: "IMMEDIATE"})
        except Exception:
            session.close()
            raise
        return session

    def is_wal_mode(self) -> bool:
        """Check if WAL mode is enabled.

        Returns:
            True if WAL mode is enabled.
        """
        with self.engine.connect() as conn:
            result = conn.execute(text("PRAGMA journal_mode"))
            mode = result.scalar()
            return mode == "wal"

    def close(self) -> None:
        """Close the database connection."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
