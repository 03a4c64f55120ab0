"""
Database Configuration
"""
import logging
from typing import Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from buffetdesk.core.config import Settings

logger = logging.getLogger(__name__)

# Base model
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite leaves FK enforcement off per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Storage context owning the engine and the session factory.

    Created and opened by the process entry point (the FastAPI lifespan or a
    test fixture) and handed to whatever needs sessions. Nothing in the
    package keeps a module-level engine.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    def _engine_options(self) -> dict:
        if self.settings.is_sqlite:
            return {
                "connect_args": {
                    "check_same_thread": False,
                    "timeout": self.settings.DB_TIMEOUT_SECONDS,
                },
            }
        options = {"pool_pre_ping": True, "pool_timeout": self.settings.DB_POOL_TIMEOUT}
        if self.settings.database_url.startswith("postgresql"):
            options["connect_args"] = {
                "options": f"-c statement_timeout={self.settings.DB_STATEMENT_TIMEOUT_MS}",
                "connect_timeout": int(self.settings.DB_TIMEOUT_SECONDS),
            }
        return options

    def open(self) -> "Database":
        if self.engine is not None:
            return self
        self.engine = create_engine(
            self.settings.database_url,
            echo=self.settings.DEBUG,
            **self._engine_options()
        )
        if self.settings.is_sqlite:
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        logger.info("Database engine opened (%s)", self.engine.url.render_as_string(hide_password=True))
        return self

    def close(self) -> None:
        if self.engine is None:
            return
        self.engine.dispose()
        self.engine = None
        self._session_factory = None
        logger.info("Database engine closed")

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    def new_session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("Database is not open")
        return self._session_factory()

    def create_all(self) -> None:
        """Create all tables registered on Base"""
        # Import models to register them with Base
        from buffetdesk import models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        from buffetdesk import models  # noqa: F401
        Base.metadata.drop_all(bind=self.engine)

    def ping(self) -> bool:
        """Run a trivial query; used by the readiness probe"""
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.
    Ensures the session is closed after use.
    """
    db = get_database(request).new_session()
    try:
        yield db
    finally:
        db.close()
