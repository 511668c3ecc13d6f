# registrar/core/db.py - Engine, connection pool and session lifecycle
from sqlalchemy import create_engine, text, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool, QueuePool
from fastapi import Request
from typing import Generator, Optional
from contextlib import contextmanager
import logging
import threading
import time

from registrar.core.config import Settings

logger = logging.getLogger(__name__)

SLOW_QUERY_SECONDS = 0.1
LONG_CHECKOUT_SECONDS = 1.0


def _enable_sqlite_pragmas(dbapi_connection, connection_record):
    # cascades on student deletion rely on enforced foreign keys
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


class DatabaseManager:
    """Owns the engine, its bounded pool and the session factory of one application.

    Built by the app factory, initialized by the lifespan and disposed at
    shutdown; sessions are always handed back to the pool on exit.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker] = None
        self._initialized = False
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self):
        """Create the engine and session factory, then check connectivity"""
        with self._lock:
            if self._initialized:
                return

            try:
                self.engine = self._build_engine()
                self.SessionLocal = sessionmaker(
                    bind=self.engine,
                    autoflush=False,
                    expire_on_commit=False,
                )
                self._register_listeners()
                self._probe()
            except Exception as e:
                logger.error(f"Database initialization failed for {self.settings.safe_database_url()}: {e}")
                raise

            self._initialized = True
            logger.info(f"Database ready ({self.settings.safe_database_url()})")

    def _build_engine(self) -> Engine:
        url = self.settings.database_url
        options = {"echo": self.settings.DATABASE_ECHO}

        if self.settings.is_sqlite:
            # sessions may move between threadpool workers; the busy timeout
            # makes writers queue on the database lock instead of failing
            options["connect_args"] = {"check_same_thread": False, "timeout": 30}
            if ":memory:" in url or url.rstrip("/") == "sqlite:":
                options["poolclass"] = StaticPool
            return create_engine(url, **options)

        return create_engine(
            url,
            poolclass=QueuePool,
            pool_size=self.settings.DATABASE_POOL_SIZE,
            max_overflow=self.settings.DATABASE_MAX_OVERFLOW,
            pool_timeout=self.settings.DATABASE_POOL_TIMEOUT,
            pool_recycle=self.settings.DATABASE_POOL_RECYCLE,
            pool_pre_ping=True,
            connect_args={
                "connect_timeout": 10,
                "application_name": f"school_registration_{self.settings.ENV}",
                "options": "-c timezone=UTC",
            },
            **options,
        )

    def _register_listeners(self):
        if self.settings.is_sqlite:
            event.listen(self.engine, "connect", _enable_sqlite_pragmas)

        if not self.settings.is_development:
            return

        # development only: flag connections held too long and slow statements
        @event.listens_for(self.engine, "checkout")
        def on_checkout(dbapi_connection, connection_record, connection_proxy):
            connection_record.info["checked_out_at"] = time.time()

        @event.listens_for(self.engine, "checkin")
        def on_checkin(dbapi_connection, connection_record):
            checked_out_at = connection_record.info.pop("checked_out_at", None)
            if checked_out_at is None:
                return
            held = time.time() - checked_out_at
            if held > LONG_CHECKOUT_SECONDS:
                logger.warning(f"Connection held for {held:.2f}s before returning to the pool")

        @event.listens_for(self.engine, "before_cursor_execute")
        def on_before_execute(conn, cursor, statement, parameters, context, executemany):
            conn.info.setdefault("statement_started", []).append(time.time())

        @event.listens_for(self.engine, "after_cursor_execute")
        def on_after_execute(conn, cursor, statement, parameters, context, executemany):
            started = conn.info.get("statement_started")
            if not started:
                return
            elapsed = time.time() - started.pop()
            if elapsed > SLOW_QUERY_SECONDS:
                logger.warning(f"Slow statement ({elapsed:.3f}s): {statement[:100]}")

    def _probe(self):
        with self.engine.connect() as conn:
            if self.settings.is_sqlite:
                version = conn.execute(text("SELECT sqlite_version()")).scalar()
                logger.info(f"SQLite {version}")
            else:
                version = conn.execute(text("SELECT version()")).scalar()
                logger.info(f"{version[:50]}")

    def get_session(self) -> Generator[Session, None, None]:
        """
        Yield a session scoped to one unit of work.

        Uncommitted work is rolled back when the caller fails, and the session
        is closed on every exit path so its connection returns to the pool.
        """
        if not self._initialized:
            self.initialize()

        session = self.SessionLocal()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def transaction(self):
        """
        Session that commits when the block exits normally.

        Usage:
            with db_manager.transaction() as session:
                session.add(tariff)
        """
        if not self._initialized:
            self.initialize()

        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Transaction rolled back: {e}")
            raise
        finally:
            session.close()

    def health_check(self) -> dict:
        """Round-trip a trivial query and report pool usage"""
        started = time.time()
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return {"status": "unhealthy", "error": str(e)}

        pool = self.engine.pool
        pool_status = {}
        if isinstance(pool, QueuePool):
            pool_status = {
                "size": pool.size(),
                "checked_in": pool.checkedin(),
                "checked_out": pool.checkedout(),
                "overflow": pool.overflow(),
            }

        return {
            "status": "healthy",
            "response_time_ms": round((time.time() - started) * 1000, 2),
            "pool": pool_status,
            "database": self.settings.safe_database_url(),
        }

    def close(self):
        """Dispose the pool; the manager can be initialized again afterwards"""
        if self.engine is not None:
            self.engine.dispose()
            logger.info("Database pool disposed")
        self._initialized = False


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    FastAPI dependency yielding a session from the application's database manager.

    Usage:
        @router.get("/students/search")
        def search(db: Session = Depends(get_db)):
            ...
    """
    db_manager: DatabaseManager = request.app.state.db
    yield from db_manager.get_session()


__all__ = [
    "DatabaseManager",
    "get_db",
]
