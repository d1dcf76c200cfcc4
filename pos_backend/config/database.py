# pos_backend/config/database.py
import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from pos_backend.config.settings import Settings
from pos_backend.core.exceptions import PersistenceFailure, PosError
from pos_backend.shared.database.models import Base

logger = logging.getLogger(__name__)

# Execution option marking a connection that will write (SQLite: BEGIN IMMEDIATE)
WRITE_TRANSACTION = "pos_write_transaction"


class Database:
    """
    Owned handle over the catalog and ledger tables.

    Holds the engine, the session factory and the write lock that every
    stock-mutating unit of work takes. Components receive the handle at
    construction time; there is no module-level engine.

    On SQLite, SQLAlchemy emits BEGIN itself instead of pysqlite: reads run in
    a deferred transaction and units of work use BEGIN IMMEDIATE, so writers in
    other processes queue on the database lock before reading stock.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.is_sqlite = database_url.startswith("sqlite")

        engine_kwargs = {
            "pool_pre_ping": True,
            "echo": echo,
        }
        if self.is_sqlite:
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        else:
            engine_kwargs["pool_recycle"] = 300

        self.engine: Engine = create_engine(database_url, **engine_kwargs)
        if self.is_sqlite:
            event.listen(self.engine, "connect", _sqlite_connect)
            event.listen(self.engine, "begin", _sqlite_begin)

        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )
        self._write_lock = threading.RLock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.database_url, echo=settings.debug)

    def create_schema(self) -> None:
        """Create products and sales tables if they do not exist"""
        Base.metadata.create_all(bind=self.engine)
        logger.info(f"Database initialized at: {self.engine.url.render_as_string(hide_password=True)}")

    def dispose(self) -> None:
        self.engine.dispose()

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Read session; sees committed data only"""
        db = self.SessionLocal()
        try:
            yield db
        except SQLAlchemyError as e:
            logger.exception("Read failed")
            raise PersistenceFailure(f"Read failed: {e.__class__.__name__}") from e
        finally:
            db.close()

    @contextmanager
    def snapshot(self) -> Iterator[Session]:
        """
        Read session where every statement sees the same committed state.

        SQLite holds its shared lock for the whole deferred transaction;
        other backends run the session at REPEATABLE READ.
        """
        with self.session() as db:
            if not self.is_sqlite:
                db.connection(execution_options={"isolation_level": "REPEATABLE READ"})
            yield db

    @contextmanager
    def unit_of_work(self) -> Iterator[Session]:
        """
        Single atomic unit spanning catalog and ledger.

        Process:
        1. Take the process-wide write lock (blocking)
        2. Yield a fresh session to the caller
        3. Commit once if the block finishes
        4. Roll back everything on any exception

        Domain errors propagate unchanged; database errors are reported as
        PersistenceFailure after the rollback.
        """
        with self._write_lock:
            db = self.SessionLocal()
            try:
                db.connection(execution_options={WRITE_TRANSACTION: True})
                yield db
                db.commit()
            except PosError:
                db.rollback()
                raise
            except SQLAlchemyError as e:
                logger.exception("Unit of work aborted, rolled back")
                db.rollback()
                raise PersistenceFailure(f"Transaction aborted: {e.__class__.__name__}") from e
            except Exception:
                logger.exception("Unexpected error in unit of work, rolled back")
                db.rollback()
                raise
            finally:
                db.close()


def _sqlite_connect(dbapi_connection, connection_record):
    # pysqlite must not emit BEGIN; _sqlite_begin does
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def _sqlite_begin(conn):
    if conn.get_execution_options().get(WRITE_TRANSACTION):
        conn.exec_driver_sql("BEGIN IMMEDIATE")
    else:
        conn.exec_driver_sql("BEGIN")


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the handle owned by the application"""
    return request.app.state.database
