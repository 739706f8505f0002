"""File-backed SQLite store holding habits and their logs.

The store owns its SQLAlchemy engine explicitly so it can be closed and
reopened around file-level operations (backup and restore). Normal reads and
writes go through ``session()``, which holds the store's shared lock; the
backup manager takes the exclusive lock for the close/copy/reopen sequence.
"""

import logging
import threading
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from trackhabit.errors import StoreUnavailableError
from trackhabit.models import Base
from trackhabit.utils.locks import ReadWriteLock

log = logging.getLogger(__name__)

AUXILIARY_SUFFIXES = ('-wal', '-shm', '-journal')


def _configure_connection(dbapi_connection, connection_record):
    """Per-connection pragmas: enforce foreign keys, use write-ahead logging."""
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.execute('PRAGMA journal_mode=WAL')
    finally:
        cursor.close()


class HabitStore:
    """Lifecycle wrapper around the habit database file."""

    def __init__(self, path):
        if not path or str(path) == ':memory:':
            raise ValueError("HabitStore needs a database file path")
        self._path = Path(path).expanduser().resolve()
        self._engine = None
        self._session_factory = None
        self._state_lock = threading.Lock()
        self._lock = ReadWriteLock()

    @property
    def path(self):
        """Absolute path of the primary database file."""
        return self._path

    @property
    def is_open(self):
        return self._engine is not None

    def auxiliary_paths(self):
        """Journal files SQLite currently keeps next to the primary file."""
        candidates = (Path(f"{self._path}{suffix}") for suffix in AUXILIARY_SUFFIXES)
        return [candidate for candidate in candidates if candidate.exists()]

    def open(self):
        """Create the engine, make sure the schema exists and verify connectivity.

        Raises:
            StoreUnavailableError: If the database cannot be opened
        """
        with self._state_lock:
            if self._engine is not None:
                return

            engine = None
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                engine = create_engine(
                    f"sqlite:///{self._path}",
                    connect_args={'check_same_thread': False},
                )
                event.listen(engine, 'connect', _configure_connection)
                Base.metadata.create_all(engine)
                with engine.connect() as connection:
                    connection.execute(text('SELECT 1'))
            except (SQLAlchemyError, OSError) as e:
                if engine is not None:
                    engine.dispose()
                log.critical(f"Unable to open habit store at {self._path}: {e}")
                raise StoreUnavailableError(
                    f"Unable to open habit store: {e}",
                    details={'path': str(self._path)}
                ) from e

            self._engine = engine
            self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
            log.info(f"Habit store opened: {self._path}")

    def reopen(self):
        """Re-acquire a live handle after ``close()``."""
        self.open()

    def close(self):
        """Checkpoint the write-ahead log and release every file handle.

        Safe to call on a closed store.
        """
        with self._state_lock:
            engine = self._engine
            if engine is None:
                return
            self._engine = None
            self._session_factory = None

        try:
            with engine.connect() as connection:
                connection.exec_driver_sql('PRAGMA wal_checkpoint(TRUNCATE)')
        except SQLAlchemyError as e:
            log.warning(f"WAL checkpoint before close failed: {e}")
        finally:
            engine.dispose()
        log.info(f"Habit store closed: {self._path}")

    @contextmanager
    def session(self):
        """Unit of work against the store.

        Holds the shared lock until the session is closed; commits on
        success and rolls back on any error. Waits while a backup or restore
        holds the exclusive lock.

        Raises:
            StoreUnavailableError: If the store is closed
        """
        with self._lock.shared():
            factory = self._session_factory
            if factory is None:
                raise StoreUnavailableError("The habit store is closed")

            session = factory()
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    def exclusive(self):
        """Exclusive hold over the store; no session can run while it is held."""
        return self._lock.exclusive()

    def __repr__(self):
        state = 'open' if self.is_open else 'closed'
        return f"<HabitStore {self._path} ({state})>"
