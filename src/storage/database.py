"""
Connection-pool handle for the tournament database.

A ``Database`` owns one SQLAlchemy engine (and so one connection pool). The
application factory creates it and stores it in ``app.extensions``; request
handlers borrow a connection with ``with database.connect() as conn:``.
"""
import logging
import threading
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError, DBAPIError, InterfaceError, OperationalError

from errors import ConfigurationError, DatabaseUnavailable
from storage.schema import metadata

logger = logging.getLogger(__name__)


def normalize_database_url(raw_url):
    """Validate *raw_url* and return a SQLAlchemy ``URL``.

    ``postgres://`` (as handed out by most hosting providers) is rewritten to
    ``postgresql://``, which is the only spelling SQLAlchemy accepts.
    """
    if not raw_url or not raw_url.strip():
        raise ConfigurationError('DATABASE_URL is not set')
    raw_url = raw_url.strip()
    if raw_url.startswith('postgres://'):
        raw_url = 'postgresql://' + raw_url[len('postgres://'):]
    try:
        url = make_url(raw_url)
    except ArgumentError as e:
        raise ConfigurationError(f'DATABASE_URL is not a valid connection string: {e}') from e
    if url.get_backend_name() == 'postgresql' and not url.host:
        raise ConfigurationError('DATABASE_URL has no host name')
    return url


# SQLSTATE for a UNIQUE constraint violation
UNIQUE_VIOLATION = '23505'


def is_unique_violation(error) -> bool:
    """True when an ``IntegrityError`` was raised by a UNIQUE constraint, not a foreign key or check."""
    orig = getattr(error, 'orig', None)
    if getattr(orig, 'pgcode', None) == UNIQUE_VIOLATION:
        return True
    return str(orig).startswith('UNIQUE constraint failed')


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


class Database:
    def __init__(self, url, pool_size=5, max_overflow=5, connect_timeout=10, sslmode='prefer', echo=False):
        self.raw_url = url
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.connect_timeout = connect_timeout
        self.sslmode = sslmode
        self.echo = echo
        self._engine = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings):
        return cls(settings.database_url,
                   pool_size=settings.pool_size,
                   max_overflow=settings.max_overflow,
                   connect_timeout=settings.connect_timeout,
                   sslmode=settings.sslmode)

    @property
    def configured(self) -> bool:
        """True when a connection string was supplied (the database is not contacted)."""
        return bool(self.raw_url)

    @property
    def engine(self):
        """The engine, created on first use and after every ``reset()``."""
        with self._lock:
            if self._engine is None:
                self._engine = self._create_engine()
            return self._engine

    def _create_engine(self):
        url = normalize_database_url(self.raw_url)
        backend = url.get_backend_name()
        logger.info(f'Initializing database connection to {url.render_as_string(hide_password=True)}')
        if backend == 'sqlite':
            engine = create_engine(url, echo=self.echo,
                                   connect_args={'check_same_thread': False})
            event.listen(engine, 'connect', _enable_sqlite_foreign_keys)
            return engine
        connect_args = {}
        if backend == 'postgresql':
            connect_args = {'connect_timeout': self.connect_timeout, 'sslmode': self.sslmode}
        return create_engine(
            url,
            echo=self.echo,
            pool_size=self.pool_size,
            max_overflow=self.max_overflow,
            pool_pre_ping=True,
            pool_recycle=300,
            connect_args=connect_args,
        )

    @contextmanager
    def connect(self):
        """Borrow a pooled connection inside a transaction.

        Commits when the block exits normally, rolls back on any exception and
        always hands the connection back to the pool. Connectivity failures
        reset the pool and surface as ``DatabaseUnavailable``.
        """
        try:
            with self.engine.begin() as conn:
                yield conn
        except (OperationalError, InterfaceError) as e:
            self._handle_connectivity_error(e)
            raise DatabaseUnavailable(_describe(e)) from e
        except DBAPIError as e:
            if e.connection_invalidated:
                self._handle_connectivity_error(e)
                raise DatabaseUnavailable(_describe(e)) from e
            raise

    def _handle_connectivity_error(self, error):
        kind = type(error.orig).__name__ if error.orig is not None else type(error).__name__
        logger.error(f'Database connectivity error ({kind}: {_describe(error)}); resetting connection pool')
        self.reset()

    def reset(self):
        """Dispose the engine so the next ``connect()`` builds a fresh pool. Idempotent."""
        with self._lock:
            engine, self._engine = self._engine, None
        if engine is not None:
            engine.dispose()

    dispose = reset

    def create_schema(self):
        """Create any missing tables (development and bootstrap helper)."""
        with self.connect() as conn:
            metadata.create_all(conn)

    def __repr__(self):
        state = 'connected' if self._engine is not None else 'idle'
        return f"Database(configured={self.configured}, state={state})"


def _describe(error) -> str:
    """Short, password-free description of a driver error."""
    orig = getattr(error, 'orig', None)
    text = str(orig) if orig is not None else str(error)
    return text.strip().splitlines()[0] if text.strip() else type(error).__name__
