"""
MySQL connection handling with SQLAlchemy and PyMySQL.

This module provides:
1. The `connect()` function for creating new database connections
2. The `ConnectionWrapper` class that runs queries and returns `MySQLRow` results
3. Engine creation and management through a thread-safe registry
4. The `check_connection` retry decorator

Rows come back with raw, undecoded column bytes so that decoding is left to
the `MySQLDataDecoder` carried by `MySQLRow.sql()`:

    with connect(options) as cn:
        row = cn.select_row('select id, name from foos where name = ?', 'vapor')
        row.sql().decode('id', int)
"""
import atexit
import logging
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import fields
from functools import wraps
from typing import Any, Self, TypeVar

import sqlalchemy as sa
from mysqlkit.exceptions import DbConnectionError, ValidationError
from mysqlkit.exceptions import is_retryable_error
from mysqlkit.options import DatabaseOptions
from mysqlkit.row import MySQLRow
from mysqlkit.sql import prepare_query
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool

from libb import load_options

__all__ = [
    'ConnectionWrapper',
    'connect',
    'check_connection',
    'create_url_from_options',
    'get_engine_for_options',
    'dispose_all_engines',
    'raw_column_data',
]

logger = logging.getLogger(__name__)

T = TypeVar('T')
_engine_registry: dict[str, Engine] = {}
_engine_registry_lock = threading.RLock()


def create_url_from_options(options: DatabaseOptions,
                            url_creator: Callable[..., sa.URL] = sa.URL.create) -> sa.URL:
    """Convert DatabaseOptions to SQLAlchemy URL.
    """
    query = {'charset': options.charset}
    if options.timeout:
        query['connect_timeout'] = str(options.timeout)

    return url_creator(
        drivername='mysql+pymysql',
        username=options.username,
        password=options.password,
        host=options.hostname,
        port=options.port,
        database=options.database,
        query=query
    )


def check_connection(func: Callable[..., T] | None = None, *, max_retries: int = 3,
                     retry_delay: float = 1, retry_errors: type | tuple[type, ...] | None = None,
                     retry_backoff: float = 1.5,
                     sleep_func: Callable[[float], None] = time.sleep) -> Callable[..., T]:
    """Connection retry decorator with backoff.

    Retries the wrapped call on connection errors. With the default error
    types, errors whose message does not look transient (see
    `is_retryable_error`) are raised immediately.

    Supports both @check_connection and @check_connection() syntax.
    """
    def decorator(f: Callable[..., T]) -> Callable[..., T]:
        @wraps(f)
        def inner(*args: Any, **kwargs: Any) -> T:
            error_types = retry_errors if retry_errors is not None else DbConnectionError

            tries = 0
            delay = retry_delay
            while tries < max_retries:
                try:
                    return f(*args, **kwargs)
                except error_types as err:
                    if retry_errors is None and not is_retryable_error(err):
                        raise
                    tries += 1
                    if tries >= max_retries:
                        logger.error(f'Maximum retries ({max_retries}) exceeded: {err}')
                        raise
                    logger.warning(f'Connection error (attempt {tries}/{max_retries}): {err}')
                    sleep_func(delay)
                    delay *= retry_backoff

        return inner

    if func is None:
        return decorator
    return decorator(func)


def get_engine_for_options(options: DatabaseOptions, use_pool: bool = False,
                           pool_size: int = 5, pool_recycle: int = 300,
                           pool_timeout: int = 30,
                           engine_factory: Callable[..., Engine] = sa.create_engine,
                           **kwargs: Any) -> Engine:
    """Get or create a SQLAlchemy engine for the given options.
    """
    key = f'{str(options)}_{use_pool}_{pool_size}_{pool_recycle}_{pool_timeout}'

    with _engine_registry_lock:
        if key in _engine_registry:
            logger.debug(f'Using existing engine for {options.hostname}/{options.database}')
            return _engine_registry[key]

        url = create_url_from_options(options)

        engine_kwargs: dict[str, Any] = {
            'echo': False,
            'connect_args': {'program_name': options.appname},
        }

        if not use_pool:
            engine_kwargs['poolclass'] = NullPool
        else:
            engine_kwargs['pool_size'] = pool_size
            engine_kwargs['pool_recycle'] = pool_recycle
            engine_kwargs['pool_timeout'] = pool_timeout
            engine_kwargs['max_overflow'] = 10
            engine_kwargs['pool_pre_ping'] = True
            engine_kwargs['pool_reset_on_return'] = 'rollback'

        engine_kwargs.update(kwargs)

        engine = engine_factory(url, **engine_kwargs)

        _engine_registry[key] = engine
        logger.debug(f'Created new engine for {options.hostname}/{options.database}')

        return engine


def dispose_all_engines() -> None:
    """Dispose all engines in the registry.
    """
    with _engine_registry_lock:
        for engine in list(_engine_registry.values()):
            engine.dispose()
        _engine_registry.clear()
        logger.debug('All database engines disposed')


atexit.register(dispose_all_engines)


@contextmanager
def raw_column_data(driver_connection: Any) -> Iterator[None]:
    """Make PyMySQL hand back undecoded column bytes inside the block.

    PyMySQL picks per-column converters while reading a result, so queries
    executed inside the block yield ``bytes`` (or None) for every column.
    """
    decoders = driver_connection.decoders
    use_unicode = driver_connection.use_unicode
    driver_connection.decoders = {}
    driver_connection.use_unicode = False
    try:
        yield
    finally:
        driver_connection.decoders = decoders
        driver_connection.use_unicode = use_unicode


class ConnectionWrapper:
    """Wraps a SQLAlchemy connection to a MySQL server

    This class provides a thin wrapper around SQLAlchemy connection objects that:
    1. Runs statements on the PyMySQL connection underneath
    2. Returns SELECT results as `MySQLRow` objects holding raw column bytes
    3. Tracks query execution counts and timing
    4. Supports context manager protocol for explicit resource management
    """

    def __init__(self, sa_connection: sa.engine.Connection | None = None,
                 options: DatabaseOptions | None = None) -> None:
        """Initialize a connection wrapper
        """
        self.sa_connection = sa_connection
        self.engine = sa_connection.engine if sa_connection else None
        self.options = options
        self.dbapi_connection = sa_connection.connection if sa_connection else None
        self.calls = 0
        self.time = 0
        self.in_transaction = False

    def __enter__(self) -> Self:
        """Support for context manager protocol
        """
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        """Return the connection to the pool when exiting the context manager
        """
        try:
            self.close()
            logger.debug('Closed connection via context manager')
        except Exception as e:
            logger.debug(f'Error closing connection in __exit__: {e}')

    @property
    def driver_connection(self) -> Any:
        """The PyMySQL connection object."""
        return self.dbapi_connection.driver_connection

    def cursor(self) -> Any:
        """Get a DB-API cursor, reconnecting if the connection was closed
        """
        if getattr(self.sa_connection, 'closed', False):
            self.sa_connection = self.engine.connect()
            self.dbapi_connection = self.sa_connection.connection

        return self.dbapi_connection.cursor()

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics
        """
        self.time += elapsed
        self.calls += 1

    def commit(self) -> None:
        self.dbapi_connection.commit()

    def rollback(self) -> None:
        self.dbapi_connection.rollback()

    def close(self) -> None:
        """Close the SQLAlchemy connection, committing first if needed
        """
        if getattr(self.sa_connection, 'closed', False):
            return

        if not self.in_transaction:
            self.commit()
        self.sa_connection.close()

        logger.debug(f'Connection closed: {self.calls} queries in {self.time:.2f}s '
                     f'(avg: {self.time/max(1,self.calls):.3f}s per query)')

    @contextmanager
    def transaction(self) -> Iterator[Self]:
        """Group statements into one transaction.

        Commits when the block exits normally and rolls back on error.
        """
        self.in_transaction = True
        try:
            yield self
            self.commit()
        except Exception:
            self.rollback()
            raise
        finally:
            self.in_transaction = False

    def _run(self, cursor: Any, sql: str, args: tuple) -> None:
        processed_sql, processed_args = prepare_query(sql, args)
        start = time.time()
        try:
            cursor.execute(processed_sql, processed_args or None)
        finally:
            self.addcall(time.time() - start)

    @check_connection
    def execute(self, sql: str, *args: Any) -> int:
        """Execute a SQL statement with the given parameters and return affected row count.
        """
        cursor = self.cursor()
        try:
            self._run(cursor, sql, args)
            rowcount = cursor.rowcount
            logger.debug(f'Executed statement affecting {rowcount} rows')
            if not self.in_transaction:
                self.commit()
            return rowcount
        except Exception:
            if not self.in_transaction:
                self.rollback()
            raise
        finally:
            cursor.close()

    @check_connection
    def select(self, sql: str, *args: Any) -> list[MySQLRow]:
        """Execute a query and return its rows with raw column data.

        Outside an explicit transaction the read is committed, so the next
        query sees a fresh snapshot and no metadata locks stay held.
        """
        cursor = self.cursor()
        try:
            with raw_column_data(self.driver_connection):
                self._run(cursor, sql, args)
            rows = MySQLRow.from_cursor(cursor)
            logger.debug(f'Select query returned {len(rows)} rows')
            if not self.in_transaction:
                self.commit()
            return rows
        finally:
            cursor.close()

    def select_row(self, sql: str, *args: Any) -> MySQLRow:
        """Execute a query and return its single row.

        Raises ValidationError if the query returns zero or multiple rows.
        """
        rows = self.select(sql, *args)
        if len(rows) != 1:
            raise ValidationError(f'Expected one row, returned {len(rows)}')
        return rows[0]


@load_options(cls=DatabaseOptions)
def connect(options: DatabaseOptions | dict[str, Any] | str,
            config: Any | None = None, **kw: Any) -> ConnectionWrapper:
    """Connect to a MySQL server using SQLAlchemy for connection management

    Args:
        options: Can be:
                - DatabaseOptions object
                - String name of an options section on ``config``
                - Dictionary of options
                - Options specified as keyword arguments
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        ConnectionWrapper object for connecting to the database
    """
    if isinstance(options, DatabaseOptions):
        for field in fields(options):
            kw.pop(field.name, None)
    else:
        options_func = load_options(cls=DatabaseOptions)(lambda o, c: o)
        options = options_func(options, config, **kw)

    engine = get_engine_for_options(options, use_pool=options.use_pool,
                                    pool_size=options.pool_max_connections,
                                    pool_recycle=options.pool_max_idle_time,
                                    pool_timeout=options.pool_wait_timeout)

    if options.check_connection:
        sa_connection = check_connection(engine.connect)()
    else:
        sa_connection = engine.connect()
    logger.debug(f'Connected to {options.hostname}:{options.port}/{options.database}')

    return ConnectionWrapper(sa_connection, options)
