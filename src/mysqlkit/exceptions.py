"""
MySQL adapter exception classes.
"""
import re

import pymysql
import sqlalchemy as sa

RETRYABLE_PATTERNS = [
    # SSL/TLS errors
    r'ssl',
    r'tls',
    # Connection drops
    r'connection.*(closed|reset|refused|lost|terminated|broken)',
    r'lost connection',
    r'server has gone away',
    r'broken pipe',
    # Timeouts
    r'timeout',
    r'timed out',
    # Network issues
    r"can't connect",
    r'could not connect',
    r'no route to host',
    r'network.*(unreachable|error)',
    r'host.*(unreachable|down)',
    # Server unavailable
    r'too many connections',
    r'server shutdown',
    r'connection pool',
]

_RETRYABLE_REGEX = re.compile('|'.join(RETRYABLE_PATTERNS), re.IGNORECASE)


def is_retryable_error(exc: BaseException) -> bool:
    """Check if an exception represents a transient error worth retrying.

    Returns True for errors that are likely transient and may succeed on retry:
    - SSL/TLS errors
    - Connection drops ("server has gone away", "lost connection")
    - Timeouts
    - Network issues
    - Server temporarily unavailable

    Returns False for errors that will definitely fail again, such as syntax
    errors, access denied, or constraint violations.

    :param exc: The exception to check.
    :returns: True if the error is likely transient and worth retrying.
    """
    error_msg = str(exc).lower()
    return bool(_RETRYABLE_REGEX.search(error_msg))


class DatabaseError(Exception):
    """Base class for all mysqlkit errors.
    """


class ConnectionFailure(DatabaseError):
    """Error establishing or maintaining database connection.
    """


class QueryError(DatabaseError):
    """Error in query syntax or execution.
    """


class TypeConversionError(DatabaseError):
    """Error converting raw column data to a Python type.
    """


class IntegrityViolationError(DatabaseError):
    """Database constraint violation error.
    """


class ValidationError(DatabaseError):
    """Error in input validation or result shape.
    """


class MissingColumn(DatabaseError, LookupError):
    """Requested column does not exist in the row.
    """

    def __init__(self, column: str) -> None:
        super().__init__(f'Column {column!r} not found in row')
        self.column = column


DbConnectionError = (
    pymysql.err.OperationalError,
    pymysql.err.InterfaceError,
    sa.exc.OperationalError,
    sa.exc.InterfaceError,
    ConnectionFailure,
    )

IntegrityError = (
    pymysql.err.IntegrityError,
    sa.exc.IntegrityError,
    IntegrityViolationError,
    )

ProgrammingError = (
    pymysql.err.ProgrammingError,
    pymysql.err.DatabaseError,
    sa.exc.ProgrammingError,
    QueryError,
    )

OperationalError = (
    pymysql.err.OperationalError,
    sa.exc.OperationalError,
    )
