"""
MySQL rows through a database-agnostic row interface.

Query results come back as `MySQLRow` objects holding raw column bytes;
`MySQLRow.sql()` presents one through the generic `SQLRow` contract:

    row = cn.select_row('select id, name from foos where name = ?', 'vapor')
    sql_row = row.sql()
    sql_row.all_columns            # ['id', 'name']
    sql_row.decode('id', int)      # -1
    sql_row.decode_nil('missing')  # True
"""
__version__ = '0.1.0'

from mysqlkit.connection import ConnectionWrapper, connect
from mysqlkit.decoder import MySQLDataDecoder
from mysqlkit.exceptions import ConnectionFailure, DatabaseError, DbConnectionError
from mysqlkit.exceptions import IntegrityError, IntegrityViolationError
from mysqlkit.exceptions import MissingColumn, OperationalError, ProgrammingError
from mysqlkit.exceptions import QueryError, TypeConversionError, ValidationError
from mysqlkit.options import DatabaseOptions
from mysqlkit.row import MySQLRow, MySQLSQLRow
from mysqlkit.sqlrow import SQLRow
from mysqlkit.types import ColumnDefinition, MySQLData

__all__ = [
    'connect',
    'ConnectionWrapper',
    'DatabaseOptions',
    'SQLRow',
    'MySQLRow',
    'MySQLSQLRow',
    'MySQLData',
    'MySQLDataDecoder',
    'ColumnDefinition',
    'MissingColumn',
    'TypeConversionError',
    'DatabaseError',
    'ConnectionFailure',
    'QueryError',
    'ValidationError',
    'IntegrityViolationError',
    'DbConnectionError',
    'IntegrityError',
    'ProgrammingError',
    'OperationalError',
]
