"""MySQL result rows and their SQLRow adapter."""
import logging
from typing import Any, Self, TypeVar

from mysqlkit.decoder import MySQLDataDecoder
from mysqlkit.exceptions import MissingColumn
from mysqlkit.sqlrow import SQLRow
from mysqlkit.types import ColumnDefinition, MySQLData
from mysqlkit.types import columns_from_cursor_description

logger = logging.getLogger(__name__)

T = TypeVar('T')


class MySQLRow:
    """One materialized MySQL result row.

    Holds the result set's column definitions and this row's raw
    text-protocol values (bytes, or None for SQL NULL).
    """

    def __init__(self, column_definitions: list[ColumnDefinition],
                 values: tuple[bytes | None, ...]) -> None:
        if len(column_definitions) != len(values):
            raise ValueError(f'Row has {len(values)} values for '
                             f'{len(column_definitions)} column definitions')
        self.column_definitions = column_definitions
        self.values = tuple(values)

    @classmethod
    def from_cursor(cls, cursor: Any) -> list[Self]:
        """Materialize all remaining rows of a cursor."""
        columns = columns_from_cursor_description(cursor)
        rows = [cls(columns, values) for values in cursor.fetchall() or ()]
        logger.debug(f'Materialized {len(rows)} rows with {len(columns)} columns')
        return rows

    def column(self, name: str) -> MySQLData | None:
        """Return raw data for the first column named ``name``, or None."""
        for col, value in zip(self.column_definitions, self.values):
            if col.name == name:
                return MySQLData(type_code=col.type_code, buffer=value, column=col)
        return None

    def __getitem__(self, name: str) -> MySQLData:
        data = self.column(name)
        if data is None:
            raise MissingColumn(name)
        return data

    def __len__(self) -> int:
        return len(self.values)

    def __repr__(self) -> str:
        pairs = ', '.join(f'{col.name}={value!r}'
                          for col, value in zip(self.column_definitions, self.values))
        return f'MySQLRow({pairs})'

    def sql(self, decoder: MySQLDataDecoder | None = None) -> SQLRow:
        """View this row through the generic SQLRow contract."""
        return MySQLSQLRow(self, decoder if decoder is not None else MySQLDataDecoder())


class MySQLSQLRow(SQLRow):
    """SQLRow over a MySQLRow, decoding through a pluggable policy."""

    def __init__(self, row: MySQLRow, decoder: MySQLDataDecoder) -> None:
        self.row = row
        self.decoder = decoder

    @property
    def all_columns(self) -> list[str]:
        return [col.name for col in self.row.column_definitions]

    def contains(self, column: str) -> bool:
        return any(col.name == column for col in self.row.column_definitions)

    def decode_nil(self, column: str) -> bool:
        # a missing column reads as NULL here, while decode() raises
        data = self.row.column(column)
        if data is None:
            return True
        return data.is_null

    def decode(self, column: str, type_: type[T]) -> T:
        data = self.row.column(column)
        if data is None:
            raise MissingColumn(column)
        return self.decoder.decode(type_, data)

    def __repr__(self) -> str:
        return f'MySQLSQLRow({self.row!r})'
