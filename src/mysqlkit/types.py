"""
Column metadata and raw column data for MySQL result rows.

This module provides:
- ColumnDefinition: Column metadata from cursor descriptions
- MySQLData: Raw text-protocol bytes for one column of one row
- resolve_type: Resolve MySQL field type codes to Python types
"""
import datetime
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Self

from pymysql.constants import FIELD_TYPE

if TYPE_CHECKING:
    from mysqlkit.decoder import MySQLDataDecoder

# Type Resolution - MySQL field type codes -> Python types

mysql_types: dict[int, type] = {}

for v in [FIELD_TYPE.TINY, FIELD_TYPE.SHORT, FIELD_TYPE.LONG, FIELD_TYPE.LONGLONG,
          FIELD_TYPE.INT24, FIELD_TYPE.YEAR, FIELD_TYPE.BIT]:
    mysql_types[v] = int

for v in [FIELD_TYPE.FLOAT, FIELD_TYPE.DOUBLE]:
    mysql_types[v] = float

for v in [FIELD_TYPE.DECIMAL, FIELD_TYPE.NEWDECIMAL]:
    mysql_types[v] = Decimal

for v in [FIELD_TYPE.VARCHAR, FIELD_TYPE.VAR_STRING, FIELD_TYPE.STRING,
          FIELD_TYPE.ENUM, FIELD_TYPE.SET]:
    mysql_types[v] = str

for v in [FIELD_TYPE.TINY_BLOB, FIELD_TYPE.MEDIUM_BLOB, FIELD_TYPE.LONG_BLOB,
          FIELD_TYPE.BLOB, FIELD_TYPE.GEOMETRY]:
    mysql_types[v] = bytes

for v in [FIELD_TYPE.DATE, FIELD_TYPE.NEWDATE]:
    mysql_types[v] = datetime.date

for v in [FIELD_TYPE.DATETIME, FIELD_TYPE.TIMESTAMP]:
    mysql_types[v] = datetime.datetime

mysql_types[FIELD_TYPE.TIME] = datetime.timedelta
mysql_types[FIELD_TYPE.JSON] = dict


def resolve_type(type_code: Any) -> type:
    """Resolve a MySQL field type code to a Python type.

    Unknown or missing codes default to str.

    MySQL reports TEXT columns with the BLOB type codes, and the DB-API
    description carries no charset, so TEXT columns resolve to bytes.
    Request str explicitly to decode them as text.

    Args:
        type_code: MySQL field type code (``pymysql.constants.FIELD_TYPE``)

    Returns
        Python type
    """
    return mysql_types.get(type_code, str)


# Column - Metadata from cursor descriptions

class ColumnDefinition:
    """MySQL result-set column metadata."""

    def __init__(self,
                 name: str,
                 type_code: Any,
                 python_type: type | None = None,
                 display_size: int | None = None,
                 internal_size: int | None = None,
                 precision: int | None = None,
                 scale: int | None = None,
                 nullable: bool | None = None):
        self.name = name
        self.type_code = type_code
        self.python_type = python_type
        self.display_size = display_size
        self.internal_size = internal_size
        self.precision = precision
        self.scale = scale
        self.nullable = nullable

    @classmethod
    def from_cursor_description(cls, description_item: Any) -> Self:
        """Create a ColumnDefinition from a DB-API cursor description item.

        PyMySQL describes each column as
        ``(name, type_code, display_size, internal_size, precision, scale, null_ok)``.
        """
        name = description_item[0]
        type_code = description_item[1] if len(description_item) > 1 else None
        extra = list(description_item[2:7]) + [None] * (5 - len(description_item[2:7]))
        display_size, internal_size, precision, scale, null_ok = extra
        return cls(
            name=name,
            type_code=type_code,
            python_type=resolve_type(type_code),
            display_size=display_size,
            internal_size=internal_size,
            precision=precision,
            scale=scale,
            nullable=None if null_ok is None else bool(null_ok),
        )

    def __repr__(self) -> str:
        return (f'ColumnDefinition(name={self.name!r}, type_code={self.type_code!r}, '
                f'python_type={self.python_type.__name__ if self.python_type else None})')

    @staticmethod
    def get_names(columns: list[Self]) -> list[str]:
        return [col.name for col in columns]

    @staticmethod
    def get_column_by_name(columns: list[Self], name: str) -> Self | None:
        for col in columns:
            if col.name == name:
                return col
        return None


def columns_from_cursor_description(cursor: Any) -> list[ColumnDefinition]:
    """Create ColumnDefinition objects from cursor description."""
    if cursor.description is None:
        return []
    return [ColumnDefinition.from_cursor_description(desc) for desc in cursor.description]


# Raw column data

@dataclass(frozen=True, slots=True)
class MySQLData:
    """Raw text-protocol data for a single column.

    ``buffer`` is None when the server sent SQL NULL.
    """
    type_code: Any
    buffer: bytes | None
    column: ColumnDefinition | None = None

    @property
    def is_null(self) -> bool:
        return self.buffer is None

    @property
    def is_binary(self) -> bool:
        """True for BIT columns, whose bytes are a packed integer rather than text."""
        return self.type_code == FIELD_TYPE.BIT

    def decode(self, type_: Any, decoder: 'MySQLDataDecoder | None' = None) -> Any:
        """Decode this value with ``decoder`` (a default decoder when omitted)."""
        if decoder is None:
            from mysqlkit.decoder import MySQLDataDecoder
            decoder = MySQLDataDecoder()
        return decoder.decode(type_, self)
