"""
Default decoding policy for MySQL text-protocol column data.

MySQLDataDecoder turns the raw bytes of a column into an instance of a
requested Python type. It is the strategy handed to a row adapter by
``MySQLRow.sql(decoder=...)``; any object with a compatible
``decode(type_, data)`` method can stand in for it.
"""
import datetime
import enum
import json
import logging
import re
import types
import uuid
from collections.abc import Callable
from decimal import Decimal
from functools import partial
from typing import Any, Union, get_args, get_origin

from dateutil.parser import isoparse, isoparser
from mysqlkit.exceptions import TypeConversionError
from mysqlkit.types import MySQLData, resolve_type

logger = logging.getLogger(__name__)

Converter = Callable[[MySQLData], Any]

_ZERO_DATE = '0000-00-00'
_TIMEDELTA = re.compile(r'^(-)?(\d+):(\d{1,2}):(\d{1,2})(?:\.(\d{1,6}))?$')
_TRUE_STRINGS = {'true', 't', 'yes', 'y'}
_FALSE_STRINGS = {'false', 'f', 'no', 'n'}


def _type_name(type_: Any) -> str:
    return getattr(type_, '__name__', None) or repr(type_)


class MySQLDataDecoder:
    """Convert MySQLData into Python values.

    Args:
        encoding: Character set used to decode text columns
        converters: Extra ``{type: func(data)}`` conversions; these take
            precedence over the built-in ones
    """

    def __init__(self, encoding: str = 'utf-8',
                 converters: dict[Any, Converter] | None = None) -> None:
        self.encoding = encoding
        self.converters: dict[Any, Converter] = dict(converters or {})
        self._builtin: dict[Any, Converter] = {
            str: self._decode_str,
            bytes: self._decode_bytes,
            int: self._decode_int,
            bool: self._decode_bool,
            float: self._decode_float,
            Decimal: self._decode_decimal,
            datetime.datetime: self._decode_datetime,
            datetime.date: self._decode_date,
            datetime.time: self._decode_time,
            datetime.timedelta: self._decode_timedelta,
            uuid.UUID: self._decode_uuid,
            dict: self._decode_json,
            list: self._decode_json,
        }

    def register(self, type_: Any, func: Converter) -> None:
        """Register a custom conversion for ``type_``."""
        logger.debug(f'Registered decoder for {_type_name(type_)}')
        self.converters[type_] = func

    def decode(self, type_: Any, data: MySQLData) -> Any:
        """Decode ``data`` into an instance of ``type_``.

        Raises TypeConversionError when the data cannot be represented as
        ``type_``, including SQL NULL requested as a non-optional type.
        """
        if type_ is Any or type_ is object:
            if data.is_null:
                return None
            return self.decode(self._infer_type(data), data)

        origin = get_origin(type_)
        if origin in {Union, types.UnionType}:
            return self._decode_union(type_, data)
        if origin in {list, dict}:
            type_ = origin

        if data.is_null:
            raise TypeConversionError(
                f'Cannot decode NULL{self._describe(data)} as {_type_name(type_)}')

        converter = self.converters.get(type_) or self._builtin.get(type_)
        if converter is None and isinstance(type_, type) and issubclass(type_, enum.Enum):
            converter = partial(self._decode_enum, type_)
        if converter is None:
            raise TypeConversionError(f'No conversion from MySQL data to {_type_name(type_)}')

        try:
            return converter(data)
        except TypeConversionError:
            raise
        except (ValueError, TypeError, ArithmeticError) as err:
            raise TypeConversionError(
                f'Cannot decode {data.buffer!r}{self._describe(data)} '
                f'as {_type_name(type_)}: {err}') from err

    def _decode_union(self, type_: Any, data: MySQLData) -> Any:
        args = get_args(type_)
        members = [a for a in args if a is not type(None)]
        if data.is_null and len(members) < len(args):
            return None
        if len(members) != 1:
            raise TypeConversionError(f'Cannot decode into ambiguous union {type_!r}')
        return self.decode(members[0], data)

    def _infer_type(self, data: MySQLData) -> type:
        if data.column is not None and data.column.python_type is not None:
            return data.column.python_type
        return resolve_type(data.type_code)

    @staticmethod
    def _describe(data: MySQLData) -> str:
        return f' in column {data.column.name!r}' if data.column is not None else ''

    def _text(self, data: MySQLData) -> str:
        return data.buffer.decode(self.encoding)

    def _decode_str(self, data: MySQLData) -> str:
        return self._text(data)

    def _decode_bytes(self, data: MySQLData) -> bytes:
        return bytes(data.buffer)

    def _decode_int(self, data: MySQLData) -> int:
        if data.is_binary:
            return int.from_bytes(data.buffer, 'big')
        return int(self._text(data))

    def _decode_bool(self, data: MySQLData) -> bool:
        if data.is_binary:
            return int.from_bytes(data.buffer, 'big') != 0
        text = self._text(data).strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        return int(text) != 0

    def _decode_float(self, data: MySQLData) -> float:
        return float(self._text(data))

    def _decode_decimal(self, data: MySQLData) -> Decimal:
        return Decimal(self._text(data))

    def _temporal_text(self, data: MySQLData) -> str:
        text = self._text(data)
        if text.startswith(_ZERO_DATE):
            raise TypeConversionError(f'MySQL zero date {text!r}{self._describe(data)} has no Python value')
        return text

    def _decode_datetime(self, data: MySQLData) -> datetime.datetime:
        return isoparse(self._temporal_text(data))

    def _decode_date(self, data: MySQLData) -> datetime.date:
        return isoparse(self._temporal_text(data)).date()

    def _decode_time(self, data: MySQLData) -> datetime.time:
        return isoparser().parse_isotime(self._text(data))

    def _decode_timedelta(self, data: MySQLData) -> datetime.timedelta:
        text = self._text(data)
        match = _TIMEDELTA.match(text)
        if not match:
            raise ValueError(f'not a MySQL TIME value: {text!r}')
        sign, hours, minutes, seconds, fraction = match.groups()
        delta = datetime.timedelta(
            hours=int(hours),
            minutes=int(minutes),
            seconds=int(seconds),
            microseconds=int((fraction or '0').ljust(6, '0')),
        )
        return -delta if sign else delta

    def _decode_uuid(self, data: MySQLData) -> uuid.UUID:
        if len(data.buffer) == 16:
            return uuid.UUID(bytes=bytes(data.buffer))
        return uuid.UUID(self._text(data))

    def _decode_json(self, data: MySQLData) -> Any:
        return json.loads(self._text(data))

    def _decode_enum(self, enum_type: type[enum.Enum], data: MySQLData) -> enum.Enum:
        text = self._text(data)
        for member in enum_type:
            if str(member.value) == text:
                return member
        raise ValueError(f'{text!r} is not a valid {enum_type.__name__}')
