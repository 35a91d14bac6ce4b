"""
Database-agnostic row access.

SQLRow is the capability contract consumed by generic row-handling code:
list the columns, check whether a column exists, check whether it holds
NULL, and decode it into a requested type. Backends implement the four
abstract members; everything else here is built on top of them.
"""
import dataclasses
import types
import typing
from abc import ABC, abstractmethod
from typing import Any, TypeVar

T = TypeVar('T')


def _is_optional(type_: Any) -> bool:
    return (typing.get_origin(type_) in {typing.Union, types.UnionType}
            and type(None) in typing.get_args(type_))


class SQLRow(ABC):
    """Generic read-only view over one result row."""

    @property
    @abstractmethod
    def all_columns(self) -> list[str]:
        """Column names in result-set order."""

    @abstractmethod
    def contains(self, column: str) -> bool:
        """Return True if the row has a column named ``column``."""

    @abstractmethod
    def decode_nil(self, column: str) -> bool:
        """Return True if ``column`` should be treated as SQL NULL."""

    @abstractmethod
    def decode(self, column: str, type_: type[T]) -> T:
        """Decode ``column`` into an instance of ``type_``."""

    def __contains__(self, column: str) -> bool:
        return self.contains(column)

    def decode_model(self, model: type[T], prefix: str = '') -> T:
        """Build a dataclass instance from the row's columns.

        Each field reads the column ``prefix + field.name``. Optional fields
        (``X | None``) become None when the column is NULL or absent; every
        other field goes through ``decode`` and so fails on a missing column.
        """
        if not (isinstance(model, type) and dataclasses.is_dataclass(model)):
            raise TypeError(f'decode_model expects a dataclass type, got {model!r}')

        hints = typing.get_type_hints(model)
        values = {}
        for field in dataclasses.fields(model):
            if not field.init:
                continue
            column = f'{prefix}{field.name}'
            type_ = hints.get(field.name, Any)
            if _is_optional(type_) and self.decode_nil(column):
                values[field.name] = None
                continue
            values[field.name] = self.decode(column, type_)
        return model(**values)
