"""
In-memory MySQL rows for unit tests.

Usage:
    def test_decode(vapor_row):
        assert vapor_row.sql().decode('id', int) == -1

    def test_custom(make_row):
        row = make_row(('id', FIELD_TYPE.LONG, b'1'))
"""
import pytest
from mysqlkit.row import MySQLRow
from mysqlkit.types import ColumnDefinition, resolve_type
from pymysql.constants import FIELD_TYPE


def _make_row(*columns):
    """
    Build a MySQLRow from ``(name, type_code, raw_value)`` triples.
    """
    definitions = [
        ColumnDefinition(name=name, type_code=type_code,
                         python_type=resolve_type(type_code))
        for name, type_code, _ in columns
    ]
    return MySQLRow(definitions, tuple(value for _, _, value in columns))


class RecordingDecoder:
    """Fake decoding policy that records calls and returns a canned value."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def decode(self, type_, data):
        self.calls.append((type_, data))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def make_row():
    """
    Factory fixture building rows from ``(name, type_code, raw_value)`` triples.
    """
    return _make_row


@pytest.fixture
def vapor_row():
    """Row from ``select * from foos`` after inserting (-1, 'vapor')."""
    return _make_row(
        ('id', FIELD_TYPE.LONG, b'-1'),
        ('name', FIELD_TYPE.VAR_STRING, b'vapor'),
    )


@pytest.fixture
def null_row():
    """Row with a NULL column next to a populated one."""
    return _make_row(
        ('id', FIELD_TYPE.LONG, b'7'),
        ('nickname', FIELD_TYPE.VAR_STRING, None),
    )


@pytest.fixture
def recording_decoder():
    return RecordingDecoder
