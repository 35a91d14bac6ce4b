"""
Tests for MySQLSQLRow, the SQLRow adapter over MySQLRow.
"""
import dataclasses

import pytest
from mysqlkit import MissingColumn, MySQLDataDecoder, SQLRow, TypeConversionError
from mysqlkit.row import MySQLSQLRow
from pymysql.constants import FIELD_TYPE


def test_sql_returns_generic_row(vapor_row):
    """Test that MySQLRow.sql() builds an SQLRow adapter with a default decoder"""
    sql_row = vapor_row.sql()
    assert isinstance(sql_row, SQLRow)
    assert isinstance(sql_row, MySQLSQLRow)
    assert sql_row.row is vapor_row
    assert isinstance(sql_row.decoder, MySQLDataDecoder)


def test_sql_keeps_supplied_decoder(vapor_row):
    decoder = MySQLDataDecoder(encoding='latin-1')
    assert vapor_row.sql(decoder=decoder).decoder is decoder


def test_vapor_scenario(vapor_row):
    """Test the full read surface on a row inserted as (-1, 'vapor')"""
    sql_row = vapor_row.sql()

    assert sql_row.all_columns == ['id', 'name']
    assert sql_row.contains('id') is True
    assert sql_row.contains('missing') is False
    assert sql_row.decode_nil('id') is False
    assert sql_row.decode('id', int) == -1
    assert sql_row.decode('name', str) == 'vapor'
    assert sql_row.decode_nil('missing') is True

    with pytest.raises(MissingColumn) as exc_info:
        sql_row.decode('missing', str)
    assert exc_info.value.column == 'missing'


def test_missing_column_is_nil_but_decode_fails(vapor_row):
    """decode_nil treats an absent column as NULL while decode raises.

    The two code paths disagree on purpose; this pins both behaviors.
    """
    sql_row = vapor_row.sql()
    assert sql_row.decode_nil('nope') is True
    for type_ in (int, str, bytes, int | None):
        with pytest.raises(MissingColumn):
            sql_row.decode('nope', type_)


def test_decode_nil_on_null_column(null_row):
    sql_row = null_row.sql()
    assert sql_row.decode_nil('nickname') is True
    assert sql_row.decode_nil('id') is False
    assert sql_row.decode('nickname', str | None) is None


def test_decode_null_as_required_type_fails(null_row):
    with pytest.raises(TypeConversionError):
        null_row.sql().decode('nickname', str)


def test_contains_is_exact_and_case_sensitive(vapor_row):
    sql_row = vapor_row.sql()
    assert 'id' in sql_row
    assert 'ID' not in sql_row
    assert sql_row.contains('Name') is False
    assert sql_row.contains('nam') is False


def test_contains_agrees_with_all_columns(vapor_row):
    sql_row = vapor_row.sql()
    for name in ('id', 'name', 'missing', ''):
        assert sql_row.contains(name) == (name in sql_row.all_columns)


def test_empty_row(make_row):
    sql_row = make_row().sql()
    assert sql_row.all_columns == []
    assert sql_row.contains('id') is False
    assert sql_row.decode_nil('id') is True


def test_duplicate_column_names_use_first(make_row):
    """Test that lookup resolves to the first column in projection order"""
    row = make_row(
        ('id', FIELD_TYPE.LONG, b'1'),
        ('id', FIELD_TYPE.LONG, b'2'),
    )
    sql_row = row.sql()
    assert sql_row.all_columns == ['id', 'id']
    assert sql_row.decode('id', int) == 1


def test_reads_are_repeatable(vapor_row):
    sql_row = vapor_row.sql()
    first = (sql_row.all_columns, sql_row.contains('id'), sql_row.decode_nil('name'),
             sql_row.decode('id', int), sql_row.decode('name', str))
    second = (sql_row.all_columns, sql_row.contains('id'), sql_row.decode_nil('name'),
              sql_row.decode('id', int), sql_row.decode('name', str))
    assert first == second


def test_decode_delegates_to_decoder(vapor_row, recording_decoder):
    """Test that decode hands the raw column data and requested type to the policy"""
    decoder = recording_decoder(result='decoded')
    sql_row = vapor_row.sql(decoder=decoder)

    assert sql_row.decode('name', bytes) == 'decoded'

    assert len(decoder.calls) == 1
    type_, data = decoder.calls[0]
    assert type_ is bytes
    assert data.buffer == b'vapor'
    assert data.type_code == FIELD_TYPE.VAR_STRING
    assert data.column.name == 'name'


def test_decoder_not_consulted_for_missing_column(vapor_row, recording_decoder):
    decoder = recording_decoder(result='decoded')
    sql_row = vapor_row.sql(decoder=decoder)

    with pytest.raises(MissingColumn):
        sql_row.decode('missing', str)
    assert sql_row.decode_nil('name') is False
    assert decoder.calls == []


def test_decoder_errors_propagate_unchanged(vapor_row, recording_decoder):
    error = ValueError('bad digits')
    sql_row = vapor_row.sql(decoder=recording_decoder(error=error))

    with pytest.raises(ValueError) as exc_info:
        sql_row.decode('id', int)
    assert exc_info.value is error


def test_conversion_failure_from_default_decoder(vapor_row):
    with pytest.raises(TypeConversionError):
        vapor_row.sql().decode('name', int)


@dataclasses.dataclass
class Foo:
    id: int
    name: str
    nickname: str | None = None


def test_decode_model(vapor_row):
    """Test that optional fields for absent columns become None"""
    foo = vapor_row.sql().decode_model(Foo)
    assert foo == Foo(id=-1, name='vapor', nickname=None)


def test_decode_model_with_prefix(make_row):
    row = make_row(
        ('foo_id', FIELD_TYPE.LONG, b'3'),
        ('foo_name', FIELD_TYPE.VAR_STRING, b'kit'),
        ('foo_nickname', FIELD_TYPE.VAR_STRING, b'k'),
    )
    assert row.sql().decode_model(Foo, prefix='foo_') == Foo(id=3, name='kit', nickname='k')


def test_decode_model_missing_required_column(null_row):
    with pytest.raises(MissingColumn) as exc_info:
        null_row.sql().decode_model(Foo)
    assert exc_info.value.column == 'name'


def test_decode_model_requires_dataclass(vapor_row):
    with pytest.raises(TypeError):
        vapor_row.sql().decode_model(dict)


if __name__ == '__main__':
    __import__('pytest').main([__file__])
