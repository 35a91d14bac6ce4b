import importlib

import pytest

# All modules in dependency order
MODULES = [
    # Independent modules (no internal deps)
    'mysqlkit.exceptions',
    'mysqlkit.sql',
    'mysqlkit.sqlrow',

    # Types, decoding and options
    'mysqlkit.types',
    'mysqlkit.decoder',
    'mysqlkit.options',

    # Rows and connection
    'mysqlkit.row',
    'mysqlkit.connection',

    # Main package
    'mysqlkit',
]


@pytest.mark.parametrize('module', MODULES)
def test_module_imports(module):
    """Test that each module imports without circular dependencies"""
    importlib.import_module(module)


def test_row_layer_does_not_import_connection():
    """The row adapter must stay usable without the connection layer"""
    import mysqlkit.row
    import mysqlkit.sqlrow

    assert not hasattr(mysqlkit.row, 'ConnectionWrapper')
    assert not hasattr(mysqlkit.sqlrow, 'MySQLRow')


if __name__ == '__main__':
    __import__('pytest').main([__file__])
