import pathlib
import site

import pytest
from mysqlkit.connection import dispose_all_engines

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture(scope='session', autouse=True)
def dispose_engines():
    """Release pooled engines once the session is done."""
    yield
    dispose_all_engines()


pytest_plugins = [
    'tests.fixtures.rows',
    'tests.fixtures.mocks',
    'tests.fixtures.mysql',
]
