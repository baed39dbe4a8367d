import pathlib
import site

import pytest
from anonrows.config.type_mapping import ColumnTypeConfig

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture(autouse=True)
def isolated_column_types(monkeypatch):
    """Keep column type files on the test machine out of every test."""
    monkeypatch.setattr(ColumnTypeConfig, '_instance', ColumnTypeConfig(search_defaults=False))
    yield


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.sqlite',
]
