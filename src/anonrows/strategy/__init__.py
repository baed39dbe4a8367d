"""
Strategy factory for dialect-specific column metadata.
"""
from functools import lru_cache

from anonrows.strategy.base import _STRATEGY_REGISTRY
from anonrows.strategy.base import ColumnType as ColumnType
from anonrows.strategy.base import ColumnTypeStrategy as ColumnTypeStrategy
from anonrows.strategy.base import register_strategy as register_strategy
from anonrows.strategy.mysql import MySQLStrategy as MySQLStrategy
from anonrows.strategy.postgres import PostgresStrategy as PostgresStrategy
from anonrows.strategy.sqlite import SQLiteStrategy as SQLiteStrategy
from anonrows.utils import get_dialect_name_or_none


def _validate_dialect(dialect: str) -> None:
    """Raise ValueError if dialect is not registered."""
    if dialect not in _STRATEGY_REGISTRY:
        available = list(_STRATEGY_REGISTRY.keys())
        raise ValueError(f'Unsupported dialect: {dialect}. Available: {available}')


@lru_cache(maxsize=8)
def _get_strategy(dialect: str) -> ColumnTypeStrategy:
    """Get cached strategy instance for a dialect."""
    _validate_dialect(dialect)
    return _STRATEGY_REGISTRY[dialect]()


def get_strategy(dialect: str) -> ColumnTypeStrategy:
    """Get strategy instance for a dialect name.
    """
    return _get_strategy(dialect)


def get_cursor_strategy(cursor, dialect: str | None = None) -> ColumnTypeStrategy:
    """Get strategy for a cursor, detecting the dialect when not given.

    Cursors from drivers without a registered strategy get the generic
    strategy, under which every column passes through unconverted.
    """
    if dialect is None:
        dialect = get_dialect_name_or_none(cursor)
    if dialect is None or not is_supported_dialect(dialect):
        return _GENERIC_STRATEGY
    return _get_strategy(dialect)


def get_available_dialects() -> list[str]:
    """Return list of registered dialect names."""
    return list(_STRATEGY_REGISTRY.keys())


def is_supported_dialect(dialect: str) -> bool:
    """Check if a dialect is supported."""
    return dialect in _STRATEGY_REGISTRY


_GENERIC_STRATEGY = ColumnTypeStrategy()
