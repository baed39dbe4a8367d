"""Low-level connection utilities with no internal dependencies.

These utilities work with cursors, raw DBAPI connections and SQLAlchemy
connections or engines, and import nothing from other anonrows modules.
"""
import logging
from typing import Any

logger = logging.getLogger(__name__)

# Driver module fragments -> dialect name
_DRIVER_DIALECTS = (
    ('psycopg', 'postgresql'),
    ('sqlite3', 'sqlite'),
    ('pymysql', 'mysql'),
    ('MySQLdb', 'mysql'),
    ('mysql.connector', 'mysql'),
)


def get_dialect_name(obj: Any) -> str:
    """Get dialect name for a cursor, connection or engine.

    Raises
        AttributeError: If dialect cannot be determined
    """
    if hasattr(obj, 'dialect'):
        dialect = obj.dialect
        if isinstance(dialect, str):
            return dialect.lower()
        return str(dialect.name).lower()

    if hasattr(obj, 'engine') and hasattr(obj.engine, 'dialect'):
        return str(obj.engine.dialect.name).lower()

    if hasattr(obj, 'dbapi_connection'):
        return get_dialect_name(obj.dbapi_connection)

    type_name = f'{type(obj).__module__}.{type(obj).__name__}'
    for fragment, dialect in _DRIVER_DIALECTS:
        if fragment in type_name:
            return dialect

    raise AttributeError(f'Cannot determine dialect for {type(obj)}')


def get_dialect_name_or_none(obj: Any) -> str | None:
    """Like get_dialect_name, returning None instead of raising."""
    try:
        return get_dialect_name(obj)
    except AttributeError:
        logger.debug(f'No dialect detected for {type(obj)}')
        return None
