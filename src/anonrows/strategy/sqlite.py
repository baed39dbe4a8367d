"""
SQLite-specific column metadata.

sqlite3 always reports type_code as None. The declared type can still be
carried by the column alias using the PEP 249 / sqlite3 "name [TYPE]"
convention:

    SELECT created AS "created [DATETIME]", payload AS "payload [JSON]" FROM t

The bracketed part is removed from the column name and used as the type.
This only works when the connection is opened without
sqlite3.PARSE_COLNAMES, which strips the brackets itself. Columns without an
alias get their type from ColumnTypeConfig, or stay untyped.
"""
import logging
import re
from typing import Any

from anonrows.adapters.type_conversion import ScanShape
from anonrows.strategy.base import ColumnTypeStrategy, register_strategy

logger = logging.getLogger(__name__)

_DECLARED_TYPE = re.compile(r'(?P<name>.*?)\s*\[(?P<type>[^\]]+)\]\s*')


def split_declared_type(name: str) -> tuple[str, str | None]:
    """Split 'created [DATETIME]' into ('created', 'DATETIME').

    >>> split_declared_type('created [DATETIME]')
    ('created', 'DATETIME')
    >>> split_declared_type('id')
    ('id', None)
    """
    match = _DECLARED_TYPE.fullmatch(name)
    if match is None:
        return name, None
    return match.group('name'), match.group('type')


@register_strategy('sqlite')
class SQLiteStrategy(ColumnTypeStrategy):
    """SQLite column metadata from declared type aliases.
    """

    dialect_name = 'sqlite'

    TYPE_ALIASES = {
        'INTEGER': 'BIGINT',
        'REAL': 'DOUBLE',
        'NUMERIC': 'DECIMAL',
        'BOOL': 'BOOLEAN',
        }

    SCAN_SHAPES = {
        'BIGINT': ScanShape.INT64,
        'INT': ScanShape.INT64,
        'SMALLINT': ScanShape.INT64,
        'TINYINT': ScanShape.INT64,
        'DOUBLE': ScanShape.FLOAT64,
        'FLOAT': ScanShape.FLOAT64,
        'BOOLEAN': ScanShape.BOOL,
        'DATE': ScanShape.TIME,
        'DATETIME': ScanShape.TIME,
        'TIMESTAMP': ScanShape.TIME,
        'DECIMAL': ScanShape.STRING,
        'TEXT': ScanShape.STRING,
        'VARCHAR': ScanShape.STRING,
        'JSON': ScanShape.STRING,
        'BLOB': ScanShape.STRING,
        }

    def column_name(self, item: Any) -> str:
        return split_declared_type(super().column_name(item))[0]

    def database_type_name(self, item: Any) -> str:
        """Declared type from the column alias, '' when absent."""
        _, declared = split_declared_type(super().column_name(item))
        return self.normalize_type_name(declared)


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
