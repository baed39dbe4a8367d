"""
MySQL-specific column metadata.

MySQL drivers (PyMySQL, mysqlclient) report the protocol field type number as
type_code in cursor.description. This module maps those numbers to type names
and to the scan shapes a MySQL driver would natively use: every integer type
is INT64, FLOAT and DOUBLE are FLOAT64, date/time types are TIME, and
decimals, strings and JSON arrive as STRING.
"""
import logging
from typing import Any

from anonrows.adapters.type_conversion import ScanShape
from anonrows.strategy.base import ColumnTypeStrategy, register_strategy

logger = logging.getLogger(__name__)

# Protocol field type number -> database type name
MYSQL_FIELD_TYPES = {
    0: 'DECIMAL',
    1: 'TINYINT',
    2: 'SMALLINT',
    3: 'INT',
    4: 'FLOAT',
    5: 'DOUBLE',
    6: 'NULL',
    7: 'TIMESTAMP',
    8: 'BIGINT',
    9: 'MEDIUMINT',
    10: 'DATE',
    11: 'TIME',
    12: 'DATETIME',
    13: 'YEAR',
    14: 'DATE',
    15: 'VARCHAR',
    16: 'BIT',
    245: 'JSON',
    246: 'DECIMAL',
    247: 'ENUM',
    248: 'SET',
    249: 'TINYBLOB',
    250: 'MEDIUMBLOB',
    251: 'LONGBLOB',
    252: 'BLOB',
    253: 'VARCHAR',
    254: 'CHAR',
    255: 'GEOMETRY',
    }

_SCAN_SHAPES = dict.fromkeys(('TINYINT', 'SMALLINT', 'MEDIUMINT', 'INT', 'BIGINT', 'YEAR'),
                             ScanShape.INT64)
_SCAN_SHAPES.update(dict.fromkeys(('FLOAT', 'DOUBLE'), ScanShape.FLOAT64))
_SCAN_SHAPES.update(dict.fromkeys(('DATE', 'DATETIME', 'TIMESTAMP'), ScanShape.TIME))
_SCAN_SHAPES.update(dict.fromkeys(
    ('DECIMAL', 'TIME', 'VARCHAR', 'CHAR', 'TEXT', 'BIT', 'JSON', 'ENUM', 'SET',
     'TINYBLOB', 'MEDIUMBLOB', 'LONGBLOB', 'BLOB', 'GEOMETRY', 'NULL'),
    ScanShape.STRING))


@register_strategy('mysql')
class MySQLStrategy(ColumnTypeStrategy):
    """MySQL column metadata from protocol field type numbers.
    """

    dialect_name = 'mysql'

    SCAN_SHAPES = _SCAN_SHAPES

    TYPE_ALIASES = {
        'INTEGER': 'INT',
        'BOOL': 'TINYINT',
        'BOOLEAN': 'TINYINT',
        'NUMERIC': 'DECIMAL',
        'REAL': 'DOUBLE',
        'TINYTEXT': 'TEXT',
        'MEDIUMTEXT': 'TEXT',
        'LONGTEXT': 'TEXT',
        }

    def database_type_name(self, item: Any) -> str:
        """Type name for the protocol field type number."""
        type_code = self.type_code(item)
        if type_code is None:
            return ''
        if isinstance(type_code, str):
            return self.normalize_type_name(type_code)
        name = MYSQL_FIELD_TYPES.get(type_code)
        if name is None:
            logger.debug(f'Unknown MySQL field type {type_code!r}')
            return ''
        return name
