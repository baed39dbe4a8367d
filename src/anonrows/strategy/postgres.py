"""
PostgreSQL-specific column metadata.

psycopg reports the type OID as type_code. The OID is resolved through
psycopg's type registry and the PostgreSQL name normalised to the SQL names
rule tables use (int8 -> BIGINT, timestamptz -> TIMESTAMP, jsonb -> JSON).
"""
import logging
from typing import Any

from anonrows.adapters.type_conversion import ScanShape
from anonrows.strategy.base import ColumnTypeStrategy, register_strategy
from psycopg.postgres import types

logger = logging.getLogger(__name__)


@register_strategy('postgresql')
class PostgresStrategy(ColumnTypeStrategy):
    """PostgreSQL column metadata from type OIDs.
    """

    dialect_name = 'postgresql'

    TYPE_ALIASES = {
        'INT2': 'SMALLINT',
        'INT4': 'INT',
        'INTEGER': 'INT',
        'INT8': 'BIGINT',
        'FLOAT4': 'FLOAT',
        'REAL': 'FLOAT',
        'FLOAT8': 'DOUBLE',
        'DOUBLE PRECISION': 'DOUBLE',
        'NUMERIC': 'DECIMAL',
        'BOOL': 'BOOLEAN',
        'TIMESTAMP': 'DATETIME',
        'TIMESTAMP WITHOUT TIME ZONE': 'DATETIME',
        'TIMESTAMPTZ': 'TIMESTAMP',
        'TIMESTAMP WITH TIME ZONE': 'TIMESTAMP',
        'JSONB': 'JSON',
        'BPCHAR': 'CHAR',
        'CHARACTER': 'CHAR',
        'CHARACTER VARYING': 'VARCHAR',
        }

    # psycopg loads json and jsonb into Python objects
    DECODED_JSON_TYPES = frozenset({'JSON', 'JSON[]'})

    SCAN_SHAPES = {
        'SMALLINT': ScanShape.INT16,
        'INT': ScanShape.INT32,
        'BIGINT': ScanShape.INT64,
        'FLOAT': ScanShape.FLOAT64,
        'DOUBLE': ScanShape.FLOAT64,
        'BOOLEAN': ScanShape.BOOL,
        'DATE': ScanShape.TIME,
        'DATETIME': ScanShape.TIME,
        'TIMESTAMP': ScanShape.TIME,
        '"CHAR"': ScanShape.BYTE,
        'DECIMAL': ScanShape.STRING,
        'TEXT': ScanShape.STRING,
        'VARCHAR': ScanShape.STRING,
        'CHAR': ScanShape.STRING,
        'NAME': ScanShape.STRING,
        'UUID': ScanShape.STRING,
        'JSON': ScanShape.STRING,
        'TIME': ScanShape.STRING,
        'TIMETZ': ScanShape.STRING,
        'INTERVAL': ScanShape.STRING,
        'BYTEA': ScanShape.STRING,
        }

    def scan_shape(self, database_type_name: str) -> ScanShape:
        if database_type_name.endswith('[]'):
            return ScanShape.STRING
        return super().scan_shape(database_type_name)

    def database_type_name(self, item: Any) -> str:
        """Type name for the OID, '<NAME>[]' for array OIDs."""
        oid = self.type_code(item)
        if oid is None:
            return ''
        info = types.get(oid)
        if info is None:
            logger.debug(f'Unknown PostgreSQL type OID {oid!r}')
            return ''
        # internal single-byte "char", not bpchar
        name = '"CHAR"' if info.name == 'char' else self.normalize_type_name(info.name)
        if oid == info.array_oid:
            return f'{name}[]'
        return name
