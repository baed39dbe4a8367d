"""
Base strategy interface for reading column metadata.

Each concrete strategy knows how one dialect's driver reports a column in
cursor.description (PEP 249) and turns it into the two type keys rule tables
match on: the database type name and the coarse ScanShape.

The strategy pattern keeps dialect knowledge out of the extraction and scan
code, which only ever sees (name, type name, scan shape) triples.
"""
import logging
from typing import Any, NamedTuple

from anonrows.adapters.type_conversion import ScanShape

logger = logging.getLogger(__name__)

# Registry of dialect name -> strategy class
_STRATEGY_REGISTRY: dict[str, type['ColumnTypeStrategy']] = {}


def register_strategy(dialect: str):
    """Decorator to register a strategy class for a dialect.

    Usage:
        @register_strategy('mysql')
        class MySQLStrategy(ColumnTypeStrategy):
            ...
    """
    def decorator(cls: type['ColumnTypeStrategy']) -> type['ColumnTypeStrategy']:
        _STRATEGY_REGISTRY[dialect] = cls
        return cls
    return decorator


class ColumnType(NamedTuple):
    """Column metadata as reported by one description item."""
    name: str
    database_type_name: str
    scan_shape: ScanShape


class ColumnTypeStrategy:
    """Dialect-neutral column metadata reader.

    Used directly for drivers no registered strategy knows: such columns
    report no type name and the RAW shape, so they pass through unconverted.
    Subclasses override database_type_name and fill SCAN_SHAPES and
    TYPE_ALIASES.
    """

    dialect_name = 'generic'

    # Normalised database type name -> ScanShape
    SCAN_SHAPES: dict[str, ScanShape] = {}

    # Driver/declared type name (upper case) -> normalised type name
    TYPE_ALIASES: dict[str, str] = {}

    # Normalised type names whose values the driver hands over already JSON-decoded
    DECODED_JSON_TYPES: frozenset[str] = frozenset()

    def column_name(self, item: Any) -> str:
        """Column name from a description item (psycopg Column or 7-tuple)."""
        name = getattr(item, 'name', None)
        if name is None:
            name = item[0]
        return str(name)

    def type_code(self, item: Any) -> Any:
        """Raw type_code from a description item."""
        if hasattr(item, 'type_code'):
            return item.type_code
        return item[1] if len(item) > 1 else None

    def database_type_name(self, item: Any) -> str:
        """Normalised database type name, '' when unknown."""
        return ''

    def normalize_type_name(self, declared: str | None) -> str:
        """Normalise a declared type such as 'numeric(10,2)' -> 'DECIMAL'.
        """
        if not declared:
            return ''
        base_type = declared.split('(')[0].strip().upper()
        return self.TYPE_ALIASES.get(base_type, base_type)

    def scan_shape(self, database_type_name: str) -> ScanShape:
        """Coarse shape for a normalised database type name."""
        return self.SCAN_SHAPES.get(database_type_name, ScanShape.RAW)

    def decodes_json(self, database_type_name: str) -> bool:
        """True when the driver returns this type as decoded Python values."""
        return database_type_name in self.DECODED_JSON_TYPES

    def describe(self, item: Any) -> ColumnType:
        """Read one description item into a ColumnType.
        """
        type_name = self.database_type_name(item)
        return ColumnType(self.column_name(item), type_name, self.scan_shape(type_name))

    def __repr__(self) -> str:
        return f'{type(self).__name__}(dialect={self.dialect_name!r})'
