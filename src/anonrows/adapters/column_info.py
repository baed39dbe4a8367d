"""
Column descriptors extracted once per query from cursor.description.
"""
import logging
from dataclasses import dataclass
from typing import Any, Self

from anonrows.adapters.type_conversion import ScanShape
from anonrows.adapters.type_mapping import RuleTable
from anonrows.config.type_mapping import ColumnTypeConfig
from anonrows.exceptions import SchemaError
from anonrows.strategy import ColumnTypeStrategy, get_cursor_strategy
from more_itertools import duplicates_everseen, first

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnDescriptor:
    """One result column, aligned by position with every fetched row.

    type_key is the key the active rule table matches on: the scan_shape for
    a scan-shape table, the database_type_name for a type-name table.
    decoded_json marks a column the driver already decoded from JSON; its
    values are serialised back to JSON text before conversion.
    """
    name: str
    position: int
    type_key: Any
    database_type_name: str = ''
    scan_shape: ScanShape = ScanShape.RAW
    decoded_json: bool = False

    @classmethod
    def from_description_item(cls, item: Any, position: int, rule_table: RuleTable,
                              strategy: ColumnTypeStrategy,
                              type_config: ColumnTypeConfig | None = None,
                              table_name: str | None = None) -> Self:
        """Create a ColumnDescriptor from one cursor.description item.

        A type configured in type_config replaces whatever the driver
        reported, and the scan shape is derived again from it.
        """
        name, type_name, scan_shape = strategy.describe(item)
        decoded_json = strategy.decodes_json(type_name)
        if type_config is not None:
            configured = type_config.get_type_for_column(strategy.dialect_name, table_name, name)
            if configured:
                type_name = strategy.normalize_type_name(configured)
                scan_shape = strategy.scan_shape(type_name)
        return cls(name=name, position=position,
                   type_key=rule_table.key_for(scan_shape, type_name),
                   database_type_name=type_name, scan_shape=scan_shape,
                   decoded_json=decoded_json)

    def __repr__(self) -> str:
        return (f'ColumnDescriptor(name={self.name!r}, position={self.position}, '
                f'type={self.database_type_name or "?"}, shape={self.scan_shape.value})')

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization.
        """
        return {
            'name': self.name,
            'position': self.position,
            'database_type_name': self.database_type_name,
            'scan_shape': self.scan_shape.value,
            }

    @staticmethod
    def get_names(descriptors: list[Self]) -> list[str]:
        """Get column names from a list of descriptors.
        """
        return [d.name for d in descriptors]

    @staticmethod
    def get_descriptor_by_name(descriptors: list[Self], name: str) -> Self | None:
        """Find a descriptor by column name.
        """
        return first((d for d in descriptors if d.name == name), None)


def read_description(cursor: Any) -> list[Any]:
    """Read cursor.description once.

    Raises
        SchemaError: The cursor has no result set or the driver failed
    """
    try:
        description = cursor.description
    except Exception as e:
        raise SchemaError(f'get column types failed: {e}') from e
    if description is None:
        raise SchemaError('cursor has no result set (description is None)')
    return list(description)


def extract_column_descriptors(cursor: Any, rule_table: RuleTable,
                               dialect: str | None = None,
                               type_config: ColumnTypeConfig | None = None,
                               table_name: str | None = None) -> list[ColumnDescriptor]:
    """Extract ordered column descriptors from a cursor.

    Names are validated first: a duplicate fails before any type key is
    built, and long before any row is fetched.

    Args:
        cursor: DB-API cursor with an executed query
        rule_table: Table whose key kind the descriptors are built for
        dialect: Dialect name, detected from the cursor when None
        type_config: Optional column type overrides
        table_name: Optional table name for type_config lookups

    Returns
        List of ColumnDescriptor in cursor column order

    Raises
        SchemaError: Missing result set, unreadable metadata, duplicate names
    """
    description = read_description(cursor)
    strategy = get_cursor_strategy(cursor, dialect)

    names = [strategy.column_name(item) for item in description]
    duplicate = first(duplicates_everseen(names), None)
    if duplicate is not None:
        raise SchemaError(f'duplicate column name {duplicate}')

    descriptors = [
        ColumnDescriptor.from_description_item(item, position, rule_table, strategy,
                                               type_config, table_name)
        for position, item in enumerate(description)
        ]

    unmatched = [d.name for d in descriptors if d.type_key not in rule_table]
    if unmatched:
        logger.debug(f'No conversion rule for columns {unmatched}, passing through raw text')
    logger.debug(f'Extracted {len(descriptors)} columns via {strategy!r}: {descriptors}')
    return descriptors
