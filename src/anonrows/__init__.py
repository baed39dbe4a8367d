"""
Typed scanning of anonymous result sets.

Converts rows of a query whose columns are only known at runtime into typed
values, driven by each column's scan shape or database type name:

- Module functions: anonrows.scan_mapped_rows(cursor)
- Scoped query: anonrows.select(cn, sql, *args)

The cursor is any PEP 249 cursor with an executed query; connections are
owned by the caller.
"""
__version__ = '0.1.0'

from anonrows.adapters import SCAN_SHAPE_TABLE, TYPE_NAME_TABLE
from anonrows.adapters import ColumnDescriptor, ConversionRule, MatchBy
from anonrows.adapters import RuleTable, ScanShape, TimePolicy
from anonrows.adapters import extract_column_descriptors, get_rule_table
from anonrows.cursor import RowScanner, cursor_scope
from anonrows.exceptions import ConversionError, CursorContractError
from anonrows.exceptions import DriverError, ScanCancelled, ScanError
from anonrows.exceptions import ScanIOError, SchemaError
from anonrows.options import ScanOptions, load_scan_options
from anonrows.query import iter_rows, scan_mapped_rows, scan_mapped_rows_ext
from anonrows.query import scan_positional_rows, scan_rows, select

__all__ = [
    # Scanning
    'iter_rows',
    'scan_rows',
    'scan_mapped_rows',
    'scan_positional_rows',
    'scan_mapped_rows_ext',
    'select',
    'cursor_scope',
    'RowScanner',
    # Rules and metadata
    'ColumnDescriptor',
    'ConversionRule',
    'MatchBy',
    'RuleTable',
    'ScanShape',
    'TimePolicy',
    'SCAN_SHAPE_TABLE',
    'TYPE_NAME_TABLE',
    'extract_column_descriptors',
    'get_rule_table',
    # Options
    'ScanOptions',
    'load_scan_options',
    # Exceptions
    'ScanError',
    'SchemaError',
    'ConversionError',
    'ScanIOError',
    'CursorContractError',
    'ScanCancelled',
    'DriverError',
]
