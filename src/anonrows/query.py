"""
Scan operations over anonymous result sets.

This module provides the entry points that tie extraction, the rule table,
the row scanner and the assembler together for one cursor.

Partial results: the eager functions either return every row or raise. Rows
assembled before a failing row are discarded; the error carries the row
ordinal. iter_rows is lazy and naturally yields those rows before raising.
"""
import logging
from dataclasses import replace
from typing import Any

from anonrows.adapters.column_info import extract_column_descriptors
from anonrows.adapters.structure import get_row_assembler
from anonrows.cursor import CancelSignal, RowScanner, cursor_scope
from anonrows.options import ScanOptions, load_scan_options
from anonrows.strategy import is_supported_dialect
from anonrows.utils import get_dialect_name_or_none

logger = logging.getLogger(__name__)

TypedRow = list[Any] | dict[str, Any]


def iter_rows(cursor: Any, options: ScanOptions | dict[str, Any] | str | None = None,
              cancel: CancelSignal | None = None, table_name: str | None = None,
              **kw: Any) -> RowScanner:
    """Lazily scan a cursor into typed rows.

    Column metadata is read and validated before this returns, so a
    SchemaError surfaces here rather than on the first next().

    Args:
        cursor: DB-API cursor with an executed query
        options: ScanOptions, dict, config setting name, or None
        cancel: Optional Event or callable checked once per row
        table_name: Optional table name for column type overrides
        **kw: ScanOptions fields overriding options

    Returns
        RowScanner yielding one typed row per cursor row
    """
    options = load_scan_options(options, **kw)
    rule_table = options.rule_table()
    descriptors = extract_column_descriptors(cursor, rule_table, options.dialect,
                                             options.column_type_config(), table_name)
    assembler = get_row_assembler(options.row_shape, descriptors)
    return RowScanner(cursor, descriptors, rule_table, assembler,
                      fetch_size=options.fetch_size, cancel=cancel)


def scan_rows(cursor: Any, options: ScanOptions | dict[str, Any] | str | None = None,
              cancel: CancelSignal | None = None, table_name: str | None = None,
              **kw: Any) -> list[TypedRow]:
    """Scan every row of a cursor.

    Returns
        All typed rows; on any failure nothing is returned and the error raised
    """
    rows = list(iter_rows(cursor, options, cancel=cancel, table_name=table_name, **kw))
    logger.debug(f'Scan returned {len(rows)} rows')
    return rows


def scan_mapped_rows(cursor: Any, **kw: Any) -> list[dict[str, Any]]:
    """Name-keyed rows matched by scan shape; time values as UTC datetimes.

    [{'col1': 1, 'col2': 'string', 'col3': datetime(..., tzinfo=tzutc())}, ...]
    """
    return scan_rows(cursor, **{'match_by': 'scan_shape', 'time_policy': 'utc',
                                'row_shape': 'mapped', **kw})


def scan_positional_rows(cursor: Any, **kw: Any) -> list[list[Any]]:
    """Positional rows matched by scan shape; time values as UTC datetimes.

    [[1, 'string', datetime(..., tzinfo=tzutc())], ...]
    """
    return scan_rows(cursor, **{'match_by': 'scan_shape', 'time_policy': 'utc',
                                'row_shape': 'positional', **kw})


def scan_mapped_rows_ext(cursor: Any, **kw: Any) -> list[dict[str, Any]]:
    """Name-keyed rows matched by database type name.

    DATE and DATETIME become local datetimes, TIMESTAMP epoch seconds,
    DECIMAL a float and JSON its decoded value.
    """
    return scan_rows(cursor, **{'match_by': 'type_name', 'time_policy': 'local',
                                'row_shape': 'mapped', **kw})


def select(cn: Any, sql: str, *args: Any,
           options: ScanOptions | dict[str, Any] | str | None = None,
           cancel: CancelSignal | None = None, **kw: Any) -> list[TypedRow]:
    """Execute a query on a connection and scan its result.

    The cursor is opened and closed here, including when a row fails to
    convert. The dialect comes from the connection unless options set it.

    >>> import sqlite3
    >>> conn = sqlite3.connect(':memory:')
    >>> select(conn, 'SELECT 1 AS "id [INTEGER]", ? AS name', 'mysql')
    [{'id': 1, 'name': 'mysql'}]
    """
    options = load_scan_options(options, **kw)
    if options.dialect is None:
        dialect = get_dialect_name_or_none(cn)
        if dialect is not None and is_supported_dialect(dialect):
            options = replace(options, dialect=dialect)
    with cursor_scope(cn, sql, *args) as cursor:
        return scan_rows(cursor, options, cancel=cancel)
