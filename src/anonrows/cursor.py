"""
Row scanning over an open DB-API cursor.

Every driver value is first rendered to its textual form (or None), so the
rule tables see one uniform input whatever the driver already decoded.
Implements the read side of PEP-249 only: callers own query execution, except
through the cursor_scope convenience.
"""
import datetime
import json
import logging
import threading
import time
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Union

from anonrows.adapters.column_info import ColumnDescriptor
from anonrows.adapters.structure import RowAssembler
from anonrows.adapters.type_mapping import RuleTable
from anonrows.exceptions import CursorContractError, ScanCancelled, ScanError
from anonrows.exceptions import ScanIOError
from dateutil import tz
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

CancelSignal = Union[threading.Event, Callable[[], bool]]


def render_raw_cell(value: Any, decoded_json: bool = False) -> str | None:
    """Render one driver value as raw cell text.

    With decoded_json the value came out of a driver-side JSON decode and is
    serialised back whole, so scalars keep their JSON typing.

    >>> render_raw_cell(True)
    '1'
    >>> render_raw_cell(datetime.datetime(2024, 7, 22, 10, 30))
    '2024-07-22 10:30:00'
    >>> render_raw_cell(b'mysql')
    'mysql'
    >>> render_raw_cell(None) is None
    True
    >>> render_raw_cell('abc', decoded_json=True)
    '"abc"'
    """
    if value is None:
        return None
    if decoded_json:
        return json.dumps(value)
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return '1' if value else '0'
    if isinstance(value, int | float | Decimal):
        return str(value)
    if isinstance(value, datetime.datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz.UTC)
            return value.replace(tzinfo=None).isoformat(sep='T') + 'Z'
        return value.isoformat(sep=' ')
    if isinstance(value, datetime.date):
        return value.isoformat()
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value).decode('utf-8', errors='replace')
    if isinstance(value, dict | list):
        return json.dumps(value)
    return str(value)


def is_cancelled(cancel: CancelSignal | None) -> bool:
    """Check a cancellation signal: an Event or a zero-argument callable."""
    if cancel is None:
        return False
    if hasattr(cancel, 'is_set'):
        return cancel.is_set()
    return bool(cancel())


class RowScanner:
    """Single-pass iterator of typed rows over one cursor.

    Fetches with fetchmany, renders and converts every cell, and hands the
    converted cells to the assembler. Any failure aborts the remaining scan;
    once exhausted or failed the scanner stays exhausted.
    """

    def __init__(self, cursor: Any, descriptors: Sequence[ColumnDescriptor],
                 rule_table: RuleTable, assembler: RowAssembler,
                 fetch_size: int = 500, cancel: CancelSignal | None = None) -> None:
        """Initialize scanner.

        Args:
            cursor: DB-API cursor positioned before the first row
            descriptors: Column descriptors extracted from the same cursor
            rule_table: Table the descriptors' type keys were built for
            assembler: Output row strategy
            fetch_size: Rows per fetchmany call
            cancel: Optional Event or callable checked once per row
        """
        self.cursor = cursor
        self.descriptors = tuple(descriptors)
        self.rule_table = rule_table
        self.assembler = assembler
        self.fetch_size = fetch_size
        self.cancel = cancel
        self.rows_scanned = 0
        self._rows = self._scan()

    def __iter__(self) -> Iterator[Any]:
        return self

    def __next__(self) -> Any:
        return next(self._rows)

    def _fetch(self) -> Sequence[Any]:
        row = self.rows_scanned + 1
        try:
            return self.cursor.fetchmany(self.fetch_size)
        except Exception as e:
            raise ScanIOError(f'row {row} scan failed: {e}', row=row) from e

    def _convert(self, values: Sequence[Any], row: int) -> list[Any]:
        if len(values) != len(self.descriptors):
            raise CursorContractError(
                f'row {row} scan failed: {len(values)} values for '
                f'{len(self.descriptors)} columns', row=row)
        return [self.rule_table.convert(
                    descriptor, render_raw_cell(value, descriptor.decoded_json), row)
                for descriptor, value in zip(self.descriptors, values)]

    def _scan(self) -> Iterator[Any]:
        start = time.time()
        try:
            while True:
                chunk = self._fetch()
                if not chunk:
                    break
                for values in chunk:
                    row = self.rows_scanned + 1
                    if is_cancelled(self.cancel):
                        raise ScanCancelled(f'scan cancelled before row {row}', row=row)
                    typed_row = self.assembler(self._convert(values, row))
                    self.rows_scanned = row
                    yield typed_row
        except ScanError as e:
            logger.error(f'Scan aborted after {self.rows_scanned} rows: {e}')
            raise
        logger.debug(f'Scanned {self.rows_scanned} rows in {time.time() - start:.4f}s')


def _checkout(cn: Any) -> tuple[Any, Callable[[], None]]:
    """DB-API connection for cn and the callable that releases it."""
    if isinstance(cn, Engine):
        raw = cn.raw_connection()
        return raw, raw.close
    if isinstance(cn, Connection):
        return cn.connection, lambda: None
    return cn, lambda: None


@contextmanager
def cursor_scope(cn: Any, sql: str | None = None, *args: Any):
    """Context manager for cursor lifecycle.

    Opens a cursor on a DB-API connection, a SQLAlchemy Connection or an
    Engine (a pooled connection is checked out and returned), executes sql
    when given, and closes the cursor on every exit path.
    """
    connection, release = _checkout(cn)
    try:
        cursor = connection.cursor()
        try:
            if sql is not None:
                if len(args) == 1 and isinstance(args[0], list | tuple | dict):
                    cursor.execute(sql, args[0])
                elif args:
                    cursor.execute(sql, args)
                else:
                    cursor.execute(sql)
                logger.debug(f'Executed query with {len(args)} parameters: {sql[:60]}...')
            yield cursor
        finally:
            cursor.close()
    finally:
        release()
