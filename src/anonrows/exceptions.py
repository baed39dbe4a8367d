"""
Scan-specific exception classes.
"""
import sqlite3

import psycopg


class ScanError(Exception):
    """Base class for all anonrows errors.
    """


class SchemaError(ScanError):
    """Column metadata could not be read or is unusable (e.g. duplicate names).
    """


class ConversionError(ScanError):
    """A matched conversion rule rejected the raw text of a cell.
    """

    def __init__(self, message: str, column: str | None = None,
                 position: int | None = None, row: int | None = None,
                 rule: str | None = None) -> None:
        super().__init__(message)
        self.column = column
        self.position = position
        self.row = row
        self.rule = rule


class ScanIOError(ScanError):
    """The cursor failed to advance or read a row.
    """

    def __init__(self, message: str, row: int | None = None) -> None:
        super().__init__(message)
        self.row = row


class CursorContractError(ScanIOError):
    """A fetched row does not line up with the column descriptors.
    """


class ScanCancelled(ScanError):
    """The caller's cancellation signal was observed mid-scan.
    """

    def __init__(self, message: str, row: int | None = None) -> None:
        super().__init__(message)
        self.row = row


DriverError = (
    psycopg.Error,
    sqlite3.Error,
    )
