"""
Conversion rules for raw textual cell values.

This module handles the conversion of the textual form of a database value
into a typed Python value (Database → Python direction only).

It provides:
1. ScanShape, the coarse driver-level category of a column
2. TimePolicy, the output shape of date/time values
3. ConversionRule, a (label, match key, parser) triple
4. The parsers themselves: integers, floats, booleans, instants, JSON

Every parser receives a non-null string and either returns the typed value or
raises ValueError. NULL handling lives in ConversionRule.convert so that no
parser ever sees None.

Usage:
    rule = ConversionRule('handle BIGINT', 'BIGINT', parse_int64)
    rule.convert('42')        # 42
    rule.convert(None)        # None
"""
import calendar
import datetime
import json
import logging
import math
import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from dateutil import tz

logger = logging.getLogger(__name__)

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_INTEGER = re.compile(r'[+-]?[0-9]+')
_FLOAT_SPECIALS = {'inf', '+inf', '-inf', 'infinity', '+infinity', '-infinity', 'nan', '+nan', '-nan'}

# Accepted date/time layouts, tried in order. Text without a zone is UTC.
DATE_LAYOUTS: tuple[tuple[str, re.Pattern], ...] = (
    ('date-only', re.compile(
        r'([0-9]{4})-([0-9]{2})-([0-9]{2})')),
    ('space-separated datetime', re.compile(
        r'([0-9]{4})-([0-9]{2})-([0-9]{2}) ([0-9]{2}):([0-9]{2}):([0-9]{2})(?:\.([0-9]{1,9}))?')),
    ('T...Z datetime', re.compile(
        r'([0-9]{4})-([0-9]{2})-([0-9]{2})T([0-9]{2}):([0-9]{2}):([0-9]{2})(?:\.([0-9]{1,9}))?Z')),
    )


class ScanShape(Enum):
    """Coarse driver-level representation of a column value.

    Several SQL types share one shape (every integer type of a MySQL driver
    reports INT64, for instance). RAW marks a column no rule knows about.
    """
    STRING = 'string'
    BYTE = 'byte'
    BOOL = 'bool'
    FLOAT64 = 'float64'
    INT16 = 'int16'
    INT32 = 'int32'
    INT64 = 'int64'
    TIME = 'time'
    RAW = 'raw'


class TimePolicy(Enum):
    """How a parsed instant is handed to the caller.

    LOCAL: aware datetime in the process local zone
    UTC: aware datetime in UTC
    FRAME: Unix epoch seconds, for network-frame consumers
    """
    LOCAL = 'local'
    UTC = 'utc'
    FRAME = 'frame'


@dataclass(frozen=True)
class ConversionRule:
    """A single (type key, parser) pair.

    label is diagnostic only and appears in ConversionError messages.
    """
    label: str
    match_key: Any
    parse: Callable[[str], Any]

    def convert(self, raw: str | None) -> Any:
        """Convert one raw cell, short-circuiting NULL.
        """
        if raw is None:
            return None
        return self.parse(raw)


def parse_int64(value: str) -> int:
    """Parse a base-10 signed 64-bit integer.

    >>> parse_int64('-42')
    -42
    >>> parse_int64('+7')
    7
    """
    if not _INTEGER.fullmatch(value):
        raise ValueError(f'invalid syntax for integer: {value!r}')
    number = int(value)
    if not INT64_MIN <= number <= INT64_MAX:
        raise ValueError(f'value out of range for int64: {value!r}')
    return number


def parse_float64(value: str) -> float:
    """Parse a 64-bit float.

    >>> parse_float64('3.25')
    3.25
    >>> parse_float64('1e3')
    1000.0
    """
    if value != value.strip() or '_' in value or not value:
        raise ValueError(f'invalid syntax for float: {value!r}')
    number = float(value)
    if math.isinf(number) and value.lower() not in _FLOAT_SPECIALS:
        raise ValueError(f'value out of range for float64: {value!r}')
    return number


def parse_bool(value: str) -> bool:
    """Accept exactly '0' and '1'.

    >>> parse_bool('1')
    True
    >>> parse_bool('0')
    False
    """
    if value == '1':
        return True
    if value == '0':
        return False
    raise ValueError(f'scan type bool value {value} is not supported')


def parse_string(value: str) -> str:
    return value


def _reject_constant(name: str) -> Any:
    raise ValueError(f'invalid JSON constant {name}')


def parse_json(value: str) -> Any:
    """Decode a JSON value of any shape.

    >>> parse_json('["5.7", "8.0"]')
    ['5.7', '8.0']
    """
    try:
        return json.loads(value, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        raise ValueError(f'failed to unmarshal JSON: {e}') from e


def parse_unsupported_byte(value: str) -> Any:
    """Single-byte columns are not supported; every value is rejected.
    """
    raise ValueError('scan type NullByte is not supported')


def parse_instant(value: str) -> datetime.datetime:
    """Parse text against DATE_LAYOUTS and return an aware UTC datetime.

    >>> parse_instant('2024-07-22 10:30:00')
    datetime.datetime(2024, 7, 22, 10, 30, tzinfo=tzutc())
    >>> parse_instant('2024-07-22T10:30:00Z') == parse_instant('2024-07-22 10:30:00')
    True
    """
    for name, layout in DATE_LAYOUTS:
        match = layout.fullmatch(value)
        if match is None:
            continue
        parts = match.groups()
        fraction = parts[6] if len(parts) > 6 else None
        microsecond = int(fraction[:6].ljust(6, '0')) if fraction else 0
        fields = [int(p) for p in parts[:6]]
        try:
            return datetime.datetime(*fields, microsecond=microsecond, tzinfo=tz.UTC)
        except ValueError as e:
            logger.debug(f'Layout {name} matched {value!r} but is not a valid date: {e}')
    raise ValueError(f'cannot parse {value!r} as date/time')


def to_epoch(instant: datetime.datetime) -> int:
    """Unix epoch seconds of an aware datetime, floored like a wall clock.
    """
    return calendar.timegm(instant.utctimetuple())


def shape_instant(instant: datetime.datetime, policy: TimePolicy) -> datetime.datetime | int:
    """Apply a TimePolicy to a parsed UTC instant.
    """
    if policy is TimePolicy.FRAME:
        return to_epoch(instant)
    if policy is TimePolicy.LOCAL:
        return instant.astimezone(tz.tzlocal())
    return instant


def instant_parser(policy: TimePolicy) -> Callable[[str], datetime.datetime | int]:
    """Build a date/time parser bound to one TimePolicy.
    """
    def parse(value: str) -> datetime.datetime | int:
        return shape_instant(parse_instant(value), policy)
    parse.__name__ = f'parse_instant_{policy.value}'
    return parse


def parse_epoch(value: str) -> int:
    """Parse a date/time and reduce it to Unix epoch seconds.

    >>> parse_epoch('1970-01-02')
    86400
    """
    return to_epoch(parse_instant(value))


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
