"""
Rule tables: dispatch from a column type key to a conversion rule.

A RuleTable is an immutable collection of ConversionRule objects keyed by one
kind of type key:

1. MatchBy.SCAN_SHAPE - the coarse ScanShape of a column. Portable, but several
   SQL types share one shape (TINYINT and BIGINT are both INT64 on MySQL).
2. MatchBy.TYPE_NAME - the database type name (BIGINT, DATETIME, JSON).
   Finer-grained: DECIMAL becomes a float and TIMESTAMP an epoch instead of
   the string and datetime their shapes would give.

The two variants stay independent; callers pick one per scan. Tables are built
once at import and shared read-only across scans.
"""
import logging
from collections.abc import Iterable
from enum import Enum
from functools import lru_cache
from types import MappingProxyType
from typing import Any

from anonrows.adapters.type_conversion import ConversionRule, ScanShape
from anonrows.adapters.type_conversion import TimePolicy, instant_parser
from anonrows.adapters.type_conversion import parse_bool, parse_epoch
from anonrows.adapters.type_conversion import parse_float64, parse_int64
from anonrows.adapters.type_conversion import parse_json, parse_string
from anonrows.adapters.type_conversion import parse_unsupported_byte
from anonrows.exceptions import ConversionError

logger = logging.getLogger(__name__)

INTEGER_TYPE_NAMES = ('BIGINT', 'YEAR', 'TINYINT', 'SMALLINT', 'MEDIUMINT', 'INT')
FLOAT_TYPE_NAMES = ('DOUBLE', 'DECIMAL', 'FLOAT')


class MatchBy(Enum):
    """Which column type key a RuleTable is keyed by.
    """
    SCAN_SHAPE = 'scan_shape'
    TYPE_NAME = 'type_name'


class RuleTable:
    """Ordered, immutable set of conversion rules for one key kind.

    Rules may not overlap: building a table with two rules for the same key
    raises ValueError, so a lookup has at most one candidate.
    """

    def __init__(self, match_by: MatchBy, rules: Iterable[ConversionRule],
                 time_policy: TimePolicy) -> None:
        self.match_by = match_by
        self.time_policy = time_policy
        self.rules = tuple(rules)
        index: dict[Any, ConversionRule] = {}
        for rule in self.rules:
            if rule.match_key in index:
                raise ValueError(
                    f'Overlapping rules for {rule.match_key!r}: '
                    f'{index[rule.match_key].label!r} and {rule.label!r}')
            index[rule.match_key] = rule
        self._index = MappingProxyType(index)

    def __repr__(self) -> str:
        return (f'RuleTable(match_by={self.match_by.value}, '
                f'time_policy={self.time_policy.value}, rules={len(self.rules)})')

    def __contains__(self, key: Any) -> bool:
        return key in self._index

    def key_for(self, scan_shape: ScanShape, database_type_name: str) -> Any:
        """Pick the type key this table matches on.
        """
        if self.match_by is MatchBy.SCAN_SHAPE:
            return scan_shape
        return database_type_name.upper()

    def lookup(self, key: Any) -> ConversionRule | None:
        """Find the rule for a type key, or None when no rule matches.
        """
        return self._index.get(key)

    def convert(self, descriptor: Any, raw: str | None, row: int | None = None) -> Any:
        """Convert one raw cell using the rule matching the descriptor's key.

        Unmatched keys pass the raw value through unchanged.

        Args:
            descriptor: ColumnDescriptor of the cell's column
            raw: Raw textual cell value, None for NULL
            row: Optional 1-based row ordinal for error context

        Returns
            Typed value, the raw value when no rule matches, or None

        Raises
            ConversionError: The matched rule rejected the text
        """
        rule = self._index.get(descriptor.type_key)
        if rule is None:
            return raw
        try:
            return rule.convert(raw)
        except (ValueError, OverflowError) as e:
            where = f'row {row}: ' if row is not None else ''
            raise ConversionError(
                f'{where}convert value failed for column {descriptor.name!r} '
                f'(position {descriptor.position}, {rule.label}): {e}',
                column=descriptor.name, position=descriptor.position,
                row=row, rule=rule.label) from e


def build_scan_shape_table(time_policy: TimePolicy = TimePolicy.UTC) -> RuleTable:
    """Rule table keyed by ScanShape.

    STRING is returned as text. BYTE is a documented gap: any non-null
    single-byte value fails.
    """
    rules = [
        ConversionRule('NullTime', ScanShape.TIME, instant_parser(time_policy)),
        ConversionRule('NullString', ScanShape.STRING, parse_string),
        ConversionRule('NullByte', ScanShape.BYTE, parse_unsupported_byte),
        ConversionRule('NullBool', ScanShape.BOOL, parse_bool),
        ConversionRule('NullFloat64', ScanShape.FLOAT64, parse_float64),
        ConversionRule('NullInt16', ScanShape.INT16, parse_int64),
        ConversionRule('NullInt32', ScanShape.INT32, parse_int64),
        ConversionRule('NullInt64', ScanShape.INT64, parse_int64),
    ]
    return RuleTable(MatchBy.SCAN_SHAPE, rules, time_policy)


def build_type_name_table(time_policy: TimePolicy = TimePolicy.LOCAL) -> RuleTable:
    """Rule table keyed by database type name.

    TIMESTAMP always yields epoch seconds; DATE and DATETIME follow the policy.
    """
    parse_time = instant_parser(time_policy)
    rules = [ConversionRule(f'handle {name}', name, parse_int64)
             for name in INTEGER_TYPE_NAMES]
    rules += [ConversionRule(f'handle {name}', name, parse_float64)
              for name in FLOAT_TYPE_NAMES]
    rules += [
        ConversionRule('handle TIMESTAMP', 'TIMESTAMP', parse_epoch),
        ConversionRule('handle DATETIME', 'DATETIME', parse_time),
        ConversionRule('handle DATE', 'DATE', parse_time),
        ConversionRule('handle BOOLEAN', 'BOOLEAN', parse_bool),
        ConversionRule('handle JSON', 'JSON', parse_json),
    ]
    return RuleTable(MatchBy.TYPE_NAME, rules, time_policy)


DEFAULT_TIME_POLICIES = {
    MatchBy.SCAN_SHAPE: TimePolicy.UTC,
    MatchBy.TYPE_NAME: TimePolicy.LOCAL,
    }

_BUILDERS = {
    MatchBy.SCAN_SHAPE: build_scan_shape_table,
    MatchBy.TYPE_NAME: build_type_name_table,
    }


@lru_cache(maxsize=8)
def _get_rule_table(match_by: MatchBy, time_policy: TimePolicy) -> RuleTable:
    """Get cached rule table for a key kind and policy."""
    table = _BUILDERS[match_by](time_policy)
    logger.debug(f'Built {table!r}')
    return table


def get_rule_table(match_by: MatchBy | str,
                   time_policy: TimePolicy | str | None = None) -> RuleTable:
    """Get the shared rule table for a key kind.

    Args:
        match_by: MatchBy member or its value ('scan_shape', 'type_name')
        time_policy: TimePolicy member or value; None picks the table default

    Returns
        RuleTable instance shared by every caller asking for the same pair
    """
    match_by = MatchBy(match_by)
    time_policy = DEFAULT_TIME_POLICIES[match_by] if time_policy is None else TimePolicy(time_policy)
    return _get_rule_table(match_by, time_policy)


SCAN_SHAPE_TABLE = get_rule_table(MatchBy.SCAN_SHAPE)
TYPE_NAME_TABLE = get_rule_table(MatchBy.TYPE_NAME)
