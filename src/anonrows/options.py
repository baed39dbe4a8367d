from dataclasses import dataclass, replace
from typing import Any

from anonrows.adapters.structure import ROW_SHAPES
from anonrows.adapters.type_mapping import MatchBy, RuleTable, get_rule_table
from anonrows.adapters.type_conversion import TimePolicy
from anonrows.config.type_mapping import ColumnTypeConfig
from anonrows.strategy import get_available_dialects, is_supported_dialect

from libb import ConfigOptions, load_options

__all__ = [
    'ScanOptions',
    'load_scan_options',
]


@dataclass
class ScanOptions(ConfigOptions):
    """Options

    supported dialects: `mysql`, `postgresql`, `sqlite` (None: detect from cursor)

    - match_by: rule table key kind, `type_name` or `scan_shape`
    - time_policy: `local`, `utc` or `frame` (None: table default)
    - row_shape: `mapped`, `positional` or `attrdict`
    - fetch_size: rows per cursor.fetchmany call
    - type_config: path of a column type override JSON file
    """
    dialect: str = None
    match_by: str = 'type_name'
    time_policy: str = None
    row_shape: str = 'mapped'
    fetch_size: int = 500
    type_config: str = None

    def __post_init__(self):
        if self.dialect is not None and not is_supported_dialect(self.dialect):
            available = get_available_dialects()
            raise ValueError(f'dialect must be one of: {available}')
        if self.match_by not in {m.value for m in MatchBy}:
            raise ValueError(f'match_by must be one of: {[m.value for m in MatchBy]}')
        if self.time_policy is not None and self.time_policy not in {p.value for p in TimePolicy}:
            raise ValueError(f'time_policy must be one of: {[p.value for p in TimePolicy]}')
        if self.row_shape not in ROW_SHAPES:
            raise ValueError(f'row_shape must be one of: {list(ROW_SHAPES)}')
        if self.fetch_size < 1:
            raise ValueError('fetch_size must be a positive integer')

    def rule_table(self) -> RuleTable:
        """Shared rule table for these options."""
        return get_rule_table(self.match_by, self.time_policy)

    def column_type_config(self) -> ColumnTypeConfig:
        """Column type overrides: the configured file or the default locations."""
        if self.type_config:
            return ColumnTypeConfig(self.type_config)
        return ColumnTypeConfig.get_instance()


def load_scan_options(options: ScanOptions | dict[str, Any] | str | None = None,
                      config: Any | None = None, **kw: Any) -> ScanOptions:
    """Build ScanOptions from an instance, a dict, a config setting or keywords.

    Keywords override whatever the first argument supplies. A string names a
    setting in config and is resolved by libb.load_options.
    """
    if options is None:
        return ScanOptions(**kw)
    if isinstance(options, ScanOptions):
        return replace(options, **kw) if kw else options
    if isinstance(options, dict):
        return ScanOptions(**(options | kw))
    options_func = load_options(cls=ScanOptions)(lambda o, c: o)
    return options_func(options, config, **kw)
