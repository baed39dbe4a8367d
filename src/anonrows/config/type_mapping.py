"""
Configuration for column type overrides.

Drivers that do not report a column's type (SQLite, most notably) can be given
one per column:

    {
        "sqlite": {
            "columns": {"events.created": "DATETIME", "payload": "JSON"},
            "patterns": {"_at$": "DATETIME"}
        }
    }
"""
import json
import logging
import pathlib
import re

logger = logging.getLogger(__name__)

DEFAULT_LOCATIONS = (
    '~/.config/anonrows/column_types.json',
    '/etc/anonrows/column_types.json',
    'column_types.json',
    )


class ColumnTypeConfig:
    """Configuration for custom column type names"""

    _instance = None

    @classmethod
    def get_instance(cls):
        """Get singleton instance loaded from the default locations"""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def __init__(self, config_file=None, search_defaults=True):
        self._mappings = {}

        if config_file:
            self.load_config(config_file)
        elif search_defaults:
            for location in DEFAULT_LOCATIONS:
                path = pathlib.Path(location).expanduser()
                if path.exists():
                    self.load_config(path)
                    break

    def load_config(self, config_file):
        """Load configuration from file, merging with what is already loaded"""
        try:
            with pathlib.Path(config_file).open() as f:
                config = json.load(f)

            for dialect, mappings in config.items():
                for column, type_name in mappings.get('columns', {}).items():
                    self.add_column_mapping(dialect, None, column, type_name)
                for pattern, type_name in mappings.get('patterns', {}).items():
                    self.add_pattern_mapping(dialect, pattern, type_name)

            logger.info(f'Loaded column type configuration from {config_file}')
        except (OSError, ValueError, AttributeError) as e:
            logger.warning(f'Failed to load column type config {config_file}: {e}')

    def _dialect(self, dialect):
        return self._mappings.setdefault(dialect, {'patterns': {}, 'columns': {}})

    def get_type_for_column(self, dialect, table_name, column_name):
        """Get configured type name for a specific column, None when unset"""
        if dialect not in self._mappings:
            return None

        columns = self._mappings[dialect]['columns']
        column = column_name.lower()

        if table_name:
            key = f'{table_name.lower()}.{column}'
            if key in columns:
                return columns[key]

        if column in columns:
            return columns[column]

        for pattern, type_name in self._mappings[dialect]['patterns'].items():
            if pattern.search(column):
                return type_name

        return None

    def add_column_mapping(self, dialect, table_name, column_name, type_name):
        """Add a specific column mapping"""
        key = f'{table_name.lower()}.{column_name.lower()}' if table_name else column_name.lower()
        self._dialect(dialect)['columns'][key] = type_name

    def add_pattern_mapping(self, dialect, pattern, type_name):
        """Add a column name regex mapping, skipping patterns that do not compile"""
        try:
            compiled = re.compile(pattern)
        except re.error as e:
            logger.warning(f'Ignoring invalid column pattern {pattern!r} for {dialect}: {e}')
            return
        self._dialect(dialect)['patterns'][compiled] = type_name
