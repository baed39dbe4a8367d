"""
Adapters package.

This package provides the following components:

- type_conversion: Parsers, ScanShape, TimePolicy and ConversionRule
- type_mapping: RuleTable dispatch and the two built-in tables
- column_info: ColumnDescriptor and extraction from cursor.description
- structure: Row assemblers (positional and name-keyed, no conversion)

Type conversion principles:
1. Every cell reaches a rule as text (or None), whatever the driver returned
2. NULL never reaches a parser
3. A column no rule matches passes its text through unchanged
"""

from anonrows.adapters.column_info import ColumnDescriptor
from anonrows.adapters.column_info import extract_column_descriptors
from anonrows.adapters.structure import MappedRowAssembler
from anonrows.adapters.structure import PositionalRowAssembler
from anonrows.adapters.structure import RowAssembler, get_row_assembler
from anonrows.adapters.type_conversion import ConversionRule, ScanShape
from anonrows.adapters.type_conversion import TimePolicy
from anonrows.adapters.type_mapping import SCAN_SHAPE_TABLE, TYPE_NAME_TABLE
from anonrows.adapters.type_mapping import MatchBy, RuleTable, get_rule_table
