"""
Tests for rule tables and dispatch.
"""
import datetime

import pytest
from anonrows.adapters.column_info import ColumnDescriptor
from anonrows.adapters.type_conversion import ConversionRule, ScanShape
from anonrows.adapters.type_conversion import TimePolicy, parse_int64
from anonrows.adapters.type_mapping import SCAN_SHAPE_TABLE, TYPE_NAME_TABLE
from anonrows.adapters.type_mapping import MatchBy, RuleTable, get_rule_table
from anonrows.exceptions import ConversionError
from dateutil import tz


def shape_column(shape, name='col', position=0):
    return ColumnDescriptor(name, position, shape, scan_shape=shape)


def type_column(type_name, name='col', position=0):
    return ColumnDescriptor(name, position, type_name, database_type_name=type_name)


class TestRuleTable:

    def test_overlapping_keys_are_rejected(self):
        rules = [ConversionRule('first', 'INT', parse_int64),
                 ConversionRule('second', 'INT', parse_int64)]
        with pytest.raises(ValueError, match='Overlapping rules'):
            RuleTable(MatchBy.TYPE_NAME, rules, TimePolicy.LOCAL)

    def test_index_is_read_only(self):
        with pytest.raises(TypeError):
            TYPE_NAME_TABLE._index['BIGINT'] = None

    def test_key_for(self):
        assert SCAN_SHAPE_TABLE.key_for(ScanShape.INT64, 'bigint') is ScanShape.INT64
        assert TYPE_NAME_TABLE.key_for(ScanShape.INT64, 'bigint') == 'BIGINT'

    def test_unmatched_key_passes_raw_text(self):
        column = type_column('GEOMETRY')
        assert 'GEOMETRY' not in TYPE_NAME_TABLE
        assert TYPE_NAME_TABLE.convert(column, 'POINT(1 2)') == 'POINT(1 2)'
        assert TYPE_NAME_TABLE.convert(column, None) is None
        assert SCAN_SHAPE_TABLE.convert(shape_column(ScanShape.RAW), 'x') == 'x'

    @pytest.mark.parametrize('table', [SCAN_SHAPE_TABLE, TYPE_NAME_TABLE])
    def test_null_yields_none_for_every_rule(self, table):
        for rule in table.rules:
            column = ColumnDescriptor('col', 0, rule.match_key)
            assert table.convert(column, None) is None, rule.label

    def test_conversion_error_context(self):
        column = type_column('BIGINT', name='id', position=2)
        with pytest.raises(ConversionError) as excinfo:
            TYPE_NAME_TABLE.convert(column, 'abc', row=7)
        err = excinfo.value
        assert err.column == 'id'
        assert err.position == 2
        assert err.row == 7
        assert err.rule == 'handle BIGINT'
        assert str(err).startswith("row 7: convert value failed for column 'id'")
        assert isinstance(err.__cause__, ValueError)


class TestScanShapeTable:

    def test_defaults(self):
        assert SCAN_SHAPE_TABLE.match_by is MatchBy.SCAN_SHAPE
        assert SCAN_SHAPE_TABLE.time_policy is TimePolicy.UTC

    @pytest.mark.parametrize('shape', [ScanShape.INT16, ScanShape.INT32, ScanShape.INT64])
    def test_integers(self, shape):
        assert SCAN_SHAPE_TABLE.convert(shape_column(shape), '-12') == -12

    def test_string_and_float(self):
        assert SCAN_SHAPE_TABLE.convert(shape_column(ScanShape.STRING), '5.70') == '5.70'
        assert SCAN_SHAPE_TABLE.convert(shape_column(ScanShape.FLOAT64), '5.70') == 5.7

    def test_bool(self):
        column = shape_column(ScanShape.BOOL)
        assert SCAN_SHAPE_TABLE.convert(column, '1') is True
        assert SCAN_SHAPE_TABLE.convert(column, '0') is False
        with pytest.raises(ConversionError, match='scan type bool value true is not supported'):
            SCAN_SHAPE_TABLE.convert(column, 'true')

    def test_time_is_utc(self):
        value = SCAN_SHAPE_TABLE.convert(shape_column(ScanShape.TIME), '2024-07-22 10:30:00')
        assert value == datetime.datetime(2024, 7, 22, 10, 30, tzinfo=tz.UTC)
        assert value.tzinfo == tz.UTC

    @pytest.mark.parametrize('text', ['a', '0', '1', ' '])
    def test_byte_always_fails(self, text):
        with pytest.raises(ConversionError, match='NullByte'):
            SCAN_SHAPE_TABLE.convert(shape_column(ScanShape.BYTE), text)


class TestTypeNameTable:

    def test_defaults(self):
        assert TYPE_NAME_TABLE.match_by is MatchBy.TYPE_NAME
        assert TYPE_NAME_TABLE.time_policy is TimePolicy.LOCAL

    @pytest.mark.parametrize('type_name', ['BIGINT', 'YEAR', 'TINYINT', 'SMALLINT', 'MEDIUMINT', 'INT'])
    def test_integer_family(self, type_name):
        assert TYPE_NAME_TABLE.convert(type_column(type_name), '2024') == 2024

    @pytest.mark.parametrize('type_name', ['DOUBLE', 'DECIMAL', 'FLOAT'])
    def test_float_family(self, type_name):
        assert TYPE_NAME_TABLE.convert(type_column(type_name), '10.25') == 10.25

    def test_timestamp_is_epoch(self):
        value = TYPE_NAME_TABLE.convert(type_column('TIMESTAMP'), '2024-07-22T10:30:00Z')
        assert value == 1721644200

    def test_datetime_and_date_are_local(self):
        value = TYPE_NAME_TABLE.convert(type_column('DATETIME'), '2024-07-22 10:30:00')
        assert isinstance(value.tzinfo, tz.tzlocal)
        assert value == datetime.datetime(2024, 7, 22, 10, 30, tzinfo=tz.UTC)
        date = TYPE_NAME_TABLE.convert(type_column('DATE'), '2024-07-22')
        assert date == datetime.datetime(2024, 7, 22, tzinfo=tz.UTC)

    def test_json(self):
        column = type_column('JSON')
        assert TYPE_NAME_TABLE.convert(column, '{"name":"mysql","version":5.7,"enabled":true}') == {
            'name': 'mysql', 'version': 5.7, 'enabled': True}
        with pytest.raises(ConversionError, match='failed to unmarshal JSON'):
            TYPE_NAME_TABLE.convert(column, 'not-json')

    def test_deeply_nested_json(self):
        column = type_column('JSON', name='doc', position=1)
        with pytest.raises(ConversionError, match='failed to unmarshal JSON') as excinfo:
            TYPE_NAME_TABLE.convert(column, '[' * 100000 + ']' * 100000, row=4)
        assert excinfo.value.column == 'doc'
        assert excinfo.value.row == 4
        assert excinfo.value.rule == 'handle JSON'

    def test_boolean(self):
        assert TYPE_NAME_TABLE.convert(type_column('BOOLEAN'), '1') is True

    def test_varchar_passes_through(self):
        assert 'VARCHAR' not in TYPE_NAME_TABLE
        assert TYPE_NAME_TABLE.convert(type_column('VARCHAR'), '00123') == '00123'


class TestGetRuleTable:

    def test_shared_instances(self):
        assert get_rule_table('scan_shape') is SCAN_SHAPE_TABLE
        assert get_rule_table(MatchBy.TYPE_NAME) is TYPE_NAME_TABLE
        assert get_rule_table('type_name', 'frame') is get_rule_table(MatchBy.TYPE_NAME, TimePolicy.FRAME)

    def test_frame_policy_table(self):
        table = get_rule_table('type_name', 'frame')
        assert table.convert(type_column('DATETIME'), '1970-01-02 00:00:00') == 86400

    def test_invalid_values(self):
        with pytest.raises(ValueError):
            get_rule_table('reflection')
        with pytest.raises(ValueError):
            get_rule_table('type_name', 'mars')


if __name__ == '__main__':
    __import__('pytest').main([__file__])
