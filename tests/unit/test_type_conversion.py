"""
Tests for the raw text parsers and time policies.
"""
import datetime

import pytest
from anonrows.adapters.type_conversion import INT64_MAX, INT64_MIN
from anonrows.adapters.type_conversion import ConversionRule, TimePolicy
from anonrows.adapters.type_conversion import parse_bool, parse_epoch
from anonrows.adapters.type_conversion import parse_float64, parse_instant
from anonrows.adapters.type_conversion import parse_int64, parse_json
from anonrows.adapters.type_conversion import parse_unsupported_byte
from anonrows.adapters.type_conversion import shape_instant
from dateutil import tz


class TestIntegers:

    @pytest.mark.parametrize('text', ['0', '-1', '42', '+7', '007',
                                      str(INT64_MAX), str(INT64_MIN)])
    def test_parse(self, text):
        assert parse_int64(text) == int(text)

    @pytest.mark.parametrize('text', ['0', '-1', '42', '1234567890123',
                                      str(INT64_MAX), str(INT64_MIN)])
    def test_decimal_text_round_trip(self, text):
        """Canonical decimal text survives parse and re-render unchanged"""
        assert str(parse_int64(text)) == text

    @pytest.mark.parametrize('text', ['', ' 1', '1 ', '1_000', '0x10', '1.0',
                                      'one', '--1', '+'])
    def test_invalid_syntax(self, text):
        with pytest.raises(ValueError, match='invalid syntax'):
            parse_int64(text)

    @pytest.mark.parametrize('text', [str(INT64_MAX + 1), str(INT64_MIN - 1)])
    def test_out_of_range(self, text):
        with pytest.raises(ValueError, match='out of range'):
            parse_int64(text)


class TestFloats:

    @pytest.mark.parametrize(('text', 'expected'), [
        ('3.25', 3.25),
        ('-0.5', -0.5),
        ('1e3', 1000.0),
        ('5.7', 5.7),
        ('10', 10.0),
        ])
    def test_parse(self, text, expected):
        assert parse_float64(text) == expected

    def test_special_literals(self):
        assert parse_float64('inf') == float('inf')
        assert parse_float64('-Infinity') == float('-inf')
        nan = parse_float64('NaN')
        assert nan != nan

    @pytest.mark.parametrize('text', ['', ' 1.5', '1.5 ', '1_000.0', 'abc'])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_float64(text)

    def test_overflow_is_rejected(self):
        with pytest.raises(ValueError, match='out of range'):
            parse_float64('1e999')


class TestBooleans:

    def test_parse(self):
        assert parse_bool('1') is True
        assert parse_bool('0') is False

    @pytest.mark.parametrize('text', ['true', 'false', '2', '', 'yes', ' 1', '01'])
    def test_other_text_is_rejected(self, text):
        with pytest.raises(ValueError, match='is not supported'):
            parse_bool(text)


class TestInstants:

    def test_layouts_agree(self):
        """Space-separated and T...Z text denote the same UTC instant"""
        expected = datetime.datetime(2024, 7, 22, 10, 30, tzinfo=tz.UTC)
        assert parse_instant('2024-07-22 10:30:00') == expected
        assert parse_instant('2024-07-22T10:30:00Z') == expected

    def test_date_only(self):
        assert parse_instant('2024-07-22') == datetime.datetime(2024, 7, 22, tzinfo=tz.UTC)

    def test_fractional_seconds(self):
        value = parse_instant('2024-07-22 10:30:00.123456789')
        assert value.microsecond == 123456
        assert parse_instant('2024-07-22T10:30:00.5Z').microsecond == 500000

    @pytest.mark.parametrize('text', ['', 'yesterday', '2024/07/22', '2024-07-22T10:30:00',
                                      '2024-13-01', '2024-02-30 00:00:00', '22-07-2024',
                                      '\u0662\u0660\u0662\u0664-07-22', '2024-07-22 1\u0660:30:00'])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_instant(text)

    def test_local_policy(self):
        """Both layouts yield equal instants in the local zone"""
        a = shape_instant(parse_instant('2024-07-22 10:30:00'), TimePolicy.LOCAL)
        b = shape_instant(parse_instant('2024-07-22T10:30:00Z'), TimePolicy.LOCAL)
        assert a == b
        assert isinstance(a.tzinfo, tz.tzlocal)
        assert a.astimezone(tz.UTC) == datetime.datetime(2024, 7, 22, 10, 30, tzinfo=tz.UTC)

    def test_frame_policy(self):
        """Both layouts yield the same Unix epoch integer"""
        a = shape_instant(parse_instant('2024-07-22 10:30:00'), TimePolicy.FRAME)
        b = shape_instant(parse_instant('2024-07-22T10:30:00Z'), TimePolicy.FRAME)
        assert a == b == 1721644200
        assert isinstance(a, int)

    def test_utc_policy(self):
        value = shape_instant(parse_instant('2024-07-22 10:30:00'), TimePolicy.UTC)
        assert value.tzinfo == tz.UTC

    def test_epoch(self):
        assert parse_epoch('1970-01-01 00:00:00') == 0
        assert parse_epoch('1970-01-02') == 86400
        assert parse_epoch('1970-01-01 00:00:01.999') == 1


class TestJson:

    def test_object(self):
        value = parse_json('{"name":"mysql","version":5.7,"enabled":true}')
        assert value == {'enabled': True, 'version': 5.7, 'name': 'mysql'}
        assert value['enabled'] is True
        assert isinstance(value['version'], float)

    def test_arrays(self):
        assert parse_json('["5.7","8.0"]') == ['5.7', '8.0']
        assert parse_json('[{"name":"mysql","version":5.7}]') == [{'name': 'mysql', 'version': 5.7}]

    def test_scalars(self):
        assert parse_json('null') is None
        assert parse_json('3') == 3

    @pytest.mark.parametrize('text', ['not-json', '{"a":', '', 'NaN', '[Infinity]'])
    def test_invalid(self, text):
        with pytest.raises(ValueError, match='failed to unmarshal JSON'):
            parse_json(text)

    def test_deep_nesting_is_a_value_error(self):
        with pytest.raises(ValueError, match='failed to unmarshal JSON'):
            parse_json('[' * 100000 + ']' * 100000)


def test_byte_values_are_rejected():
    for text in ['a', '1', '']:
        with pytest.raises(ValueError, match='scan type NullByte is not supported'):
            parse_unsupported_byte(text)


def test_rule_short_circuits_null():
    """A NULL never reaches the parser, even one that always fails"""
    def explode(value):
        raise AssertionError('parser called')

    rule = ConversionRule('explode', 'X', explode)
    assert rule.convert(None) is None
    byte_rule = ConversionRule('NullByte', 'BYTE', parse_unsupported_byte)
    assert byte_rule.convert(None) is None


if __name__ == '__main__':
    __import__('pytest').main([__file__])
