"""
Unit tests for date helpers.
"""
import unittest
from datetime import date, datetime, timedelta, timezone

from inventory_intelligence.utils.date_utils import convert_to_date, convert_to_datetime, utc_now

class TestConvertToDatetime(unittest.TestCase):
    """Test cases for datetime conversion."""

    def test_naive_string_is_unchanged(self):
        self.assertEqual(convert_to_datetime('2024-06-15T08:00:00'), datetime(2024, 6, 15, 8, 0))

    def test_utc_suffix_becomes_naive_utc(self):
        value = convert_to_datetime('2024-06-15T08:00:00Z')
        self.assertEqual(value, datetime(2024, 6, 15, 8, 0))
        self.assertIsNone(value.tzinfo)

    def test_offset_is_shifted_to_utc(self):
        self.assertEqual(convert_to_datetime('2024-06-15T10:30:00+02:00'), datetime(2024, 6, 15, 8, 30))
        aware = datetime(2024, 6, 15, 3, 0, tzinfo=timezone(timedelta(hours=-5)))
        self.assertEqual(convert_to_datetime(aware), datetime(2024, 6, 15, 8, 0))

    def test_mixed_inputs_compare(self):
        run_at = convert_to_datetime('2024-06-15T08:00:00Z')
        until = convert_to_datetime('2024-06-18T00:00:00')
        self.assertLess(run_at, until)

    def test_date_is_midnight(self):
        self.assertEqual(convert_to_datetime(date(2024, 6, 15)), datetime(2024, 6, 15))
        self.assertIsNone(convert_to_datetime(None))

    def test_invalid_value(self):
        with self.assertRaises(ValueError):
            convert_to_datetime(42)

    def test_utc_now_is_naive(self):
        self.assertIsNone(utc_now().tzinfo)

class TestConvertToDate(unittest.TestCase):
    """Test cases for date conversion."""

    def test_timestamp_string(self):
        self.assertEqual(convert_to_date('2024-06-15T08:00:00Z'), date(2024, 6, 15))
        self.assertEqual(convert_to_date(datetime(2024, 6, 15, 23, 0)), date(2024, 6, 15))

if __name__ == '__main__':
    unittest.main()
