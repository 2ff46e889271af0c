"""
Unit tests for safety stock thresholds.
"""
import unittest

from inventory_intelligence.models import SafetyStockRule, ThresholdType
from inventory_intelligence.core.safety_stock import (
    calculate_safety_stock,
    calculate_safety_stock_units,
    find_active_rule
)
from inventory_intelligence.exceptions import SafetyStockError

class TestSafetyStock(unittest.TestCase):
    """Test cases for safety stock evaluation."""

    def test_days_of_cover_rule(self):
        """30 days of cover at 4 units/day is 120 units."""
        rule = SafetyStockRule('P1', 'AMZ', ThresholdType.DAYS_OF_COVER, 30)
        threshold = calculate_safety_stock(rule, 4.0, 14)
        self.assertEqual(threshold.units, 120)
        self.assertIs(threshold.rule, rule)

    def test_units_rule_rounds_up(self):
        rule = SafetyStockRule('P1', 'AMZ', ThresholdType.UNITS, 99.2)
        self.assertEqual(calculate_safety_stock(rule, 4.0, 14).units, 100)

    def test_default_policy_without_rule(self):
        threshold = calculate_safety_stock(None, 2.5, 14)
        self.assertEqual(threshold.units, 35)
        self.assertIsNone(threshold.rule)
        self.assertIn('default 14 days', threshold.reasoning.message)

    def test_zero_rate_needs_no_cover(self):
        self.assertEqual(calculate_safety_stock_units(14, 0.0), 0)
        rule = SafetyStockRule('P1', 'AMZ', ThresholdType.DAYS_OF_COVER, 30)
        self.assertEqual(calculate_safety_stock(rule, 0.0, 14).units, 0)

    def test_fractional_units_round_up(self):
        self.assertEqual(calculate_safety_stock_units(14, 3.3), 47)
        self.assertEqual(calculate_safety_stock_units(3, 0.1), 1)

    def test_negative_threshold_rejected(self):
        rule = SafetyStockRule('P1', 'AMZ', ThresholdType.UNITS, -5)
        with self.assertRaises(SafetyStockError):
            calculate_safety_stock(rule, 4.0, 14)

    def test_find_active_rule(self):
        rules = [
            SafetyStockRule('P1', 'AMZ', ThresholdType.UNITS, 10, is_active=False),
            SafetyStockRule('P1', 'AMZ', ThresholdType.UNITS, 20),
            SafetyStockRule('P2', 'AMZ', ThresholdType.UNITS, 30),
        ]
        self.assertEqual(find_active_rule(rules, 'P1', 'AMZ').threshold_value, 20)
        self.assertIsNone(find_active_rule(rules, 'P1', 'WH'))

if __name__ == '__main__':
    unittest.main()
