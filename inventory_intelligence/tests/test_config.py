"""
Unit tests for configuration handling.
"""
import unittest

from inventory_intelligence.config import config
from inventory_intelligence.exceptions import ConfigError

class TestConfig(unittest.TestCase):
    """Test cases for the configuration manager."""

    def setUp(self):
        """Remember the values the tests change."""
        self._saved = {
            key: config.get('INTELLIGENCE', key)
            for key in ('critical_days', 'warning_days', 'history_window_days', 'source_location_types')
        }

    def tearDown(self):
        """Restore the shared configuration."""
        for key, value in self._saved.items():
            config.set('INTELLIGENCE', key, value)

    def test_intelligence_settings_from_defaults(self):
        settings = config.intelligence_settings()
        thresholds = settings.urgency_thresholds
        self.assertLess(thresholds.critical_days, thresholds.warning_days)
        self.assertLess(thresholds.warning_days, thresholds.planned_days)
        self.assertGreater(settings.history_window_days, 0)

    def test_overrides_are_applied(self):
        config.set('INTELLIGENCE', 'critical_days', 2)
        config.set('INTELLIGENCE', 'source_location_types', 'warehouse, 3pl, fba-prep')
        settings = config.intelligence_settings()
        self.assertEqual(settings.urgency_thresholds.critical_days, 2.0)
        self.assertEqual(settings.source_location_types, ('warehouse', '3pl', 'fba-prep'))

    def test_inconsistent_thresholds_rejected(self):
        config.set('INTELLIGENCE', 'critical_days', 10)
        config.set('INTELLIGENCE', 'warning_days', 5)
        with self.assertRaises(ConfigError):
            config.intelligence_settings()

    def test_typed_getters_fall_back_to_default(self):
        self.assertEqual(config.get_int('MISSING', 'key', 7), 7)
        self.assertEqual(config.get_float('INTELLIGENCE', 'missing', 1.5), 1.5)
        self.assertTrue(config.get_boolean('MISSING', 'flag', True))
        self.assertIsNone(config.get('MISSING', 'key'))

    def test_malformed_value_rejected(self):
        config.set('INTELLIGENCE', 'history_window_days', 'thirty')
        with self.assertRaises(ConfigError) as context:
            config.intelligence_settings()
        self.assertIn('history_window_days', str(context.exception))

    def test_get_list(self):
        self.assertEqual(config.get_list('INTELLIGENCE', 'source_location_types'), ('warehouse', '3pl'))
        self.assertEqual(config.get_list('MISSING', 'key', ['a']), ('a',))

    def test_batch_config(self):
        self.assertGreaterEqual(config.batch_config['max_workers'], 1)

if __name__ == '__main__':
    unittest.main()
