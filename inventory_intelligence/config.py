import os
import configparser
from pathlib import Path

from inventory_intelligence.exceptions import ConfigError
from inventory_intelligence.models import IntelligenceSettings, UrgencyThresholds

CONFIG_DIR_ENV = 'INVENTORY_INTELLIGENCE_CONFIG_DIR'

DEFAULTS = {
    'LOGGING': {
        'level': 'INFO',
        'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        'directory': 'logs',
        'max_size_mb': '10',
        'backup_count': '5',
        'console_output': 'True',
        'file_output': 'True'
    },
    'BATCH_PROCESS': {
        'max_workers': '4'
    },
    'INTELLIGENCE': {
        'critical_days': '3',
        'warning_days': '7',
        'planned_days': '14',
        'default_safety_stock_days': '14',
        'include_in_transit_in_calculations': 'True',
        'target_days_of_cover': '45',
        'history_window_days': '30',
        'default_supplier_lead_time_days': '30',
        'dashboard_lookback_days': '7',
        'source_location_types': 'warehouse,3pl',
        'notify_on_critical': 'True',
        'notify_on_warning': 'False',
        'auto_refresh_interval_minutes': '60'
    }
}

_MISSING = (configparser.NoSectionError, configparser.NoOptionError)

class Config:
    """Configuration manager for the inventory intelligence engine.

    Values come from ``DEFAULTS`` overlaid with ``settings.ini`` in the
    directory named by ``INVENTORY_INTELLIGENCE_CONFIG_DIR`` (``config/``
    when unset). A partial settings file only overrides the keys it names.
    """

    _instance = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._config_path = Path(os.environ.get(CONFIG_DIR_ENV, 'config')) / 'settings.ini'
        self._parser = configparser.ConfigParser(interpolation=None)
        self._parser.read_dict(DEFAULTS)
        self._parser.read(self._config_path)

        self._initialized = True

    @property
    def config_path(self):
        return self._config_path

    def _lookup(self, getter, section, key, default):
        try:
            return getter(section, key)
        except _MISSING:
            return default
        except ValueError as e:
            raise ConfigError(
                f"Invalid value for [{section}] {key}",
                details={"value": self._parser.get(section, key), "error": str(e)}
            ) from e

    def get(self, section, key, default=None):
        """Get a raw configuration value."""
        return self._lookup(self._parser.get, section, key, default)

    def get_int(self, section, key, default=None):
        return self._lookup(self._parser.getint, section, key, default)

    def get_float(self, section, key, default=None):
        return self._lookup(self._parser.getfloat, section, key, default)

    def get_boolean(self, section, key, default=None):
        return self._lookup(self._parser.getboolean, section, key, default)

    def get_list(self, section, key, default=()):
        """Get a comma-separated value as a tuple of stripped, non-empty items."""
        raw = self.get(section, key)
        if raw is None:
            return tuple(default)
        return tuple(item.strip() for item in raw.split(',') if item.strip())

    def set(self, section, key, value):
        """Set a configuration value in memory."""
        if not self._parser.has_section(section):
            self._parser.add_section(section)
        self._parser.set(section, key, str(value))

    @property
    def log_config(self):
        """Logging options for logging_setup."""
        return {
            'level': self.get('LOGGING', 'level'),
            'format': self.get('LOGGING', 'format'),
            'directory': self.get('LOGGING', 'directory'),
            'max_size_mb': self.get_int('LOGGING', 'max_size_mb'),
            'backup_count': self.get_int('LOGGING', 'backup_count'),
            'console_output': self.get_boolean('LOGGING', 'console_output'),
            'file_output': self.get_boolean('LOGGING', 'file_output')
        }

    @property
    def batch_config(self):
        return {'max_workers': max(1, self.get_int('BATCH_PROCESS', 'max_workers', 1))}

    def intelligence_settings(self):
        """Build an IntelligenceSettings value from the INTELLIGENCE section.

        Returns:
            Validated IntelligenceSettings

        Raises:
            ConfigError: If the configured thresholds or policy values are inconsistent
        """
        section = 'INTELLIGENCE'
        thresholds = UrgencyThresholds(
            critical_days=self.get_float(section, 'critical_days'),
            warning_days=self.get_float(section, 'warning_days'),
            planned_days=self.get_float(section, 'planned_days')
        )
        settings = IntelligenceSettings(
            urgency_thresholds=thresholds,
            default_safety_stock_days=self.get_float(section, 'default_safety_stock_days'),
            include_in_transit_in_calculations=self.get_boolean(section, 'include_in_transit_in_calculations'),
            target_days_of_cover=self.get_float(section, 'target_days_of_cover'),
            history_window_days=self.get_int(section, 'history_window_days'),
            default_supplier_lead_time_days=self.get_int(section, 'default_supplier_lead_time_days'),
            dashboard_lookback_days=self.get_int(section, 'dashboard_lookback_days'),
            source_location_types=self.get_list(section, 'source_location_types'),
            notify_on_critical=self.get_boolean(section, 'notify_on_critical'),
            notify_on_warning=self.get_boolean(section, 'notify_on_warning'),
            auto_refresh_interval_minutes=self.get_int(section, 'auto_refresh_interval_minutes')
        )

        settings.validate()
        return settings

# Global config instance
config = Config()
