from .settings import GroupingConfig, SettingsManager
from .profiles import DEFAULT_IGNORE_PROFILES

__all__ = ['GroupingConfig', 'SettingsManager', 'DEFAULT_IGNORE_PROFILES']
