"""Configuration subpackage - settings, country constants and logging."""
from .countries import COUNTRIES, CountryConfig, get_country
from .settings import Settings, get_settings

__all__ = ['COUNTRIES', 'CountryConfig', 'get_country', 'Settings', 'get_settings']
