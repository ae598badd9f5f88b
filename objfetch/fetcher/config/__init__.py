"""
Configuration for the object fetcher.
"""

from .settings import FetcherSettings, load_config_from_yaml, load_settings

__all__ = ["FetcherSettings", "load_settings", "load_config_from_yaml"]
