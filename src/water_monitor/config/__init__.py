"""Configuration management for Water Monitor."""

from water_monitor.config.schema import AppConfig
from water_monitor.config.manager import ConfigManager

__all__ = ["AppConfig", "ConfigManager"]
