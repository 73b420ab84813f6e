"""Configuration and dependency wiring."""

from music_coordinator.config.settings import Settings, clear_settings_cache, get_settings

__all__ = [
    "Settings",
    "clear_settings_cache",
    "get_settings",
]
