"""
Configuration package for the room-rental listing service.
"""

from myroom.config.settings import Settings, get_settings, settings

__all__ = ['Settings', 'get_settings', 'settings']
