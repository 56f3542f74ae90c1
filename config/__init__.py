"""
Configuration module for the Staysync booking and calendar sync system.
"""

from .settings import firebase_config, discord_config, sync_config, app_config, api_config

__all__ = ['firebase_config', 'discord_config', 'sync_config', 'app_config', 'api_config']
