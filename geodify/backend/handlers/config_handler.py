#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration Handler Module
Handles application settings and the last choices made in the setup wizard
"""

import os
import json
import logging

from geodify import __version__
from geodify.backend.handlers.vdf_patcher import BACKUP_SUFFIX
from geodify.backend.models.configuration import GD_APP_ID, CHANNEL_NIGHTLY

# Initialize logger
logger = logging.getLogger(__name__)


class ConfigHandler:
    """
    Handles application configuration and settings
    Singleton pattern ensures all code shares the same instance
    """
    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigHandler, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize configuration handler with default settings"""
        # Only initialize once (singleton pattern)
        if ConfigHandler._initialized:
            return
        ConfigHandler._initialized = True

        from geodify.shared.paths import get_geodify_config_dir
        self.config_dir = str(get_geodify_config_dir())
        self.config_file = os.path.join(self.config_dir, "config.json")
        self.settings = {
            "version": __version__,
            "channel": CHANNEL_NIGHTLY,
            "gpu_type": None,  # None = use detected value
            "display_server": None,  # None = use detected value
            "proton_name": None,  # Internal name of the last chosen compatibility tool
            "game_path": None,
            "steam_path": None,  # Overrides Steam root detection when set
            "verbose": False,
            "backup_suffix": BACKUP_SUFFIX,
            "app_id": GD_APP_ID,
            "request_timeout": 30,  # seconds, for release lookups
        }

        self._load_config()

    @classmethod
    def reset(cls):
        """Drop the shared instance so the next call re-reads from disk."""
        cls._instance = None
        cls._initialized = False

    def _load_config(self):
        """
        Load configuration from file and update in-memory cache.
        """
        try:
            if os.path.exists(self.config_file):
                with open(self.config_file, 'r') as f:
                    saved_config = json.load(f)
                    self.settings.update(saved_config)
                    logger.debug("Loaded configuration from file")
            else:
                logger.debug("No configuration file found, using defaults")
        except Exception as e:
            logger.error(f"Error loading configuration: {e}")

    def _read_config_from_disk(self):
        """
        Read configuration directly from disk without caching.
        Returns merged config (defaults + saved values).
        """
        try:
            config = self.settings.copy()
            if os.path.exists(self.config_file):
                with open(self.config_file, 'r') as f:
                    saved_config = json.load(f)
                    config.update(saved_config)
            return config
        except Exception as e:
            logger.error(f"Error reading configuration from disk: {e}")
            return self.settings.copy()

    def _create_config_dir(self):
        """Create configuration directory if it doesn't exist"""
        try:
            os.makedirs(self.config_dir, exist_ok=True)
            logger.debug(f"Created configuration directory: {self.config_dir}")
        except Exception as e:
            logger.error(f"Error creating configuration directory: {e}")

    def save_config(self):
        """Save current configuration to file"""
        try:
            self._create_config_dir()
            with open(self.config_file, 'w') as f:
                json.dump(self.settings, f, indent=2)
            logger.debug("Saved configuration to file")
            return True
        except Exception as e:
            logger.error(f"Error saving configuration: {e}")
            return False

    def get(self, key, default=None):
        """
        Get a configuration value by key.
        Always reads fresh from disk to avoid stale data.
        """
        config = self._read_config_from_disk()
        value = config.get(key)
        return default if value is None else value

    def update(self, settings_dict):
        """Update multiple configuration values"""
        self.settings.update(settings_dict)
        return True

    def remember_choices(self, context):
        """Persist the wizard's choices so they become next run's defaults"""
        # gpu_type/display_server stay user-managed overrides, detection runs every time
        self.update({
            "channel": context.channel,
            "proton_name": context.proton_name,
            "game_path": str(context.game_path) if context.game_path else None,
            "verbose": context.verbose,
        })
        return self.save_config()
