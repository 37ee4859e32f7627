"""
Configuration management for the Skywatch application.
Author: Oliver Ernster

This module handles loading and validating application configuration
using Pydantic models for type safety and validation.
"""

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from version import __app_name__

logger = logging.getLogger(__name__)


class LocationConfig(BaseModel):
    """
    Configuration for location resolution.

    Follows Single Responsibility Principle - only responsible for
    location resolution settings and validation.
    """

    device_timeout_ms: int = Field(
        default=5000,
        ge=0,
        le=60000,
        description="How long to wait for the device before falling back to IP lookup",
    )
    high_accuracy: bool = Field(default=True, description="Request high accuracy device fixes")
    watch_timeout_ms: int = Field(
        default=10000,
        ge=0,
        description="Timeout passed to the device location capability",
    )
    max_cache_age_ms: int = Field(
        default=0,
        ge=0,
        description="Maximum age of a cached device position",
    )
    lookup_timeout_seconds: int = Field(
        default=8,
        ge=1,
        le=30,
        description="Timeout for IP lookup and geocoding requests",
    )
    fallback_place: Optional[str] = Field(
        default=None,
        description="Place submitted as manual entry when automatic detection fails",
    )

    @field_validator("fallback_place")
    @classmethod
    def validate_fallback_place(cls, v):
        """Normalise an empty fallback place to None."""
        if v is None:
            return None
        v = v.strip()
        return v or None


class FeedToggleConfig(BaseModel):
    """Configuration for the individual astronomy data feeds."""

    moon: bool = True
    planets: bool = True
    satellites: bool = True
    meteor_showers: bool = True
    aurora: bool = True

    def get_enabled_feeds(self) -> List[str]:
        """Get list of enabled feed names."""
        return [name for name, enabled in self.model_dump().items() if enabled]


class AstronomyConfig(BaseModel):
    """
    Configuration for astronomy data aggregation.

    Follows Single Responsibility Principle - only responsible for
    astronomy feed configuration data and validation.
    """

    feed_timeout_seconds: Optional[float] = Field(
        default=15.0,
        gt=0,
        le=120,
        description="Per-feed deadline; None waits for every feed to settle",
    )
    http_timeout_seconds: int = Field(
        default=15,
        ge=5,
        le=60,
        description="HTTP request timeout for feeds",
    )
    feeds: FeedToggleConfig = Field(default_factory=FeedToggleConfig)
    ephemeris_file: str = Field(default="de421.bsp", description="JPL ephemeris file")
    ephemeris_cache_dir: Optional[str] = Field(
        default=None,
        description="Directory for downloaded ephemeris files",
    )
    tle_url: str = Field(
        default="https://celestrak.org/NORAD/elements/gp.php?GROUP=visual&FORMAT=tle",
        description="Two-line element source for satellite passes",
    )
    tracked_satellites: List[str] = Field(
        default_factory=lambda: ["ISS (ZARYA)", "HST", "CSS (TIANHE)"],
        description="Satellite names to predict passes for",
    )
    aurora_url: str = Field(
        default="https://services.swpc.noaa.gov/json/planetary_k_index_1m.json",
        description="Planetary K-index source",
    )

    @field_validator("tracked_satellites")
    @classmethod
    def validate_tracked_satellites(cls, v):
        """Strip names and drop empty entries."""
        cleaned = [name.strip() for name in v if name and name.strip()]
        if not cleaned:
            raise ValueError("At least one tracked satellite is required")
        return cleaned

    def get_cache_dir(self) -> Path:
        """Get the ephemeris cache directory, defaulting to the user cache."""
        if self.ephemeris_cache_dir:
            return Path(self.ephemeris_cache_dir)
        return Path.home() / ".cache" / __app_name__.lower()


class AppConfig(BaseModel):
    """Main configuration data model."""

    location: LocationConfig = Field(default_factory=LocationConfig)
    astronomy: AstronomyConfig = Field(default_factory=AstronomyConfig)
    log_level: str = Field(default="WARNING", description="Root log level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level name."""
        level = str(v).upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("Log level must be DEBUG, INFO, WARNING, ERROR or CRITICAL")
        return level


class ConfigurationError(Exception):
    """Exception raised for configuration-related errors."""

    pass


class ConfigManager:
    """
    Loads application configuration from a JSON file.

    A missing file yields the default configuration; nothing is written
    back to disk.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file. If None, uses the
                platform configuration directory
        """
        if config_path is None:
            self.config_path = self.get_default_config_path()
        else:
            self.config_path = Path(config_path)
        self.config: Optional[AppConfig] = None
        logger.debug(f"ConfigManager initialized with path: {self.config_path}")

    @staticmethod
    def get_default_config_path() -> Path:
        """
        Get the default configuration file path.

        On Windows, uses AppData/Roaming/Skywatch/config.json
        On Linux, uses XDG_CONFIG_HOME/Skywatch/config.json or ~/.config/Skywatch/config.json

        Returns:
            Path: Default configuration file path
        """
        if os.name == "nt":  # Windows
            appdata = os.environ.get("APPDATA")
            if appdata:
                return Path(appdata) / __app_name__ / "config.json"
        else:  # Linux/Unix
            xdg_config = os.environ.get("XDG_CONFIG_HOME")
            if xdg_config:
                return Path(xdg_config) / __app_name__ / "config.json"
            return Path.home() / ".config" / __app_name__ / "config.json"

        # Fallback to current directory for development
        return Path("config.json")

    def load_config(self) -> AppConfig:
        """
        Load configuration from file.

        Returns:
            AppConfig: The loaded configuration, or defaults if the file is missing

        Raises:
            ConfigurationError: If the configuration file is invalid
        """
        logger.debug(f"Loading config from: {self.config_path}")

        if not self.config_path.exists():
            logger.info(f"Config file doesn't exist, using defaults: {self.config_path}")
            self.config = AppConfig()
            return self.config

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self.config = AppConfig(**data)
            logger.debug(f"Successfully loaded config from: {self.config_path}")
            return self.config
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in config file: {e}")
        except Exception as e:
            raise ConfigurationError(f"Failed to load config: {e}")

    def get_config(self) -> AppConfig:
        """Get current configuration, loading it on first use."""
        if self.config is None:
            return self.load_config()
        return self.config

    def get_config_summary(self) -> dict:
        """Get configuration summary for display."""
        config = self.get_config()
        return {
            "config_path": str(self.config_path),
            "device_timeout_ms": config.location.device_timeout_ms,
            "fallback_place": config.location.fallback_place,
            "feed_timeout_seconds": config.astronomy.feed_timeout_seconds,
            "enabled_feeds": config.astronomy.feeds.get_enabled_feeds(),
            "log_level": config.log_level,
        }
