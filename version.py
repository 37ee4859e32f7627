"""
Version information for Skywatch application.
Author: Oliver Ernster

Centralized version management for the location resolution and
astronomy aggregation core.
"""

# Core application information
__version__ = "1.0.0"
__version_info__ = (1, 0, 0)
__app_name__ = "Skywatch"
__app_display_name__ = "Skywatch - Tonight's Sky Highlights"
__author__ = "Oliver Ernster"
__company__ = "Skywatch by Oliver Ernster"
__copyright__ = "© 2025 Oliver Ernster"
__description__ = "Celestial viewing conditions for your current location"

# Feature information
__features__ = [
    "Device, IP and manual location resolution with timeout fallback",
    "Moon phase, planets, satellite passes, meteor showers and aurora",
    "Tonight's highlights ranked by priority",
    "Graceful degradation when individual data feeds fail",
]

# Data feed information
__feeds_version__ = "1.0.0"
__aurora_api_provider__ = "NOAA Space Weather Prediction Center"
__satellite_api_provider__ = "CelesTrak"
__geocoding_api_provider__ = "OpenStreetMap Nominatim"


def get_user_agent() -> str:
    """Get the User-Agent header sent to external services."""
    return f"{__app_name__}/{__version__}"


def get_version_string() -> str:
    """Get formatted version string."""
    return f"{__app_name__} v{__version__}"

