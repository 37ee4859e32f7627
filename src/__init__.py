"""
Skywatch celestial viewing conditions

Resolves the observer's location (device, IP address or manual entry) and
aggregates tonight's astronomy data into a ranked list of highlights.

Features:
- Device location with timeout fallback to IP lookup and manual entry
- Moon phase, planets, satellite passes, meteor showers and aurora forecast
- Partial results when individual data feeds fail
- Tonight's highlights ordered by priority
"""

__version__ = "1.0.0"
__author__ = "Oliver Ernster"
__description__ = "Skywatch celestial viewing conditions"
