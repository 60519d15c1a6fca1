"""
Configuration for restbridge.

Settings come from RESTBRIDGE_* environment variables; static API profile
data lives in restbridge.profiles.
"""

from .settings import AppSettings, load_settings

__all__ = [
    "AppSettings",
    "load_settings",
]
