"""Loader module for check profiles."""

from dbprobe.loader.profile_loader import ProfileLoadError, load_profile

__all__ = [
    "ProfileLoadError",
    "load_profile",
]
