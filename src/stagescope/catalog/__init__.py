"""
Stagescope Catalog module

Provides AppCatalog for reading collector output and SampleWatcher for
streaming newly written samples.
"""

from .app_catalog import AppCatalog, AppInfo, Timeline
from .watcher import SampleWatcher

__all__ = [
    "AppCatalog",
    "AppInfo",
    "SampleWatcher",
    "Timeline",
]
