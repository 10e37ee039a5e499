"""
Domain Value Objects Package
=============================
Immutable value objects for shed readings, misting sessions and thermal
scans, plus the application exception hierarchy.
"""

from .misting import EnvironmentSnapshot, MistingSession
from .readings import SensorReading
from .thermal import ThermalScan

__all__ = [
    "EnvironmentSnapshot",
    "MistingSession",
    "SensorReading",
    "ThermalScan",
]
