"""Repository facades exposing typed accessors over the low-level ``*Operations`` mixins."""

from infrastructure.database.repositories.misting import MistingLogRepository
from infrastructure.database.repositories.notifications import NotificationRepository
from infrastructure.database.repositories.sensors import SensorReadingRepository
from infrastructure.database.repositories.thermal_records import ThermalRecordRepository
from infrastructure.database.repositories.users import UserRepository

__all__ = [
    "MistingLogRepository",
    "NotificationRepository",
    "SensorReadingRepository",
    "ThermalRecordRepository",
    "UserRepository",
]
