"""
Repository Module.

Provides specialized repository classes for different domain objects.
Each repository encapsulates CRUD operations for a specific table.
"""

from almanac.services.repositories.calendar_repository import CalendarRepository
from almanac.services.repositories.world_repository import WorldRepository

__all__ = [
    "CalendarRepository",
    "WorldRepository",
]
