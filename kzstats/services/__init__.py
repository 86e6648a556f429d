"""
Services package for the KZ stats API.

Read-only query services over the records store.
"""

from .base import BaseService
from .catalog import CatalogService
from .filters import FilterComposer, FilterSpec
from .leaderboard import LeaderboardService
from .profile import ProfileService
from .records import RecordService
from .registry import ServiceRegistry
from .resolver import IdentifierResolver

__all__ = [
    'BaseService',
    'CatalogService',
    'FilterComposer',
    'FilterSpec',
    'IdentifierResolver',
    'LeaderboardService',
    'ProfileService',
    'RecordService',
    'ServiceRegistry',
]
