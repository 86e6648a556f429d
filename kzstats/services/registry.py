"""
Service wiring shared by the HTTP app and scripts.
"""

from dataclasses import dataclass

from kzstats.services.catalog import CatalogService
from kzstats.services.filters import FilterComposer
from kzstats.services.leaderboard import LeaderboardService
from kzstats.services.profile import ProfileService
from kzstats.services.records import RecordService
from kzstats.services.resolver import IdentifierResolver


@dataclass
class ServiceRegistry:
    """All services bound to one session factory."""
    resolver: IdentifierResolver
    composer: FilterComposer
    leaderboard: LeaderboardService
    records: RecordService
    profile: ProfileService
    catalog: CatalogService

    @classmethod
    def from_session_factory(cls, session_factory) -> "ServiceRegistry":
        resolver = IdentifierResolver(session_factory)
        composer = FilterComposer(resolver)
        return cls(
            resolver=resolver,
            composer=composer,
            leaderboard=LeaderboardService(session_factory, resolver, composer),
            records=RecordService(session_factory, resolver, composer),
            profile=ProfileService(session_factory, resolver),
            catalog=CatalogService(session_factory, resolver),
        )
