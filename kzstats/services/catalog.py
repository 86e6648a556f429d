"""
Catalog service for maps, servers and modes.
"""

import logging
from datetime import datetime
from typing import List, Optional, Union

from sqlalchemy import Integer, bindparam, select
from sqlalchemy.orm import selectinload

from kzstats.constants import QueryConstants
from kzstats.data_models.catalog import CourseInfo, MapDetail, ModeInfo, ServerDetail
from kzstats.database.models import GameMode, Map, Server
from kzstats.services.base import BaseService
from kzstats.services.filters import (
    LIKE_ESCAPE, PredicateChain, check_date_range, like_pattern, parse_bounded_int, parse_date_bound
)
from kzstats.utils.exceptions import NotFoundError
from kzstats.utils.modes import parse_mode, parse_tier

logger = logging.getLogger(__name__)

MAP_ID_BASE = "\nSELECT map.id AS id FROM maps AS map"

MAIN_COURSE_TIER = (
    "EXISTS (SELECT 1 FROM courses AS course"
    " WHERE course.map_id = map.id AND course.stage = 0 AND course.kzt_difficulty = ?)"
)


def _map_detail(map_row: Map) -> MapDetail:
    courses = [
        CourseInfo(
            id=course.id,
            stage=course.stage,
            kzt=course.kzt,
            kzt_difficulty=course.kzt_difficulty,
            skz=course.skz,
            skz_difficulty=course.skz_difficulty,
            vnl=course.vnl,
            vnl_difficulty=course.vnl_difficulty,
        )
        for course in map_row.course_list
    ]
    # Map tier is the main course's KZT difficulty
    tier = next((course.kzt_difficulty for course in courses if course.stage == 0), None)

    return MapDetail(
        id=map_row.id,
        name=map_row.name,
        tier=tier,
        courses=courses,
        validated=map_row.validated,
        filesize=map_row.filesize,
        mapper_id=map_row.created_by,
        mapper_name=map_row.mapper.name if map_row.mapper else None,
        approver_id=map_row.approved_by,
        approver_name=map_row.approver.name if map_row.approver else None,
        created_on=map_row.created_on,
        updated_on=map_row.updated_on,
    )


def _server_detail(server: Server) -> ServerDetail:
    return ServerDetail(
        id=server.id,
        name=server.name,
        owner_id=server.owned_by,
        owner_name=server.owner.name if server.owner else None,
        approver_id=server.approved_by,
        approver_name=server.approver.name if server.approver else None,
    )


def _map_with_details():
    return select(Map).options(
        selectinload(Map.course_list),
        selectinload(Map.mapper),
        selectinload(Map.approver),
    )


def _server_with_details():
    return select(Server).options(
        selectinload(Server.owner),
        selectinload(Server.approver),
    )


class CatalogService(BaseService):
    """Service for map, server and mode lookups."""

    def __init__(self, session_factory, resolver):
        super().__init__(session_factory)
        self.resolver = resolver

    async def get_map_detail(self, identifier) -> MapDetail:
        """Get a map with its courses, mapper and approver."""
        map_row = await self.resolver.resolve_map(identifier)

        async with self.get_session("map detail") as session:
            detailed = await session.scalar(_map_with_details().where(Map.id == map_row.id))

        if detailed is None:
            raise NotFoundError("map", f"id={map_row.id}")
        return _map_detail(detailed)

    async def list_maps(
        self,
        name: Optional[str] = None,
        tier=None,
        courses: Optional[int] = None,
        validated: Optional[bool] = None,
        created_by=None,
        approved_by=None,
        created_after: Union[datetime, str, None] = None,
        created_before: Union[datetime, str, None] = None,
        limit: Optional[int] = None,
    ) -> List[MapDetail]:
        """
        List maps ordered by id.

        Args:
            name: Case-insensitive substring of the map name
            tier: Tier of the main course (KZT difficulty of stage 0)
            courses: Exact number of courses
            validated: Only validated (or only unvalidated) maps
            created_by: Player identifier of the mapper
            approved_by: Player identifier of the approver
            created_after: Exclusive lower bound on the creation date
            created_before: Exclusive upper bound on the creation date
            limit: Maximum number of maps

        Raises:
            InvalidIdentityError: Unparseable tier, course count, player
                identifiers, dates or limit
            InvalidDateRangeError: created_after is not before created_before
            NotFoundError: A player identifier or the filters matched nothing
        """
        limit = self.clamp_limit(limit)
        tier = parse_tier(tier) if tier is not None else None
        if courses is not None:
            courses = parse_bounded_int(courses, QueryConstants.MAX_COURSES, "a course count")
        created_after = parse_date_bound(created_after)
        created_before = parse_date_bound(created_before)
        check_date_range(created_after, created_before)

        mapper_id = await self.resolver.resolve_player_id(created_by) if created_by is not None else None
        approver_id = await self.resolver.resolve_player_id(approved_by) if approved_by is not None else None

        chain = PredicateChain()
        if name:
            chain.add(f"LOWER(map.name) LIKE ? ESCAPE '{LIKE_ESCAPE}'", like_pattern(name.strip()))
        if tier is not None:
            chain.add(MAIN_COURSE_TIER, int(tier))
        if courses is not None:
            chain.add("map.courses = ?", courses)
        if validated is not None:
            chain.add("map.validated = ?", validated)
        if mapper_id is not None:
            chain.add("map.created_by = ?", mapper_id)
        if approver_id is not None:
            chain.add("map.approved_by = ?", approver_id)
        if created_after is not None:
            chain.add("map.created_on > ?", created_after)
        if created_before is not None:
            chain.add("map.created_on < ?", created_before)
        fragment = chain.build()

        statement = (
            fragment.to_text_clause(MAP_ID_BASE, "\nORDER BY map.id\nLIMIT :limit")
            .bindparams(bindparam("limit", limit, type_=Integer()))
            .columns(id=Integer)
        )

        async with self.get_session("map listing") as session:
            map_ids = (await session.scalars(statement)).all()
            if not map_ids:
                raise NotFoundError("maps", fragment.sql or None)
            maps = (await session.scalars(
                _map_with_details().where(Map.id.in_(map_ids)).order_by(Map.id)
            )).all()

        return [_map_detail(map_row) for map_row in maps]

    async def get_server_detail(self, identifier) -> ServerDetail:
        """Get a server with its owner and approver."""
        server = await self.resolver.resolve_server(identifier)

        async with self.get_session("server detail") as session:
            detailed = await session.scalar(_server_with_details().where(Server.id == server.id))

        if detailed is None:
            raise NotFoundError("server", f"id={server.id}")
        return _server_detail(detailed)

    async def list_servers(
        self,
        name: Optional[str] = None,
        owned_by=None,
        approved_by=None,
        limit: Optional[int] = None,
    ) -> List[ServerDetail]:
        """List servers ordered by id; owner and approver take any player identifier."""
        limit = self.clamp_limit(limit)
        query = _server_with_details().order_by(Server.id).limit(limit)
        if name:
            query = query.where(Server.name.icontains(name.strip(), autoescape=True))
        if owned_by is not None:
            query = query.where(Server.owned_by == await self.resolver.resolve_player_id(owned_by))
        if approved_by is not None:
            query = query.where(Server.approved_by == await self.resolver.resolve_player_id(approved_by))

        async with self.get_session("server listing") as session:
            servers = (await session.scalars(query)).all()

        if not servers:
            raise NotFoundError("servers")
        return [_server_detail(server) for server in servers]

    async def get_modes(self) -> List[ModeInfo]:
        async with self.get_session("mode listing") as session:
            modes = (await session.scalars(select(GameMode).order_by(GameMode.id))).all()

        if not modes:
            raise NotFoundError("modes")
        return [ModeInfo(id=mode.id, name=mode.name, created_on=mode.created_on) for mode in modes]

    async def get_mode(self, value) -> ModeInfo:
        """Get a mode by id or any of its names."""
        mode = parse_mode(value)

        async with self.get_session("mode lookup") as session:
            row = await session.scalar(select(GameMode).where(GameMode.id == int(mode)))

        if row is None:
            raise NotFoundError("mode", mode.api_name)
        return ModeInfo(id=row.id, name=row.name, created_on=row.created_on)
