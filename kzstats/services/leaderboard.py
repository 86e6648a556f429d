"""
Leaderboard service.

Personal-best aggregation and rank lookup. A personal best is a player's
fastest record within one (course, mode, teleport class) group; equal times
are broken by the lowest record id. Places are numbered within each
(course, mode, teleport class) among personal bests only.
"""

import logging
from typing import List, Optional

from sqlalchemy import DateTime, Float, Integer, String, bindparam, select, text

from kzstats.data_models.records import LeaderboardEntry, RecordEntry
from kzstats.database.models import Course, Record
from kzstats.services.base import BaseService
from kzstats.services.filters import (
    FilterComposer, FilterSpec, PredicateChain, QueryFragment, ResolvedFilters, parse_record_id
)
from kzstats.utils.exceptions import NotFoundError

logger = logging.getLogger(__name__)

RECORD_COLUMNS = dict(
    id=Integer,
    course_id=Integer,
    map_id=Integer,
    map_name=String,
    stage=Integer,
    mode_id=Integer,
    player_id=Integer,
    player_name=String,
    server_id=Integer,
    server_name=String,
    time=Float,
    teleports=Integer,
    created_on=DateTime,
)

# Rank every record within its group, then keep the first of each group.
PERSONAL_BEST_BASE = """
SELECT
  record.id AS id,
  record.course_id AS course_id,
  course.map_id AS map_id,
  map.name AS map_name,
  course.stage AS stage,
  record.mode_id AS mode_id,
  record.player_id AS player_id,
  player.name AS player_name,
  record.server_id AS server_id,
  server.name AS server_name,
  record.time AS time,
  record.teleports AS teleports,
  record.created_on AS created_on
FROM (
  SELECT
    record.id AS id,
    ROW_NUMBER() OVER (
      PARTITION BY
        record.course_id,
        record.mode_id,
        record.player_id,
        CASE WHEN record.teleports > 0 THEN 1 ELSE 0 END
      ORDER BY record.time, record.id
    ) AS pb_rank
  FROM records AS record
  JOIN courses AS course ON course.id = record.course_id
  JOIN players AS player ON player.id = record.player_id"""

PERSONAL_BEST_JOINS = """
) AS best
JOIN records AS record ON record.id = best.id
JOIN courses AS course ON course.id = record.course_id
JOIN maps AS map ON map.id = course.map_id
JOIN players AS player ON player.id = record.player_id
LEFT JOIN servers AS server ON server.id = record.server_id
WHERE best.pb_rank = 1"""

PERSONAL_BEST_ORDER = "\nORDER BY record.time, course.stage, record.id"

# Number the personal bests of each group, then narrow the placed rows.
PLACED_HEAD = """
SELECT
{columns},
  placed.place AS place
FROM (
  SELECT
    pb.*,
    ROW_NUMBER() OVER (
      PARTITION BY
        pb.course_id,
        pb.mode_id,
        CASE WHEN pb.teleports > 0 THEN 1 ELSE 0 END
      ORDER BY pb.time, pb.id
    ) AS place
  FROM (""".format(columns=",\n".join(f"  placed.{name} AS {name}" for name in RECORD_COLUMNS))

PLACED_TAIL = """
  ) AS pb
) AS placed"""

PLACED_ORDER = "\nORDER BY placed.time, placed.stage, placed.id"


class LeaderboardService(BaseService):
    """Service for personal-best leaderboards and record placement."""

    def __init__(self, session_factory, resolver, composer: Optional[FilterComposer] = None):
        super().__init__(session_factory)
        self.resolver = resolver
        self.composer = composer or FilterComposer(resolver)

    async def personal_bests(self, spec: FilterSpec, limit: Optional[int] = None) -> List[RecordEntry]:
        """
        Get personal bests matching `spec`, fastest first.

        At most one row is returned per (course, mode, player, teleport class).
        Rows are ordered by time, then stage, then record id.

        Raises:
            InvalidIdentityError: Malformed identifiers or filter values
            InvalidDateRangeError: created_after is not before created_before
            NotFoundError: An identifier matched nothing or no records matched
        """
        limit = self.clamp_limit(limit)
        fragment = await self.composer.build_predicates(spec)
        return await self._fetch_personal_bests(fragment, limit)

    async def map_leaderboard(
        self,
        map_identifier,
        mode=None,
        stage: Optional[int] = 0,
        player=None,
        has_teleports: Optional[bool] = None,
        allow_banned: bool = False,
        limit: Optional[int] = None,
    ) -> List[LeaderboardEntry]:
        """
        Get the placed personal bests for one course of a map, fastest first.

        Each entry's rank is its place within its own mode and teleport class,
        the same number `rank_of` gives for that record. Narrowing to a
        `player` keeps their places on the full leaderboard.
        """
        limit = self.clamp_limit(limit)
        spec = FilterSpec(
            map=map_identifier,
            stage=stage,
            mode=mode,
            has_teleports=has_teleports,
            exclude_banned=not allow_banned,
        )
        fragment = await self.composer.build_predicates(spec)

        narrowing = PredicateChain()
        if player is not None:
            narrowing.add("placed.player_id = ?", await self.resolver.resolve_player_id(player))

        entries = await self._fetch_placed(fragment, narrowing.build(), limit)
        if not entries:
            raise NotFoundError("leaderboard entries", fragment.sql or None)
        return entries

    async def player_personal_bests(
        self,
        player_identifier,
        mode=None,
        map_identifier=None,
        stage: Optional[int] = None,
        has_teleports: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> List[RecordEntry]:
        """Get a player's personal bests across maps (or a single map)."""
        player = await self.resolver.resolve_player(player_identifier)
        spec = FilterSpec(
            map=map_identifier,
            stage=stage,
            mode=mode,
            player=player.id,
            has_teleports=has_teleports,
        )
        return await self.personal_bests(spec, limit)

    async def rank_of(self, record_id: int, allow_banned: bool = False) -> int:
        """
        Get the 1-based place of a record among the personal bests of its
        course, mode and teleport class.

        Only personal bests are ranked. A record that was superseded by a
        faster run (or lost an equal-time tie to a lower id) has no place, and
        neither does a banned player's record unless `allow_banned` is set.

        Raises:
            InvalidIdentityError: The record id does not fit a record key
            NotFoundError: Unknown record or the record holds no place
        """
        record_id = parse_record_id(record_id)

        async with self.get_session("record lookup") as session:
            result = await session.execute(
                select(Record.id, Record.mode_id, Record.teleports, Course.map_id, Course.stage)
                .join(Course, Course.id == Record.course_id)
                .where(Record.id == record_id)
            )
            target = result.first()

        if target is None:
            raise NotFoundError("record", f"id={record_id}")

        resolved = ResolvedFilters(
            map_id=target.map_id,
            stage=target.stage,
            mode=target.mode_id,
            has_teleports=target.teleports > 0,
            exclude_banned=not allow_banned,
        )
        narrowing = PredicateChain().add("placed.id = ?", record_id).build()
        entries = await self._fetch_placed(self.composer.compose(resolved), narrowing, limit=None)

        if not entries:
            logger.debug(f"Record {record_id} is not a personal best")
            raise NotFoundError("place", f"record {record_id} is not a personal best")
        return entries[0].rank

    async def _fetch_personal_bests(self, fragment: QueryFragment, limit: Optional[int]) -> List[RecordEntry]:
        tail = PERSONAL_BEST_JOINS + PERSONAL_BEST_ORDER
        if limit is not None:
            tail += "\nLIMIT :limit"

        statement = fragment.to_text_clause(PERSONAL_BEST_BASE, tail)
        if limit is not None:
            statement = statement.bindparams(bindparam("limit", limit, type_=Integer()))
        statement = statement.columns(**RECORD_COLUMNS)

        async with self.get_session("personal bests") as session:
            result = await session.execute(statement)
            rows = result.all()

        if not rows:
            raise NotFoundError("records", fragment.sql or None)

        return [RecordEntry.from_row(row) for row in rows]

    async def _fetch_placed(
        self, fragment: QueryFragment, narrowing: QueryFragment, limit: Optional[int]
    ) -> List[LeaderboardEntry]:
        """Place the personal bests selected by `fragment`, then keep rows matching `narrowing`."""
        inner_sql, binds = fragment.compile()
        outer_sql, outer_binds = narrowing.compile(prefix="q")
        binds.extend(outer_binds)

        sql = (
            f"{PLACED_HEAD}{PERSONAL_BEST_BASE}{inner_sql}{PERSONAL_BEST_JOINS}"
            f"{PLACED_TAIL}{outer_sql}{PLACED_ORDER}"
        )
        if limit is not None:
            sql += "\nLIMIT :limit"
            binds.append(bindparam("limit", limit, type_=Integer()))

        statement = text(sql).bindparams(*binds).columns(**RECORD_COLUMNS, place=Integer)

        async with self.get_session("leaderboard") as session:
            rows = (await session.execute(statement)).all()

        return [LeaderboardEntry(rank=row.place, record=RecordEntry.from_row(row)) for row in rows]
