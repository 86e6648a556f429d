"""
Record listing service.
"""

import logging
from typing import List, Optional

from sqlalchemy import Integer, bindparam

from kzstats.data_models.records import RecordEntry
from kzstats.services.base import BaseService
from kzstats.services.filters import FilterComposer, FilterSpec, PredicateChain, parse_record_id
from kzstats.services.leaderboard import RECORD_COLUMNS
from kzstats.utils.exceptions import NotFoundError

logger = logging.getLogger(__name__)

RECORD_BASE = """
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
FROM records AS record
JOIN courses AS course ON course.id = record.course_id
JOIN maps AS map ON map.id = course.map_id
JOIN players AS player ON player.id = record.player_id
LEFT JOIN servers AS server ON server.id = record.server_id"""


class RecordService(BaseService):
    """Service for single records and filtered record listings."""

    def __init__(self, session_factory, resolver, composer: Optional[FilterComposer] = None):
        super().__init__(session_factory)
        self.resolver = resolver
        self.composer = composer or FilterComposer(resolver)

    async def get_record(self, record_id: int) -> RecordEntry:
        """Get a single record by id."""
        record_id = parse_record_id(record_id)
        fragment = PredicateChain().add("record.id = ?", record_id).build()
        statement = fragment.to_text_clause(RECORD_BASE).columns(**RECORD_COLUMNS)

        async with self.get_session("record lookup") as session:
            row = (await session.execute(statement)).first()

        if row is None:
            raise NotFoundError("record", f"id={record_id}")
        return RecordEntry.from_row(row)

    async def get_records(self, spec: FilterSpec, limit: Optional[int] = None) -> List[RecordEntry]:
        """
        List records matching `spec`, newest first.

        Unlike leaderboards this returns every matching run, not just
        personal bests.
        """
        limit = self.clamp_limit(limit)
        fragment = await self.composer.build_predicates(spec)
        statement = (
            fragment.to_text_clause(RECORD_BASE, "\nORDER BY record.created_on DESC, record.id DESC\nLIMIT :limit")
            .bindparams(bindparam("limit", limit, type_=Integer()))
            .columns(**RECORD_COLUMNS)
        )

        async with self.get_session("record listing") as session:
            rows = (await session.execute(statement)).all()

        if not rows:
            raise NotFoundError("records", fragment.sql or None)

        logger.debug(f"Listed {len(rows)} records")
        return [RecordEntry.from_row(row) for row in rows]
