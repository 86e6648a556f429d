"""
Player profile service.

Player lookups and per-mode completion counts.
"""

import logging
from typing import List, Optional

from sqlalchemy import and_, case, func, select

from kzstats.constants import Mode, QueryConstants
from kzstats.data_models.profile import PlayerProfile, PlayerSummary, RecordCount, RecordSummary
from kzstats.database.models import Course, Player, Record
from kzstats.services.base import BaseService
from kzstats.services.filters import parse_bounded_int
from kzstats.utils.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class ProfileService(BaseService):
    """Service for player profiles and listings."""

    def __init__(self, session_factory, resolver):
        super().__init__(session_factory)
        self.resolver = resolver

    async def get_player_profile(self, identifier) -> PlayerProfile:
        """
        Get a player with their completion counts.

        A completion is a distinct main course (stage 0) finished in a mode,
        counted separately for pro and teleport runs.

        Raises:
            InvalidIdentityError: Malformed identifier
            NotFoundError: No player matched
        """
        player = await self.resolver.resolve_player(identifier)

        tp_class = case((Record.teleports > 0, 1), else_=0).label("tp_class")
        completed = (
            select(Record.mode_id, Record.course_id, tp_class)
            .join(Course, Course.id == Record.course_id)
            .where(Record.player_id == player.id, Course.stage == 0)
            .distinct()
            .subquery()
        )

        def completions(mode: Mode, has_teleports: bool):
            matches = and_(
                completed.c.mode_id == int(mode),
                completed.c.tp_class == (1 if has_teleports else 0),
            )
            return func.coalesce(func.sum(case((matches, 1), else_=0)), 0)

        query = select(
            completions(Mode.KZTIMER, True).label("kzt_tp"),
            completions(Mode.KZTIMER, False).label("kzt_pro"),
            completions(Mode.SIMPLEKZ, True).label("skz_tp"),
            completions(Mode.SIMPLEKZ, False).label("skz_pro"),
            completions(Mode.VANILLA, True).label("vnl_tp"),
            completions(Mode.VANILLA, False).label("vnl_pro"),
        ).select_from(completed)

        async with self.get_session("player completion") as session:
            counts = (await session.execute(query)).one()

        kzt = RecordCount(tp=int(counts.kzt_tp), pro=int(counts.kzt_pro))
        skz = RecordCount(tp=int(counts.skz_tp), pro=int(counts.skz_pro))
        vnl = RecordCount(tp=int(counts.vnl_tp), pro=int(counts.vnl_pro))
        total = sum(count.tp + count.pro for count in (kzt, skz, vnl))

        return PlayerProfile(
            player=PlayerSummary(account_id=player.id, name=player.name, is_banned=player.is_banned),
            records=RecordSummary(total=total, kzt=kzt, skz=skz, vnl=vnl),
        )

    async def list_players(
        self,
        is_banned: Optional[bool] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[PlayerSummary]:
        """List players ordered by account id."""
        limit = self.clamp_limit(limit)
        offset = parse_bounded_int(offset, QueryConstants.MAX_OFFSET, "a non-negative offset")

        query = select(Player).order_by(Player.id).offset(offset).limit(limit)
        if is_banned is not None:
            query = query.where(Player.is_banned == is_banned)

        async with self.get_session("player listing") as session:
            players = (await session.scalars(query)).all()

        if not players:
            raise NotFoundError("players")

        return [
            PlayerSummary(account_id=player.id, name=player.name, is_banned=player.is_banned)
            for player in players
        ]
