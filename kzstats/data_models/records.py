"""
Record data models.

Immutable data transfer objects for record listings and leaderboards.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from kzstats.constants import Mode
from kzstats.utils.dates import format_datetime
from kzstats.utils.identity import account_id_to_global_id


@dataclass(frozen=True)
class RecordEntry:
    """Single record row joined with its course, map, player and server."""
    id: int
    course_id: int
    map_id: int
    map_name: str
    stage: int
    mode_id: int
    player_id: int
    player_name: str
    server_id: int
    server_name: Optional[str]
    time: float
    teleports: int
    created_on: datetime

    @property
    def mode(self) -> Optional[Mode]:
        """The known mode for `mode_id`, or None for ids outside `Mode`."""
        return Mode(self.mode_id) if self.mode_id in Mode._value2member_map_ else None

    @property
    def has_teleports(self) -> bool:
        return self.teleports > 0

    @property
    def global_id(self) -> int:
        return account_id_to_global_id(self.player_id)

    @classmethod
    def from_row(cls, row) -> "RecordEntry":
        return cls(
            id=row.id,
            course_id=row.course_id,
            map_id=row.map_id,
            map_name=row.map_name,
            stage=row.stage,
            mode_id=row.mode_id,
            player_id=row.player_id,
            player_name=row.player_name,
            server_id=row.server_id,
            server_name=row.server_name,
            time=row.time,
            teleports=row.teleports,
            created_on=row.created_on,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'map_id': self.map_id,
            'map_name': self.map_name,
            'stage': self.stage,
            'mode': self.mode.api_name if self.mode else None,
            'player_name': self.player_name,
            'player_id': self.player_id,
            'global_id': str(self.global_id),
            'server_id': self.server_id,
            'server_name': self.server_name,
            'time': self.time,
            'teleports': self.teleports,
            'created_on': format_datetime(self.created_on),
        }


@dataclass(frozen=True)
class LeaderboardEntry:
    """A personal best together with its 1-based position."""
    rank: int
    record: RecordEntry

    def to_dict(self) -> Dict[str, Any]:
        return {'rank': self.rank, **self.record.to_dict()}
