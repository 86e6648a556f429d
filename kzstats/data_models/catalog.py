"""
Catalog data models for maps, courses, servers and modes.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from kzstats.constants import Mode, Tier
from kzstats.utils.dates import format_datetime
from kzstats.utils.identity import account_id_to_global_id


def _tier_name(value: int) -> Optional[str]:
    try:
        return Tier(value).name
    except ValueError:
        return None


@dataclass(frozen=True)
class CourseInfo:
    """A single stage of a map with per-mode availability."""
    id: int
    stage: int
    kzt: bool
    kzt_difficulty: int
    skz: bool
    skz_difficulty: int
    vnl: bool
    vnl_difficulty: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'stage': self.stage,
            'kzt': self.kzt,
            'kzt_difficulty': _tier_name(self.kzt_difficulty),
            'skz': self.skz,
            'skz_difficulty': _tier_name(self.skz_difficulty),
            'vnl': self.vnl,
            'vnl_difficulty': _tier_name(self.vnl_difficulty),
        }


@dataclass(frozen=True)
class MapDetail:
    """A map together with its courses."""
    id: int
    name: str
    tier: Optional[int]
    courses: List[CourseInfo]
    validated: bool
    filesize: int
    mapper_id: int
    mapper_name: Optional[str]
    approver_id: int
    approver_name: Optional[str]
    created_on: datetime
    updated_on: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'tier': _tier_name(self.tier) if self.tier is not None else None,
            'courses': [course.to_dict() for course in self.courses],
            'validated': self.validated,
            'filesize': self.filesize,
            'mapper_name': self.mapper_name,
            'mapper_global_id': str(account_id_to_global_id(self.mapper_id)),
            'approver_name': self.approver_name,
            'approver_global_id': str(account_id_to_global_id(self.approver_id)),
            'created_on': format_datetime(self.created_on),
            'updated_on': format_datetime(self.updated_on),
        }


@dataclass(frozen=True)
class ServerDetail:
    """A server together with its owner and approver."""
    id: int
    name: str
    owner_id: int
    owner_name: Optional[str]
    approver_id: int
    approver_name: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'owner_name': self.owner_name,
            'owner_global_id': str(account_id_to_global_id(self.owner_id)),
            'approver_name': self.approver_name,
            'approver_global_id': str(account_id_to_global_id(self.approver_id)),
        }


@dataclass(frozen=True)
class ModeInfo:
    id: int
    name: str
    created_on: datetime

    def to_dict(self) -> Dict[str, Any]:
        mode = Mode(self.id) if self.id in Mode._value2member_map_ else None
        return {
            'id': self.id,
            'name': self.name,
            'name_short': mode.short_name if mode else None,
            'name_long': mode.long_name if mode else None,
            'created_on': format_datetime(self.created_on),
        }
