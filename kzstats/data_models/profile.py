"""
Profile data models.

Immutable data transfer objects for player lookups and completion counts.
"""

from dataclasses import dataclass
from typing import Any, Dict

from kzstats.utils.identity import account_id_to_global_id, account_id_to_legacy_id


@dataclass(frozen=True)
class RecordCount:
    """Completions for one mode, split by teleport class."""
    tp: int
    pro: int


@dataclass(frozen=True)
class RecordSummary:
    """Completion counts across all modes."""
    total: int
    kzt: RecordCount
    skz: RecordCount
    vnl: RecordCount


@dataclass(frozen=True)
class PlayerSummary:
    """A player row with its identity forms."""
    account_id: int
    name: str
    is_banned: bool

    @property
    def global_id(self) -> int:
        return account_id_to_global_id(self.account_id)

    @property
    def legacy_id(self) -> str:
        return account_id_to_legacy_id(self.account_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'account_id': self.account_id,
            'global_id': str(self.global_id),
            'legacy_id': self.legacy_id,
            'is_banned': self.is_banned,
        }


@dataclass(frozen=True)
class PlayerProfile:
    """A player plus their completion counts."""
    player: PlayerSummary
    records: RecordSummary

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.player.to_dict(),
            'records': {
                'total': self.records.total,
                'kzt': {'tp': self.records.kzt.tp, 'pro': self.records.kzt.pro},
                'skz': {'tp': self.records.skz.tp, 'pro': self.records.skz.pro},
                'vnl': {'tp': self.records.vnl.tp, 'pro': self.records.vnl.pro},
            },
        }
