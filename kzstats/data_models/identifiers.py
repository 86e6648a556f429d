"""
Identifier data models.

Request-scoped tagged union of the shapes a user-supplied player, map or
server identifier can take. Classification from raw text lives in
`kzstats.services.resolver`.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class NumericId:
    """A bare storage id (account id for players)."""
    value: int


@dataclass(frozen=True)
class LegacyId:
    """A player id in "ID_U:P:H" form."""
    value: str


@dataclass(frozen=True)
class GlobalId:
    """A player's 64-bit global id."""
    value: int


@dataclass(frozen=True)
class NameQuery:
    """A case-insensitive substring of a name."""
    value: str


PlayerIdentifier = Union[NumericId, LegacyId, GlobalId, NameQuery]
MapIdentifier = Union[NumericId, NameQuery]
ServerIdentifier = Union[NumericId, NameQuery]
