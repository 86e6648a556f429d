"""
Filter composition for record queries.

Turns a `FilterSpec` into an ordered chain of predicates, each carrying its
own bound parameters. The first predicate opens with WHERE and every later
one with AND; values are never interpolated into the SQL text.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional, Tuple, Union

from sqlalchemy import Boolean, DateTime, bindparam, text
from sqlalchemy.sql.elements import BindParameter, TextClause

from kzstats.constants import Mode, QueryConstants
from kzstats.utils.dates import parse_datetime, to_naive_utc
from kzstats.utils.exceptions import InvalidDateRangeError, InvalidIdentityError
from kzstats.utils.modes import parse_mode

logger = logging.getLogger(__name__)

PLACEHOLDER = "?"
LIKE_ESCAPE = "\\"


@dataclass(frozen=True)
class FilterSpec:
    """
    Optional filters accepted by record listings and leaderboards.

    Identifier-typed fields (map, player, server) accept raw text, ints or
    identifier objects and are resolved by `FilterComposer.build_predicates`.
    """
    map: Any = None
    stage: Optional[int] = None
    mode: Union[str, int, Mode, None] = None
    player: Any = None
    server: Any = None
    has_teleports: Optional[bool] = None
    created_after: Union[datetime, str, None] = None
    created_before: Union[datetime, str, None] = None
    exclude_banned: bool = False


@dataclass(frozen=True)
class ResolvedFilters:
    """A `FilterSpec` with every identifier resolved to its storage id."""
    map_id: Optional[int] = None
    stage: Optional[int] = None
    mode: Optional[Mode] = None
    player_id: Optional[int] = None
    server_id: Optional[int] = None
    has_teleports: Optional[bool] = None
    created_after: Optional[datetime] = None
    created_before: Optional[datetime] = None
    exclude_banned: bool = False


@dataclass(frozen=True)
class Predicate:
    """One WHERE/AND clause with `?` placeholders and its parameters."""
    keyword: str
    sql: str
    params: Tuple[Any, ...] = ()

    def render(self) -> str:
        return f" {self.keyword} {self.sql}"


@dataclass(frozen=True)
class QueryFragment:
    """An ordered predicate list that callers append to a base query."""
    predicates: Tuple[Predicate, ...] = ()

    @property
    def sql(self) -> str:
        return "".join(predicate.render() for predicate in self.predicates)

    @property
    def params(self) -> List[Any]:
        return [param for predicate in self.predicates for param in predicate.params]

    def is_empty(self) -> bool:
        return not self.predicates

    def compile(self, prefix: str = "p") -> Tuple[str, List[BindParameter]]:
        """
        Rewrite `?` placeholders as named binds.

        Returns:
            The fragment text using `:p0, :p1, ...` and the matching typed
            bind parameters, ready for `text(...).bindparams(*binds)`
        """
        params = self.params
        pieces = self.sql.split(PLACEHOLDER)
        if len(pieces) - 1 != len(params):
            raise ValueError(f"Fragment has {len(pieces) - 1} placeholders but {len(params)} params")

        binds = []
        compiled = pieces[0]
        for index, (value, piece) in enumerate(zip(params, pieces[1:])):
            name = f"{prefix}{index}"
            binds.append(_typed_bindparam(name, value))
            compiled += f":{name}{piece}"
        return compiled, binds

    def to_text_clause(self, base_sql: str, tail_sql: str = "") -> TextClause:
        """Build an executable clause from `base_sql + fragment + tail_sql`."""
        compiled, binds = self.compile()
        return text(f"{base_sql}{compiled}{tail_sql}").bindparams(*binds)


def _typed_bindparam(name: str, value: Any) -> BindParameter:
    if isinstance(value, datetime):
        return bindparam(name, value, type_=DateTime())
    if isinstance(value, bool):
        return bindparam(name, value, type_=Boolean())
    return bindparam(name, value)


def like_pattern(term: str) -> str:
    """Lowercased `%term%` pattern with LIKE wildcards escaped."""
    escaped = (
        term.lower()
        .replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


class PredicateChain:
    """Collects predicates, opening with WHERE once and joining the rest with AND."""

    def __init__(self):
        self._predicates: List[Predicate] = []
        self._emitted = False

    def add(self, sql: str, *params) -> "PredicateChain":
        keyword = "AND" if self._emitted else "WHERE"
        self._predicates.append(Predicate(keyword, sql, tuple(params)))
        self._emitted = True
        return self

    def build(self) -> QueryFragment:
        return QueryFragment(tuple(self._predicates))


def parse_bounded_int(value, maximum: int, expected: str) -> int:
    """Parse an int (or digit string) that fits in `0..maximum`."""
    if isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= maximum:
        raise InvalidIdentityError(value, expected)
    return value


def parse_stage(value) -> Optional[int]:
    """Parse an optional stage number."""
    if value is None:
        return None
    return parse_bounded_int(value, QueryConstants.MAX_STAGE, f"a stage number (0-{QueryConstants.MAX_STAGE})")


def parse_record_id(value) -> int:
    return parse_bounded_int(value, QueryConstants.MAX_RECORD_ID, "a record id")


def parse_date_bound(value: Union[datetime, str, None]) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_naive_utc(value)
    return parse_datetime(value)


def check_date_range(created_after: Optional[datetime], created_before: Optional[datetime]):
    """Fail fast when both bounds are given and do not form a range."""
    if created_after is not None and created_before is not None and created_after >= created_before:
        raise InvalidDateRangeError(created_after, created_before)


class FilterComposer:
    """Builds predicate fragments from filter sets."""

    def __init__(self, resolver):
        """
        Args:
            resolver: IdentifierResolver used for identifier-typed filters
        """
        self.resolver = resolver

    async def resolve(self, spec: FilterSpec) -> ResolvedFilters:
        """
        Validate plain filters, then resolve identifier-typed ones.

        Plain values are checked before any lookup so a bad request never
        reaches the store.
        """
        stage = parse_stage(spec.stage)
        mode = parse_mode(spec.mode) if spec.mode is not None else None
        created_after = parse_date_bound(spec.created_after)
        created_before = parse_date_bound(spec.created_before)
        check_date_range(created_after, created_before)

        map_id = None
        if spec.map is not None:
            map_id = (await self.resolver.resolve_map(spec.map)).id

        player_id = None
        if spec.player is not None:
            player_id = await self.resolver.resolve_player_id(spec.player)

        server_id = None
        if spec.server is not None:
            server_id = await self.resolver.resolve_server_id(spec.server)

        return ResolvedFilters(
            map_id=map_id,
            stage=stage,
            mode=mode,
            player_id=player_id,
            server_id=server_id,
            has_teleports=spec.has_teleports,
            created_after=created_after,
            created_before=created_before,
            exclude_banned=spec.exclude_banned,
        )

    async def build_predicates(self, spec: FilterSpec) -> QueryFragment:
        """Resolve a `FilterSpec` and compose its predicate fragment."""
        resolved = await self.resolve(spec)
        fragment = self.compose(resolved)
        logger.debug(f"Composed filters: {fragment.sql!r} {fragment.params!r}")
        return fragment

    @staticmethod
    def compose(resolved: ResolvedFilters) -> QueryFragment:
        """
        Compose predicates from already-resolved filters.

        Predicate order: map, stage, mode, player, server, teleport class,
        created_after, created_before, banned players.
        """
        check_date_range(resolved.created_after, resolved.created_before)

        chain = PredicateChain()
        if resolved.map_id is not None:
            chain.add("course.map_id = ?", resolved.map_id)
        if resolved.stage is not None:
            chain.add("course.stage = ?", resolved.stage)
        if resolved.mode is not None:
            chain.add("record.mode_id = ?", int(resolved.mode))
        if resolved.player_id is not None:
            chain.add("record.player_id = ?", resolved.player_id)
        if resolved.server_id is not None:
            chain.add("record.server_id = ?", resolved.server_id)
        if resolved.has_teleports is not None:
            operator = ">" if resolved.has_teleports else "="
            chain.add(f"record.teleports {operator} ?", 0)
        if resolved.created_after is not None:
            chain.add("record.created_on > ?", resolved.created_after)
        if resolved.created_before is not None:
            chain.add("record.created_on < ?", resolved.created_before)
        if resolved.exclude_banned:
            chain.add("player.is_banned = ?", False)
        return chain.build()
