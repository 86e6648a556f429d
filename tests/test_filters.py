import asyncio
from datetime import datetime, timedelta
from itertools import combinations

import pytest
from sqlalchemy.sql.elements import BindParameter

from kzstats.constants import Mode
from kzstats.services.filters import (
    FilterComposer,
    FilterSpec,
    PredicateChain,
    ResolvedFilters,
    like_pattern,
)
from kzstats.services.resolver import IdentifierResolver
from kzstats.utils.exceptions import InvalidDateRangeError, InvalidIdentityError

from conftest import ALPHA, LIONHARDER

FILTER_VALUES = {
    "map_id": LIONHARDER,
    "stage": 2,
    "mode": Mode.SIMPLEKZ,
    "player_id": ALPHA,
    "server_id": 1,
    "has_teleports": False,
    "created_after": datetime(2023, 1, 1),
    "created_before": datetime(2023, 6, 1),
    "exclude_banned": True,
}

SUBSETS = [
    subset
    for size in range(len(FILTER_VALUES) + 1)
    for subset in combinations(FILTER_VALUES, size)
]


def build(spec: FilterSpec):
    # No identifier-typed filters, so no resolver is needed
    return asyncio.run(FilterComposer(resolver=None).build_predicates(spec))


def test_stage_and_teleports_fragment():
    fragment = build(FilterSpec(stage=2, has_teleports=True))

    assert fragment.sql == " WHERE course.stage = ? AND record.teleports > ?"
    assert fragment.params == [2, 0]


def test_pro_runs_compare_with_equality():
    fragment = FilterComposer.compose(ResolvedFilters(has_teleports=False))
    assert fragment.sql == " WHERE record.teleports = ?"
    assert fragment.params == [0]


def test_empty_spec_emits_nothing():
    fragment = build(FilterSpec())

    assert fragment.is_empty()
    assert fragment.sql == ""
    assert fragment.params == []


@pytest.mark.parametrize("subset", SUBSETS, ids=lambda subset: "+".join(subset) or "none")
def test_clause_discipline(subset):
    fragment = FilterComposer.compose(ResolvedFilters(**{name: FILTER_VALUES[name] for name in subset}))
    keywords = [predicate.keyword for predicate in fragment.predicates]

    assert len(keywords) == len(subset)
    if subset:
        assert keywords[0] == "WHERE"
        assert all(keyword == "AND" for keyword in keywords[1:])
    assert fragment.sql.count(" WHERE ") == (1 if subset else 0)
    assert fragment.sql.count("?") == len(fragment.params)


def test_predicate_order():
    fragment = FilterComposer.compose(ResolvedFilters(**FILTER_VALUES))

    assert fragment.sql == (
        " WHERE course.map_id = ?"
        " AND course.stage = ?"
        " AND record.mode_id = ?"
        " AND record.player_id = ?"
        " AND record.server_id = ?"
        " AND record.teleports = ?"
        " AND record.created_on > ?"
        " AND record.created_on < ?"
        " AND player.is_banned = ?"
    )
    assert fragment.params == [
        LIONHARDER, 2, 201, ALPHA, 1, 0, datetime(2023, 1, 1), datetime(2023, 6, 1), False
    ]


def test_values_are_never_interpolated():
    fragment = build(FilterSpec(mode="kz_simple", created_after="2023-01-01T00:00:00Z"))

    assert "201" not in fragment.sql
    assert "2023" not in fragment.sql
    assert fragment.params == [201, datetime(2023, 1, 1)]


def test_compile_uses_named_typed_binds():
    fragment = FilterComposer.compose(
        ResolvedFilters(stage=0, created_after=datetime(2023, 1, 1), exclude_banned=True)
    )
    compiled, binds = fragment.compile()

    assert compiled == " WHERE course.stage = :p0 AND record.created_on > :p1 AND player.is_banned = :p2"
    assert [bind.key for bind in binds] == ["p0", "p1", "p2"]
    assert all(isinstance(bind, BindParameter) for bind in binds)
    assert binds[1].value == datetime(2023, 1, 1)


@pytest.mark.parametrize("moment", [
    datetime(2023, 1, 1),
    datetime(2000, 2, 29, 12, 30),
    datetime(2030, 12, 31, 23, 59, 59),
])
def test_inverted_date_range_is_rejected(moment):
    with pytest.raises(InvalidDateRangeError):
        build(FilterSpec(created_after=moment + timedelta(seconds=1), created_before=moment))


def test_equal_date_bounds_are_rejected():
    with pytest.raises(InvalidDateRangeError):
        build(FilterSpec(created_after="2023-01-01", created_before="2023-01-01"))


def test_date_range_checked_before_identifier_lookup():
    class ExplodingResolver:
        async def resolve_map(self, raw):
            raise AssertionError("store touched")

    spec = FilterSpec(map="lionharder", created_after="2023-02-01", created_before="2023-01-01")
    with pytest.raises(InvalidDateRangeError):
        asyncio.run(FilterComposer(ExplodingResolver()).build_predicates(spec))


@pytest.mark.parametrize("filters", [
    FilterSpec(mode="kz_nope"),
    FilterSpec(stage=-1),
    FilterSpec(stage="two"),
    FilterSpec(created_after="yesterday"),
])
def test_unparseable_filter_values(filters):
    with pytest.raises(InvalidIdentityError):
        build(filters)


def test_player_id_forms_need_no_lookup():
    # A resolver without a session factory fails on any store access
    resolver = IdentifierResolver(session_factory=None)
    fragment = asyncio.run(
        FilterComposer(resolver).build_predicates(FilterSpec(player="ID_1:1:161178172"))
    )
    assert fragment.sql == " WHERE record.player_id = ?"
    assert fragment.params == [ALPHA]


def test_predicate_chain_directly():
    fragment = PredicateChain().add("a = ?", 1).add("b BETWEEN ? AND ?", 2, 3).build()

    assert fragment.sql == " WHERE a = ? AND b BETWEEN ? AND ?"
    assert fragment.params == [1, 2, 3]


def test_like_pattern_escapes_wildcards():
    assert like_pattern("Lion") == "%lion%"
    assert like_pattern("100%_x") == "%100\\%\\_x%"
