import pytest

from kzstats.data_models.identifiers import GlobalId, LegacyId, NameQuery, NumericId
from kzstats.services.resolver import (
    parse_map_identifier,
    parse_player_identifier,
    parse_server_identifier,
    player_identifier_to_account_id,
)
from kzstats.utils.exceptions import InvalidIdentityError, NotFoundError

from conftest import ALPHA, CHARLIE, LIONHARDER, LIONHEART


@pytest.mark.parametrize("raw, expected", [
    ("76561197960265729", GlobalId(76561197960265729)),
    ("ID_1:1:161178172", LegacyId("ID_1:1:161178172")),
    ("42", NumericId(42)),
    (42, NumericId(42)),
    (" 42 ", NumericId(42)),
    ("ibra", NameQuery("ibra")),
    ("ID_nothing", NameQuery("ID_nothing")),
    ("-5", NameQuery("-5")),
])
def test_player_classification(raw, expected):
    assert parse_player_identifier(raw) == expected


def test_classified_identifiers_pass_through():
    identifier = LegacyId("ID_1:1:161178172")
    assert parse_player_identifier(identifier) is identifier


@pytest.mark.parametrize("raw", ["", "   ", "ID_1:1", "ID_1:x:5", "4294967296", None, 4.2])
def test_invalid_player_identifiers(raw):
    with pytest.raises(InvalidIdentityError):
        parse_player_identifier(raw)


def test_map_and_server_classification():
    assert parse_map_identifier("992") == NumericId(992)
    assert parse_map_identifier("lionharder") == NameQuery("lionharder")
    assert parse_server_identifier(2) == NumericId(2)
    assert parse_server_identifier("kiwi") == NameQuery("kiwi")

    with pytest.raises(InvalidIdentityError):
        parse_map_identifier("70000")
    with pytest.raises(InvalidIdentityError):
        parse_server_identifier("")


def test_id_forms_convert_without_lookup():
    assert player_identifier_to_account_id(NumericId(ALPHA)) == ALPHA
    assert player_identifier_to_account_id(GlobalId(76561198282622073)) == ALPHA
    assert player_identifier_to_account_id(LegacyId("ID_1:1:161178172")) == ALPHA
    with pytest.raises(InvalidIdentityError):
        player_identifier_to_account_id(NameQuery("alpha"))


def test_player_legacy_and_global_ids_resolve_to_same_account(run):
    async def scenario(services):
        by_legacy = await services.resolver.resolve_player("ID_1:1:161178172")
        by_global = await services.resolver.resolve_player("76561198282622073")
        by_account = await services.resolver.resolve_player(ALPHA)
        by_name = await services.resolver.resolve_player("alphakz")
        return by_legacy.id, by_global.id, by_account.id, by_name.id

    assert run(scenario) == (ALPHA, ALPHA, ALPHA, ALPHA)


def test_map_id_and_name_resolve_to_same_map(run):
    async def scenario(services):
        by_id = await services.resolver.resolve_map("992")
        by_name = await services.resolver.resolve_map("lionharder")
        return by_id.id, by_name.id

    assert run(scenario) == (LIONHARDER, LIONHARDER)


def test_name_lookup_takes_first_row_by_id(run):
    async def scenario(services):
        return (await services.resolver.resolve_map("LION")).id

    assert run(scenario) == LIONHEART


def test_name_lookup_treats_wildcards_literally(run):
    async def scenario(services):
        return (await services.resolver.resolve_player("100%")).id

    assert run(scenario) == CHARLIE

    with pytest.raises(NotFoundError):
        run(lambda services: services.resolver.resolve_player("a%z"))


def test_unknown_identifiers_are_not_found(run):
    with pytest.raises(NotFoundError):
        run(lambda services: services.resolver.resolve_player("nobody"))
    with pytest.raises(NotFoundError):
        run(lambda services: services.resolver.resolve_player(999))
    with pytest.raises(NotFoundError):
        run(lambda services: services.resolver.resolve_map(1))
    with pytest.raises(NotFoundError):
        run(lambda services: services.resolver.resolve_server("nowhere"))


def test_server_id_resolution(run):
    async def scenario(services):
        by_number = await services.resolver.resolve_server_id("2")
        by_name = await services.resolver.resolve_server_id("kiwi")
        # Numeric ids are used as-is
        unknown = await services.resolver.resolve_server_id(77)
        return by_number, by_name, unknown

    assert run(scenario) == (2, 2, 77)


def test_global_id_at_offset_is_invalid_not_missing(run):
    with pytest.raises(InvalidIdentityError):
        run(lambda services: services.resolver.resolve_player("76561197960265728"))
