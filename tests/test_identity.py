import pytest

from kzstats.constants import IdentityConstants
from kzstats.utils.exceptions import InvalidIdentityError
from kzstats.utils.identity import (
    MAGIC_OFFSET,
    account_id_to_global_id,
    account_id_to_legacy_id,
    global_id_to_account_id,
    legacy_id_to_account_id,
    looks_like_global_id,
    looks_like_legacy_id,
)

ACCOUNT_IDS = [0, 1, 2, 3, 322356345, 2 ** 31, IdentityConstants.MAX_ACCOUNT_ID]


def test_known_player_forms():
    assert account_id_to_global_id(322356345) == 76561198282622073
    assert account_id_to_legacy_id(322356345) == "ID_1:1:161178172"
    assert legacy_id_to_account_id("ID_1:1:161178172") == 322356345
    assert global_id_to_account_id(76561198282622073) == 322356345


@pytest.mark.parametrize("account_id", ACCOUNT_IDS)
def test_global_id_round_trip(account_id):
    assert global_id_to_account_id(account_id_to_global_id(account_id)) == account_id


@pytest.mark.parametrize("account_id", ACCOUNT_IDS)
def test_legacy_id_round_trip(account_id):
    assert legacy_id_to_account_id(account_id_to_legacy_id(account_id)) == account_id


def test_legacy_id_parity_and_half():
    assert account_id_to_legacy_id(0) == "ID_1:0:0"
    assert account_id_to_legacy_id(1) == "ID_1:1:0"
    assert account_id_to_legacy_id(2) == "ID_1:0:1"
    # universe is ignored when parsing
    assert legacy_id_to_account_id("ID_0:1:5") == 11


@pytest.mark.parametrize("global_id", [MAGIC_OFFSET, MAGIC_OFFSET - 1, 0, 42])
def test_global_id_at_or_below_offset_is_rejected(global_id):
    with pytest.raises(InvalidIdentityError):
        global_id_to_account_id(global_id)


def test_smallest_global_id():
    assert global_id_to_account_id(MAGIC_OFFSET + 1) == 1


def test_global_id_beyond_account_range_is_rejected():
    with pytest.raises(InvalidIdentityError):
        global_id_to_account_id(MAGIC_OFFSET + IdentityConstants.MAX_ACCOUNT_ID + 1)


@pytest.mark.parametrize("text", [
    "ID_1:1",
    "ID_1:1:",
    "ID_1::5",
    "ID_a:1:5",
    "ID_1:x:5",
    "ID_1:1:5x",
    "ID_1:2:5",
    "1:1:5",
    "",
    "ID_1:1:9999999999",
])
def test_malformed_legacy_ids_parse_to_none(text):
    assert legacy_id_to_account_id(text) is None


def test_legacy_id_shape():
    assert looks_like_legacy_id("ID_1:1:161178172")
    assert looks_like_legacy_id("ID_1:1")
    assert not looks_like_legacy_id("ID_nothing")
    assert not looks_like_legacy_id("AlphaKZ")


def test_global_id_shape():
    assert looks_like_global_id("76561197960265729")
    assert not looks_like_global_id("7656119796026572")
    assert not looks_like_global_id("12345678901234567")
    assert not looks_like_global_id("7656119796026572a")
