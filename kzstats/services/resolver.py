"""
Identifier resolution service.

Classifies loosely-typed player/map/server identifiers and resolves them to
canonical store rows. All classification of raw identifier text happens here.
"""

import logging
from typing import Union

from sqlalchemy import select

from kzstats.constants import IdentityConstants
from kzstats.data_models.identifiers import (
    GlobalId, LegacyId, MapIdentifier, NameQuery, NumericId, PlayerIdentifier, ServerIdentifier
)
from kzstats.database.models import Map, Player, Server
from kzstats.services.base import BaseService
from kzstats.utils.exceptions import InvalidIdentityError, NotFoundError
from kzstats.utils.identity import (
    global_id_to_account_id,
    legacy_id_to_account_id,
    looks_like_global_id,
    looks_like_legacy_id,
)

logger = logging.getLogger(__name__)

EXPECTED_PLAYER = "an account id, a global id, a legacy id (ID_1:1:161178172) or a name"
EXPECTED_MAP = "a map id or a map name"
EXPECTED_SERVER = "a server id or a server name"


def _is_digits(text: str) -> bool:
    return text.isascii() and text.isdigit()


def _parse_numeric(text: str, maximum: int, expected: str) -> NumericId:
    value = int(text)
    if value > maximum:
        raise InvalidIdentityError(text, expected)
    return NumericId(value)


def _parse_name(raw, expected: str) -> NameQuery:
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidIdentityError(raw, expected)
    return NameQuery(raw.strip())


def parse_player_identifier(raw: Union[str, int, PlayerIdentifier]) -> PlayerIdentifier:
    """
    Classify a raw player identifier.

    Order: digit strings (global id if they have its 17-digit "7656..." shape,
    account id otherwise), legacy ids, then name substrings.

    Examples:
        "42" -> NumericId(42)
        "76561197960265729" -> GlobalId(76561197960265729)
        "ID_1:1:161178172" -> LegacyId("ID_1:1:161178172")
        "ibra" -> NameQuery("ibra")

    Raises:
        InvalidIdentityError: Out-of-range account ids, malformed legacy ids
            and empty names
    """
    if isinstance(raw, (NumericId, LegacyId, GlobalId, NameQuery)):
        return raw
    if isinstance(raw, int) and not isinstance(raw, bool):
        raw = str(raw)
    if not isinstance(raw, str):
        raise InvalidIdentityError(raw, EXPECTED_PLAYER)

    text = raw.strip()
    if _is_digits(text):
        if looks_like_global_id(text):
            return GlobalId(int(text))
        return _parse_numeric(text, IdentityConstants.MAX_ACCOUNT_ID, EXPECTED_PLAYER)

    if looks_like_legacy_id(text):
        if legacy_id_to_account_id(text) is None:
            raise InvalidIdentityError(text, "a legacy id such as ID_1:1:161178172")
        return LegacyId(text)

    return _parse_name(raw, EXPECTED_PLAYER)


def parse_map_identifier(raw: Union[str, int, MapIdentifier]) -> MapIdentifier:
    """Classify a raw map identifier as a map id or a name substring."""
    if isinstance(raw, (NumericId, NameQuery)):
        return raw
    if isinstance(raw, int) and not isinstance(raw, bool):
        raw = str(raw)
    if isinstance(raw, str) and _is_digits(raw.strip()):
        return _parse_numeric(raw.strip(), IdentityConstants.MAX_MAP_ID, EXPECTED_MAP)
    return _parse_name(raw, EXPECTED_MAP)


def parse_server_identifier(raw: Union[str, int, ServerIdentifier]) -> ServerIdentifier:
    """Classify a raw server identifier as a server id or a name substring."""
    if isinstance(raw, (NumericId, NameQuery)):
        return raw
    if isinstance(raw, int) and not isinstance(raw, bool):
        raw = str(raw)
    if isinstance(raw, str) and _is_digits(raw.strip()):
        return _parse_numeric(raw.strip(), IdentityConstants.MAX_SERVER_ID, EXPECTED_SERVER)
    return _parse_name(raw, EXPECTED_SERVER)


def player_identifier_to_account_id(identifier: PlayerIdentifier) -> int:
    """
    Convert an id-shaped player identifier to an account id without I/O.

    Raises:
        InvalidIdentityError: For names (they need a lookup) and invalid ids
    """
    if isinstance(identifier, NumericId):
        return identifier.value
    if isinstance(identifier, GlobalId):
        return global_id_to_account_id(identifier.value)
    if isinstance(identifier, LegacyId):
        account_id = legacy_id_to_account_id(identifier.value)
        if account_id is None:
            raise InvalidIdentityError(identifier.value, "a legacy id such as ID_1:1:161178172")
        return account_id
    raise InvalidIdentityError(identifier, "an id-shaped player identifier")


class IdentifierResolver(BaseService):
    """Resolves identifiers to player, map and server rows."""

    async def resolve_player(self, raw: Union[str, int, PlayerIdentifier]) -> Player:
        """Resolve a player identifier to its row; names match the first row by id."""
        identifier = parse_player_identifier(raw)
        logger.debug(f"Resolving player {identifier!r}")

        if isinstance(identifier, NameQuery):
            query = (
                select(Player)
                .where(Player.name.icontains(identifier.value, autoescape=True))
                .order_by(Player.id)
                .limit(1)
            )
        else:
            account_id = player_identifier_to_account_id(identifier)
            query = select(Player).where(Player.id == account_id)

        async with self.get_session("player lookup") as session:
            player = await session.scalar(query)

        if player is None:
            raise NotFoundError("player", repr(identifier))
        return player

    async def resolve_player_id(self, raw: Union[str, int, PlayerIdentifier]) -> int:
        """Resolve a player identifier to an account id, touching the store only for names."""
        identifier = parse_player_identifier(raw)
        if isinstance(identifier, NameQuery):
            player = await self.resolve_player(identifier)
            return player.id
        return player_identifier_to_account_id(identifier)

    async def resolve_map(self, raw: Union[str, int, MapIdentifier]) -> Map:
        """Resolve a map identifier to its row; numeric ids are still looked up."""
        identifier = parse_map_identifier(raw)
        logger.debug(f"Resolving map {identifier!r}")

        if isinstance(identifier, NameQuery):
            query = (
                select(Map)
                .where(Map.name.icontains(identifier.value, autoescape=True))
                .order_by(Map.id)
                .limit(1)
            )
        else:
            query = select(Map).where(Map.id == identifier.value)

        async with self.get_session("map lookup") as session:
            map_row = await session.scalar(query)

        if map_row is None:
            raise NotFoundError("map", repr(identifier))
        return map_row

    async def resolve_server(self, raw: Union[str, int, ServerIdentifier]) -> Server:
        """Resolve a server identifier to its row; numeric ids are still looked up."""
        identifier = parse_server_identifier(raw)
        logger.debug(f"Resolving server {identifier!r}")

        if isinstance(identifier, NameQuery):
            query = (
                select(Server)
                .where(Server.name.icontains(identifier.value, autoescape=True))
                .order_by(Server.id)
                .limit(1)
            )
        else:
            query = select(Server).where(Server.id == identifier.value)

        async with self.get_session("server lookup") as session:
            server = await session.scalar(query)

        if server is None:
            raise NotFoundError("server", repr(identifier))
        return server

    async def resolve_server_id(self, raw: Union[str, int, ServerIdentifier]) -> int:
        """Resolve a server identifier to its id; numeric ids are used without a lookup."""
        identifier = parse_server_identifier(raw)
        if isinstance(identifier, NumericId):
            return identifier.value
        server = await self.resolve_server(identifier)
        return server.id
