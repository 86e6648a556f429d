"""
Service-wide constants for the stats API.

This module contains the magic numbers used by the identity codec and the
query layer so they are defined exactly once.
"""

from enum import IntEnum


class IdentityConstants:
    """Constants for converting between the three player identity forms."""

    # global_id = account_id + MAGIC_OFFSET
    MAGIC_OFFSET = 76561197960265728

    # Legacy ids look like "ID_1:1:161178172"
    LEGACY_ID_PREFIX = "ID_"
    LEGACY_ID_UNIVERSE = 1

    # Heuristic for recognising a global id in free text
    GLOBAL_ID_DIGITS = 17
    GLOBAL_ID_LEADING = "7656"

    # Storage key widths
    MAX_ACCOUNT_ID = 2 ** 32 - 1
    MAX_MAP_ID = 2 ** 16 - 1
    MAX_SERVER_ID = 2 ** 16 - 1


class Mode(IntEnum):
    """Movement modes, keyed by their storage id."""
    KZTIMER = 200
    SIMPLEKZ = 201
    VANILLA = 202

    @property
    def api_name(self) -> str:
        return _MODE_NAMES[self][0]

    @property
    def short_name(self) -> str:
        return _MODE_NAMES[self][1]

    @property
    def long_name(self) -> str:
        return _MODE_NAMES[self][2]


_MODE_NAMES = {
    Mode.KZTIMER: ("kz_timer", "KZT", "KZTimer"),
    Mode.SIMPLEKZ: ("kz_simple", "SKZ", "SimpleKZ"),
    Mode.VANILLA: ("kz_vanilla", "VNL", "Vanilla"),
}


class Tier(IntEnum):
    """Course difficulty rating."""
    VERY_EASY = 1
    EASY = 2
    MEDIUM = 3
    HARD = 4
    VERY_HARD = 5
    EXTREME = 6
    DEATH = 7


class QueryConstants:
    """Storage widths for plain numeric query values."""

    MAX_RECORD_ID = 2 ** 32 - 1
    MAX_STAGE = 2 ** 8 - 1
    MAX_COURSES = 2 ** 8 - 1
    MAX_OFFSET = 2 ** 31 - 1
