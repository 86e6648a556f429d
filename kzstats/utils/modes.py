"""
Mode and tier parsing utilities.

Maps the loose mode and tier spellings accepted by the API onto their enums.
"""

from typing import Dict, Union

from kzstats.constants import Mode, Tier
from kzstats.utils.exceptions import InvalidIdentityError


def _build_lookup() -> Dict[str, Mode]:
    lookup = {}
    for mode in Mode:
        for alias in (str(mode.value), mode.api_name, mode.short_name, mode.long_name):
            lookup[alias.lower()] = mode
    return lookup


MODE_LOOKUP: Dict[str, Mode] = _build_lookup()

EXPECTED_MODE = "a mode id (200-202) or name (kz_timer, kzt, KZTimer, ...)"


def parse_mode(value: Union[str, int, Mode]) -> Mode:
    """
    Parse a mode id or name into a `Mode`.

    Examples:
        "kz_timer" -> Mode.KZTIMER
        "SKZ" -> Mode.SIMPLEKZ
        202 -> Mode.VANILLA

    Raises:
        InvalidIdentityError: If the value names no known mode
    """
    if isinstance(value, Mode):
        return value

    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return Mode(value)
        except ValueError:
            raise InvalidIdentityError(value, EXPECTED_MODE)

    if isinstance(value, str):
        mode = MODE_LOOKUP.get(value.strip().lower())
        if mode is not None:
            return mode

    raise InvalidIdentityError(value, EXPECTED_MODE)


EXPECTED_TIER = "a tier from 1 (VERY_EASY) to 7 (DEATH)"


def parse_tier(value: Union[str, int, Tier]) -> Tier:
    """
    Parse a tier number or name into a `Tier`.

    Examples:
        3 -> Tier.MEDIUM
        "7" -> Tier.DEATH
        "very_hard" -> Tier.VERY_HARD
    """
    if isinstance(value, Tier):
        return value

    if isinstance(value, str):
        text = value.strip()
        if text.isascii() and text.isdigit():
            value = int(text)
        elif text.upper() in Tier.__members__:
            return Tier[text.upper()]

    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return Tier(value)
        except ValueError:
            raise InvalidIdentityError(value, EXPECTED_TIER)

    raise InvalidIdentityError(value, EXPECTED_TIER)
