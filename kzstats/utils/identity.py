"""
Player identity codec.

Converts between the three equivalent forms of a player's identity:
the 32-bit account id (storage key), the 64-bit global id and the
legacy "ID_U:P:H" text form. Pure functions, no I/O.
"""

import re
from typing import Optional

from kzstats.constants import IdentityConstants
from kzstats.utils.exceptions import InvalidIdentityError


MAGIC_OFFSET = IdentityConstants.MAGIC_OFFSET

LEGACY_ID_PATTERN = re.compile(
    r"^" + re.escape(IdentityConstants.LEGACY_ID_PREFIX) + r"([0-9]+):([01]):([0-9]+)$"
)


def account_id_to_global_id(account_id: int) -> int:
    """
    Convert an account id into its 64-bit global id.

    Examples:
        322356345 -> 76561198282622073
    """
    return account_id + MAGIC_OFFSET


def global_id_to_account_id(global_id: int) -> int:
    """
    Convert a 64-bit global id back into an account id.

    Raises:
        InvalidIdentityError: If the value does not exceed MAGIC_OFFSET or the
            resulting account id does not fit in 32 bits
    """
    if global_id <= MAGIC_OFFSET:
        raise InvalidIdentityError(global_id, f"a global id greater than {MAGIC_OFFSET}")

    account_id = global_id - MAGIC_OFFSET
    if account_id > IdentityConstants.MAX_ACCOUNT_ID:
        raise InvalidIdentityError(global_id, "a global id within the 32-bit account range")
    return account_id


def legacy_id_to_account_id(legacy_id: str) -> Optional[int]:
    """
    Parse a legacy id into an account id.

    Args:
        legacy_id: Text in the form "ID_<universe>:<parity>:<half>"

    Returns:
        half * 2 + parity, or None if the text is malformed

    Examples:
        "ID_1:1:161178172" -> 322356345
        "ID_1:1" -> None
    """
    match = LEGACY_ID_PATTERN.match(legacy_id.strip())
    if not match:
        return None

    parity = int(match.group(2))
    half = int(match.group(3))
    account_id = half * 2 + parity
    if account_id > IdentityConstants.MAX_ACCOUNT_ID:
        return None
    return account_id


def account_id_to_legacy_id(account_id: int) -> str:
    """
    Format an account id as a legacy id.

    Examples:
        322356345 -> "ID_1:1:161178172"
    """
    return (
        f"{IdentityConstants.LEGACY_ID_PREFIX}{IdentityConstants.LEGACY_ID_UNIVERSE}"
        f":{account_id & 1}:{account_id >> 1}"
    )


def looks_like_legacy_id(text: str) -> bool:
    """Check whether free text is meant as a legacy id (it may still be malformed)."""
    text = text.strip()
    return text.startswith(IdentityConstants.LEGACY_ID_PREFIX) and ":" in text


def looks_like_global_id(text: str) -> bool:
    """Check whether a digit string has the shape of a global id."""
    text = text.strip()
    return (
        text.isascii()
        and text.isdigit()
        and len(text) == IdentityConstants.GLOBAL_ID_DIGITS
        and text.startswith(IdentityConstants.GLOBAL_ID_LEADING)
    )
