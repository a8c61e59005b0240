"""Whole-token substitution."""

from __future__ import annotations

import re
from functools import lru_cache

# Identifier characters when the caller does not supply a profile's class
DEFAULT_BOUNDARY = r"[A-Za-z0-9_$]"


@lru_cache(maxsize=4096)
def token_pattern(name: str, boundary: str = DEFAULT_BOUNDARY) -> re.Pattern[str]:
    """Pattern matching ``name`` only where it is not part of a longer identifier."""
    return re.compile(rf"(?<!{boundary}){re.escape(name)}(?!{boundary})")


def tokens_in(text: str, boundary: str = DEFAULT_BOUNDARY) -> set[str]:
    """Every maximal run of identifier characters in ``text``."""
    return set(re.findall(f"{boundary}+", text))


def apply_substitution(
    text: str,
    original: str,
    generic: str,
    boundary: str = DEFAULT_BOUNDARY,
) -> tuple[str, int]:
    """
    Replace every whole-token occurrence of ``original`` with ``generic``.

    Returns:
        Tuple of (new text, number of occurrences replaced)
    """
    if not original:
        return text, 0
    return token_pattern(original, boundary).subn(lambda _: generic, text)
