"""Textual normalization of raw find/hide input.

Each rewrite is purely textual and the order matters: mnemonic qualifiers are
dropped before word operators are rewritten, and conjunctions are uppercased
last so the compiler can split on the canonical `` OR `` / `` AND ``.
"""

from __future__ import annotations

import re


_RE_MULTI_SPACE = re.compile(r" +(?= )")

# (pattern, replacement); every pattern is anchored on a leading space
_REWRITES: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(pattern, re.IGNORECASE), replacement)
    for pattern, replacement in (
        # mnemonic qualifiers: 'has cb' -> 'cb', '! is idle' -> '! idle'
        (r" is ", " "),
        (r" has ", " "),
        (r" !\s*is ", " ! "),
        (r" !\s*has ", " ! "),
        # word operators
        (r" not ", " !"),
        (r" !\s*contains ", " !*= "),
        (r" !\s*startswith ", " !^= "),
        (r" !\s*endswith ", " !$= "),
        (r" contains ", " *= "),
        (r" startswith ", " ^= "),
        (r" endswith ", " $= "),
        # conjunctions
        (r" and ", " AND "),
        (r" or ", " OR "),
    )
)


def prepare_value(value: str | None) -> str:
    """Normalize raw expression text.

    Args:
        value: Raw user input, possibly None.

    Returns:
        Normalized text, empty when there is nothing to compile.
    """
    if not value:
        return ""
    text = _RE_MULTI_SPACE.sub("", value)
    text = " " + text
    for pattern, replacement in _REWRITES:
        text = pattern.sub(replacement, text)
    return text.strip()
