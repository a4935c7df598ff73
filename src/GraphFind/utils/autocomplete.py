"""Prefix autocomplete over a fixed keyword vocabulary."""

from __future__ import annotations

import re
from typing import Iterable, Sequence


_DEFAULT_STOPS: tuple[str, ...] = (" ", "\t", "\n", "!")


class AutoComplete:
    """Cycle through vocabulary entries completing the last token of an input.

    The token being completed is whatever follows the last stop character.
    ``next`` returns the full input text with that token replaced, so callers
    can drop the result straight into the edit buffer.
    """

    def __init__(self, options: Iterable[str]) -> None:
        self._options: tuple[str, ...] = tuple(dict.fromkeys(o.strip().lower() for o in options if o.strip()))
        self._head = ""
        self._token = ""
        self._matches: tuple[str, ...] = ()
        self._index = 0

    @property
    def matches(self) -> tuple[str, ...]:
        return self._matches

    def set_input(self, value: str, stop_chars: Sequence[str] | None = None) -> None:
        """Set the partial input and recompute candidates.

        Args:
            value: Current input text.
            stop_chars: Characters that end a token. Defaults to whitespace and ``!``.
        """
        stops = tuple(stop_chars) if stop_chars else _DEFAULT_STOPS
        pattern = "|".join(re.escape(stop) for stop in stops)
        parts = re.split(f"(?:{pattern})", value)
        token = parts[-1]

        self._head = value[: len(value) - len(token)]
        self._token = token
        self._index = 0
        needle = token.lower()
        self._matches = tuple(o for o in self._options if needle and o.startswith(needle))

    def next(self) -> str | None:
        """Return the input completed with the next candidate, or None."""
        if not self._matches:
            return None
        match = self._matches[self._index % len(self._matches)]
        self._index = (self._index + 1) % len(self._matches)
        return self._head + match
