"""Title sanitization: strip characters that cannot appear in a filename."""

from __future__ import annotations

import re
from collections.abc import Iterable

# Characters the vault refuses in note names (links and block refs use # ^ [ ])
STOCK_ILLEGAL_SYMBOLS = re.compile(r"[\\/:|#^\[\]]")


def _user_pattern(symbols: Iterable[str]) -> re.Pattern[str] | None:
    escaped = [re.escape(s) for s in symbols if s]
    if not escaped:
        return None
    return re.compile("|".join(escaped))


def sanitize(text: str, extra_symbols: Iterable[str] = ()) -> str:
    """Return ``text`` with illegal characters and user symbols removed, trimmed.

    Removal repeats until nothing changes, so the result is a fixed point:
    ``sanitize(sanitize(x)) == sanitize(x)``. An empty string means the text
    holds no usable title.
    """
    user = _user_pattern(extra_symbols)
    while True:
        cleaned = STOCK_ILLEGAL_SYMBOLS.sub("", text)
        if user is not None:
            cleaned = user.sub("", cleaned)
        cleaned = cleaned.strip()
        if cleaned == text:
            return cleaned
        text = cleaned
