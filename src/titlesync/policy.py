"""Decisions that need no I/O: which files to skip, which title wins."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from titlesync.cache import CachedTitles
from titlesync.exclusions import is_excluded
from titlesync.settings import Settings, SyncTarget

logger = logging.getLogger(__name__)


def matches_rule(pattern: str, path: str) -> bool:
    """True if ``pattern`` matches anywhere in ``path``. Empty or invalid patterns never match."""
    if not pattern:
        return False
    try:
        return re.search(pattern, path) is not None
    except re.error:
        return False


def is_listed(settings: Settings, path: str) -> bool:
    """True if ``path`` is covered by the manual set or regex of the current mode."""
    return path in settings.manual_files or matches_rule(settings.rule_regex, path)


def is_ignored(
    settings: Settings,
    path: str,
    frontmatter: Mapping[str, Any] | None = None,
    *,
    file_path: str | None = None,
) -> bool:
    """Decide whether the engine must leave a file alone.

    ``path`` is checked against the user's rules; exclusions by type are
    checked against ``file_path`` (defaults to ``path``) and apply in both
    modes.
    """
    if is_excluded(file_path or path, frontmatter):
        return True
    if settings.include_mode:
        return not is_listed(settings, path)
    return is_listed(settings, path)


def files_matching_rule(settings: Settings, paths: Iterable[str]) -> list[str]:
    """Paths the regex rule of the current mode matches, in input order."""
    return [p for p in paths if matches_rule(settings.rule_regex, p)]


def resolve_source(
    current: CachedTitles,
    previous: CachedTitles | None,
    sources: Iterable[SyncTarget],
    precedence: SyncTarget,
) -> SyncTarget | None:
    """Pick the title source that wins this round.

    Only sources present in the document count. With one, it wins. With two,
    the one that changed since ``previous`` wins; if both or neither changed,
    ``precedence`` does. That is a configured approximation, not real edit
    order.
    """
    available = [s for s in sources if current.get(s) is not None]
    if not available:
        return None
    if len(available) == 1:
        return available[0]

    if previous is None:
        changed = available
    else:
        changed = [s for s in available if current.get(s) != previous.get(s)]
    if len(changed) == 1:
        return changed[0]
    if precedence in available:
        logger.debug("Both or neither title sources changed, %s takes precedence", precedence.value)
        return precedence
    return available[0]
