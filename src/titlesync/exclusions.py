"""Files other plugins own: drawings and kanban boards are never synced."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

_EXCALIDRAW_MD = re.compile(r".*\.excalidraw\.md$")


def is_excalidraw(path: str, frontmatter: Mapping[str, Any] | None = None) -> bool:
    if path.endswith(".excalidraw") or _EXCALIDRAW_MD.match(path):
        return True
    return bool(frontmatter and frontmatter.get("excalidraw-plugin"))


def is_kanban(path: str, frontmatter: Mapping[str, Any] | None = None) -> bool:
    return bool(frontmatter and frontmatter.get("kanban-plugin"))


def is_excluded(path: str, frontmatter: Mapping[str, Any] | None = None) -> bool:
    return is_excalidraw(path, frontmatter) or is_kanban(path, frontmatter)
