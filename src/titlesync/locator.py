"""Line scanners that find the frontmatter block, the first heading and the title field."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

FRONTMATTER_DELIMITER = "---"
_FENCE_MARKERS = ("```", "~~~")
_UNDERLINE = re.compile(r"^=+$")


class HeadingStyle(str, Enum):
    """Where a title lives in the document. Values are persisted in settings."""

    PREFIX = "Prefix"
    UNDERLINE = "Underline"
    FRONTMATTER = "Frontmatter"


@dataclass(frozen=True)
class TitleLocation:
    """A title found in a document. Recomputed on every pass, never stored."""

    line_number: int
    text: str
    style: HeadingStyle


def find_note_start(lines: list[str]) -> int:
    """Return the index of the first line after the frontmatter block, or 0.

    An opening delimiter without a closing one is not frontmatter.
    """
    if lines and lines[0] == FRONTMATTER_DELIMITER:
        for i in range(1, len(lines)):
            if lines[i] == FRONTMATTER_DELIMITER:
                return i + 1
    return 0


def _outside_inline_code(line: str) -> bool:
    # An odd backtick count means the line opens a code span it never closes
    return line.count("`") % 2 == 0


def find_heading(lines: list[str], start_line: int = 0) -> TitleLocation | None:
    """Find the first level-one heading at or after ``start_line``.

    Prefix headings (``# Title``) are checked before underline headings
    (``Title`` over a line of ``=``). Lines inside fenced code blocks,
    escaped hashes and hashes inside inline code are not headings.
    """
    in_fence = False
    for i in range(start_line, len(lines)):
        line = lines[i]
        if line.strip().startswith(_FENCE_MARKERS):
            in_fence = not in_fence
            continue
        if in_fence:
            continue

        if (
            line.startswith("# ")
            and not line.startswith("\\# ")
            and _outside_inline_code(line)
        ):
            return TitleLocation(i, line[2:], HeadingStyle.PREFIX)

        if (
            line.strip()
            and i + 1 < len(lines)
            and _UNDERLINE.match(lines[i + 1])
            and _outside_inline_code(line)
        ):
            return TitleLocation(i, line, HeadingStyle.UNDERLINE)
    return None


def _unquote(value: str) -> str:
    double_quoted = len(value) >= 2 and value.startswith('"') and value.endswith('"')
    if value.startswith(('"', "'")):
        value = value[1:]
    if value.endswith(('"', "'")):
        value = value[:-1]
    if double_quoted:
        value = value.replace('\\"', '"')
    return value


def find_frontmatter_title(lines: list[str], key: str = "title") -> TitleLocation | None:
    """Find the ``key: value`` line inside the leading frontmatter block."""
    if not lines or lines[0] != FRONTMATTER_DELIMITER:
        return None
    prefix = f"{key}: "
    for i in range(1, len(lines)):
        line = lines[i]
        if line == FRONTMATTER_DELIMITER:
            return None
        if line.startswith(prefix):
            return TitleLocation(i, _unquote(line[len(prefix):]), HeadingStyle.FRONTMATTER)
    return None
