"""Pure line-list edits for writing a title back into a document.

Every function returns a new list; the caller decides when to write it.
"""

from __future__ import annotations

from titlesync.locator import FRONTMATTER_DELIMITER, HeadingStyle, TitleLocation, find_note_start


def replace_line(lines: list[str], line_number: int, text: str) -> list[str]:
    """Replace one line. Past the end, the text is appended as a new last line."""
    if line_number >= len(lines):
        return [*lines, text, ""]
    result = list(lines)
    result[line_number] = text
    return result


def insert_lines(lines: list[str], line_number: int, texts: list[str]) -> list[str]:
    """Insert ``texts`` before ``line_number``. Past the end, they are appended."""
    if line_number >= len(lines):
        return [*lines, *texts, ""]
    return [*lines[:line_number], *texts, *lines[line_number:]]


def delete_line(lines: list[str], line_number: int) -> list[str]:
    if line_number >= len(lines):
        return list(lines)
    return [*lines[:line_number], *lines[line_number + 1:]]


def format_heading(title: str, style: HeadingStyle, underline: str = "===") -> list[str]:
    """Render a heading as the line(s) it occupies."""
    if style is HeadingStyle.UNDERLINE:
        return [title, underline]
    return [f"# {title}"]


def insert_heading(
    lines: list[str],
    line_number: int,
    title: str,
    *,
    style: HeadingStyle = HeadingStyle.PREFIX,
    underline: str = "===",
) -> list[str]:
    return insert_lines(lines, line_number, format_heading(title, style, underline))


def replace_heading(
    lines: list[str],
    location: TitleLocation,
    title: str,
    *,
    style: HeadingStyle = HeadingStyle.PREFIX,
    replace_style: bool = False,
    underline: str = "===",
) -> list[str]:
    """Swap the heading text at ``location``.

    With ``replace_style`` off the existing style is kept. With it on the
    heading is converted to ``style``: an underline line is added, refreshed
    or removed as needed.
    """
    n = location.line_number
    old_style = location.style
    new_style = style if replace_style else old_style

    if new_style is HeadingStyle.UNDERLINE:
        result = replace_line(lines, n, title)
        if not replace_style:
            return result
        if old_style is HeadingStyle.UNDERLINE:
            return replace_line(result, n + 1, underline)
        return insert_lines(result, n + 1, [underline])

    result = replace_line(lines, n, f"# {title}")
    if old_style is HeadingStyle.UNDERLINE:
        result = delete_line(result, n + 1)
    return result


def format_frontmatter_field(key: str, value: str) -> str:
    escaped = value.replace('"', '\\"')
    return f'{key}: "{escaped}"'


def write_frontmatter_title(
    lines: list[str],
    title: str,
    *,
    key: str = "title",
    location: TitleLocation | None = None,
) -> list[str]:
    """Set the frontmatter ``key`` to ``title``.

    Replaces the field when ``location`` is given, otherwise inserts it at the
    top of an existing frontmatter block, or creates a new block.
    """
    field = format_frontmatter_field(key, title)
    if location is not None:
        return replace_line(lines, location.line_number, field)
    if find_note_start(lines) > 0:
        return insert_lines(lines, 1, [field])
    return insert_lines(lines, 0, [FRONTMATTER_DELIMITER, field, FRONTMATTER_DELIMITER])
