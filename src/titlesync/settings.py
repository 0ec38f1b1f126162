"""User settings: defaults, validation and JSON persistence across sessions."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any

from titlesync.locator import HeadingStyle

logger = logging.getLogger(__name__)


class SyncTarget(str, Enum):
    """A place inside the document that can hold the title."""

    HEADING = "heading"
    FRONTMATTER = "frontmatter"


@dataclass
class Settings:
    """Persisted configuration. Mutated by commands, saved on every mutation."""

    user_illegal_symbols: list[str] = field(default_factory=list)
    ignore_regex: str = ""
    ignored_files: dict[str, None] = field(default_factory=dict)
    include_mode: bool = False
    include_regex: str = ""
    included_files: dict[str, None] = field(default_factory=dict)
    use_file_open_hook: bool = True
    use_file_save_hook: bool = True
    new_heading_style: HeadingStyle = HeadingStyle.PREFIX
    replace_style: bool = False
    underline_string: str = "==="
    frontmatter_key: str = "title"
    # filename -> these, on rename and open
    rename_targets: list[SyncTarget] = field(default_factory=lambda: [SyncTarget.HEADING])
    # these -> filename (and each other), on modify
    modify_sources: list[SyncTarget] = field(default_factory=lambda: [SyncTarget.HEADING])
    conflict_precedence: SyncTarget = SyncTarget.HEADING
    use_debounce: bool = True
    debounce_timeout: int = 1000  # ms

    @property
    def rule_regex(self) -> str:
        """The regex rule in effect for the current mode."""
        return self.include_regex if self.include_mode else self.ignore_regex

    @property
    def manual_files(self) -> dict[str, None]:
        """The manually managed path set in effect for the current mode."""
        return self.included_files if self.include_mode else self.ignored_files

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["new_heading_style"] = self.new_heading_style.value
        data["rename_targets"] = [t.value for t in self.rename_targets]
        data["modify_sources"] = [t.value for t in self.modify_sources]
        data["conflict_precedence"] = self.conflict_precedence.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Settings":
        """Merge persisted ``data`` over the defaults.

        Unknown keys are dropped; a malformed value falls back to its default.
        """
        settings = cls()
        if not data:
            return settings
        data = dict(data)

        # Older settings files only had a "use frontmatter instead of heading" switch
        legacy = data.pop("frontmatter_title", None)
        if legacy is not None and "rename_targets" not in data and "modify_sources" not in data:
            target = SyncTarget.FRONTMATTER if legacy else SyncTarget.HEADING
            data["rename_targets"] = [target.value]
            data["modify_sources"] = [target.value]

        known = {f.name for f in fields(cls)}
        for key, value in data.items():
            if key not in known:
                logger.debug("Ignoring unknown setting: %s", key)
                continue
            try:
                setattr(settings, key, _coerce(key, value, getattr(settings, key)))
            except (TypeError, ValueError) as e:
                logger.warning("Invalid value for setting %s (%r): %s", key, value, e)
        return settings


def _coerce(key: str, value: Any, default: Any) -> Any:
    if key == "new_heading_style":
        return HeadingStyle(value)
    if key == "conflict_precedence":
        return SyncTarget(value)
    if key in ("rename_targets", "modify_sources"):
        if not isinstance(value, list):
            raise TypeError("expected a list")
        targets: list[SyncTarget] = []
        for item in value:
            target = SyncTarget(item)
            if target not in targets:
                targets.append(target)
        return targets
    if key in ("ignored_files", "included_files"):
        if not isinstance(value, dict):
            raise TypeError("expected a mapping")
        return {str(path): None for path in value}
    if key == "user_illegal_symbols":
        if not isinstance(value, list):
            raise TypeError("expected a list")
        return [str(s) for s in value]
    if key == "debounce_timeout":
        timeout = int(value)
        if timeout <= 0:
            raise ValueError("must be a positive number of milliseconds")
        return timeout
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise TypeError("expected a boolean")
        return value
    if not isinstance(value, str):
        raise TypeError("expected a string")
    return value


def validated_regex(value: str) -> str:
    """Return ``value`` if it compiles, else the empty (inert) rule."""
    try:
        re.compile(value)
    except re.error:
        logger.warning("Invalid regex rule %r, clearing it", value)
        return ""
    return value


class SettingsStore:
    """Load and save ``Settings`` as a JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> Settings:
        if not self.path.exists():
            return Settings()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read settings %s: %s", self.path, e)
            return Settings()
        if not isinstance(data, dict):
            logger.warning("Settings file %s is not an object, using defaults", self.path)
            return Settings()
        return Settings.from_dict(data)

    def save(self, settings: Settings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(settings.to_dict(), ensure_ascii=False, indent=2) + "\n",
            encoding="utf-8",
        )
