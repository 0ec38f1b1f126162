"""Configuration loading from environment variables and titlesync.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

from titlesync.cache import DEFAULT_CAPACITY

_CONFIG_FILENAME = "titlesync.toml"
_SETTINGS_RELPATH = Path(".titlesync") / "settings.json"


@dataclass
class AppConfig:
    """Where the vault lives and how the process runs. User sync rules live in Settings."""

    vault_dir: Path = field(default_factory=Path.cwd)
    settings_file: Path | None = None
    cache_capacity: int = DEFAULT_CAPACITY
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.settings_file is None:
            self.settings_file = self.vault_dir / _SETTINGS_RELPATH


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from environment variables and optional titlesync.toml.

    Priority: environment variables > titlesync.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.titlesync/
        for candidate in [
            Path.cwd() / _CONFIG_FILENAME,
            Path.home() / ".titlesync" / _CONFIG_FILENAME,
        ]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    vault_dir = Path(os.getenv("TITLESYNC_VAULT", file_data.get("vault_dir", str(Path.cwd()))))
    settings_file = os.getenv("TITLESYNC_SETTINGS", file_data.get("settings_file"))

    return AppConfig(
        vault_dir=vault_dir,
        settings_file=Path(settings_file) if settings_file else None,
        cache_capacity=int(
            os.getenv("TITLESYNC_CACHE_CAPACITY", file_data.get("cache_capacity", DEFAULT_CAPACITY))
        ),
        log_level=os.getenv("TITLESYNC_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
