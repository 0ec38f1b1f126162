"""Entry point: python -m titlesync <command> [path]

- filename-to-heading <path>      Write the filename into the first heading
- heading-to-filename <path>      Rename the file after its first heading
- filename-to-frontmatter <path>  Write the filename into the frontmatter title
- frontmatter-to-filename <path>  Rename the file after its frontmatter title
- ignore <path> / unignore <path> Manage the manually ignored files
- ignored                         List manually ignored files and regex matches
"""

from __future__ import annotations

import asyncio
import logging
import sys

from titlesync.config import AppConfig, load_config
from titlesync.core import TitleSync
from titlesync.settings import SettingsStore, SyncTarget
from titlesync.vault.base import VaultError
from titlesync.vault.local import FrontmatterCache, LocalVault

_SYNC_COMMANDS = {
    "filename-to-heading": ("to_content", SyncTarget.HEADING),
    "heading-to-filename": ("to_filename", SyncTarget.HEADING),
    "filename-to-frontmatter": ("to_content", SyncTarget.FRONTMATTER),
    "frontmatter-to-filename": ("to_filename", SyncTarget.FRONTMATTER),
}
_PATH_COMMANDS = {*_SYNC_COMMANDS, "ignore", "unignore"}


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _build(config: AppConfig) -> TitleSync:
    vault = LocalVault(config.vault_dir)
    return TitleSync(
        vault,
        vault.events,
        SettingsStore(config.settings_file),
        metadata=FrontmatterCache(vault),
        cache_capacity=config.cache_capacity,
    )


async def _run(config: AppConfig, cmd: str, arg: str | None) -> int:
    sync = _build(config)
    await sync.start()
    try:
        if cmd == "ignored":
            for path in sync.settings.ignored_files:
                print(f"manual  {path}")
            for path in sync.files_matching_rule():
                print(f"regex   {path}")
            return 0

        try:
            file = sync.vault.file(arg)
        except VaultError as e:
            print(e, file=sys.stderr)
            return 1
        if cmd == "ignore":
            sync.ignore_file(file.path)
            return 0
        if cmd == "unignore":
            if not sync.unignore_file(file.path):
                print(f"{file.path} is not ignored", file=sys.stderr)
                return 1
            return 0

        direction, target = _SYNC_COMMANDS[cmd]
        if not sync.vault.resolve(file.path).is_file():
            print(f"No such file: {file.path}", file=sys.stderr)
            return 1
        if direction == "to_content":
            ok = await sync.sync_filename_to(file, target)
        else:
            ok = await sync.sync_to_filename(file, target)
        return 0 if ok else 1
    finally:
        await sync.stop()


def _usage() -> None:
    print("Usage: python -m titlesync <command> [path]")
    for name in _SYNC_COMMANDS:
        print(f"  {name} <path>")
    print("  ignore <path>")
    print("  unignore <path>")
    print("  ignored")


def main() -> None:
    cmd = sys.argv[1] if len(sys.argv) > 1 else ""
    arg = sys.argv[2] if len(sys.argv) > 2 else None

    if cmd not in _PATH_COMMANDS and cmd != "ignored":
        _usage()
        sys.exit(1)
    if cmd in _PATH_COMMANDS and arg is None:
        _usage()
        sys.exit(1)

    config = load_config()
    _setup_logging(config.log_level)
    sys.exit(asyncio.run(_run(config, cmd, arg)))


if __name__ == "__main__":
    main()
