"""Vault backed by a local directory.

Every mutation made through ``LocalVault`` is published on the attached
``EventHub``, the way an editor host reports its own file operations.
Watching for changes made by other programs is not part of this adapter.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

import frontmatter

from titlesync.events import EventHub, EventKind
from titlesync.vault.base import RenameConflictError, VaultError, VaultFile

logger = logging.getLogger(__name__)


class LocalVault:
    """Read/modify/rename Markdown files under ``root``."""

    def __init__(self, root: Path, events: EventHub | None = None) -> None:
        self.root = Path(root)
        self.events = events or EventHub()

    def resolve(self, path: str) -> Path:
        return self.root / path

    def file(self, path: str) -> VaultFile:
        """Vault entry for a path given relative to the root or as an absolute path."""
        p = Path(path)
        if p.is_absolute():
            try:
                p = p.resolve().relative_to(self.root.resolve())
            except ValueError as e:
                raise VaultError(f"{path} is outside the vault {self.root}") from e
        return VaultFile(p.as_posix())

    def list_files(self) -> list[VaultFile]:
        files = []
        for p in sorted(self.root.rglob("*")):
            rel = p.relative_to(self.root)
            if not p.is_file() or any(part.startswith(".") for part in rel.parts):
                continue
            files.append(VaultFile(rel.as_posix()))
        return files

    async def read(self, file: VaultFile) -> str:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self._read, self.resolve(file.path))
        except OSError as e:
            raise VaultError(f"Cannot read {file.path}: {e}") from e

    async def modify(self, file: VaultFile, text: str) -> None:
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._write, self.resolve(file.path), text)
        except OSError as e:
            raise VaultError(f"Cannot write {file.path}: {e}") from e
        logger.debug("Modified %s", file.path)
        await self.events.emit(EventKind.MODIFY, file)

    async def rename(self, file: VaultFile, new_path: str) -> None:
        source = self.resolve(file.path)
        target = self.resolve(new_path)
        # Case-only renames point at the same file on case-insensitive systems
        if target.exists() and not _same_file(source, target):
            raise RenameConflictError(f"Cannot rename {file.path}: {new_path} already exists")
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, source.rename, target)
        except OSError as e:
            raise VaultError(f"Cannot rename {file.path} to {new_path}: {e}") from e
        logger.info("Renamed %s -> %s", file.path, new_path)
        await self.events.emit(EventKind.RENAME, VaultFile(new_path), file.path)

    async def open(self, file: VaultFile | None) -> None:
        """Report ``file`` as the document now open in the editor."""
        await self.events.emit(EventKind.OPEN, file)

    @staticmethod
    def _read(path: Path) -> str:
        return path.read_text(encoding="utf-8")

    @staticmethod
    def _write(path: Path, text: str) -> None:
        path.write_text(text, encoding="utf-8")


def _same_file(a: Path, b: Path) -> bool:
    try:
        return a.samefile(b)
    except OSError:
        return False


class FrontmatterCache:
    """Parsed frontmatter of files in a ``LocalVault``."""

    def __init__(self, vault: LocalVault) -> None:
        self.vault = vault

    def get_frontmatter(self, file: VaultFile) -> dict[str, Any] | None:
        path = self.vault.resolve(file.path)
        try:
            post = frontmatter.load(str(path))
        except Exception:
            return None
        return dict(post.metadata) or None
