"""Host collaborator protocols and shared types."""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class VaultError(Exception):
    """A host storage operation failed."""


class RenameConflictError(VaultError):
    """The rename target already exists."""


@dataclass(frozen=True)
class VaultEntry:
    """Anything addressable in the vault, by vault-relative POSIX path."""

    path: str

    @property
    def name(self) -> str:
        return posixpath.basename(self.path)

    @property
    def parent(self) -> str:
        return posixpath.dirname(self.path)


@dataclass(frozen=True)
class VaultFile(VaultEntry):
    @property
    def extension(self) -> str:
        _, ext = posixpath.splitext(self.name)
        return ext[1:]

    @property
    def basename(self) -> str:
        stem, _ = posixpath.splitext(self.name)
        return stem

    def sibling(self, basename: str) -> "VaultFile":
        """The file with ``basename`` in the same folder and with the same extension."""
        name = f"{basename}.{self.extension}" if self.extension else basename
        return VaultFile(posixpath.join(self.parent, name))


@dataclass(frozen=True)
class VaultFolder(VaultEntry):
    pass


def is_markdown(entry: object) -> bool:
    """Boundary check: only Markdown files ever reach the engine."""
    return isinstance(entry, VaultFile) and entry.extension == "md"


@runtime_checkable
class Vault(Protocol):
    """Read, modify and rename text files."""

    async def read(self, file: VaultFile) -> str: ...

    async def modify(self, file: VaultFile, text: str) -> None: ...

    async def rename(self, file: VaultFile, new_path: str) -> None:
        """Move ``file`` to ``new_path``. Raises VaultError on failure."""
        ...

    def list_files(self) -> list[VaultFile]: ...


@runtime_checkable
class MetadataCache(Protocol):
    """Parsed frontmatter lookups."""

    def get_frontmatter(self, file: VaultFile) -> dict[str, Any] | None: ...


@runtime_checkable
class Notifier(Protocol):
    """One-shot user-facing notices."""

    def notify(self, message: str) -> None: ...


class LogNotifier:
    """Notifier that writes notices to the log."""

    def notify(self, message: str) -> None:
        logger.warning("%s", message)
