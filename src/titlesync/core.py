"""TitleSync: the event router that keeps filenames, headings and frontmatter titles in step.

Responsibilities:
1. Subscribe to rename/modify/open events from the host
2. Skip what must not be touched: non-Markdown, ignored, excluded, our own writes
3. Filename → content on rename and open
4. Content → filename on modify (debounced), picking a source of truth via the cache
5. The user command surface (ignore file, forced syncs, regex rules)
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from titlesync import policy
from titlesync.cache import DEFAULT_CAPACITY, CachedTitles, TitleCache
from titlesync.debounce import Debouncer
from titlesync.events import EventHub, EventKind, Subscription
from titlesync.locator import find_frontmatter_title, find_heading, find_note_start
from titlesync.rewriter import insert_heading, replace_heading, write_frontmatter_title
from titlesync.sanitize import sanitize
from titlesync.settings import Settings, SettingsStore, SyncTarget, validated_regex
from titlesync.vault.base import LogNotifier, VaultEntry, VaultError, VaultFile, is_markdown

if TYPE_CHECKING:
    from titlesync.vault.base import MetadataCache, Notifier, Vault

logger = logging.getLogger(__name__)


class TitleSync:
    """Context object for one vault: settings, title cache, debouncer, re-entrancy flag."""

    def __init__(
        self,
        vault: Vault,
        events: EventHub,
        settings_store: SettingsStore,
        *,
        metadata: MetadataCache | None = None,
        notifier: Notifier | None = None,
        cache_capacity: int = DEFAULT_CAPACITY,
    ) -> None:
        self.vault = vault
        self.events = events
        self.settings_store = settings_store
        self.metadata = metadata
        self.notifier = notifier or LogNotifier()
        self.settings = Settings()
        self.cache = TitleCache(cache_capacity)
        self.active_path: str | None = None
        self._syncing = False
        self._debouncer = Debouncer(self.settings.debounce_timeout)
        self._pending_file: VaultFile | None = None
        self._subscriptions: list[Subscription] = []

    # ── Lifecycle ─────────────────────────────────────────────

    async def start(self) -> None:
        """Load settings and subscribe to host events."""
        self.settings = self.settings_store.load()
        self._subscriptions = [
            self.events.on(EventKind.RENAME, self.on_rename),
            self.events.on(EventKind.MODIFY, self.on_modify),
            self.events.on(EventKind.OPEN, self.on_open),
        ]
        logger.info(
            "Title sync started (rename targets=%s, modify sources=%s)",
            [t.value for t in self.settings.rename_targets],
            [t.value for t in self.settings.modify_sources],
        )

    async def stop(self) -> None:
        for subscription in self._subscriptions:
            self.events.off(subscription)
        self._subscriptions = []
        self._debouncer.cancel()
        self._pending_file = None
        await self._debouncer.flush()
        logger.info("Title sync stopped.")

    def save_settings(self) -> None:
        self.settings_store.save(self.settings)

    # ── Helpers ───────────────────────────────────────────────

    def sanitize(self, text: str) -> str:
        return sanitize(text, self.settings.user_illegal_symbols)

    def is_ignored(self, file: VaultFile, path: str | None = None) -> bool:
        frontmatter = self.metadata.get_frontmatter(file) if self.metadata else None
        return policy.is_ignored(self.settings, path or file.path, frontmatter, file_path=file.path)

    @asynccontextmanager
    async def _guard(self) -> AsyncIterator[None]:
        """Mark our own writes so the events they raise are not handled again."""
        previous = self._syncing
        self._syncing = True
        try:
            yield
        finally:
            self._syncing = previous

    async def _safely(self, description: str, coro) -> bool:
        try:
            await coro
        except VaultError as e:
            self.notifier.notify(f"Could not {description}: {e}")
            return False
        return True

    def _snapshot(self, lines: list[str]) -> CachedTitles:
        heading = find_heading(lines, find_note_start(lines))
        title = find_frontmatter_title(lines, self.settings.frontmatter_key)
        return CachedTitles(
            heading=heading.text if heading else None,
            frontmatter=title.text if title else None,
        )

    def _write_target(self, lines: list[str], target: SyncTarget, title: str) -> list[str]:
        """Lines with ``title`` written into ``target``; ``lines`` itself when already in sync."""
        s = self.settings
        if target is SyncTarget.FRONTMATTER:
            location = find_frontmatter_title(lines, s.frontmatter_key)
            if location is not None and self.sanitize(location.text) == title:
                return lines
            return write_frontmatter_title(lines, title, key=s.frontmatter_key, location=location)

        start = find_note_start(lines)
        location = find_heading(lines, start)
        if location is None:
            return insert_heading(
                lines, start, title, style=s.new_heading_style, underline=s.underline_string
            )
        if self.sanitize(location.text) == title:
            return lines
        return replace_heading(
            lines,
            location,
            title,
            style=s.new_heading_style,
            replace_style=s.replace_style,
            underline=s.underline_string,
        )

    async def _read_lines(self, file: VaultFile) -> list[str]:
        return (await self.vault.read(file)).split("\n")

    async def _write_lines(self, file: VaultFile, lines: list[str]) -> None:
        async with self._guard():
            await self.vault.modify(file, "\n".join(lines))

    # ── Sync passes ───────────────────────────────────────────

    async def _sync_filename_to_content(
        self, file: VaultFile, targets: Iterable[SyncTarget]
    ) -> None:
        title = self.sanitize(file.basename)
        lines = await self._read_lines(file)
        if not title:
            logger.debug("Filename of %s has no usable title, skipping", file.path)
            self.cache.set(file.path, self._snapshot(lines))
            return

        updated = lines
        for target in targets:
            updated = self._write_target(updated, target, title)
        if updated != lines:
            await self._write_lines(file, updated)
            logger.info("Wrote title %r into %s", title, file.path)
        self.cache.set(file.path, self._snapshot(updated))

    async def _sync_content_to_filename(
        self, file: VaultFile, sources: Iterable[SyncTarget]
    ) -> None:
        sources = list(sources)
        lines = await self._read_lines(file)
        current = self._snapshot(lines)
        previous = self.cache.get(file.path)
        source = policy.resolve_source(current, previous, sources, self.settings.conflict_precedence)
        if source is None:
            logger.debug("No title found in %s", file.path)
            self.cache.set(file.path, current)
            return

        title = self.sanitize(current.get(source) or "")
        if not title:
            logger.debug("Title in %s sanitizes to nothing, skipping", file.path)
            self.cache.set(file.path, current)
            return

        updated = lines
        for target in sources:
            if target is not source:
                updated = self._write_target(updated, target, title)
        if updated != lines:
            await self._write_lines(file, updated)
            logger.info("Copied %s title %r within %s", source.value, title, file.path)
        self.cache.set(file.path, self._snapshot(updated))

        # Rename last: the rename event it raises must find everything else settled
        if self.sanitize(file.basename) != title:
            target_file = file.sibling(title)
            async with self._guard():
                await self.vault.rename(file, target_file.path)
            self.cache.move(file.path, target_file.path)

    # ── Event handlers ────────────────────────────────────────

    async def on_rename(self, entry: VaultEntry, old_path: str) -> None:
        if self.active_path == old_path:
            self.active_path = entry.path
        if self._pending_file is not None and self._pending_file.path == old_path:
            self._pending_file = VaultFile(entry.path)
        self.cache.move(old_path, entry.path)

        if self._syncing:
            logger.debug("Ignoring rename issued by title sync: %s", entry.path)
            return
        if not self.settings.use_file_save_hook or not is_markdown(entry):
            return
        await self.handle_rename(entry, old_path)

    async def handle_rename(self, file: VaultFile, old_path: str) -> None:
        """Filename → content after a rename, unless the file is ignored."""
        old_path = old_path.strip()
        ignored = self.is_ignored(file, old_path)

        manual = self.settings.manual_files
        if old_path != file.path and old_path in manual:
            del manual[old_path]
            manual[file.path] = None
            self.save_settings()
            logger.info("Moved %s rule entry %s -> %s",
                        "include" if self.settings.include_mode else "ignore", old_path, file.path)

        # Include mode also requires the new path to be included
        if ignored or (self.settings.include_mode and self.is_ignored(file)):
            logger.debug("Ignored file renamed: %s", file.path)
            return
        await self._safely(
            f"update title of {file.path}",
            self._sync_filename_to_content(file, self.settings.rename_targets),
        )

    async def on_modify(self, entry: VaultEntry) -> None:
        if self._syncing or not self.settings.use_file_save_hook:
            return
        await self.handle_modify(entry, self.active_path)

    async def handle_modify(self, entry: VaultEntry, active_path: str | None) -> None:
        """Content → filename for the active document, debounced when enabled."""
        if not is_markdown(entry):
            return
        if entry.path != active_path:
            logger.debug("Skipping background modify of %s", entry.path)
            return
        if self.is_ignored(entry):
            return

        self._pending_file = entry
        if self.settings.use_debounce:
            self._debouncer.timeout_ms = self.settings.debounce_timeout
            self._debouncer.trigger(self._sync_pending)
        else:
            await self._sync_pending()

    async def _sync_pending(self) -> None:
        file, self._pending_file = self._pending_file, None
        if file is None:
            return
        await self._safely(
            f"rename {file.path}",
            self._sync_content_to_filename(file, self.settings.modify_sources),
        )

    async def flush(self) -> None:
        """Wait for a debounced sync to finish."""
        await self._debouncer.flush()

    async def on_open(self, entry: VaultEntry | None) -> None:
        self.active_path = entry.path if entry is not None else None
        if entry is None or not is_markdown(entry) or self._syncing:
            return
        if self.is_ignored(entry):
            return
        if self.settings.use_file_open_hook:
            await self._safely(
                f"update title of {entry.path}",
                self._sync_filename_to_content(entry, self.settings.rename_targets),
            )
        else:
            await self._safely(f"read {entry.path}", self._prime_cache(entry))

    async def _prime_cache(self, file: VaultFile) -> None:
        self.cache.set(file.path, self._snapshot(await self._read_lines(file)))

    # ── Commands ──────────────────────────────────────────────

    async def sync_filename_to(self, file: VaultFile, target: SyncTarget) -> bool:
        """Write the filename into the heading or frontmatter, ignoring rules and hooks."""
        return await self._safely(
            f"update {target.value} of {file.path}",
            self._sync_filename_to_content(file, [target]),
        )

    async def sync_to_filename(self, file: VaultFile, source: SyncTarget) -> bool:
        """Rename the file after its heading or frontmatter title, ignoring rules and hooks."""
        return await self._safely(
            f"rename {file.path}",
            self._sync_content_to_filename(file, [source]),
        )

    def ignore_current_file(self) -> bool:
        if self.active_path is None:
            return False
        self.ignore_file(self.active_path)
        return True

    def ignore_file(self, path: str) -> None:
        """Stop syncing ``path``: add it to the ignore list, or drop it from the include list."""
        if self.settings.include_mode:
            self.exclude_file(path)
        else:
            self.settings.ignored_files[path] = None
            self.save_settings()
        logger.info("Ignoring %s", path)

    def unignore_file(self, path: str) -> bool:
        if path not in self.settings.ignored_files:
            return False
        del self.settings.ignored_files[path]
        self.save_settings()
        return True

    def include_file(self, path: str) -> None:
        self.settings.included_files[path] = None
        self.save_settings()
        logger.info("Including %s", path)

    def exclude_file(self, path: str) -> bool:
        if path not in self.settings.included_files:
            return False
        del self.settings.included_files[path]
        self.save_settings()
        return True

    def set_ignore_regex(self, value: str) -> str:
        self.settings.ignore_regex = validated_regex(value)
        self.save_settings()
        return self.settings.ignore_regex

    def set_include_regex(self, value: str) -> str:
        self.settings.include_regex = validated_regex(value)
        self.save_settings()
        return self.settings.include_regex

    def files_matching_rule(self) -> list[str]:
        return policy.files_matching_rule(self.settings, [f.path for f in self.vault.list_files()])
