"""
Selection / playback coordinator.

Drives what the UI shows for the selected song: cached metadata on selection,
cache-then-remote resolution on play, and artwork rotation for the song that
is playing. Every async continuation re-checks that its operation has not been
superseded before it touches the display, so the newest selection always wins
regardless of the order in which lookups finish.
"""
import os
import asyncio
from dataclasses import dataclass, replace
from pathlib import Path, PureWindowsPath
from typing import Callable, List, Optional
from urllib.parse import urlparse

from config import ARTWORK, RESOURCES_DIR
from logging_config import get_logger
from playback import AudioPlayback
from providers.base import MetadataProvider, LookupResult
from system_utils.artwork_rotation import ArtworkRotation
from system_utils.helpers import build_query_from_file_name, create_tracked_task, existing_files, same_path
from system_utils.metadata_cache import MetadataCache, SongCacheEntry
from system_utils.state import (
    STATUS_READY,
    STATUS_LOADING,
    STATUS_FROM_CACHE,
    STATUS_OK,
    STATUS_UPDATED,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class Song:
    full_path: str

    @property
    def file_name_without_ext(self) -> str:
        # Accept both separators so Windows paths behave the same everywhere
        name = self.full_path.replace("\\", "/").rsplit("/", 1)[-1]
        return os.path.splitext(name)[0]


@dataclass(frozen=True)
class DisplayState:
    display_name: str = ""
    display_path: str = ""
    track_name: str = ""
    artist_name: str = ""
    album_name: str = ""
    artwork_url: str = ""
    cover_image_path: str = ""
    status_message: str = ""


def resolve_image_path(value: str, resources_dir: Optional[Path] = None) -> str:
    """Absolute URLs and paths pass through; relative assets resolve against the resources dir."""
    if urlparse(value).scheme in ("http", "https", "file"):
        return value
    if os.path.isabs(value) or PureWindowsPath(value).is_absolute():
        return value
    return str(((resources_dir or RESOURCES_DIR) / value).resolve())


class PlayerCoordinator:
    def __init__(self, cache: MetadataCache, provider: MetadataProvider, playback: AudioPlayback,
                 rotation_interval: Optional[float] = None, resources_dir: Optional[Path] = None,
                 default_cover: Optional[str] = None):
        self.cache = cache
        self.provider = provider
        self.playback = playback
        self.resources_dir = resources_dir or RESOURCES_DIR
        self.default_cover = default_cover or ARTWORK["default_cover"]
        self.rotation = ArtworkRotation(self._on_rotation_image, rotation_interval)

        self.selected_song: Optional[Song] = None
        self.playback_target: Optional[Song] = None
        self.state = DisplayState(
            artwork_url=self.default_cover,
            cover_image_path=self._resolve(self.default_cover),
        )
        self._subscribers: List[Callable[[DisplayState], None]] = []

        # One task + generation per operation kind; bumping the generation retires the old scope
        self._preview_task: Optional[asyncio.Task] = None
        self._preview_generation = 0
        self._resolve_task: Optional[asyncio.Task] = None
        self._resolve_generation = 0

    # ------------------------------------------------------------------
    # Publication
    # ------------------------------------------------------------------

    def subscribe(self, callback: Callable[[DisplayState], None]) -> Callable[[], None]:
        """Register for full DisplayState snapshots. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, state: DisplayState) -> None:
        self.state = state
        for callback in list(self._subscribers):
            try:
                callback(state)
            except Exception as e:
                logger.error(f"Display subscriber failed: {e}", exc_info=True)

    def _publish_status(self, message: str) -> None:
        self._publish(replace(self.state, status_message=message))

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, song: Optional[Song]) -> Optional[asyncio.Task]:
        """
        Show a new selection right away and look it up in the cache in the background.
        Never calls the remote provider and never writes to the cache.
        """
        self._cancel_preview()
        self.rotation.stop()
        self.selected_song = song
        if song is None:
            return None

        self._publish(self._provisional_state(song, STATUS_READY))

        generation = self._preview_generation
        self._preview_task = create_tracked_task(self._preview(song, generation))
        return self._preview_task

    async def _preview(self, song: Song, generation: int) -> None:
        try:
            entry = await self.cache.get(song.full_path)
        except Exception as e:
            logger.error(f"Cache read failed for {song.full_path}: {e}")
            if self._preview_is_current(song, generation):
                self._publish_status(f"Cache error: {e}")
            return

        if entry is None or not self._preview_is_current(song, generation):
            return
        self._publish(self._state_from_entry(song, entry, STATUS_FROM_CACHE))

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    async def play(self) -> None:
        """Start playing the selection, then resolve its metadata (cache first, then remote)."""
        song = self.selected_song
        if song is None:
            return

        self._cancel_preview()
        self._cancel_resolution()

        try:
            self.playback.play(song.full_path)
        except Exception as e:
            logger.error(f"Playback failed for {song.full_path}: {e}")
            self._publish_status(f"Playback error: {e}")
            return

        self.playback_target = song
        self.rotation.stop()

        generation = self._resolve_generation
        task = create_tracked_task(self._resolve_metadata(song, generation))
        self._resolve_task = task
        # A newer play() cancels this task; wait() returns without raising in that case
        await asyncio.wait({task})

    async def _resolve_metadata(self, song: Song, generation: int) -> None:
        try:
            entry = await self.cache.get(song.full_path)
        except Exception as e:
            logger.error(f"Cache read failed for {song.full_path}: {e}")
            if self._resolution_is_current(song, generation):
                self._publish_status(f"Cache error: {e}")
            return

        if entry is not None:
            if self._resolution_is_current(song, generation):
                self._publish(self._state_from_entry(song, entry, STATUS_FROM_CACHE))
                await self._start_rotation_for(song, entry)
            return

        if self._resolution_is_current(song, generation):
            self._publish(self._provisional_state(song, STATUS_LOADING))

        query = build_query_from_file_name(song.file_name_without_ext)
        try:
            result = await self.provider.search(query)
        except Exception as e:
            # Providers should not raise, but a broken one must not take the coordinator down
            logger.error(f"Provider {self.provider} raised for '{query}': {e}", exc_info=True)
            result = LookupResult.failed(str(e))

        if not result.success:
            if self._resolution_is_current(song, generation):
                self._publish(self._provisional_state(song, f"API error: {result.error_message}"))
            return

        entry = SongCacheEntry(
            file_path=song.full_path,
            track_name=result.track_name or song.file_name_without_ext,
            artist_name=result.artist_name or "",
            album_name=result.album_name or "",
            api_artwork_url=result.artwork_url or self.default_cover,
            user_images=[],
        )

        # Persisting a finished lookup is useful even if the user has moved on.
        # Images attached by an edit while the lookup ran stay on the entry.
        status = STATUS_OK
        try:
            entry = await self.cache.upsert(entry, keep_user_images=True)
        except Exception as e:
            logger.error(f"Cache write failed for {song.full_path}: {e}")
            status = f"Cache error: {e}"

        if not self._resolution_is_current(song, generation):
            logger.debug(f"Dropping stale metadata for {song.full_path}")
            return
        self._publish(self._state_from_entry(song, entry, status))
        await self._start_rotation_for(song, entry)

    def stop(self) -> None:
        """Stop playback and artwork rotation; the selection stays on screen."""
        self._cancel_resolution()
        self.rotation.stop()
        self.playback_target = None
        try:
            self.playback.stop()
        except Exception as e:
            logger.error(f"Stopping playback failed: {e}")
            self._publish_status(f"Playback error: {e}")

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    async def refresh_after_edit(self, song: Song) -> None:
        """Re-read an edited song's entry and show it if the song is still selected."""
        if self._resolve_task is not None and not self._resolve_task.done() and self._is_playback_target(song):
            # The saved edit is newer than whatever the running lookup would write
            self._cancel_resolution()

        try:
            entry = await self.cache.get(song.full_path)
        except Exception as e:
            logger.error(f"Cache read failed for {song.full_path}: {e}")
            if self._is_selected(song):
                self._publish_status(f"Cache error: {e}")
            return

        if not self._is_selected(song):
            return

        self.rotation.stop()
        if entry is None:
            self._publish(self._provisional_state(song, STATUS_UPDATED))
            return
        self._publish(self._state_from_entry(song, entry, STATUS_UPDATED))
        await self._start_rotation_for(song, entry)

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def cancel_pending(self) -> None:
        """Retire any in-flight preview or resolution; their results will never be shown."""
        self._cancel_preview()
        self._cancel_resolution()

    async def close(self) -> None:
        tasks = [t for t in (self._preview_task, self._resolve_task) if t is not None]
        self.cancel_pending()
        self.rotation.stop()
        if tasks:
            await asyncio.wait(tasks)

    def _cancel_preview(self) -> None:
        self._preview_generation += 1
        if self._preview_task is not None:
            self._preview_task.cancel()
            self._preview_task = None

    def _cancel_resolution(self) -> None:
        self._resolve_generation += 1
        if self._resolve_task is not None:
            self._resolve_task.cancel()
            self._resolve_task = None

    # ------------------------------------------------------------------
    # Staleness checks
    # ------------------------------------------------------------------

    def _is_selected(self, song: Song) -> bool:
        return self.selected_song is not None and same_path(self.selected_song.full_path, song.full_path)

    def _is_playback_target(self, song: Song) -> bool:
        return self.playback_target is not None and same_path(self.playback_target.full_path, song.full_path)

    def _preview_is_current(self, song: Song, generation: int) -> bool:
        return generation == self._preview_generation and self._is_selected(song)

    def _resolution_is_current(self, song: Song, generation: int) -> bool:
        return generation == self._resolve_generation and self._is_selected(song)

    # ------------------------------------------------------------------
    # Artwork
    # ------------------------------------------------------------------

    async def _start_rotation_for(self, song: Song, entry: SongCacheEntry) -> None:
        if not self._is_playback_target(song):
            return
        images = await asyncio.to_thread(existing_files, entry.user_images)
        # Selection or playback may have moved on while the disk was checked
        if images and self._is_playback_target(song) and self._is_selected(song):
            self.rotation.start(images)

    def _on_rotation_image(self, image_path: str) -> None:
        self._publish(replace(self.state, cover_image_path=self._resolve(image_path)))

    def _resolve(self, value: str) -> str:
        return resolve_image_path(value or self.default_cover, self.resources_dir)

    def _provisional_state(self, song: Song, status: str) -> DisplayState:
        return DisplayState(
            display_name=song.file_name_without_ext,
            display_path=song.full_path,
            track_name=song.file_name_without_ext,
            artist_name="",
            album_name="",
            artwork_url=self.default_cover,
            cover_image_path=self._resolve(self.default_cover),
            status_message=status,
        )

    def _state_from_entry(self, song: Song, entry: SongCacheEntry, status: str) -> DisplayState:
        artwork = entry.api_artwork_url or self.default_cover
        return DisplayState(
            display_name=song.file_name_without_ext,
            display_path=song.full_path,
            track_name=entry.track_name or song.file_name_without_ext,
            artist_name=entry.artist_name or "",
            album_name=entry.album_name or "",
            artwork_url=artwork,
            cover_image_path=self._resolve(artwork),
            status_message=status,
        )
