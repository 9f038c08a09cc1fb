"""
SongMeta command line shell.
Stands in for the GUI: drives the coordinator and edit session from the terminal.
"""
import os
import asyncio
import json

import click

from config import DEBUG
from logging_config import setup_logging, get_logger
from playback import LocalFilePlayback
from player import PlayerCoordinator, Song, DisplayState
from providers.itunes import ItunesMetadataProvider
from song_editor import SongEditor
from system_utils.image_storage import ImageStorage
from system_utils.metadata_cache import CacheError, MetadataCache

logger = get_logger(__name__)


def _print_state(state: DisplayState) -> None:
    click.echo(f"[{state.status_message}] {state.track_name} - {state.artist_name} ({state.album_name})")
    click.echo(f"    cover: {state.cover_image_path}")


async def _resolve_all(paths, verbose: bool) -> None:
    provider = ItunesMetadataProvider()
    coordinator = PlayerCoordinator(MetadataCache(), provider, LocalFilePlayback())
    if verbose:
        coordinator.subscribe(_print_state)
    try:
        for path in paths:
            song = Song(os.path.abspath(path))
            click.echo(song.full_path)
            coordinator.select(song)
            await coordinator.play()
            if not verbose:
                _print_state(coordinator.state)
    finally:
        # close() first so it still sees the resolution task it has to wait for
        await coordinator.close()
        coordinator.stop()
        provider.close()


async def _edit_images(song_path: str, add=(), remove=()) -> SongEditor:
    editor = SongEditor(Song(os.path.abspath(song_path)), MetadataCache(), ImageStorage())
    await editor.load()
    if editor.status_message.startswith("Cache error"):
        # Stored images would be orphaned by a save that cannot succeed
        return editor
    for image in add:
        await editor.add_image(os.path.abspath(image))
        click.echo(editor.status_message)
    for image in remove:
        await editor.remove_image(os.path.abspath(image))
        click.echo(editor.status_message)
    await editor.save()
    return editor


@click.group()
@click.option("--log-level", default=None, help="Console log level (defaults to debug.log_level)")
def cli(log_level):
    """Resolve and cache display metadata for local music files."""
    setup_logging(
        console_level=log_level or DEBUG.get("log_level", "INFO"),
        file_level="DEBUG" if DEBUG.get("log_detailed", False) else "INFO",
        console=DEBUG.get("log_to_console", True),
        log_file=DEBUG.get("log_file", "songmeta.log"),
    )


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(dir_okay=False))
@click.option("--verbose", "-v", is_flag=True, help="Print every display update")
def resolve(paths, verbose):
    """Play each file in turn and print the metadata that ends up on screen."""
    asyncio.run(_resolve_all(paths, verbose))


@cli.command()
@click.argument("path")
def show(path):
    """Print the cached entry for a song."""
    try:
        entry = MetadataCache().get_sync(os.path.abspath(path))
    except (CacheError, OSError) as e:
        logger.error(f"Cache read failed for {path}: {e}")
        click.echo(f"Cache error: {e}")
        return
    if entry is None:
        click.echo("Not cached")
        return
    click.echo(json.dumps(entry.to_dict(), indent=2, ensure_ascii=False))


@cli.command("add-image")
@click.argument("song")
@click.argument("images", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
def add_image(song, images):
    """Attach user images to a song."""
    editor = asyncio.run(_edit_images(song, add=images))
    click.echo(f"{editor.status_message}: {len(editor.user_images)} image(s)")


@cli.command("remove-image")
@click.argument("song")
@click.argument("images", nargs=-1, required=True)
def remove_image(song, images):
    """Detach user images from a song and delete the stored copies."""
    editor = asyncio.run(_edit_images(song, remove=images))
    click.echo(f"{editor.status_message}: {len(editor.user_images)} image(s)")


if __name__ == "__main__":
    try:
        cli()
    except KeyboardInterrupt:
        logger.info("Interrupted")
