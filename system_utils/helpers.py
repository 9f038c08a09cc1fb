"""
Helper functions for system_utils package.
Pure utility functions with minimal dependencies.

Dependencies: state (for task tracking)
"""
from __future__ import annotations
import re
import os
import asyncio

from . import state
from logging_config import get_logger

logger = get_logger(__name__)

# A dash glued to a word ("My-Song") is a word break; a free-standing dash
# ("Artist - Song") is the artist/title separator and is kept.
_ATTACHED_DASH = re.compile(r"(?<=\S)-|-(?=\S)")
_WHITESPACE = re.compile(r"\s+")


def build_query_from_file_name(file_name_without_ext: str) -> str:
    """
    Turn a file name (without extension) into a search term.

    Examples:
        "My-Song_Name"  -> "My Song Name"
        "Artist_-_Song" -> "Artist - Song"
    """
    query = file_name_without_ext.replace("_", " ")
    query = _ATTACHED_DASH.sub(" ", query)
    return _WHITESPACE.sub(" ", query).strip()


def same_path(a: str | None, b: str | None) -> bool:
    """Case-insensitive path comparison, matching how the cache keys entries."""
    if a is None or b is None:
        return False
    return a.casefold() == b.casefold()


def existing_files(paths: list[str]) -> list[str]:
    """Paths that still point at a file. Blocking; run it in a worker thread."""
    return [path for path in paths if os.path.isfile(path)]


def create_tracked_task(coro):
    """
    Create a background task with automatic cleanup and error logging.
    Prevents silent failures and ensures tasks complete even if references are lost.
    """
    task = asyncio.create_task(coro)
    state._background_tasks.add(task)

    def cleanup(t):
        state._background_tasks.discard(t)
        try:
            t.result()
        except asyncio.CancelledError:
            pass  # Superseded or shut down
        except Exception as e:
            logger.error(f"Background task failed: {e}", exc_info=True)

    task.add_done_callback(cleanup)
    return task
