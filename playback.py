"""
Audio playback collaborator.
Decoding and output belong to whatever engine the shell plugs in; the
coordinator only needs play/stop and an exception when playback cannot start.
"""
import os
from typing import Optional, Protocol

from logging_config import get_logger

logger = get_logger(__name__)


class AudioPlayback(Protocol):
    def play(self, file_path: str) -> None: ...

    def stop(self) -> None: ...


class LocalFilePlayback:
    """Validates the file and tracks what is playing."""

    def __init__(self):
        self.current_path: Optional[str] = None

    def play(self, file_path: str) -> None:
        if not os.path.isfile(file_path):
            raise FileNotFoundError(f"Audio file not found: {file_path}")
        self.current_path = file_path
        logger.info(f"Playing {file_path}")

    def stop(self) -> None:
        if self.current_path:
            logger.info(f"Stopped {self.current_path}")
        self.current_path = None
