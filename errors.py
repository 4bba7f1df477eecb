"""
LyricLoom Studio - Errors
Failure types raised by the collaborator clients and the playback pipeline.
"""

from typing import Optional


class LyricLoomError(Exception):
    """Base class for every failure the session knows how to report."""


class CollaboratorError(LyricLoomError):
    """The Gemini API could not be reached or answered with an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GenerationError(LyricLoomError):
    """The text collaborator returned no usable text."""


class SchemaError(LyricLoomError):
    """The returned text did not parse into a song."""


class NoAudioError(LyricLoomError):
    """The speech collaborator returned no audio payload."""


class DecodeError(LyricLoomError):
    """Malformed PCM or base64 audio payload."""


class PlaybackError(LyricLoomError):
    """The audio device refused to start a source."""


class BusyError(LyricLoomError):
    """An operation of the same kind is already in flight."""
