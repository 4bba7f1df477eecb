"""
LyricLoom Studio - Composition Session
Current song, loading/error flags, and the wiring from user actions to clients.
"""

import asyncio
from dataclasses import dataclass, replace
from typing import List, Optional

from errors import BusyError
from lyrics_client import LyricsClient
from playback import PlaybackController, PlaybackState
from schemas import GeneratorParams, SectionCard, SectionType, SongLyrics
from speech_client import lyrics_to_script

LYRICS_FAILED_MESSAGE = "Failed to compose lyrics. Please try again."
AUDIO_FAILED_MESSAGE = "Failed to generate song audio."

# ============================================================================
# State & Transitions
# ============================================================================

@dataclass(frozen=True)
class SessionState:
    lyrics: Optional[SongLyrics] = None
    loading: bool = False
    audio_loading: bool = False
    error: Optional[str] = None


def begin_lyrics(state: SessionState) -> SessionState:
    return replace(state, loading=True, error=None)


def lyrics_succeeded(state: SessionState, lyrics: SongLyrics) -> SessionState:
    return replace(state, lyrics=lyrics, loading=False)


def lyrics_failed(state: SessionState) -> SessionState:
    # Previous song stays on screen
    return replace(state, loading=False, error=LYRICS_FAILED_MESSAGE)


def begin_audio(state: SessionState) -> SessionState:
    return replace(state, audio_loading=True, error=None)


def audio_finished(state: SessionState) -> SessionState:
    return replace(state, audio_loading=False)


def audio_failed(state: SessionState) -> SessionState:
    return replace(state, audio_loading=False, error=AUDIO_FAILED_MESSAGE)

# ============================================================================
# Rendering Helpers
# ============================================================================

def section_cards(lyrics: Optional[SongLyrics]) -> List[SectionCard]:
    """One card per section, in order. Verses are numbered from 1."""
    if lyrics is None:
        return []
    cards = []
    verse_count = 0
    for section in lyrics.sections:
        label = section.type
        if section.type == SectionType.VERSE.value:
            verse_count += 1
            label = f"{section.type} {verse_count}"
        cards.append(SectionCard(label=label, type=section.type, lines=list(section.lines),
                                 well_formed=section.is_well_formed))
    return cards


def format_lyrics_text(lyrics: SongLyrics) -> str:
    """Plain-text export: title, then [Type] blocks separated by blank lines."""
    blocks = [f"[{s.type}]\n" + "\n".join(s.lines) for s in lyrics.sections]
    return f"{lyrics.title}\n\n" + "\n\n".join(blocks)

# ============================================================================
# Session
# ============================================================================

class CompositionSession:
    def __init__(self, lyrics_client: LyricsClient, playback: PlaybackController):
        self.lyrics_client = lyrics_client
        self.playback = playback
        self.state = SessionState()

    @property
    def lyrics(self) -> Optional[SongLyrics]:
        return self.state.lyrics

    @property
    def playback_state(self) -> PlaybackState:
        return self.playback.state

    async def generate(self, params: GeneratorParams) -> SongLyrics:
        if not params.topic.strip():
            raise ValueError("A topic is required")
        if self.state.loading:
            raise BusyError("Lyrics are already being composed")

        self.state = begin_lyrics(self.state)
        self.playback.stop()
        try:
            lyrics = await self.lyrics_client.generate_lyrics_async(params)
        except (Exception, asyncio.CancelledError) as e:
            print(f"[SESSION] Lyrics generation failed: {e!r}", flush=True)
            self.state = lyrics_failed(self.state)
            raise

        self.state = lyrics_succeeded(self.state, lyrics)
        return lyrics

    async def create_song(self, voice: Optional[str] = None):
        if self.state.lyrics is None:
            raise ValueError("Compose lyrics before creating a song")
        if self.state.audio_loading:
            raise BusyError("Song audio is already being generated")

        self.state = begin_audio(self.state)
        try:
            buffer = await self.playback.create_song(lyrics_to_script(self.state.lyrics), voice)
        except (Exception, asyncio.CancelledError) as e:
            print(f"[SESSION] Song audio failed: {e!r}", flush=True)
            self.state = audio_failed(self.state)
            raise

        self.state = audio_finished(self.state)
        return buffer

    def stop(self):
        self.playback.stop()

    async def toggle_playback(self, voice: Optional[str] = None) -> PlaybackState:
        if self.playback.is_playing:
            self.stop()
        else:
            await self.create_song(voice)
        return self.playback.state

    def section_cards(self) -> List[SectionCard]:
        return section_cards(self.state.lyrics)

    def export_text(self) -> Optional[str]:
        if self.state.lyrics is None:
            return None
        return format_lyrics_text(self.state.lyrics)

    def snapshot(self) -> dict:
        return {
            "has_lyrics": self.state.lyrics is not None,
            "title": self.state.lyrics.title if self.state.lyrics else None,
            "loading": self.state.loading,
            "audio_loading": self.state.audio_loading,
            "error": self.state.error,
            "playback": self.playback.state.value,
        }

    def close(self):
        self.playback.close()
