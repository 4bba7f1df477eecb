"""
LyricLoom Studio - Speech Generation
Turns lyrics into a spoken performance via the speech model.
"""

import asyncio
from typing import Optional

from config import SPEECH_MODEL, DEFAULT_VOICE
from errors import NoAudioError
from gemini import GeminiClient, first_parts, user_contents
from schemas import SongLyrics


def lyrics_to_script(lyrics: SongLyrics) -> str:
    """Flatten every section into one script, lines and sections joined with '. '"""
    return ". ".join(". ".join(section.lines) for section in lyrics.sections)


def build_performance_prompt(text: str) -> str:
    return f"Perform these song lyrics expressively, matching the mood of the words: {text}"


def extract_audio(response: dict) -> str:
    """Base64 audio from the first part of the first candidate."""
    parts = first_parts(response)
    if not parts:
        raise NoAudioError("Speech response has no content parts")
    inline = parts[0].get("inlineData") or parts[0].get("inline_data") or {}
    data = inline.get("data")
    if not data:
        raise NoAudioError("Speech response has no inline audio data")
    return data


class SpeechClient:
    def __init__(self, gemini: GeminiClient, model: str = SPEECH_MODEL, default_voice: str = DEFAULT_VOICE):
        self.gemini = gemini
        self.model = model
        self.default_voice = default_voice

    def generate_song_audio(self, text: str, voice: Optional[str] = None) -> str:
        """Request a spoken performance; returns base64 PCM."""
        voice = voice or self.default_voice
        print(f"[SPEECH] Requesting audio for {len(text)} chars (voice: {voice})", flush=True)

        response = self.gemini.generate_content(
            self.model,
            user_contents(build_performance_prompt(text)),
            generation_config={
                "responseModalities": ["AUDIO"],
                "speechConfig": {
                    "voiceConfig": {"prebuiltVoiceConfig": {"voiceName": voice}},
                },
            },
        )

        audio = extract_audio(response)
        print(f"[SPEECH] Received {len(audio)} base64 chars", flush=True)
        return audio

    async def generate_song_audio_async(self, text: str, voice: Optional[str] = None) -> str:
        return await asyncio.to_thread(self.generate_song_audio, text, voice)
