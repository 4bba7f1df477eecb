"""
LyricLoom Studio - Lyrics Generation
Prompt building, output schema, and parsing of structured lyrics.
"""

import json
import asyncio
from typing import Optional

from pydantic import ValidationError

from config import LYRICS_MODEL
from errors import GenerationError, SchemaError
from gemini import GeminiClient, extract_text, user_contents
from schemas import GeneratorParams, SongLyrics

# ============================================================================
# Prompt & Schema
# ============================================================================

SONGWRITER_PERSONA = (
    "You are a multi-platinum award-winning professional songwriter known for "
    "poetic depth and catchy hooks. You write lyrics that resonate deeply with listeners."
)

# Suggested, not enforced
CLASSIC_STRUCTURE = "Intro, Verse 1, Chorus, Verse 2, Chorus, Bridge, Chorus, Outro"

SONG_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "title": {"type": "STRING", "description": "A creative title for the song"},
        "sections": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "type": {
                        "type": "STRING",
                        "description": "Section type: Intro, Verse, Chorus, Bridge, or Outro",
                    },
                    "lines": {"type": "ARRAY", "items": {"type": "STRING"}},
                },
                "required": ["type", "lines"],
            },
        },
    },
    "required": ["title", "sections"],
}


def build_lyrics_prompt(params: GeneratorParams) -> str:
    """Build the songwriting instruction for one generation request."""
    parts = [
        f"Write a professionally structured song in the {params.genre.value} genre "
        f"with a {params.mood.value} mood.",
        f"The song should be about: {params.topic.strip()}.",
        f"Incorporate these keywords naturally: {', '.join(params.keywords)}.",
        f"The output must follow a classic song structure (e.g., {CLASSIC_STRUCTURE}).",
        "Ensure the rhymes are clever and the rhythm fits the genre.",
    ]
    return "\n".join(parts)


def parse_song(text: Optional[str]) -> SongLyrics:
    """Parse collaborator text into a SongLyrics."""
    if not text or not text.strip():
        raise GenerationError("No response from the lyrics model")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaError(f"Lyrics response is not valid JSON: {e}") from e

    try:
        return SongLyrics.model_validate(data)
    except ValidationError as e:
        raise SchemaError(f"Lyrics response does not match the song schema: {e}") from e

# ============================================================================
# Client
# ============================================================================

class LyricsClient:
    def __init__(self, gemini: GeminiClient, model: str = LYRICS_MODEL):
        self.gemini = gemini
        self.model = model

    def generate_lyrics(self, params: GeneratorParams) -> SongLyrics:
        prompt = build_lyrics_prompt(params)
        print(f"[LYRICS] Requesting {params.genre.value}/{params.mood.value} song about {params.topic[:60]!r}", flush=True)

        response = self.gemini.generate_content(
            self.model,
            user_contents(prompt),
            system_instruction=SONGWRITER_PERSONA,
            generation_config={
                "responseMimeType": "application/json",
                "responseSchema": SONG_SCHEMA,
            },
        )

        song = parse_song(extract_text(response))
        print(f"[LYRICS] Received '{song.title}' with {len(song.sections)} sections", flush=True)
        return song

    async def generate_lyrics_async(self, params: GeneratorParams) -> SongLyrics:
        return await asyncio.to_thread(self.generate_lyrics, params)
