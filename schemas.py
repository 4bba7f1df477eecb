"""
LyricLoom Studio - Pydantic Schemas
Song data model and API request/response bodies.
"""

from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator

# ============================================================================
# Enumerations
# ============================================================================

class Genre(str, Enum):
    POP = "Pop"
    ROCK = "Rock"
    HIP_HOP = "Hip-Hop"
    COUNTRY = "Country"
    R_AND_B = "R&B"
    METAL = "Metal"
    INDIE = "Indie"
    JAZZ = "Jazz"
    FOLK = "Folk"


class Mood(str, Enum):
    HAPPY = "Happy"
    SAD = "Sad"
    ANGRY = "Angry"
    ROMANTIC = "Romantic"
    MELANCHOLIC = "Melancholic"
    ENERGETIC = "Energetic"
    NOSTALGIC = "Nostalgic"
    REBELLIOUS = "Rebellious"


class SectionType(str, Enum):
    INTRO = "Intro"
    VERSE = "Verse"
    CHORUS = "Chorus"
    BRIDGE = "Bridge"
    OUTRO = "Outro"


SECTION_TYPE_NAMES = {t.value for t in SectionType}

# ============================================================================
# Song Models
# ============================================================================

class GeneratorParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    topic: str
    genre: Genre = Genre.POP
    mood: Mood = Mood.HAPPY
    keywords: List[str] = Field(default_factory=list)

    @field_validator("topic")
    @classmethod
    def topic_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("topic must not be empty")
        return value

    @field_validator("keywords")
    @classmethod
    def clean_keywords(cls, value: List[str]) -> List[str]:
        # Trimmed, no blanks, first occurrence wins
        cleaned = []
        for keyword in value:
            keyword = keyword.strip()
            if keyword and keyword not in cleaned:
                cleaned.append(keyword)
        return cleaned


class LyricSection(BaseModel):
    type: str
    lines: List[str] = Field(min_length=1)

    @property
    def is_well_formed(self) -> bool:
        return self.type in SECTION_TYPE_NAMES


class SongLyrics(BaseModel):
    title: str
    sections: List[LyricSection]
    artist_style: Optional[str] = Field(default=None, alias="artistStyle")

    model_config = ConfigDict(populate_by_name=True)

# ============================================================================
# Request/Response Models
# ============================================================================

class SectionCard(BaseModel):
    label: str
    type: str
    lines: List[str]
    well_formed: bool = True


class PlayRequest(BaseModel):
    voice: Optional[str] = None


class LyricsResponse(BaseModel):
    lyrics: Optional[SongLyrics] = None
    cards: List[SectionCard] = Field(default_factory=list)
    state: dict = Field(default_factory=dict)
