"""Lyrics prompt, schema declaration and response parsing."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from conftest import FakeGemini, text_response
from errors import CollaboratorError, GenerationError, SchemaError
from lyrics_client import SONG_SCHEMA, SONGWRITER_PERSONA, LyricsClient, build_lyrics_prompt
from schemas import Genre, GeneratorParams, Mood


@pytest.fixture
def params():
    return GeneratorParams(topic="rain in the city", genre=Genre.JAZZ, mood=Mood.MELANCHOLIC,
                           keywords=["neon", "puddles"])


def test_prompt_embeds_parameters(params):
    prompt = build_lyrics_prompt(params)
    assert "Jazz" in prompt
    assert "Melancholic" in prompt
    assert "rain in the city" in prompt
    assert "neon, puddles" in prompt
    assert "Bridge" in prompt


def test_single_verse_song_parsed(params):
    gemini = FakeGemini(text_response('{"title":"T","sections":[{"type":"Verse","lines":["a","b"]}]}'))
    song = LyricsClient(gemini).generate_lyrics(params)

    assert song.title == "T"
    assert len(song.sections) == 1
    assert song.sections[0].type == "Verse"
    assert song.sections[0].lines == ["a", "b"]


def test_request_declares_schema_and_persona(params):
    gemini = FakeGemini(text_response('{"title":"T","sections":[]}'))
    LyricsClient(gemini, model="test-model").generate_lyrics(params)

    call = gemini.calls[0]
    assert call["model"] == "test-model"
    assert call["system_instruction"] == SONGWRITER_PERSONA
    assert call["generation_config"]["responseMimeType"] == "application/json"
    assert call["generation_config"]["responseSchema"] is SONG_SCHEMA
    assert SONG_SCHEMA["required"] == ["title", "sections"]
    assert "professional songwriter" in SONGWRITER_PERSONA


@pytest.mark.parametrize("response", [text_response(""), text_response("   "), {"candidates": []}, {}])
def test_empty_text_is_generation_error(params, response):
    with pytest.raises(GenerationError):
        LyricsClient(FakeGemini(response)).generate_lyrics(params)


@pytest.mark.parametrize("text", [
    "not json",
    json.dumps({"sections": []}),
    json.dumps({"title": "T", "sections": [{"type": "Verse"}]}),
    json.dumps({"title": "T", "sections": [{"type": "Verse", "lines": []}]}),
])
def test_malformed_text_is_schema_error(params, text):
    with pytest.raises(SchemaError):
        LyricsClient(FakeGemini(text_response(text))).generate_lyrics(params)


def test_collaborator_errors_are_not_retried(params):
    gemini = FakeGemini(CollaboratorError("HTTP 500", status_code=500))
    with pytest.raises(CollaboratorError):
        LyricsClient(gemini).generate_lyrics(params)
    assert len(gemini.calls) == 1


def test_blank_topic_rejected():
    with pytest.raises(ValidationError):
        GeneratorParams(topic="   ")


def test_keywords_cleaned():
    params = GeneratorParams(topic="x", keywords=[" neon ", "", "neon", "puddles"])
    assert params.keywords == ["neon", "puddles"]


def test_params_frozen(params):
    with pytest.raises(ValidationError):
        params.topic = "other"
