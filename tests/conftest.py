"""
Shared fixtures: stub Gemini transport and a fake audio output.
No network, no audio device.
"""

from __future__ import annotations

import base64
import json
import struct

import pytest

from gemini import GeminiClient
from lyrics_client import LyricsClient
from playback import PlaybackController
from session import CompositionSession
from speech_client import SpeechClient


def text_response(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def audio_response(samples):
    data = base64.b64encode(struct.pack(f"<{len(samples)}h", *samples)).decode("ascii")
    return {"candidates": [{"content": {"parts": [{"inlineData": {"mimeType": "audio/pcm", "data": data}}]}}]}


THREE_SECTION_SONG = {
    "title": "Neon Puddles",
    "sections": [
        {"type": "Verse", "lines": ["Streetlights drown in neon", "Puddles hold the sky"]},
        {"type": "Chorus", "lines": ["Rain in the city"]},
        {"type": "Verse", "lines": ["Umbrellas drift like ghosts"]},
    ],
}


class FakeGemini(GeminiClient):
    """Replays queued responses and records every request."""

    def __init__(self, *responses):
        super().__init__(api_key="test-key")
        self.responses = list(responses)
        self.calls = []

    def generate_content(self, model, contents, system_instruction=None, generation_config=None):
        self.calls.append({
            "model": model,
            "contents": contents,
            "system_instruction": system_instruction,
            "generation_config": generation_config,
        })
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeSource:
    def __init__(self, buffer, on_finished):
        self.buffer = buffer
        self.on_finished = on_finished
        self.stopped = False
        self.closed = False

    def stop(self):
        self.stopped = True
        self.closed = True

    def close(self):
        self.closed = True

    def finish(self):
        self.on_finished()


class FakeOutput:
    def __init__(self, fail=False):
        self.sources = []
        self.closed = False
        self.fail = fail

    def start(self, buffer, on_finished):
        if self.fail:
            raise RuntimeError("device busy")
        source = FakeSource(buffer, on_finished)
        self.sources.append(source)
        return source

    def close(self):
        self.closed = True


@pytest.fixture
def song_json():
    return json.dumps(THREE_SECTION_SONG)


@pytest.fixture
def output():
    return FakeOutput()


@pytest.fixture
def make_session(output):
    def _make(*responses):
        gemini = FakeGemini(*responses)
        playback = PlaybackController(SpeechClient(gemini), output_factory=lambda: output)
        return CompositionSession(LyricsClient(gemini), playback), gemini
    return _make
