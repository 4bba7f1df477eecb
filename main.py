"""
LyricLoom Studio - Main Application
FastAPI app, routes, and entry point.
"""

import argparse
from typing import Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
import uvicorn

# Local imports
from config import (
    STATIC_DIR, LYRICS_MODEL, SPEECH_MODEL, DEFAULT_VOICE, SAMPLE_RATE,
    log_startup_info
)
from errors import BusyError, LyricLoomError
from gemini import GeminiClient
from lyrics_client import LyricsClient
from playback import PlaybackController
from schemas import (
    Genre, Mood, SectionType, GeneratorParams, PlayRequest, LyricsResponse
)
from session import CompositionSession
from speech_client import SpeechClient

# ============================================================================
# Startup Initialization
# ============================================================================

log_startup_info()

session: Optional[CompositionSession] = None


def create_session() -> CompositionSession:
    """Wire the Gemini-backed clients into a fresh session."""
    gemini = GeminiClient()
    speech = SpeechClient(gemini)
    return CompositionSession(LyricsClient(gemini), PlaybackController(speech))


def get_session() -> CompositionSession:
    if session is None:
        raise HTTPException(503, "Session not initialized")
    return session


def raise_http(e: Exception):
    """Translate a session failure into an HTTP error."""
    if isinstance(e, BusyError):
        raise HTTPException(409, str(e))
    if isinstance(e, ValueError):
        raise HTTPException(400, str(e))
    if isinstance(e, LyricLoomError):
        message = (session.state.error if session else None) or str(e)
        raise HTTPException(502, message)
    raise e


def lyrics_response(s: CompositionSession) -> LyricsResponse:
    return LyricsResponse(lyrics=s.lyrics, cards=s.section_cards(), state=s.snapshot())

# ============================================================================
# FastAPI App
# ============================================================================

@asynccontextmanager
async def lifespan(app):
    global session
    if session is None:
        session = create_session()
    yield
    print("[API] Shutting down, releasing audio output")
    session.close()
    session = None

app = FastAPI(title="LyricLoom Studio", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# API Routes
# ============================================================================

@app.get("/")
async def root():
    index_path = STATIC_DIR / "index.html"
    if index_path.exists():
        response = FileResponse(index_path)
        response.headers["Cache-Control"] = "no-cache"
        return response
    return {"message": "LyricLoom Studio API", "status": "running"}


@app.get("/api/health")
async def health_check():
    return {
        "status": "ok",
        "lyrics_model": LYRICS_MODEL,
        "speech_model": SPEECH_MODEL,
        "sample_rate": SAMPLE_RATE,
    }


@app.get("/api/options")
async def get_options():
    return {
        "genres": [g.value for g in Genre],
        "moods": [m.value for m in Mood],
        "section_types": [t.value for t in SectionType],
        "default_voice": DEFAULT_VOICE,
    }


@app.get("/api/state")
async def get_state():
    return get_session().snapshot()


@app.post("/api/lyrics", response_model=LyricsResponse)
async def generate_lyrics(params: GeneratorParams):
    s = get_session()
    print(f"[API] /api/lyrics topic={params.topic[:40]!r} genre={params.genre.value}", flush=True)
    try:
        await s.generate(params)
    except Exception as e:
        raise_http(e)
    return lyrics_response(s)


@app.get("/api/lyrics", response_model=LyricsResponse)
async def get_lyrics():
    return lyrics_response(get_session())


@app.get("/api/lyrics/export", response_class=PlainTextResponse)
async def export_lyrics():
    text = get_session().export_text()
    if text is None:
        raise HTTPException(404, "No lyrics composed yet")
    return text


@app.post("/api/song/play")
async def play_song(request: Optional[PlayRequest] = None):
    s = get_session()
    voice = request.voice if request else None
    try:
        buffer = await s.create_song(voice)
    except Exception as e:
        raise_http(e)
    return {
        "playback": s.playback_state.value,
        "duration_seconds": round(buffer.duration_seconds, 2),
    }


@app.post("/api/song/stop")
async def stop_song():
    s = get_session()
    s.stop()
    return {"playback": s.playback_state.value}


@app.post("/api/song/toggle")
async def toggle_song(request: Optional[PlayRequest] = None):
    s = get_session()
    try:
        state = await s.toggle_playback(request.voice if request else None)
    except Exception as e:
        raise_http(e)
    return {"playback": state.value}


# Static files
if STATIC_DIR.exists():
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="LyricLoom Studio API Server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    print()
    print("=" * 60)
    print("  LyricLoom Studio")
    print(f"  Open http://{args.host}:{args.port} in your browser")
    print("=" * 60)
    print()

    uvicorn.run(app, host=args.host, port=args.port)
