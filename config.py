"""
LyricLoom Studio - Configuration
Paths, collaborator endpoints, and audio constants.
"""

import os
from pathlib import Path

# ============================================================================
# Configuration
# ============================================================================

BASE_DIR = Path(__file__).parent
STATIC_DIR = BASE_DIR / "web" / "static"

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", "")
GEMINI_API_URL = os.getenv("GEMINI_API_URL", "https://generativelanguage.googleapis.com/v1beta")
API_TIMEOUT = float(os.getenv("API_TIMEOUT", "60"))

LYRICS_MODEL = os.getenv("LYRICS_MODEL", "gemini-3-flash-preview")
SPEECH_MODEL = os.getenv("SPEECH_MODEL", "gemini-2.5-flash-preview-tts")
DEFAULT_VOICE = os.getenv("SPEECH_VOICE", "Kore")

# ============================================================================
# Audio Output
# ============================================================================

# The speech model replies with raw 16-bit mono PCM at 24kHz
SAMPLE_RATE = 24000
CHANNELS = 1
OUTPUT_BLOCKSIZE = 2048


def log_startup_info():
    """Log the effective configuration (never the key itself)"""
    print(f"[CONFIG] Gemini endpoint: {GEMINI_API_URL}")
    print(f"[CONFIG] Lyrics model: {LYRICS_MODEL}")
    print(f"[CONFIG] Speech model: {SPEECH_MODEL} (voice: {DEFAULT_VOICE})")
    print(f"[CONFIG] Audio output: {SAMPLE_RATE}Hz, {CHANNELS} channel(s)")
    if not GEMINI_API_KEY:
        print("[CONFIG] WARNING: GEMINI_API_KEY is not set, generation requests will fail")
