"""
LyricLoom Studio - Gemini Communication
Thin REST wrapper around the generateContent endpoint.
"""

import asyncio
from typing import Optional, List

import requests

from config import GEMINI_API_KEY, GEMINI_API_URL, API_TIMEOUT
from errors import CollaboratorError

# ============================================================================
# Response Helpers
# ============================================================================

def first_parts(response: dict) -> List[dict]:
    """Content parts of the first candidate, empty if there are none."""
    candidates = response.get("candidates") or []
    if not candidates:
        return []
    content = candidates[0].get("content") or {}
    return content.get("parts") or []


def extract_text(response: dict) -> Optional[str]:
    """Concatenated text of the first candidate, None when absent."""
    texts = [part["text"] for part in first_parts(response) if part.get("text")]
    if not texts:
        return None
    return "".join(texts)

# ============================================================================
# Client
# ============================================================================

class GeminiClient:
    def __init__(self, api_key: str = GEMINI_API_KEY, base_url: str = GEMINI_API_URL,
                 timeout: float = API_TIMEOUT, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def generate_content(self, model: str, contents: list,
                         system_instruction: Optional[str] = None,
                         generation_config: Optional[dict] = None) -> dict:
        """POST a generateContent request (blocking)."""
        if not self.api_key:
            raise CollaboratorError("GEMINI_API_KEY is not configured")

        payload = {"contents": contents}
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if generation_config:
            payload["generationConfig"] = generation_config

        url = f"{self.base_url}/models/{model}:generateContent"
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.api_key}

        try:
            resp = self.session.post(url, headers=headers, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise CollaboratorError(f"{model} timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise CollaboratorError(f"{model} request failed: {e}") from e

        if resp.status_code != 200:
            raise CollaboratorError(
                f"{model} returned HTTP {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as e:
            raise CollaboratorError(f"{model} returned a non-JSON body") from e

    async def generate_content_async(self, model: str, contents: list,
                                     system_instruction: Optional[str] = None,
                                     generation_config: Optional[dict] = None) -> dict:
        """POST a generateContent request (non-blocking)."""
        return await asyncio.to_thread(
            self.generate_content, model, contents, system_instruction, generation_config
        )

    def close(self):
        self.session.close()


def user_contents(*texts: str) -> list:
    """A single user turn made of text parts."""
    return [{"role": "user", "parts": [{"text": t} for t in texts]}]
