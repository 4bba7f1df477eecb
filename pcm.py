"""
LyricLoom Studio - PCM Decoding
Raw little-endian 16-bit PCM to normalized float waveforms.
"""

import base64
import binascii
from dataclasses import dataclass

import numpy as np

from config import SAMPLE_RATE, CHANNELS
from errors import DecodeError

# Symmetric scaling used by the speech collaborator; keep 32768, not 32767
PCM16_SCALE = 32768.0


@dataclass(frozen=True)
class AudioPCMBuffer:
    """Decoded audio, one row of float32 samples per channel."""
    sample_rate: int
    channel_count: int
    samples: np.ndarray

    @property
    def frame_count(self) -> int:
        return int(self.samples.shape[1])

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / self.sample_rate

    def interleaved(self) -> np.ndarray:
        """Frames-by-channels view, the layout audio devices consume."""
        return np.ascontiguousarray(self.samples.T)


def decode_pcm16(data: bytes, sample_rate: int = SAMPLE_RATE, channel_count: int = CHANNELS) -> AudioPCMBuffer:
    """Decode interleaved little-endian int16 PCM.

    samples[c][i] = int16(data, i * channel_count + c) / 32768.0
    """
    if sample_rate <= 0:
        raise DecodeError(f"sample rate must be positive, got {sample_rate}")
    if channel_count <= 0:
        raise DecodeError(f"channel count must be positive, got {channel_count}")

    frame_size = 2 * channel_count
    if len(data) % frame_size != 0:
        raise DecodeError(
            f"PCM payload of {len(data)} bytes is not a multiple of {frame_size} "
            f"({channel_count} channel(s) of 16-bit samples)"
        )

    pcm = np.frombuffer(data, dtype="<i2")
    frames = pcm.reshape(-1, channel_count)
    samples = frames.T.astype(np.float32) / PCM16_SCALE
    return AudioPCMBuffer(sample_rate=sample_rate, channel_count=channel_count, samples=samples)


def decode_base64_audio(payload: str) -> bytes:
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Audio payload is not valid base64: {e}") from e


def decode_base64_pcm(payload: str, sample_rate: int = SAMPLE_RATE, channel_count: int = CHANNELS) -> AudioPCMBuffer:
    """Base64 payload straight to a playable buffer."""
    return decode_pcm16(decode_base64_audio(payload), sample_rate, channel_count)
