"""
LyricLoom Studio - Playback
Owns the audio output and the single active playback source.
"""

import asyncio
from enum import Enum
from typing import Callable, Optional, Protocol

import numpy as np

from config import SAMPLE_RATE, CHANNELS, OUTPUT_BLOCKSIZE
from errors import BusyError, PlaybackError
from pcm import AudioPCMBuffer, decode_base64_pcm
from speech_client import SpeechClient


class PlaybackState(str, Enum):
    IDLE = "Idle"
    GENERATING = "Generating"
    PLAYING = "Playing"

# ============================================================================
# Audio Output Surface
# ============================================================================

class AudioSource(Protocol):
    def stop(self) -> None: ...
    def close(self) -> None: ...


class AudioOutput(Protocol):
    def start(self, buffer: AudioPCMBuffer, on_finished: Callable[[], None]) -> AudioSource: ...
    def close(self) -> None: ...


class SoundDeviceSource:
    """One running PortAudio stream."""

    def __init__(self, stream):
        self.stream = stream

    def stop(self):
        if not self.stream.closed:
            self.stream.abort()
        self.close()

    def close(self):
        if not self.stream.closed:
            self.stream.close()


class SoundDeviceOutput:
    """Audio output backed by sounddevice; PortAudio is loaded on first use."""

    def __init__(self, sample_rate: int = SAMPLE_RATE, channel_count: int = CHANNELS,
                 blocksize: int = OUTPUT_BLOCKSIZE):
        self.sample_rate = sample_rate
        self.channel_count = channel_count
        self.blocksize = blocksize
        self._sd = None

    def _device(self):
        if self._sd is None:
            try:
                import sounddevice
            except OSError as e:
                # PortAudio shared library missing
                raise PlaybackError(f"Audio device unavailable: {e}") from e
            self._sd = sounddevice
            print(f"[PLAYBACK] Audio output opened ({self.sample_rate}Hz, {self.channel_count}ch)", flush=True)
        return self._sd

    def start(self, buffer: AudioPCMBuffer, on_finished: Callable[[], None]) -> SoundDeviceSource:
        sd = self._device()
        if buffer.sample_rate != self.sample_rate or buffer.channel_count != self.channel_count:
            raise PlaybackError(
                f"Buffer format {buffer.sample_rate}Hz/{buffer.channel_count}ch does not match "
                f"output {self.sample_rate}Hz/{self.channel_count}ch"
            )

        frames = buffer.interleaved()
        position = 0

        def callback(outdata, frame_count, time_info, status):
            nonlocal position
            if status:
                print(f"[PLAYBACK] Stream status: {status}", flush=True)
            chunk = frames[position:position + frame_count]
            position += len(chunk)
            outdata[:len(chunk)] = chunk
            if len(chunk) < frame_count:
                outdata[len(chunk):] = 0
                raise sd.CallbackStop

        try:
            stream = sd.OutputStream(
                samplerate=self.sample_rate,
                channels=self.channel_count,
                dtype=np.float32,
                blocksize=self.blocksize,
                callback=callback,
                finished_callback=on_finished,
            )
            stream.start()
        except sd.PortAudioError as e:
            raise PlaybackError(f"Failed to start audio stream: {e}") from e
        return SoundDeviceSource(stream)

    def close(self):
        if self._sd is not None:
            print("[PLAYBACK] Audio output released", flush=True)
        self._sd = None

# ============================================================================
# Controller
# ============================================================================

class PlaybackController:
    """Idle -> Generating -> Playing -> Idle, with at most one active source."""

    def __init__(self, speech: SpeechClient,
                 output_factory: Optional[Callable[[], AudioOutput]] = None,
                 sample_rate: int = SAMPLE_RATE, channel_count: int = CHANNELS):
        self.speech = speech
        self.sample_rate = sample_rate
        self.channel_count = channel_count
        self._output_factory = output_factory or (lambda: SoundDeviceOutput(sample_rate, channel_count))
        self._output: Optional[AudioOutput] = None
        self._source: Optional[AudioSource] = None
        self._state = PlaybackState.IDLE
        # Bumped on every start/stop so stale completion callbacks are ignored
        self._play_id = 0

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state is PlaybackState.PLAYING

    def _acquire_output(self) -> AudioOutput:
        if self._output is None:
            self._output = self._output_factory()
        return self._output

    async def create_song(self, text: str, voice: Optional[str] = None) -> AudioPCMBuffer:
        """Synthesize, decode, and play; returns the buffer being played."""
        if self._state is PlaybackState.GENERATING:
            raise BusyError("Song audio is already being generated")

        self.stop()
        self._state = PlaybackState.GENERATING
        print("[PLAYBACK] Generating song audio...", flush=True)

        try:
            payload = await self.speech.generate_song_audio_async(text, voice)
            buffer = decode_base64_pcm(payload, self.sample_rate, self.channel_count)
            self._start(buffer, asyncio.get_running_loop())
        except (Exception, asyncio.CancelledError) as e:
            print(f"[PLAYBACK] Generation failed: {e}", flush=True)
            self._state = PlaybackState.IDLE
            raise

        self._state = PlaybackState.PLAYING
        print(f"[PLAYBACK] Playing {buffer.duration_seconds:.1f}s of audio", flush=True)
        return buffer

    def _start(self, buffer: AudioPCMBuffer, loop: asyncio.AbstractEventLoop):
        # Invariant: the previous source is gone before a new one exists
        if self._source is not None:
            self.stop()

        self._play_id += 1
        play_id = self._play_id

        def on_finished():
            # May run on the audio thread
            try:
                loop.call_soon_threadsafe(self._on_finished, play_id)
            except RuntimeError:
                # Event loop already closed on shutdown
                pass

        output = self._acquire_output()
        try:
            self._source = output.start(buffer, on_finished)
        except PlaybackError:
            raise
        except Exception as e:
            raise PlaybackError(f"Failed to start playback: {e}") from e

    def _on_finished(self, play_id: int):
        if play_id != self._play_id or self._source is None:
            return
        source = self._source
        self._source = None
        source.close()
        self._state = PlaybackState.IDLE
        print("[PLAYBACK] Finished", flush=True)

    def stop(self):
        """Terminate the active source; no-op when nothing is playing."""
        source = self._source
        self._source = None
        if source is not None:
            self._play_id += 1
            source.stop()
            print("[PLAYBACK] Stopped", flush=True)
        if self._state is PlaybackState.PLAYING:
            self._state = PlaybackState.IDLE

    def close(self):
        self.stop()
        if self._output is not None:
            self._output.close()
            self._output = None
