"""
dualsub/audio/decoder.py
=========================
Audio Decoder — DualSub chunked path, step 1

Responsibility:
    - Decode raw input bytes of arbitrary container/codec (wav, mp3, m4a,
      mp4, webm, ...) via pydub / ffmpeg
    - Split interleaved integer samples into per-channel float arrays
      normalized to [-1.0, 1.0]
    - Return a RawAudioBuffer with a known sample rate and duration

This module does NOT:
    - Downmix or resample (handled by resampler.py)
    - Enforce any size or duration limit
"""

import io
import logging

import numpy as np
from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from dualsub.errors import DecodeError
from dualsub.models import RawAudioBuffer

logger = logging.getLogger("dualsub.audio.decoder")


# ---------------------------------------------------------------------------
# Format hints
# ---------------------------------------------------------------------------

_WAV_MEDIA_TYPES = {"audio/wav", "audio/x-wav", "audio/wave", "audio/vnd.wave"}

# Formats where an explicit ffmpeg demuxer name is safe to pass.  Anything
# else (m4a, mp4, mov, webm, ...) is left to ffmpeg's own probing.
_EXPLICIT_FORMATS = {"wav", "mp3", "ogg", "flac"}


def guess_format(filename: str = "", media_type: str | None = None) -> str | None:
    """
    Derive a pydub format hint from the declared media type or filename.

    WAV is the important case: pydub decodes it natively without ffmpeg.
    Returns None when ffmpeg should probe the container itself.
    """
    if media_type:
        mt = media_type.split(";", 1)[0].strip().lower()
        if mt in _WAV_MEDIA_TYPES:
            return "wav"
        if mt in ("audio/mpeg", "audio/mp3"):
            return "mp3"

    dot_index = filename.rfind(".")
    if dot_index != -1:
        ext = filename[dot_index + 1:].lower()
        if ext in _EXPLICIT_FORMATS:
            return ext
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def decode_audio(audio_bytes: bytes, format_hint: str | None = None) -> RawAudioBuffer:
    """
    Decode arbitrary audio bytes into a multi-channel float buffer.

    Args:
        audio_bytes: Raw bytes of the uploaded file.
        format_hint: Optional pydub format name (see ``guess_format``).

    Returns:
        RawAudioBuffer with one float32 array per channel.

    Raises:
        DecodeError: If the container/codec is unrecognized or corrupt.
    """
    if not audio_bytes:
        raise DecodeError("Audio file is empty — nothing to decode.")

    try:
        audio = AudioSegment.from_file(io.BytesIO(audio_bytes), format=format_hint)
    except CouldntDecodeError as exc:
        raise DecodeError(
            "Audio file is corrupt or could not be decoded."
        ) from exc
    except Exception as exc:
        raise DecodeError(f"Unexpected error decoding audio: {exc}") from exc

    n_channels = audio.channels
    sample_width = audio.sample_width
    interleaved = np.array(audio.get_array_of_samples(), dtype=np.float32)
    interleaved /= float(1 << (8 * sample_width - 1))
    np.clip(interleaved, -1.0, 1.0, out=interleaved)

    frames = interleaved.reshape(-1, n_channels)
    channels = [np.ascontiguousarray(frames[:, c]) for c in range(n_channels)]

    buffer = RawAudioBuffer(channels=channels, sample_rate=audio.frame_rate)
    logger.info(
        "Decoded audio: %.1fs | %d Hz | %d ch | %d-bit",
        buffer.duration, buffer.sample_rate, n_channels, sample_width * 8,
    )
    return buffer
