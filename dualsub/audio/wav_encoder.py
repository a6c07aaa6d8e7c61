"""
dualsub/audio/wav_encoder.py
=============================
WAV Encoder — DualSub chunked path, step 4

Serializes a mono float sample buffer into a minimal, byte-exact
RIFF/WAVE container: a fixed 44-byte header (PCM, 1 channel, 16-bit)
followed by little-endian int16 samples.  Each encoded window is a
self-contained file the transcription service can read with no extra
metadata.

Sample mapping: NaN becomes silence; clamp to [-1, 1]; negatives scale by 32768, non-negatives
by 32767; truncate toward zero.
"""

import io
import struct
import wave
from typing import Any

import numpy as np

from dualsub.models import EncodedAudioBlob

WAV_MIME_TYPE = "audio/wav"
WAV_HEADER_SIZE = 44

_HEADER_STRUCT = struct.Struct("<4sI4s4sIHHIIHH4sI")


def float_to_pcm16(samples) -> np.ndarray:
    """Map float amplitudes to int16 using the asymmetric PCM scale."""
    s = np.nan_to_num(np.asarray(samples, dtype=np.float64), nan=0.0)
    s = np.clip(s, -1.0, 1.0)
    scaled = np.where(s < 0, s * 32768.0, s * 32767.0)
    return scaled.astype(np.int16)


def encode_wav(samples, sample_rate: int) -> EncodedAudioBlob:
    """
    Encode mono float samples as a 16-bit PCM WAV blob.

    Args:
        samples:     Sequence of floats, nominally in [-1.0, 1.0].
        sample_rate: Sample rate in Hz.

    Returns:
        EncodedAudioBlob with MIME type ``audio/wav``.
    """
    pcm = float_to_pcm16(samples)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        # wave expects native byte order and swaps to little-endian itself
        wf.writeframes(pcm.tobytes())
    return EncodedAudioBlob(data=buf.getvalue(), mime_type=WAV_MIME_TYPE)


def read_wav_header(data: bytes) -> dict[str, Any]:
    """Parse the 44-byte header produced by ``encode_wav``."""
    if len(data) < WAV_HEADER_SIZE:
        raise ValueError(f"WAV data too short for a header: {len(data)} bytes")

    (
        riff, riff_size, wave_tag, fmt_tag, fmt_size,
        audio_format, channels, sample_rate, byte_rate,
        block_align, bits_per_sample, data_tag, data_size,
    ) = _HEADER_STRUCT.unpack_from(data, 0)

    if riff != b"RIFF" or wave_tag != b"WAVE" or fmt_tag != b"fmt " or data_tag != b"data":
        raise ValueError("Not a minimal PCM WAV header.")

    return {
        "riff_size": riff_size,
        "fmt_size": fmt_size,
        "audio_format": audio_format,
        "channels": channels,
        "sample_rate": sample_rate,
        "byte_rate": byte_rate,
        "block_align": block_align,
        "bits_per_sample": bits_per_sample,
        "data_size": data_size,
    }
