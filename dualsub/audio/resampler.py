"""
dualsub/audio/resampler.py
===========================
Resampler — DualSub chunked path, step 2

Downmixes a RawAudioBuffer to one channel (arithmetic mean of all
channels) and resamples it to the target rate with a band-limited
polyphase filter (scipy ``resample_poly``).  Content above the target
Nyquist frequency is filtered out instead of folding back into the
speech band.  16 kHz mono keeps each 60 s window comfortably under the
transcription service's payload ceiling.
"""

import logging
from math import gcd

import numpy as np
from scipy.signal import resample_poly

from dualsub.config import TARGET_SAMPLE_RATE
from dualsub.models import MonoPCM, RawAudioBuffer

logger = logging.getLogger("dualsub.audio.resampler")


def downmix(buffer: RawAudioBuffer) -> np.ndarray:
    """Average all channels into a single float32 array."""
    if len(buffer.channels) == 1:
        return np.asarray(buffer.channels[0], dtype=np.float32)
    stacked = np.stack(buffer.channels, axis=0).astype(np.float32)
    return stacked.mean(axis=0)


def resample(buffer: RawAudioBuffer, target_rate: int = TARGET_SAMPLE_RATE) -> MonoPCM:
    """
    Convert decoded audio to mono at ``target_rate``.

    The output holds exactly round(duration × target_rate) samples, so
    duration is preserved to within one sample.
    """
    if target_rate <= 0:
        raise ValueError(f"target_rate must be positive, got {target_rate}")

    mono = downmix(buffer)
    n_in = len(mono)
    n_out = int(round(buffer.duration * target_rate))

    if n_in == 0 or n_out == 0:
        return MonoPCM(samples=np.zeros(0, dtype=np.float32), sample_rate=target_rate)

    if buffer.sample_rate == target_rate:
        out = mono
    else:
        common = gcd(int(buffer.sample_rate), int(target_rate))
        up = int(target_rate) // common
        down = int(buffer.sample_rate) // common
        out = resample_poly(mono, up, down)
        # resample_poly yields ceil(n_in * up / down) samples
        if len(out) >= n_out:
            out = out[:n_out]
        else:
            out = np.pad(out, (0, n_out - len(out)))

    pcm = MonoPCM(samples=np.asarray(out, dtype=np.float32), sample_rate=target_rate)
    logger.info(
        "Resampled %d Hz x %d ch -> %d Hz mono (%d samples, %.1fs).",
        buffer.sample_rate, len(buffer.channels), target_rate,
        len(pcm.samples), pcm.duration,
    )
    return pcm
