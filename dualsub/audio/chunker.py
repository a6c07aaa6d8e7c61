"""
dualsub/audio/chunker.py
=========================
Audio Chunker — DualSub chunked path, step 3

Responsibility:
    - Split resampled mono audio into fixed-duration (default 60 s)
      contiguous, non-overlapping windows covering the full duration
    - Place every window on the global timeline (start/end seconds)

Windows are cut on sample indices: window k spans samples
[k·W, min((k+1)·W, N)), so consecutive windows share exact boundaries and
the last window ends at N / sample_rate.

This module does NOT:
    - Look for silence or sentence boundaries (cuts are blind)
    - Overlap windows or merge text across cuts
    - Encode windows (handled by wav_encoder.py)
"""

import logging

from dualsub.config import CHUNK_DURATION_SEC
from dualsub.models import AudioWindow, MonoPCM

logger = logging.getLogger("dualsub.audio.chunker")


def chunk_pcm(
    pcm: MonoPCM,
    window_seconds: float = CHUNK_DURATION_SEC,
) -> list[AudioWindow]:
    """
    Partition ``pcm`` into ordered windows of ``window_seconds``.

    Args:
        pcm:            Resampled mono audio.
        window_seconds: Nominal window duration in seconds.

    Returns:
        Ordered list of AudioWindow.  Empty if the audio has zero duration.

    Raises:
        ValueError: If window_seconds is not positive.
    """
    if window_seconds <= 0:
        raise ValueError(f"window_seconds must be positive, got {window_seconds}")

    rate = pcm.sample_rate
    total = len(pcm.samples)
    window_samples = max(1, int(round(window_seconds * rate)))

    windows: list[AudioWindow] = []
    start = 0
    while start < total:
        end = min(start + window_samples, total)
        windows.append(
            AudioWindow(
                index=len(windows),
                samples=pcm.samples[start:end],
                sample_rate=rate,
                start_time=start / rate,
                end_time=end / rate,
            )
        )
        start = end

    logger.info(
        "Chunked %.1fs of audio into %d window(s) of <= %.1fs.",
        pcm.duration, len(windows), window_seconds,
    )
    return windows
