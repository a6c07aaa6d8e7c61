"""
dualsub/stt/stitcher.py
========================
Stitcher — DualSub chunked path, step 5

Responsibility:
    - Dispatch each AudioWindow to the transcriber strictly in window
      order, one request at a time
    - Move every returned segment from window-local time onto the global
      timeline and make its id unique across the whole job
    - Return one ascending-by-start-time transcript

Failure policy:
    The first failing window aborts the job.  Remaining windows are not
    sent and no partial transcript is returned; a single
    WindowProcessingError names the failing window's start time.

This module does NOT:
    - Retry a window
    - Merge sentences split across window boundaries
"""

import logging

from dualsub.audio.wav_encoder import encode_wav
from dualsub.errors import WindowProcessingError, format_offset
from dualsub.models import AudioWindow, SubtitleSegment
from dualsub.stt.transcription_client import Transcriber

logger = logging.getLogger("dualsub.stt.stitcher")


def offset_segments(
    segments: list[SubtitleSegment],
    window_start: float,
) -> list[SubtitleSegment]:
    """Shift window-local segments by ``window_start`` and re-key their ids."""
    prefix = _offset_label(window_start)
    return [
        seg.shifted(window_start, new_id=f"seg-{prefix}-{seg.id}")
        for seg in segments
    ]


def stitch(
    windows: list[AudioWindow],
    transcriber: Transcriber,
) -> list[SubtitleSegment]:
    """
    Transcribe ``windows`` serially and assemble the global transcript.

    Args:
        windows:     Ordered windows from the chunker.
        transcriber: Service used for each window.

    Returns:
        All segments, stable-sorted ascending by start_time.

    Raises:
        WindowProcessingError: On the first window that fails.
    """
    stitched: list[SubtitleSegment] = []

    for window in windows:
        try:
            blob = encode_wav(window.samples, window.sample_rate)
            logger.info(
                "Processing window %d: %.1fs to %.1fs (%.1fs, Size: %.2f MB)",
                window.index, window.start_time, window.end_time, window.duration,
                blob.size / 1024 / 1024,
            )
            local_segments = transcriber.transcribe(blob)
        except Exception as exc:
            logger.error(
                "Window %d starting at %s failed: %s — aborting job.",
                window.index, format_offset(window.start_time), exc,
            )
            raise WindowProcessingError(window.start_time, exc) from exc

        stitched.extend(offset_segments(local_segments, window.start_time))

    stitched.sort(key=lambda seg: seg.start_time)
    logger.info(
        "Stitched %d segment(s) from %d window(s).", len(stitched), len(windows),
    )
    return stitched


def _offset_label(seconds: float) -> str:
    """``60.0`` → ``"60"``, ``60.5`` → ``"60.5"``."""
    if float(seconds).is_integer():
        return str(int(seconds))
    return repr(float(seconds))
