"""
dualsub/stt/router.py
======================
Router — DualSub

Responsibility:
    Choose, from the input's byte size alone, how to transcribe it:
        - size <  CHUNK_THRESHOLD_BYTES → single-shot: the original bytes
          go to the transcriber once and its result is returned as-is
        - size >= CHUNK_THRESHOLD_BYTES → chunked: decode → resample →
          chunk → (encode + transcribe) per window → stitch

    There is no content inspection and no fallback between the two paths:
    a chunked-path failure is NOT retried as single-shot.

This module does NOT:
    - Enforce the upload size cap (done at the HTTP / CLI boundary)
    - Talk to the remote service directly
"""

import logging

from dualsub import config
from dualsub.audio.chunker import chunk_pcm
from dualsub.audio.decoder import decode_audio, guess_format
from dualsub.audio.resampler import resample
from dualsub.models import EncodedAudioBlob, InputMedia, SubtitleSegment
from dualsub.stt.stitcher import stitch
from dualsub.stt.transcription_client import Transcriber

logger = logging.getLogger("dualsub.stt.router")

DEFAULT_MEDIA_TYPE = "audio/mp3"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def route(
    media: InputMedia,
    transcriber: Transcriber,
    threshold_bytes: int = config.CHUNK_THRESHOLD_BYTES,
    window_seconds: float = config.CHUNK_DURATION_SEC,
    target_rate: int = config.TARGET_SAMPLE_RATE,
) -> list[SubtitleSegment]:
    """
    Transcribe ``media`` via the single-shot or chunked path.

    Args:
        media:           The uploaded file.
        transcriber:     Remote transcription capability.
        threshold_bytes: Inputs at or above this size are chunked.
        window_seconds:  Window duration for the chunked path.
        target_rate:     Resample rate for the chunked path.

    Returns:
        Time-ordered list of SubtitleSegment.

    Raises:
        DecodeError, NetworkError, ResponseFormatError,
        WindowProcessingError: Propagated unchanged; every one is terminal.
    """
    if media.size < threshold_bytes:
        logger.info(
            "File %.2f MB below %.2f MB threshold — single-shot transcription.",
            media.size / 1024 / 1024, threshold_bytes / 1024 / 1024,
        )
        blob = EncodedAudioBlob(
            data=media.data,
            mime_type=media.media_type or DEFAULT_MEDIA_TYPE,
        )
        return transcriber.transcribe(blob)

    logger.info(
        "File %.2f MB at or above threshold — switching to chunked processing.",
        media.size / 1024 / 1024,
    )
    return transcribe_chunked(
        media, transcriber,
        window_seconds=window_seconds,
        target_rate=target_rate,
    )


def transcribe_chunked(
    media: InputMedia,
    transcriber: Transcriber,
    window_seconds: float = config.CHUNK_DURATION_SEC,
    target_rate: int = config.TARGET_SAMPLE_RATE,
) -> list[SubtitleSegment]:
    """
    Decode, resample and chunk ``media``, then stitch per-window results.

    Zero-duration audio yields no windows and an empty transcript without
    any remote call.
    """
    raw = decode_audio(media.data, guess_format(media.filename, media.media_type))
    pcm = resample(raw, target_rate=target_rate)
    del raw

    windows = chunk_pcm(pcm, window_seconds=window_seconds)
    if not windows:
        logger.warning("Decoded audio has zero duration — nothing to transcribe.")
        return []

    return stitch(windows, transcriber)
