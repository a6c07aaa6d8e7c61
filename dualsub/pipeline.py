"""
dualsub/pipeline.py
====================
Pipeline Entry — DualSub

Responsibility:
    1. Validate the input at the boundary (non-empty, ≤ MAX_UPLOAD_BYTES,
       audio/video type, WAV/MP3 container for single-shot files)
    2. Build the default OpenAI-backed transcriber when none is supplied
    3. Route the file (single-shot or chunked)
    4. Return the time-ordered bilingual transcript

One job per call; every failure is terminal and propagates to the caller.
"""

import logging
import mimetypes
import time

from dualsub import config
from dualsub.errors import UploadRejectedError
from dualsub.models import InputMedia, SubtitleSegment
from dualsub.stt.router import route
from dualsub.stt.transcription_client import (
    Transcriber,
    TranscriptionClient,
    require_audio_format,
)

logger = logging.getLogger("dualsub.pipeline")

# Types some clients send when they do not know the real one
_GENERIC_MEDIA_TYPES = {"application/octet-stream", "binary/octet-stream"}


def resolve_media_type(filename: str = "", media_type: str | None = None) -> str | None:
    """Declared MIME type, or one guessed from the extension when absent or generic."""
    if media_type:
        mt = media_type.split(";", 1)[0].strip().lower()
        if mt and mt not in _GENERIC_MEDIA_TYPES:
            return mt
    guessed, _ = mimetypes.guess_type(filename or "")
    return guessed


def validate_upload(
    audio_bytes: bytes,
    filename: str = "",
    media_type: str | None = None,
    max_bytes: int = config.MAX_UPLOAD_BYTES,
    threshold_bytes: int = config.CHUNK_THRESHOLD_BYTES,
) -> str | None:
    """
    Reject unusable input before it reaches the core.

    Checks, in order: empty file, size cap, audio/video type, and for
    files small enough to go out single-shot, a container the
    transcription service reads directly (WAV or MP3).

    Returns:
        The resolved media type.

    Raises:
        UploadRejectedError: With a human-readable message.
    """
    if not audio_bytes:
        raise UploadRejectedError("Audio file is empty.")
    if len(audio_bytes) > max_bytes:
        limit_mb = max_bytes / 1024 / 1024
        raise UploadRejectedError(
            f"File size too large. Please keep it under {limit_mb:g}MB.",
            too_large=True,
        )

    resolved = resolve_media_type(filename, media_type)
    if not resolved or not resolved.startswith(("audio/", "video/")):
        raise UploadRejectedError("Please upload a valid audio file.")

    if len(audio_bytes) < threshold_bytes:
        require_audio_format(resolved)
    return resolved


def run_pipeline(
    audio_bytes: bytes,
    filename: str,
    media_type: str | None = None,
    transcriber: Transcriber | None = None,
) -> list[SubtitleSegment]:
    """
    Run one transcription job end to end.

    Args:
        audio_bytes: Raw bytes of the uploaded file.
        filename:    Original filename (used as a decode hint).
        media_type:  Declared MIME type, if any.
        transcriber: Override for the remote service (tests, alternative
                     backends).  Defaults to TranscriptionClient().

    Returns:
        Time-ordered list of SubtitleSegment.
    """
    media_type = validate_upload(audio_bytes, filename, media_type)

    if transcriber is None:
        transcriber = TranscriptionClient()

    media = InputMedia(data=audio_bytes, filename=filename, media_type=media_type)
    logger.info(
        "Job started: %s (%s, %.2f MB)",
        filename, media_type or "unknown type", media.size / 1024 / 1024,
    )

    started = time.monotonic()
    segments = route(media, transcriber)
    logger.info(
        "Job complete: %d segment(s) in %.1fs.",
        len(segments), time.monotonic() - started,
    )
    return segments
