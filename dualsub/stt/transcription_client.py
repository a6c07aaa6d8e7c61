"""
dualsub/stt/transcription_client.py
====================================
Transcription Client — DualSub

Responsibility:
    - Send one audio payload (a 60 s WAV window, or the original file on
      the single-shot path) to an OpenAI audio-capable chat model
    - Ask for transcription in the original language plus a Simplified
      Chinese translation, sentence by sentence, with per-segment times
    - Parse the strictly-typed JSON reply into SubtitleSegment records on a
      window-local time origin (0 = start of the payload)
    - Synthesize a segment id locally (the service never supplies one)

This module does NOT:
    - Retry failed requests
    - Offset timestamps onto the global timeline (handled by stitcher.py)
    - Decide between single-shot and chunked processing (router.py)
"""

import base64
import json
import logging
import time
from typing import Any, Protocol

from openai import OpenAI

from dualsub import config
from dualsub.errors import ResponseFormatError, UploadRejectedError
from dualsub.models import EncodedAudioBlob, SubtitleSegment
from dualsub.openai_call import chat_completion_once

logger = logging.getLogger("dualsub.stt.transcription_client")


# ---------------------------------------------------------------------------
# Request contract
# ---------------------------------------------------------------------------

SYSTEM_INSTRUCTION = """\
You are an expert transcriber and translator.
Your task is to:
1. Listen to the audio file provided.
2. Transcribe the spoken content accurately in its original language.
3. Translate the content into Simplified Chinese (zh-CN) sentence by sentence.
4. Provide precise timestamps (start and end time in seconds) for each sentence or logical segment.
5. Ensure the timestamps align perfectly with the audio for subtitle synchronization.

Return the result STRICTLY as a JSON array of objects.
"""

USER_PROMPT = "Transcribe and translate this audio to Chinese with timestamps."

_SEGMENT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "startTime": {
            "type": "number",
            "description": "Start time of the segment in seconds (e.g., 1.5)",
        },
        "endTime": {
            "type": "number",
            "description": "End time of the segment in seconds (e.g., 4.2)",
        },
        "originalText": {
            "type": "string",
            "description": "The original transcribed text",
        },
        "translatedText": {
            "type": "string",
            "description": "The Simplified Chinese translation",
        },
    },
    "required": ["startTime", "endTime", "originalText", "translatedText"],
    "additionalProperties": False,
}

# Structured outputs need an object root; the array lives under "segments".
RESPONSE_FORMAT: dict[str, Any] = {
    "type": "json_schema",
    "json_schema": {
        "name": "subtitle_segments",
        "strict": True,
        "schema": {
            "type": "object",
            "properties": {
                "segments": {"type": "array", "items": _SEGMENT_SCHEMA},
            },
            "required": ["segments"],
            "additionalProperties": False,
        },
    },
}

_REQUIRED_FIELDS = ("startTime", "endTime", "originalText", "translatedText")

_WAV_MEDIA_TYPES = {"audio/wav", "audio/x-wav", "audio/wave", "audio/vnd.wave"}
_MP3_MEDIA_TYPES = {"audio/mpeg", "audio/mp3"}


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------


class Transcriber(Protocol):
    """Anything that turns one audio payload into window-local segments."""

    def transcribe(self, blob: EncodedAudioBlob) -> list[SubtitleSegment]:
        ...


# ---------------------------------------------------------------------------
# OpenAI-backed implementation
# ---------------------------------------------------------------------------


class TranscriptionClient:
    """Transcribe + translate audio payloads with an OpenAI audio model."""

    def __init__(
        self,
        client: Any = None,
        api_key: str | None = None,
        model: str = config.MODEL,
        temperature: float = config.TEMPERATURE,
        timeout: float = config.REQUEST_TIMEOUT_SEC,
    ):
        if client is None:
            api_key = api_key or config.OPENAI_API_KEY
            if not api_key:
                raise RuntimeError("OPENAI_API_KEY environment variable is not set.")
            # SDK-level retries are disabled: a failed request aborts the job
            client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self._client = client
        self.model = model
        self.temperature = temperature

    def transcribe(self, blob: EncodedAudioBlob) -> list[SubtitleSegment]:
        """
        Send one payload and return its segments (time origin 0).

        Raises:
            NetworkError:        Upload / connection failure.
            ResponseFormatError: Missing, unparsable or schema-violating reply.
            UploadRejectedError: Payload container is neither WAV nor MP3.
        """
        audio_format = require_audio_format(blob.mime_type)
        logger.info(
            "Sending %.2f MB of %s audio to %s.",
            blob.size / 1024 / 1024, audio_format, self.model,
        )

        response = chat_completion_once(
            self._client,
            model=self.model,
            modalities=["text"],
            temperature=self.temperature,
            response_format=RESPONSE_FORMAT,
            messages=[
                {"role": "system", "content": SYSTEM_INSTRUCTION},
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "input_audio",
                            "input_audio": {
                                "data": base64.b64encode(blob.data).decode("ascii"),
                                "format": audio_format,
                            },
                        },
                        {"type": "text", "text": USER_PROMPT},
                    ],
                },
            ],
        )

        segments = parse_segments(_response_text(response))
        logger.info("Received %d segment(s).", len(segments))
        return segments


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------


def parse_segments(json_text: str | None, stamp_ms: int | None = None) -> list[SubtitleSegment]:
    """
    Parse the service's JSON reply into SubtitleSegment records.

    Accepts a bare JSON array, or an object whose ``segments`` member is
    the array.  Ids are ``seg-<stamp_ms>-<index>``.

    Raises:
        ResponseFormatError: On any contract violation.
    """
    if not json_text or not json_text.strip():
        raise ResponseFormatError("No response text received.")

    try:
        parsed = json.loads(json_text)
    except ValueError as exc:
        raise ResponseFormatError("Failed to parse JSON response.") from exc

    if isinstance(parsed, dict) and "segments" in parsed:
        parsed = parsed["segments"]
    if not isinstance(parsed, list):
        raise ResponseFormatError("Model response was not an array.")

    if stamp_ms is None:
        stamp_ms = int(time.time() * 1000)

    return [
        _to_segment(item, index, f"seg-{stamp_ms}-{index}")
        for index, item in enumerate(parsed)
    ]


def _to_segment(item: Any, index: int, segment_id: str) -> SubtitleSegment:
    """Validate one reply element against the four-field contract."""
    if not isinstance(item, dict):
        raise ResponseFormatError(f"Segment {index} is not an object.")

    for key in _REQUIRED_FIELDS:
        if key not in item:
            raise ResponseFormatError(f"Segment {index} missing required field '{key}'.")

    start, end = item["startTime"], item["endTime"]
    for key, value in (("startTime", start), ("endTime", end)):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ResponseFormatError(f"Segment {index} {key} is not a number.")
    if start < 0:
        raise ResponseFormatError(f"Segment {index} startTime is negative.")
    if end <= start:
        raise ResponseFormatError(f"Segment {index} endTime is not after startTime.")

    original, translated = item["originalText"], item["translatedText"]
    for key, value in (("originalText", original), ("translatedText", translated)):
        if not isinstance(value, str) or not value.strip():
            raise ResponseFormatError(f"Segment {index} has empty or non-string {key}.")

    return SubtitleSegment(
        id=segment_id,
        start_time=float(start),
        end_time=float(end),
        original_text=original,
        translated_text=translated,
    )


def _response_text(response: Any) -> str | None:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return None
    return getattr(choices[0].message, "content", None)


def audio_format_for(mime_type: str | None) -> str | None:
    """
    Map a MIME type to the ``input_audio`` format name (wav or mp3).

    Undeclared payloads go out as mp3.  Returns None for any other
    declared container: the service accepts only these two.
    """
    mt = (mime_type or "").split(";", 1)[0].strip().lower()
    if not mt or mt in _MP3_MEDIA_TYPES:
        return "mp3"
    if mt in _WAV_MEDIA_TYPES:
        return "wav"
    return None


def require_audio_format(mime_type: str | None) -> str:
    """
    Like ``audio_format_for`` but rejects containers the service cannot read.

    Raises:
        UploadRejectedError: For m4a, mp4, ogg, webm and other non-wav/mp3 types.
    """
    audio_format = audio_format_for(mime_type)
    if audio_format is None:
        raise UploadRejectedError(
            f"Unsupported audio format '{mime_type}' for direct transcription. "
            "Please upload an MP3 or WAV file."
        )
    return audio_format
