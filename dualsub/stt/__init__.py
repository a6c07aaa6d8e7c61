# dualsub/stt/__init__.py
# ========================
# Speech-to-Text Layer - DualSub
#
#   1. route                - size-based single-shot vs. chunked decision
#   2. TranscriptionClient  - one payload → window-local bilingual segments
#   3. stitch               - serial per-window dispatch + global reassembly
#
# Public API:
#   route(media, transcriber) → list[SubtitleSegment]

from dualsub.stt.router import route, transcribe_chunked  # noqa: F401
from dualsub.stt.stitcher import stitch  # noqa: F401
from dualsub.stt.transcription_client import (  # noqa: F401
    Transcriber,
    TranscriptionClient,
    parse_segments,
)

__all__ = [
    "route",
    "transcribe_chunked",
    "stitch",
    "Transcriber",
    "TranscriptionClient",
    "parse_segments",
]
