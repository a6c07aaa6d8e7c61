"""
dualsub/export/subtitles.py
============================
Subtitle / transcript export — DualSub

Renders a transcript (list of SubtitleSegment, already time-ordered) as:
    - SRT: index, ``HH:MM:SS,mmm --> HH:MM:SS,mmm``, translated text
    - TXT: ``[MM:SS - MM:SS] original`` followed by the translation

Segment order is written exactly as given.
"""

import re

from dualsub.models import SubtitleSegment

SRT_SUFFIX = "_zh.srt"
TRANSCRIPT_SUFFIX = "_transcript.txt"

_SRT_TIME_RE = re.compile(
    r"^\s*(\d{2,}):(\d{2}):(\d{2}),(\d{3})\s*-->\s*(\d{2,}):(\d{2}):(\d{2}),(\d{3})\s*$"
)


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------


def format_srt_timestamp(seconds: float) -> str:
    """Seconds → ``HH:MM:SS,mmm`` (rounded to the millisecond)."""
    total_ms = max(0, int(round(seconds * 1000)))
    hh = total_ms // 3_600_000
    mm = (total_ms % 3_600_000) // 60_000
    ss = (total_ms % 60_000) // 1_000
    ms = total_ms % 1_000
    return f"{hh:02d}:{mm:02d}:{ss:02d},{ms:03d}"


def format_display_time(seconds: float) -> str:
    """Seconds → ``MM:SS`` (floored; minutes are not wrapped at the hour)."""
    mins = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{mins:02d}:{secs:02d}"


def _to_seconds(h: str, m: str, s: str, ms: str) -> float:
    return (int(h) * 3_600_000 + int(m) * 60_000 + int(s) * 1_000 + int(ms)) / 1000.0


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------


def generate_srt(segments: list[SubtitleSegment]) -> str:
    """Render segments as SRT with the Chinese translation as the cue text."""
    blocks = []
    for index, seg in enumerate(segments, start=1):
        time_line = (
            f"{format_srt_timestamp(seg.start_time)} --> "
            f"{format_srt_timestamp(seg.end_time)}"
        )
        blocks.append(f"{index}\n{time_line}\n{seg.translated_text}\n")
    return "\n".join(blocks)


def generate_transcript(segments: list[SubtitleSegment]) -> str:
    """Render a bilingual plain-text transcript with ``MM:SS`` ranges."""
    blocks = []
    for seg in segments:
        label = f"[{format_display_time(seg.start_time)} - {format_display_time(seg.end_time)}]"
        blocks.append(f"{label} {seg.original_text}\n{seg.translated_text}\n")
    return "\n".join(blocks)


def parse_srt_times(srt_text: str) -> list[tuple[float, float]]:
    """Recover (start, end) seconds from every timestamp line of an SRT file."""
    times: list[tuple[float, float]] = []
    for line in srt_text.splitlines():
        match = _SRT_TIME_RE.match(line)
        if match:
            g = match.groups()
            times.append((_to_seconds(*g[:4]), _to_seconds(*g[4:])))
    return times


# ---------------------------------------------------------------------------
# File naming
# ---------------------------------------------------------------------------


def export_filename(source_name: str, suffix: str) -> str:
    """``talk.final.mp3`` + ``_zh.srt`` → ``talk.final_zh.srt``."""
    stem = re.sub(r"\.[^/.]+$", "", source_name or "") or "transcript"
    return stem + suffix
