# dualsub/export/__init__.py
# ===========================
# Export Layer - DualSub
#
# Renders a finished transcript as SRT subtitles or a bilingual TXT file.

from dualsub.export.subtitles import (  # noqa: F401
    SRT_SUFFIX,
    TRANSCRIPT_SUFFIX,
    export_filename,
    format_display_time,
    format_srt_timestamp,
    generate_srt,
    generate_transcript,
    parse_srt_times,
)
