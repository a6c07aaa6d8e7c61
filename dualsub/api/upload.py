"""
dualsub/api/upload.py
======================
API Endpoints — DualSub

Responsibility:
    - Expose POST /api/v1/transcribe
      Accept a single audio/video file via multipart/form-data, reject
      empty, oversized or non-audio uploads, run the pipeline in a worker thread and
      return the bilingual segments as JSON
    - Expose POST /api/v1/export/{fmt}
      Render (possibly user-edited) segments as SRT or TXT downloads
    - Expose GET /health

This module does NOT:
    - Retry failed jobs
    - Persist uploads or transcripts
"""

import asyncio
import logging
from urllib.parse import quote

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field

from dualsub.errors import (
    DecodeError,
    NetworkError,
    ResponseFormatError,
    UploadRejectedError,
    WindowProcessingError,
)
from dualsub.export.subtitles import (
    SRT_SUFFIX,
    TRANSCRIPT_SUFFIX,
    export_filename,
    generate_srt,
    generate_transcript,
)
from dualsub.models import SubtitleSegment
from dualsub.pipeline import run_pipeline

logger = logging.getLogger("dualsub.api")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="DualSub",
    description="Bilingual (original + Simplified Chinese) subtitle generation.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class SegmentPayload(BaseModel):
    id: str
    startTime: float
    endTime: float
    originalText: str
    translatedText: str


class ExportRequest(BaseModel):
    filename: str = "transcript"
    segments: list[SegmentPayload] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/api/v1/transcribe")
async def transcribe_upload(audio_file: UploadFile = File(...)):
    """
    Accept an audio/video file and return its bilingual transcript.

    Returns:
        ``{"filename": str, "segments": [ {id, startTime, endTime,
        originalText, translatedText}, ... ]}``
    """
    if audio_file is None or audio_file.filename is None:
        raise HTTPException(status_code=400, detail="Audio file is required.")

    logger.info("Audio file received: %s (%s)", audio_file.filename, audio_file.content_type)

    try:
        audio_bytes = await audio_file.read()
    except Exception:
        raise HTTPException(status_code=400, detail="Failed to read uploaded file.")

    logger.info("File size: %.2f KB", len(audio_bytes) / 1024)

    try:
        segments = await asyncio.to_thread(
            run_pipeline, audio_bytes, audio_file.filename, audio_file.content_type
        )
    except UploadRejectedError as exc:
        raise HTTPException(status_code=413 if exc.too_large else 400, detail=exc.message)
    except DecodeError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except (NetworkError, ResponseFormatError, WindowProcessingError) as exc:
        logger.error("Transcription failed: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc))
    except RuntimeError as exc:
        logger.error("Pipeline runtime error: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc))
    except Exception as exc:
        logger.error("Pipeline unexpected error: %s", exc, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Pipeline failed: {exc}")

    return JSONResponse(
        status_code=200,
        content={
            "filename": audio_file.filename,
            "segments": [seg.to_dict() for seg in segments],
        },
    )


@app.post("/api/v1/export/{fmt}")
async def export_segments(fmt: str, request: ExportRequest):
    """Render segments as ``srt`` (translation only) or ``txt`` (bilingual)."""
    if not request.segments:
        raise HTTPException(status_code=400, detail="No segments to export.")

    segments = [SubtitleSegment.from_dict(seg.model_dump()) for seg in request.segments]

    if fmt == "srt":
        content = generate_srt(segments)
        name = export_filename(request.filename, SRT_SUFFIX)
    elif fmt == "txt":
        content = generate_transcript(segments)
        name = export_filename(request.filename, TRANSCRIPT_SUFFIX)
    else:
        raise HTTPException(status_code=404, detail=f"Unknown export format '{fmt}'.")

    return PlainTextResponse(
        content,
        headers={"Content-Disposition": _attachment_header(name)},
    )


def _attachment_header(name: str) -> str:
    # Headers are latin-1; non-ASCII names go in the RFC 5987 form
    fallback = name.encode("ascii", "ignore").decode("ascii") or "transcript"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(name)}"
