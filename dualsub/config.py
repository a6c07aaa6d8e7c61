"""
dualsub/config.py
==================
Runtime configuration — DualSub

All tunables are resolved once from the environment (a local ``.env`` is
loaded first).  Defaults match the transcription service's payload ceiling:
a 60 s window of 16 kHz mono 16-bit WAV is ~1.92 MB, ~2.56 MB after the
base64 transport inflation.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    return int(raw) if raw else default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    return float(raw) if raw else default


# ---------------------------------------------------------------------------
# Remote transcription service
# ---------------------------------------------------------------------------

OPENAI_API_KEY: str | None = os.environ.get("OPENAI_API_KEY")
MODEL: str = os.environ.get("DUALSUB_MODEL", "gpt-4o-audio-preview")
TEMPERATURE: float = _env_float("DUALSUB_TEMPERATURE", 0.2)
REQUEST_TIMEOUT_SEC: float = _env_float("DUALSUB_REQUEST_TIMEOUT", 120.0)

# ---------------------------------------------------------------------------
# Routing / chunking
# ---------------------------------------------------------------------------

CHUNK_THRESHOLD_BYTES: int = _env_int(
    "DUALSUB_CHUNK_THRESHOLD_BYTES", int(2.5 * 1024 * 1024)
)
CHUNK_DURATION_SEC: float = _env_float("DUALSUB_CHUNK_SECONDS", 60.0)
TARGET_SAMPLE_RATE: int = _env_int("DUALSUB_SAMPLE_RATE", 16000)

# ---------------------------------------------------------------------------
# Input boundary (HTTP / CLI)
# ---------------------------------------------------------------------------

MAX_UPLOAD_BYTES: int = _env_int("DUALSUB_MAX_UPLOAD_BYTES", 20 * 1024 * 1024)
