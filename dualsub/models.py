"""
dualsub/models.py
==================
Data types shared by the audio and STT layers — DualSub

Audio flows through these types strictly left to right:

    InputMedia → RawAudioBuffer → MonoPCM → AudioWindow → EncodedAudioBlob

and comes back from the transcription service as SubtitleSegment lists.
"""

from dataclasses import dataclass, replace
from typing import Any

import numpy as np


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InputMedia:
    """A single user-supplied file as received at the boundary."""

    data: bytes
    filename: str = ""
    media_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)


# ---------------------------------------------------------------------------
# Audio
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class RawAudioBuffer:
    """Decoded multi-channel float audio, amplitudes in [-1.0, 1.0]."""

    channels: list[np.ndarray]
    sample_rate: int

    def __post_init__(self):
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if not self.channels:
            raise ValueError("RawAudioBuffer needs at least one channel.")
        lengths = {len(ch) for ch in self.channels}
        if len(lengths) != 1:
            raise ValueError(f"Channel lengths differ: {sorted(lengths)}")

    @property
    def num_samples(self) -> int:
        return len(self.channels[0])

    @property
    def duration(self) -> float:
        return self.num_samples / self.sample_rate


@dataclass(frozen=True, eq=False)
class MonoPCM:
    """Single-channel float samples at a fixed rate (16 kHz after resampling)."""

    samples: np.ndarray
    sample_rate: int

    @property
    def duration(self) -> float:
        return len(self.samples) / self.sample_rate


@dataclass(frozen=True, eq=False)
class AudioWindow:
    """A contiguous slice of MonoPCM placed on the global timeline."""

    index: int
    samples: np.ndarray
    sample_rate: int
    start_time: float
    end_time: float

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class EncodedAudioBlob:
    """Self-describing audio payload ready to upload."""

    data: bytes
    mime_type: str = "audio/wav"

    @property
    def size(self) -> int:
        return len(self.data)


# ---------------------------------------------------------------------------
# Transcript
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SubtitleSegment:
    """One transcribed-and-translated unit with times in seconds."""

    id: str
    start_time: float
    end_time: float
    original_text: str
    translated_text: str

    def shifted(self, offset: float, new_id: str) -> "SubtitleSegment":
        """Copy moved ``offset`` seconds later on the timeline."""
        return replace(
            self,
            id=new_id,
            start_time=self.start_time + offset,
            end_time=self.end_time + offset,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "originalText": self.original_text,
            "translatedText": self.translated_text,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SubtitleSegment":
        return cls(
            id=str(data["id"]),
            start_time=float(data["startTime"]),
            end_time=float(data["endTime"]),
            original_text=str(data["originalText"]),
            translated_text=str(data["translatedText"]),
        )


TranscriptResult = list[SubtitleSegment]
