"""
dualsub/errors.py
==================
Error taxonomy — DualSub

Every failure is terminal for the job: nothing here is retried and no
partial transcript is ever returned.
"""


class DualSubError(Exception):
    """Base class for all pipeline failures."""


class UploadRejectedError(DualSubError):
    """Raised at the input boundary (empty, oversized, or unusable file type)."""

    def __init__(self, message: str, too_large: bool = False):
        self.message = message
        self.too_large = too_large
        super().__init__(message)


class DecodeError(DualSubError):
    """Input bytes are not a recognized or parseable audio container."""


class ResponseFormatError(DualSubError):
    """Transcription reply is missing, malformed, or violates the schema."""


class NetworkError(DualSubError):
    """Transport-level failure talking to the transcription service."""

    DEFAULT_MESSAGE = (
        "Network error during upload. The file size might exceed the "
        "service's payload limit. Please try a smaller file or ensure "
        "your network is stable."
    )

    def __init__(self, message: str = DEFAULT_MESSAGE):
        super().__init__(message)


class WindowProcessingError(DualSubError):
    """A single audio window failed; the whole chunked job is aborted."""

    def __init__(self, window_start: float, cause: Exception):
        self.window_start = window_start
        self.cause = cause
        super().__init__(
            f"Failed to process audio segment at {format_offset(window_start)}. "
            f"{cause}"
        )


def format_offset(seconds: float) -> str:
    """Render a timeline offset as ``M:SS`` (e.g. ``2:05``)."""
    mins = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{mins}:{secs:02d}"
