"""DualSub — bilingual subtitle generation from a single audio/video file."""

__version__ = "1.0.0"
