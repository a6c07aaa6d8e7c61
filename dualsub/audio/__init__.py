# dualsub/audio/__init__.py
# ==========================
# Audio Layer - DualSub chunked path
#
#   1. decode_audio  - arbitrary container → RawAudioBuffer (pydub/ffmpeg)
#   2. resample      - RawAudioBuffer → 16 kHz MonoPCM
#   3. chunk_pcm     - MonoPCM → ordered 60 s AudioWindows
#   4. encode_wav    - window samples → self-contained WAV blob

from dualsub.audio.decoder import decode_audio, guess_format  # noqa: F401
from dualsub.audio.resampler import resample  # noqa: F401
from dualsub.audio.chunker import chunk_pcm  # noqa: F401
from dualsub.audio.wav_encoder import encode_wav, read_wav_header  # noqa: F401

__all__ = [
    "decode_audio",
    "guess_format",
    "resample",
    "chunk_pcm",
    "encode_wav",
    "read_wav_header",
]
