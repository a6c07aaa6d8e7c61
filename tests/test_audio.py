"""
tests/test_audio.py
====================
Audio Layer Tests — decode, resample, chunk, WAV encode

Test categories:
    1. WavEncoder — byte-exact header, sample scaling and clamping
    2. Chunker — contiguous coverage of [0, D) for many durations
    3. Resampler — downmix, output length, anti-alias filtering
    4. AudioDecoder — real pydub decode of synthesized WAV bytes,
       DecodeError on garbage

All tests are OFFLINE — audio is synthesized in memory.
"""

import io
import os
import struct
import sys
import unittest
import wave
from unittest.mock import patch

import numpy as np

# Ensure project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from pydub.exceptions import CouldntDecodeError

from dualsub.audio.chunker import chunk_pcm
from dualsub.audio.decoder import decode_audio, guess_format
from dualsub.audio.resampler import downmix, resample
from dualsub.audio.wav_encoder import (
    WAV_HEADER_SIZE,
    encode_wav,
    float_to_pcm16,
    read_wav_header,
)
from dualsub.errors import DecodeError
from dualsub.models import MonoPCM, RawAudioBuffer


# ===================================================================
# Test fixtures
# ===================================================================


def _make_wav(frames: np.ndarray, sample_rate: int) -> bytes:
    """Build 16-bit WAV bytes from an int16 array shaped (n, channels)."""
    frames = np.asarray(frames, dtype=np.int16)
    if frames.ndim == 1:
        frames = frames.reshape(-1, 1)
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(frames.shape[1])
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(frames.tobytes())
    return buf.getvalue()


def _pcm(n_samples: int, rate: int) -> MonoPCM:
    return MonoPCM(samples=np.zeros(n_samples, dtype=np.float32), sample_rate=rate)


def _tone(freq: float, rate: int, seconds: float = 1.0, amplitude: float = 0.8) -> RawAudioBuffer:
    t = np.arange(int(seconds * rate)) / rate
    samples = (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)
    return RawAudioBuffer(channels=[samples], sample_rate=rate)


def _rms(samples) -> float:
    return float(np.sqrt(np.mean(np.square(np.asarray(samples, dtype=np.float64)))))


# ===================================================================
# WavEncoder
# ===================================================================


class TestWavEncoder(unittest.TestCase):

    def test_header_fields(self):
        n, rate = 1000, 16000
        blob = encode_wav(np.zeros(n, dtype=np.float32), rate)
        header = read_wav_header(blob.data)

        self.assertEqual(header["riff_size"], 36 + 2 * n)
        self.assertEqual(header["data_size"], 2 * n)
        self.assertEqual(header["sample_rate"], rate)
        self.assertEqual(header["channels"], 1)
        self.assertEqual(header["bits_per_sample"], 16)
        self.assertEqual(header["audio_format"], 1)
        self.assertEqual(header["fmt_size"], 16)
        self.assertEqual(header["byte_rate"], rate * 2)
        self.assertEqual(header["block_align"], 2)

    def test_total_length_is_header_plus_payload(self):
        blob = encode_wav([0.1] * 37, 8000)
        self.assertEqual(len(blob.data), WAV_HEADER_SIZE + 2 * 37)
        self.assertEqual(blob.mime_type, "audio/wav")

    def test_magic_tags_at_fixed_offsets(self):
        data = encode_wav([0.0, 0.0], 16000).data
        self.assertEqual(data[0:4], b"RIFF")
        self.assertEqual(data[8:12], b"WAVE")
        self.assertEqual(data[12:16], b"fmt ")
        self.assertEqual(data[36:40], b"data")

    def test_sample_scaling_and_clamping(self):
        samples = [-1.0, -0.5, 0.0, 0.5, 1.0, 2.0, -3.0]
        data = encode_wav(samples, 16000).data
        payload = struct.unpack("<7h", data[WAV_HEADER_SIZE:])
        self.assertEqual(
            payload, (-32768, -16384, 0, 16383, 32767, 32767, -32768)
        )

    def test_truncates_toward_zero(self):
        pcm = float_to_pcm16([0.00002, -0.00002])
        # 0.00002 * 32767 = 0.655 → 0 ; -0.00002 * 32768 = -0.655 → 0
        self.assertEqual(pcm.tolist(), [0, 0])

    def test_nan_samples_become_silence(self):
        data = encode_wav([0.5, float("nan"), -0.5, float("inf")], 16000).data
        payload = struct.unpack("<4h", data[WAV_HEADER_SIZE:])
        self.assertEqual(payload, (16383, 0, -16384, 32767))

    def test_empty_input_yields_bare_header(self):
        blob = encode_wav([], 16000)
        self.assertEqual(len(blob.data), WAV_HEADER_SIZE)
        header = read_wav_header(blob.data)
        self.assertEqual(header["data_size"], 0)
        self.assertEqual(header["riff_size"], 36)

    def test_read_header_rejects_short_data(self):
        with self.assertRaises(ValueError):
            read_wav_header(b"RIFF")


# ===================================================================
# Chunker
# ===================================================================


class TestChunker(unittest.TestCase):

    def test_windows_cover_duration_contiguously(self):
        rate, window = 100, 60.0
        for duration in (0.01, 1.0, 59.99, 60.0, 60.01, 120.0, 150.0, 179.37, 600.0):
            with self.subTest(duration=duration):
                n = int(round(duration * rate))
                windows = chunk_pcm(_pcm(n, rate), window_seconds=window)

                self.assertEqual(windows[0].start_time, 0.0)
                self.assertEqual(windows[-1].end_time, n / rate)
                for prev, nxt in zip(windows, windows[1:]):
                    self.assertEqual(prev.end_time, nxt.start_time)
                for w in windows:
                    self.assertGreater(w.end_time, w.start_time)
                    self.assertLessEqual(w.duration, window + 1e-9)
                self.assertEqual(sum(len(w.samples) for w in windows), n)
                self.assertEqual([w.index for w in windows], list(range(len(windows))))

    def test_short_clip_is_one_window(self):
        windows = chunk_pcm(_pcm(4500, 100), window_seconds=60)
        self.assertEqual(len(windows), 1)
        self.assertEqual((windows[0].start_time, windows[0].end_time), (0.0, 45.0))

    def test_exact_multiple_has_no_short_tail(self):
        windows = chunk_pcm(_pcm(18000, 100), window_seconds=60)
        self.assertEqual(len(windows), 3)
        self.assertEqual([w.duration for w in windows], [60.0, 60.0, 60.0])

    def test_last_window_is_clamped(self):
        windows = chunk_pcm(_pcm(15000, 100), window_seconds=60)
        self.assertEqual(
            [(w.start_time, w.end_time) for w in windows],
            [(0.0, 60.0), (60.0, 120.0), (120.0, 150.0)],
        )

    def test_zero_duration_yields_no_windows(self):
        self.assertEqual(chunk_pcm(_pcm(0, 16000)), [])

    def test_windows_are_views_of_source(self):
        pcm = MonoPCM(samples=np.arange(250, dtype=np.float32), sample_rate=100)
        windows = chunk_pcm(pcm, window_seconds=1)
        self.assertEqual(windows[1].samples[0], 100.0)
        self.assertEqual(windows[2].samples.tolist(), [200.0 + i for i in range(50)])

    def test_non_positive_window_rejected(self):
        with self.assertRaises(ValueError):
            chunk_pcm(_pcm(100, 100), window_seconds=0)


# ===================================================================
# Resampler
# ===================================================================


class TestResampler(unittest.TestCase):

    def test_downmix_averages_channels(self):
        buf = RawAudioBuffer(
            channels=[np.array([1.0, 0.5], np.float32), np.array([0.0, -0.5], np.float32)],
            sample_rate=8000,
        )
        np.testing.assert_allclose(downmix(buf), [0.5, 0.0])

    def test_output_length_matches_duration(self):
        for src_rate, n in ((44100, 44100 * 3 + 17), (48000, 48000), (8000, 12345), (22050, 1)):
            with self.subTest(src_rate=src_rate, n=n):
                buf = RawAudioBuffer(channels=[np.zeros(n, np.float32)], sample_rate=src_rate)
                pcm = resample(buf, target_rate=16000)
                self.assertEqual(pcm.sample_rate, 16000)
                self.assertEqual(len(pcm.samples), int(round(n / src_rate * 16000)))
                self.assertLessEqual(abs(pcm.duration - buf.duration), 1 / 16000)

    def test_content_above_target_nyquist_is_filtered(self):
        for src_rate, freq in ((48000, 10000.0), (44100, 12000.0)):
            with self.subTest(src_rate=src_rate, freq=freq):
                pcm = resample(_tone(freq, src_rate), target_rate=16000)
                # Ignore filter edge transients
                core = pcm.samples[1600:-1600]
                self.assertLess(_rms(core), 0.05)

    def test_speech_band_tone_survives(self):
        for src_rate in (48000, 44100, 8000):
            with self.subTest(src_rate=src_rate):
                pcm = resample(_tone(1000.0, src_rate), target_rate=16000)
                core = pcm.samples[1600:-1600]
                self.assertAlmostEqual(_rms(core), 0.8 / np.sqrt(2), delta=0.03)
                spectrum = np.abs(np.fft.rfft(core))
                peak_hz = np.argmax(spectrum) * 16000 / len(core)
                self.assertAlmostEqual(peak_hz, 1000.0, delta=5.0)

    def test_same_rate_is_passthrough(self):
        samples = np.linspace(-1, 1, 160, dtype=np.float32)
        buf = RawAudioBuffer(channels=[samples], sample_rate=16000)
        np.testing.assert_array_equal(resample(buf).samples, samples)

    def test_empty_buffer(self):
        buf = RawAudioBuffer(channels=[np.zeros(0, np.float32)] * 2, sample_rate=44100)
        pcm = resample(buf)
        self.assertEqual(len(pcm.samples), 0)
        self.assertEqual(pcm.duration, 0.0)

    def test_unequal_channels_rejected(self):
        with self.assertRaises(ValueError):
            RawAudioBuffer(channels=[np.zeros(3), np.zeros(4)], sample_rate=8000)


# ===================================================================
# AudioDecoder
# ===================================================================


class TestAudioDecoder(unittest.TestCase):

    def test_decodes_stereo_wav(self):
        frames = np.array([[16384, -16384], [0, 32767], [-32768, 8192]], dtype=np.int16)
        buf = decode_audio(_make_wav(frames, 8000), format_hint="wav")

        self.assertEqual(buf.sample_rate, 8000)
        self.assertEqual(len(buf.channels), 2)
        self.assertAlmostEqual(buf.duration, 3 / 8000)
        np.testing.assert_allclose(buf.channels[0], [0.5, 0.0, -1.0], atol=1e-4)
        np.testing.assert_allclose(buf.channels[1], [-0.5, 1.0, 0.25], atol=1e-4)

    def test_decodes_encoder_output(self):
        blob = encode_wav(np.linspace(-0.9, 0.9, 1600), 16000)
        buf = decode_audio(blob.data, format_hint="wav")
        self.assertEqual(len(buf.channels), 1)
        self.assertEqual(buf.num_samples, 1600)
        self.assertAlmostEqual(buf.duration, 0.1)

    def test_empty_bytes_raise_decode_error(self):
        with self.assertRaises(DecodeError):
            decode_audio(b"")

    def test_corrupt_input_raises_decode_error(self):
        with patch(
            "dualsub.audio.decoder.AudioSegment.from_file",
            side_effect=CouldntDecodeError("bad"),
        ):
            with self.assertRaises(DecodeError) as ctx:
                decode_audio(b"not really audio", format_hint="mp3")
        self.assertIn("corrupt", str(ctx.exception))

    def test_unexpected_decoder_failure_raises_decode_error(self):
        with patch(
            "dualsub.audio.decoder.AudioSegment.from_file",
            side_effect=FileNotFoundError("ffmpeg"),
        ):
            with self.assertRaises(DecodeError):
                decode_audio(b"\x00\x01\x02")

    def test_guess_format(self):
        self.assertEqual(guess_format("a.bin", "audio/x-wav"), "wav")
        self.assertEqual(guess_format("a.bin", "audio/wav; codecs=1"), "wav")
        self.assertEqual(guess_format("song.MP3"), "mp3")
        self.assertEqual(guess_format("a", "audio/mpeg"), "mp3")
        self.assertIsNone(guess_format("clip.m4a", "audio/mp4"))
        self.assertIsNone(guess_format("noext"))


if __name__ == "__main__":
    unittest.main()
