"""
dualsub/cli.py
===============
Command-line entry — DualSub

    dualsub talk.mp3 --out-dir subs/ --format both

Transcribes one local file and writes ``<stem>_zh.srt`` and/or
``<stem>_transcript.txt``.
"""

import argparse
import logging
import mimetypes
import sys
from pathlib import Path

from dualsub.errors import DualSubError
from dualsub.export.subtitles import (
    SRT_SUFFIX,
    TRANSCRIPT_SUFFIX,
    export_filename,
    generate_srt,
    generate_transcript,
)
from dualsub.pipeline import run_pipeline

logger = logging.getLogger("dualsub.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dualsub",
        description="Generate bilingual (original + Simplified Chinese) subtitles.",
    )
    parser.add_argument("input", type=Path, help="Audio or video file to transcribe.")
    parser.add_argument(
        "--out-dir", type=Path, default=None,
        help="Directory for the exported files (default: next to the input).",
    )
    parser.add_argument(
        "--format", choices=("srt", "txt", "both"), default="both",
        help="Which files to write.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser


def main(argv: list[str] | None = None, transcriber=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for name in ("openai", "httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)

    src: Path = args.input
    if not src.is_file():
        print(f"error: {src} is not a file", file=sys.stderr)
        return 1

    media_type, _ = mimetypes.guess_type(src.name)

    try:
        segments = run_pipeline(
            src.read_bytes(), src.name, media_type, transcriber=transcriber,
        )
    except (DualSubError, RuntimeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    out_dir: Path = args.out_dir or src.parent
    out_dir.mkdir(parents=True, exist_ok=True)

    written: list[Path] = []
    if args.format in ("srt", "both"):
        path = out_dir / export_filename(src.name, SRT_SUFFIX)
        path.write_text(generate_srt(segments), encoding="utf-8")
        written.append(path)
    if args.format in ("txt", "both"):
        path = out_dir / export_filename(src.name, TRANSCRIPT_SUFFIX)
        path.write_text(generate_transcript(segments), encoding="utf-8")
        written.append(path)

    for path in written:
        logger.info("Wrote %s", path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
