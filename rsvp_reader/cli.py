"""Command-line interface for the RSVP reader.

WHY: The parsing pipeline is useful outside an interactive front end:
inspect how a pasted transcript is split into speaker turns, export the
cleaned text or the frame stream, or speed-read a file right in the
terminal.

HOW: Uses argparse. The input (file path, URL, or stdin) is loaded into
a ReaderSession; then one of three actions runs:
  --summary (default)  paragraph/token/speaker counts on stdout
  --formats KEYS       formatter output to stdout or --output-dir
  --play               frames drawn in place on the terminal, driven by
                       the session's asyncio scheduler
Status messages go to stderr.

RULES:
- Positional argument: file path or http(s) URL; omitted or "-" reads stdin
- --wpm defaults to RSVP_DEFAULT_WPM; --auto-continue/--no-auto-continue
  defaults to RSVP_AUTO_CONTINUE
- --formats: comma-separated formatter keys; unknown keys exit 1
- Output naming: {stem}{suffix}, numeric suffix for conflicts (-frames-2.json)
- Source and configuration errors print "Error: …" and exit 1
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rsvp_reader.config import load_auto_continue, load_log_level, load_wpm
from rsvp_reader.core.normalizer import parse_url_only_input
from rsvp_reader.formatters import FORMATTERS
from rsvp_reader.formatters.base import FormatterOutput
from rsvp_reader.playback.scheduler import PlaybackScheduler
from rsvp_reader.session import ReaderSession
from rsvp_reader.sources.errors import SourceError

logger = logging.getLogger(__name__)


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Return {stem}{suffix} in output_dir, numbered on conflict.

    e.g. "talk-frames.json", then "talk-frames-2.json".
    """
    base_path = output_dir / f"{stem}{suffix}"
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx > 0:
        suffix_name, suffix_ext = suffix[:dot_idx], suffix[dot_idx:]
    else:
        suffix_name, suffix_ext = suffix, ""

    counter = 2
    while True:
        candidate = output_dir / f"{stem}{suffix_name}-{counter}{suffix_ext}"
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(output: FormatterOutput, stem: str, output_dir: Path) -> Path:
    path = _resolve_output_path(stem, output.suffix, output_dir)
    if isinstance(output.content, bytes):
        path.write_bytes(output.content)
    else:
        path.write_text(output.content, encoding="utf-8")
    return path


def _output_stem(source: Optional[str]) -> str:
    if not source or source == "-":
        return "stdin"
    if parse_url_only_input(source):
        return "page"
    return Path(source).stem


def _parse_format_keys(formats: str) -> List[str]:
    keys = [f.strip() for f in formats.split(",") if f.strip()]
    for key in keys:
        if key not in FORMATTERS:
            available = ", ".join(sorted(FORMATTERS.keys()))
            raise ValueError(f"Unknown format '{key}'. Available formats: {available}")
    return keys


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


async def _load(session: ReaderSession, source: Optional[str]) -> None:
    if source is None or source == "-":
        _status("Reading stdin...")
        session.load_text(sys.stdin.read(), label="stdin")
    elif parse_url_only_input(source):
        _status(f"Fetching {source}...")
        await session.submit(source)
    else:
        session.load_file(source)


def _print_summary(session: ReaderSession) -> None:
    doc = session.document
    print(f"Paragraphs: {len(doc.paragraphs)}")
    print(f"Tokens: {doc.total_tokens}")
    print(f"Transcript: {'yes' if doc.is_transcript else 'no'}")
    speakers = doc.directory.canonical_names()
    print(f"Speakers: {', '.join(speakers) if speakers else 'none'}")
    minutes = doc.total_tokens / session.scheduler.words_per_minute if session.scheduler.words_per_minute > 0 else 0
    print(f"Reading time at {session.scheduler.words_per_minute} wpm: {minutes:.1f} min")


def _export(session: ReaderSession, keys: List[str], stem: str, output_dir: Optional[Path]) -> None:
    for key in keys:
        formatter = FORMATTERS[key]()
        _status(f"Running {formatter.name} formatter...")
        for output in formatter.format(session.document):
            if output_dir is None:
                content = output.content
                sys.stdout.write(content.decode("utf-8") if isinstance(content, bytes) else content)
            else:
                saved = _save_output(output, stem, output_dir)
                _status(f"  Saved: {saved.name}")


def _render(scheduler: PlaybackScheduler, session: ReaderSession) -> None:
    view = session.view()
    line = f"{view.pivot.left}[{view.pivot.pivot}]{view.pivot.right}"
    counter = f"{view.progress.current}/{view.progress.total_tokens}"
    sys.stdout.write(f"\r\x1b[2K{line:>30}  {counter}")
    sys.stdout.flush()


async def _play(session: ReaderSession, paragraph_pause_s: float) -> None:
    stopped = asyncio.Event()

    def on_change(scheduler: PlaybackScheduler) -> None:
        _render(scheduler, session)
        if not scheduler.is_playing:
            stopped.set()

    session.add_listener(on_change)
    last = session.document.last_index
    while True:
        stopped.clear()
        session.play()
        if not session.scheduler.is_playing:
            break
        await stopped.wait()
        if session.scheduler.current_index >= last:
            break
        await asyncio.sleep(paragraph_pause_s)
    sys.stdout.write("\n")


async def _run(args: argparse.Namespace) -> None:
    keys = _parse_format_keys(args.formats) if args.formats else []

    output_dir: Optional[Path] = None
    if args.output_dir:
        output_dir = Path(args.output_dir).resolve()
        if not output_dir.is_dir():
            raise ValueError(f"Output directory does not exist: {output_dir}")

    wpm = args.wpm if args.wpm is not None else load_wpm()
    if wpm <= 0:
        raise ValueError(f"--wpm must be positive, got {wpm}")
    auto_continue = args.auto_continue if args.auto_continue is not None else load_auto_continue()

    session = ReaderSession(words_per_minute=wpm, auto_continue=auto_continue)
    await _load(session, args.input)

    if not session.has_content:
        _status("No readable text found.")
        return

    if keys:
        _export(session, keys, _output_stem(args.input), output_dir)
    if args.play:
        await _play(session, args.paragraph_pause)
    if args.summary or (not keys and not args.play):
        _print_summary(session)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="rsvp_reader",
        description="Parse pasted text or speaker transcripts into RSVP reading frames.",
    )

    parser.add_argument(
        "input",
        nargs="?",
        default=None,
        help="Text/PDF/HTML file or http(s) URL. Reads stdin when omitted or '-'.",
    )

    parser.add_argument(
        "--wpm",
        type=int,
        default=None,
        help="Reading speed in words per minute (default: RSVP_DEFAULT_WPM or 350).",
    )

    parser.add_argument(
        "--auto-continue",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Keep playing across paragraph ends (default: RSVP_AUTO_CONTINUE or true).",
    )

    parser.add_argument(
        "--paragraph-pause",
        type=float,
        default=1.0,
        help="Seconds to wait at a paragraph end when --no-auto-continue is set "
             "(default: %(default)s).",
    )

    parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of export formats. "
             f"Available: {', '.join(sorted(FORMATTERS.keys()))}.",
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Save exports to this directory instead of printing them.",
    )

    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print paragraph, token and speaker counts (the default action).",
    )

    parser.add_argument(
        "--play",
        action="store_true",
        help="Play the frames in the terminal.",
    )

    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the HTTP API server instead (see rsvp_reader.server.app).",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=load_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.serve:
        from rsvp_reader.server.app import main as serve_main
        serve_main()
        return

    try:
        asyncio.run(_run(args))
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except SourceError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
