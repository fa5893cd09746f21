"""Tests for the command-line interface and configuration loading.

WHY: The CLI is the quickest way to check how a pasted transcript is
parsed. Its exit codes and output naming are relied on by scripts, and
bad environment values must fail loudly rather than silently defaulting.

HOW: main() is called with explicit argv lists; stdout/stderr are
captured with capsys. Environment variables are set with monkeypatch.

RULES:
- Tests write only inside tmp_path
- --play runs at a very high wpm so the whole document plays in
  milliseconds on a real event loop
"""

from __future__ import annotations

import io
import logging

import pytest

from rsvp_reader.cli import _parse_format_keys, _resolve_output_path, build_parser, main
from rsvp_reader.config import (
    DEFAULT_PROXY_URLS,
    load_auto_continue,
    load_document_ttl,
    load_fetch_timeout,
    load_log_level,
    load_proxy_urls,
    load_wpm,
)

from tests.conftest import SAMPLE_TRANSCRIPT


@pytest.fixture
def transcript_file(tmp_path):
    path = tmp_path / "interview.txt"
    path.write_text(SAMPLE_TRANSCRIPT, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("RSVP_DEFAULT_WPM", "RSVP_AUTO_CONTINUE", "RSVP_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.input is None
        assert args.wpm is None
        assert args.auto_continue is None
        assert args.paragraph_pause == 1.0

    def test_auto_continue_flags(self):
        assert build_parser().parse_args(["--no-auto-continue"]).auto_continue is False
        assert build_parser().parse_args(["--auto-continue"]).auto_continue is True

    def test_parse_format_keys(self):
        assert _parse_format_keys("plain_text, frames_json") == ["plain_text", "frames_json"]
        with pytest.raises(ValueError, match="Unknown format 'srt'"):
            _parse_format_keys("srt")


class TestSummary:
    def test_file_summary(self, transcript_file, capsys):
        main([str(transcript_file)])
        out = capsys.readouterr().out
        assert "Paragraphs: 3" in out
        assert "Tokens: 25" in out
        assert "Transcript: yes" in out
        assert "Speakers: Jane Doe, John Smith" in out

    def test_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("One two three."))
        main(["-"])
        captured = capsys.readouterr()
        assert "Tokens: 3" in captured.out
        assert "Reading stdin" in captured.err

    def test_empty_input(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("   "))
        main([])
        assert "No readable text found." in capsys.readouterr().err


class TestExport:
    def test_export_to_stdout(self, transcript_file, capsys):
        main([str(transcript_file), "--formats", "plain_text"])
        out = capsys.readouterr().out
        assert out.startswith("Jane Doe:\nWelcome to the show.")
        assert "Paragraphs:" not in out

    def test_export_to_directory_with_numbering(self, transcript_file, tmp_path, capsys):
        out_dir = tmp_path / "out"
        out_dir.mkdir()
        main([str(transcript_file), "--formats", "frames_json", "--output-dir", str(out_dir)])
        main([str(transcript_file), "--formats", "frames_json", "--output-dir", str(out_dir)])
        names = sorted(p.name for p in out_dir.iterdir())
        assert names == ["interview-frames-2.json", "interview-frames.json"]

    def test_resolve_output_path(self, tmp_path):
        assert _resolve_output_path("talk", "-reader.txt", tmp_path).name == "talk-reader.txt"
        (tmp_path / "talk-reader.txt").write_text("x")
        assert _resolve_output_path("talk", "-reader.txt", tmp_path).name == "talk-reader-2.txt"


class TestErrors:
    def test_unknown_format_exits_1(self, transcript_file, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([str(transcript_file), "--formats", "docx"])
        assert exc_info.value.code == 1
        assert "Unknown format 'docx'" in capsys.readouterr().err

    def test_missing_output_dir(self, transcript_file, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main([str(transcript_file), "--formats", "plain_text", "--output-dir", str(tmp_path / "nope")])
        assert exc_info.value.code == 1

    def test_unsupported_file(self, tmp_path, capsys):
        path = tmp_path / "deck.pptx"
        path.write_bytes(b"PK")
        with pytest.raises(SystemExit) as exc_info:
            main([str(path)])
        assert exc_info.value.code == 1
        assert "Unsupported file type" in capsys.readouterr().err

    def test_bad_wpm(self, transcript_file):
        with pytest.raises(SystemExit) as exc_info:
            main([str(transcript_file), "--wpm", "0"])
        assert exc_info.value.code == 1

    def test_bad_env_wpm(self, transcript_file, monkeypatch):
        monkeypatch.setenv("RSVP_DEFAULT_WPM", "fast")
        with pytest.raises(SystemExit) as exc_info:
            main([str(transcript_file)])
        assert exc_info.value.code == 1


class TestPlay:
    def test_plays_whole_document(self, transcript_file, capsys):
        main([str(transcript_file), "--play", "--wpm", "60000"])
        out = capsys.readouterr().out
        assert "25/25" in out
        assert out.endswith("\n")

    def test_paragraph_pauses_resume(self, transcript_file, capsys):
        main([str(transcript_file), "--play", "--wpm", "60000", "--no-auto-continue", "--paragraph-pause", "0"])
        assert "25/25" in capsys.readouterr().out

    def test_serve_dispatch(self, monkeypatch):
        called = []
        monkeypatch.setattr("rsvp_reader.server.app.main", lambda: called.append(True))
        main(["--serve"])
        assert called == [True]


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class TestConfig:
    def test_defaults(self, monkeypatch):
        for name in ("RSVP_FETCH_TIMEOUT_S", "RSVP_PROXY_URLS", "RSVP_DOCUMENT_TTL_S"):
            monkeypatch.delenv(name, raising=False)
        assert load_wpm() == 350
        assert load_auto_continue() is True
        assert load_fetch_timeout() == 20.0
        assert load_proxy_urls() == DEFAULT_PROXY_URLS
        assert load_document_ttl() == 3600
        assert load_log_level() == logging.INFO

    @pytest.mark.parametrize("value, expected", [
        ("true", True), ("1", True), ("off", False), ("No", False),
    ])
    def test_auto_continue_values(self, monkeypatch, value, expected):
        monkeypatch.setenv("RSVP_AUTO_CONTINUE", value)
        assert load_auto_continue() is expected

    @pytest.mark.parametrize("name, value, loader", [
        ("RSVP_DEFAULT_WPM", "-5", load_wpm),
        ("RSVP_DEFAULT_WPM", "abc", load_wpm),
        ("RSVP_AUTO_CONTINUE", "maybe", load_auto_continue),
        ("RSVP_FETCH_TIMEOUT_S", "0", load_fetch_timeout),
        ("RSVP_DOCUMENT_TTL_S", "soon", load_document_ttl),
        ("RSVP_LOG_LEVEL", "LOUD", load_log_level),
        ("RSVP_PROXY_URLS", "https://proxy.test/", load_proxy_urls),
    ])
    def test_invalid_values_raise(self, monkeypatch, name, value, loader):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValueError, match=name):
            loader()

    def test_proxy_urls_override_and_disable(self, monkeypatch):
        monkeypatch.setenv("RSVP_PROXY_URLS", " https://a.test/?{url} , https://b.test/{url} ")
        assert load_proxy_urls() == ["https://a.test/?{url}", "https://b.test/{url}"]
        monkeypatch.setenv("RSVP_PROXY_URLS", "")
        assert load_proxy_urls() == []
