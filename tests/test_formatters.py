"""Unit tests for all formatter modules.

WHY: Exports are read by other programs. A frame stream that skips or
repeats tokens, or plain text that loses speaker attribution, breaks
every consumer downstream.

HOW: Tests run each formatter against the sample transcript and prose
documents from conftest.py:
  - Plain text: speaker header lines, paragraph spacing
  - Frames JSON: schema validation, merged-name frames, paragraph ranges

RULES:
- Schema validation uses the frames_schema.json shipped in the package
"""

from __future__ import annotations

import json

import jsonschema
import pytest

from rsvp_reader.core.ir import EMPTY_DOCUMENT
from rsvp_reader.core.pipeline import build_document
from rsvp_reader.formatters import FORMATTERS
from rsvp_reader.formatters.base import BaseFormatter
from rsvp_reader.formatters.frames_json import FORMAT_VERSION, FramesJsonFormatter, get_schema
from rsvp_reader.formatters.plain_text import PlainTextFormatter


class TestRegistry:
    def test_all_formatters_registered(self):
        assert set(FORMATTERS) == {"plain_text", "frames_json"}
        for formatter_cls in FORMATTERS.values():
            assert issubclass(formatter_cls, BaseFormatter)
            assert formatter_cls().name


class TestPlainTextFormatter:
    def test_speaker_paragraphs(self, transcript_doc):
        [output] = PlainTextFormatter().format(transcript_doc)
        assert output.suffix == "-reader.txt"
        assert output.media_type == "text/plain"
        assert output.content == (
            "Jane Doe:\nWelcome to the show. Today we talk about reading.\n\n"
            "John Smith:\nThanks for having me, Jane.\n\n"
            "Jane Doe:\nSo, John Smith, tell us how it works.\n"
        )

    def test_title_stays_with_name(self):
        doc = build_document("Dr. Jane Doe (00:01): Results are in.")
        [output] = PlainTextFormatter().format(doc)
        assert output.content == "Dr. Jane Doe:\nResults are in.\n"

    def test_prose(self, prose_doc):
        [output] = PlainTextFormatter().format(prose_doc)
        assert output.content == (
            "Speed reading shows one word at a time.\n\n"
            "Your eyes stay still while the words change.\n"
        )

    def test_empty_document(self):
        [output] = PlainTextFormatter().format(EMPTY_DOCUMENT)
        assert output.content == ""


class TestFramesJsonFormatter:
    def _payload(self, doc):
        [output] = FramesJsonFormatter().format(doc)
        assert output.suffix == "-frames.json"
        assert output.media_type == "application/json"
        return json.loads(output.content)

    def test_validates_against_schema(self, transcript_doc):
        jsonschema.validate(instance=self._payload(transcript_doc), schema=get_schema())

    def test_document_metadata(self, transcript_doc):
        payload = self._payload(transcript_doc)
        assert payload["version"] == FORMAT_VERSION
        assert payload["document"]["is_transcript"] is True
        assert payload["document"]["total_tokens"] == 25
        assert payload["document"]["speakers"] == ["Jane Doe", "John Smith"]
        assert payload["document"]["directory"]["Doe"] == "Jane Doe"

    def test_paragraph_ranges(self, transcript_doc):
        paragraphs = self._payload(transcript_doc)["paragraphs"]
        assert [(p["start"], p["end"]) for p in paragraphs] == [(0, 9), (10, 15), (16, 24)]
        assert paragraphs[1]["speaker"] == "John Smith"

    def test_merged_name_is_one_frame(self, transcript_doc):
        frames = self._payload(transcript_doc)["frames"]
        assert len(frames) == 24
        merged = [f for f in frames if f["advance"] == 2]
        assert merged == [{
            "index": 18,
            "text": "John Smith,",
            "advance": 2,
            "paragraph": 2,
            "pivot": {"left": "John ", "pivot": "S", "right": "mith,"},
        }]
        assert 19 not in [f["index"] for f in frames]

    def test_frames_cover_every_token(self, transcript_doc):
        frames = self._payload(transcript_doc)["frames"]
        assert sum(f["advance"] for f in frames) == transcript_doc.total_tokens

    def test_empty_document(self):
        payload = self._payload(EMPTY_DOCUMENT)
        assert payload["frames"] == []
        assert payload["paragraphs"] == []

    def test_invalid_payload_rejected_by_schema(self, transcript_doc):
        payload = self._payload(transcript_doc)
        payload["frames"][0]["advance"] = 3
        with pytest.raises(jsonschema.ValidationError):
            jsonschema.validate(instance=payload, schema=get_schema())
