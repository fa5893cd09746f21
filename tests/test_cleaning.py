"""Tests for the junk filter and paragraph cleaning.

WHY: Scraped transcript pages carry menus, footers and garbled speaker
labels. Under-filtering pollutes the reading stream; over-filtering
drops speech. Both directions are checked here.
"""

from __future__ import annotations

import pytest

from rsvp_reader.core.cleaning import (
    clean_paragraph,
    collapse_whitespace,
    dedupe_speaker_label,
    dedupe_speaker_name,
    strip_boilerplate_tails,
)
from rsvp_reader.core.junk_filter import JUNK_RULES, classify, has_speaker_marker, is_junk


# ---------------------------------------------------------------------------
# Junk filter
# ---------------------------------------------------------------------------


class TestClassify:
    @pytest.mark.parametrize("text, rule", [
        ("Privacy Policy", "legal"),
        ("Subscribe to our blog for weekly updates", "subscription"),
        ("Help Center", "navigation"),
        ("Pricing", "navigation-single"),
        ("LinkedIn", "social"),
        ("AI Transcription", "marketing"),
        ("Thank you! Your submission has been received!", "form-feedback"),
        ("Jane Doe Interview Transcript | Rev", "page-title"),
        ("[inaudible 00:12]", "inaudible"),
        ("Tom &amp; Jerry", "html-entity"),
        ("View all", "view-all"),
        ("Keep reading", "keep-reading"),
    ])
    def test_catalog_rules(self, text, rule):
        assert classify(text) == rule

    def test_too_short(self):
        assert classify("ab") == "too-short"
        assert classify("   x ") == "too-short"

    def test_short_lowercase_fragment(self):
        assert classify("menu") == "fragment"

    def test_short_capitalised_or_punctuated_is_kept(self):
        assert classify("Hello") is None
        assert classify("yes.") is None

    def test_length_caps(self):
        long_view_all = "View all the ways this argument goes wrong in practice, one by one."
        assert len(long_view_all) >= 50
        assert classify(long_view_all) is None

    def test_speaker_marker_is_never_junk(self):
        assert classify("Jane Doe (01:23): Privacy Policy") is None
        assert classify("(01:23): ok") is None
        assert has_speaker_marker("Jane Doe (01:23): hi") is True

    def test_real_sentence(self):
        assert is_junk("The committee met on Tuesday to discuss the budget.") is False

    def test_rule_names_are_unique(self):
        names = [rule.name for rule in JUNK_RULES]
        assert len(names) == len(set(names))


# ---------------------------------------------------------------------------
# Speaker label deduplication
# ---------------------------------------------------------------------------


class TestDedupeSpeakerName:
    @pytest.mark.parametrize("raw, expected", [
        ("John John Smith Smith", "John Smith"),
        ("Jane Doe Jane Doe", "Jane Doe"),
        ("Jane Doe Jane Doe Jane Doe", "Jane Doe"),
        ("Jane jane Doe", "Jane Doe"),
        ("Jane Doe", "Jane Doe"),
        ("", ""),
    ])
    def test_collapse(self, raw, expected):
        assert dedupe_speaker_name(raw) == expected


class TestDedupeSpeakerLabel:
    def test_leading_label_with_timestamp(self):
        assert dedupe_speaker_label("John John Smith Smith (01:23): Hi") == "John Smith (01:23): Hi"

    def test_running_text_untouched(self):
        text = "I said that that was fine."
        assert dedupe_speaker_label(text) == text

    def test_label_beyond_four_words(self):
        assert dedupe_speaker_label("Jane Doe Jane Doe Jane Doe: Hi") == "Jane Doe: Hi"


# ---------------------------------------------------------------------------
# clean_paragraph
# ---------------------------------------------------------------------------


class TestCleanParagraph:
    def test_inaudible_and_orphan_timestamps_removed(self):
        raw = "Jane Doe (00:01): Hello [inaudible 00:02] world (00:03) again"
        assert clean_paragraph(raw) == "Jane Doe (00:01): Hello world again"

    def test_marker_timestamp_kept(self):
        assert clean_paragraph("Jane Doe (00:01): Hi") == "Jane Doe (00:01): Hi"

    def test_html_entities_decoded(self):
        assert clean_paragraph("Tom &amp; Jerry &#39;rock&#39;") == "Tom & Jerry 'rock'"

    def test_footer_tail_removed(self):
        raw = "Great talk, thanks. Subscribe to our blog and never miss a post. Copyright Disclaimer Under Title 17"
        assert clean_paragraph(raw) == "Great talk, thanks."

    def test_topics_tail_removed(self):
        assert clean_paragraph("That is all for today. Topics: No items found.") == "That is all for today."

    def test_trailing_topic_tags_removed(self):
        assert clean_paragraph("Thanks for listening. Topics: Politics Economy") == "Thanks for listening."

    def test_topics_in_speech_kept(self):
        text = "We covered many topics: economy and jobs"
        assert clean_paragraph(text) == text
        text = "The Topics: economy and jobs came up."
        assert clean_paragraph(text) == text

    def test_whitespace_collapsed(self):
        assert clean_paragraph("  a \n\n b\t c ") == "a b c"

    def test_empty(self):
        assert clean_paragraph("") == ""
        assert clean_paragraph(None) == ""

    def test_strip_tails_leaves_clean_text(self):
        text = "Nothing to remove here."
        assert strip_boilerplate_tails(text) == text

    def test_collapse_whitespace(self):
        assert collapse_whitespace(" x\n y ") == "x y"
