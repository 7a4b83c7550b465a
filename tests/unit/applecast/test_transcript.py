#!/usr/bin/env python3
"""Tests for transcript URL discovery in serialized server data."""

import json
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

import pytest

from applecast import transcript

# Add tests directory to path for conftest import
tests_dir = Path(__file__).resolve().parents[2]
if str(tests_dir) not in sys.path:
    sys.path.insert(0, str(tests_dir))

from conftest import (  # noqa: E402
    build_episode_html,
    build_server_data_script,
    TEST_SCHEMA,
    TEST_SERVER_DATA,
    TEST_TRANSCRIPT_URL,
)

pytestmark = [pytest.mark.unit]


class TestExtractServerData(unittest.TestCase):
    """Tests for extract_server_data."""

    def test_returns_script_body(self):
        html = build_episode_html(server_data={"a": 1})
        self.assertEqual(transcript.extract_server_data(html), '{"a": 1}')

    def test_missing_script_returns_none(self):
        self.assertIsNone(transcript.extract_server_data(build_episode_html(schema=TEST_SCHEMA)))

    def test_payload_may_span_lines(self):
        payload = json.dumps({"closedCaptions": {"url": TEST_TRANSCRIPT_URL}}, indent=2)
        html = "<html>" + build_server_data_script(payload) + "</html>"
        self.assertEqual(transcript.extract_server_data(html), payload)

    def test_attribute_order_must_match(self):
        html = '<script id="serialized-server-data" type="application/json">{}</script>'
        self.assertIsNone(transcript.extract_server_data(html))


class TestFindClosedCaptionsUrl(unittest.TestCase):
    """Tests for the depth-first closedCaptions search."""

    def test_finds_nested_url(self):
        self.assertEqual(transcript.find_closed_captions_url(TEST_SERVER_DATA), TEST_TRANSCRIPT_URL)

    def test_first_match_in_document_order_wins(self):
        data = [
            {"offer": {"closedCaptions": {"url": "https://example.com/first.ttml"}}},
            {"offer": {"closedCaptions": {"url": "https://example.com/second.ttml"}}},
        ]
        self.assertEqual(
            transcript.find_closed_captions_url(data), "https://example.com/first.ttml"
        )

    def test_own_key_checked_before_children(self):
        data = {
            "child": {"closedCaptions": {"url": "https://example.com/child.ttml"}},
            "closedCaptions": {"url": "https://example.com/own.ttml"},
        }
        self.assertEqual(transcript.find_closed_captions_url(data), "https://example.com/own.ttml")

    def test_non_string_url_is_skipped(self):
        data = {
            "closedCaptions": {"url": 123},
            "nested": [{"closedCaptions": {"url": TEST_TRANSCRIPT_URL}}],
        }
        self.assertEqual(transcript.find_closed_captions_url(data), TEST_TRANSCRIPT_URL)

    def test_captions_without_url_are_searched_further(self):
        data = {"closedCaptions": {"inner": {"closedCaptions": {"url": TEST_TRANSCRIPT_URL}}}}
        self.assertEqual(transcript.find_closed_captions_url(data), TEST_TRANSCRIPT_URL)

    def test_no_match_returns_none(self):
        self.assertIsNone(transcript.find_closed_captions_url({"data": [1, "two", None]}))
        self.assertIsNone(transcript.find_closed_captions_url("closedCaptions"))


class TestFindTranscriptUrl(unittest.TestCase):
    """Tests for find_transcript_url."""

    def test_finds_url_in_episode_page(self):
        html = build_episode_html(schema=TEST_SCHEMA, server_data=TEST_SERVER_DATA)
        self.assertEqual(transcript.find_transcript_url(html), TEST_TRANSCRIPT_URL)

    def test_page_without_server_data(self):
        self.assertIsNone(transcript.find_transcript_url(build_episode_html(schema=TEST_SCHEMA)))

    def test_server_data_without_captions(self):
        html = build_episode_html(server_data=[{"data": {"shelves": []}}])
        self.assertIsNone(transcript.find_transcript_url(html))

    def test_malformed_server_data_returns_none(self):
        html = build_episode_html(server_data="{not valid json")
        self.assertIsNone(transcript.find_transcript_url(html))

    def test_deeply_nested_server_data_returns_none(self):
        html = build_episode_html(server_data="[" * 100000)
        self.assertIsNone(transcript.find_transcript_url(html))

    def test_search_recursion_limit_returns_none(self):
        html = build_episode_html(server_data=TEST_SERVER_DATA)
        with patch.object(transcript, "find_closed_captions_url", side_effect=RecursionError):
            self.assertIsNone(transcript.find_transcript_url(html))


if __name__ == "__main__":
    unittest.main()
