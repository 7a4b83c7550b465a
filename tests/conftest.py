"""Shared fixtures and test utilities for applecast tests.

This module contains:
- Test constants
- Helper functions for building episode pages
- A fake transport standing in for the network
- Network isolation (socket connections fail in every test)
"""

import json
import socket
from unittest.mock import patch

import pytest

from applecast import config
from applecast.downloader import HttpResponse

# Test constants
TEST_EPISODE_URL = "https://podcasts.apple.com/us/podcast/id840986946?i=1000631244436"
TEST_TRANSCRIPT_URL = "https://example.com/transcript.ttml"
TEST_EPISODE_TITLE = "Test Episode Title"
TEST_DESCRIPTION = "Test episode description"
TEST_SHOW_TITLE = "Test Podcast Show"
TEST_PUBLISH_DATE = "2023-01-15"
TEST_TRANSCRIPT_BODY = b'<?xml version="1.0" encoding="UTF-8"?><tt><body><p>Hello</p></body></tt>'

TEST_SCHEMA = {
    "name": TEST_EPISODE_TITLE,
    "description": TEST_DESCRIPTION,
    "datePublished": TEST_PUBLISH_DATE,
    "partOfSeries": {"name": TEST_SHOW_TITLE},
}

TEST_SERVER_DATA = [
    {
        "data": {
            "shelves": [
                {
                    "items": [
                        {
                            "contextAction": {
                                "episodeOffer": {"closedCaptions": {"url": TEST_TRANSCRIPT_URL}}
                            }
                        }
                    ]
                }
            ]
        }
    }
]


def build_schema_script(schema):
    """Return an episode schema script tag; ``schema`` may be a dict or raw text."""
    body = schema if isinstance(schema, str) else json.dumps(schema, indent=2)
    return f'<script id="schema:episode" type="application/ld+json">\n{body}\n</script>'


def build_server_data_script(payload):
    """Return a serialized-server-data script tag; ``payload`` may be JSON-able or raw text."""
    body = payload if isinstance(payload, str) else json.dumps(payload)
    return f'<script type="application/json" id="serialized-server-data">{body}</script>'


def build_meta_tag(content=None, **attributes):
    """Return a ``<meta>`` tag with the given attributes (``itemprop=...`` etc.)."""
    parts = [f'{name}="{value}"' for name, value in attributes.items()]
    if content is not None:
        parts.append(f'content="{content}"')
    return "<meta " + " ".join(parts) + ">"


def build_episode_html(schema=None, meta_tags=(), server_data=None):
    """Assemble an episode page from optional schema, meta tags and server data."""
    head = list(meta_tags)
    if schema is not None:
        head.append(build_schema_script(schema))
    body = build_server_data_script(server_data) if server_data is not None else ""
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n"
        + "\n".join(head)
        + "\n</head>\n<body>\n"
        + body
        + "\n</body>\n</html>\n"
    )


def create_html_response(html, url=TEST_EPISODE_URL, status_code=200):
    """Create an HttpResponse carrying an HTML page."""
    return HttpResponse(
        url=url, status_code=status_code, content=html.encode("utf-8"), encoding="utf-8"
    )


def create_transcript_response(
    body=TEST_TRANSCRIPT_BODY, url=TEST_TRANSCRIPT_URL, status_code=200
):
    """Create an HttpResponse carrying transcript bytes."""
    return HttpResponse(url=url, status_code=status_code, content=body)


def create_test_config(**overrides):
    """Create a Config with test defaults.

    Args:
        **overrides: Fields to override from defaults
    """
    defaults = {
        "url": TEST_EPISODE_URL,
        "output_dir": "output",
        "log_level": "DEBUG",
    }
    defaults.update(overrides)
    return config.Config.model_validate(defaults)


class FakeTransport:
    """In-memory transport mapping URLs to responses or exceptions.

    Unknown URLs answer with a 404 response.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.requested = []
        self.closed = False

    def fetch(self, url, *, description="Downloading"):
        self.requested.append(url)
        outcome = self.responses.get(url)
        if outcome is None:
            return HttpResponse(url=url, status_code=404, content=b"Not Found")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self):
        self.closed = True


class NetworkCallDetectedError(Exception):
    """Raised when a test attempts to open a network connection."""

    def __init__(self, call_type, address=None):
        self.call_type = call_type
        self.address = address
        super().__init__(
            f"Network call detected in test: socket.{call_type}({address!r})\n"
            f"Tests must not make network calls. Use FakeTransport or mocks instead."
        )


def _blocked_connect(self, address):
    raise NetworkCallDetectedError("connect", address)


def _blocked_create_connection(address, *args, **kwargs):
    raise NetworkCallDetectedError("create_connection", address)


@pytest.fixture(autouse=True)
def block_network_calls():
    """Fail any test that tries to open a socket connection."""
    with patch.object(socket.socket, "connect", _blocked_connect), patch.object(
        socket, "create_connection", _blocked_create_connection
    ):
        yield
