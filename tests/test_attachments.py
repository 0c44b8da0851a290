"""Tests for attachment filenames derived from media URLs."""

from __future__ import annotations

import pytest

from skyanki.attachments import absolute_url, url_to_filename


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://host/path/abc123.png", "abc123.png"),
        ("https://cdn-user77752.skyeng.ru/images/f0/4b/9c1a.jpeg", "9c1a.jpeg"),
        ("https://host?gender=female&text=deter", "deter.mp3"),
        ("https://d2fmfepycn0xw0.cloudfront.net?gender=male&accent=british&text=get+rid+of", "get+rid+of.mp3"),
        # the last "=" wins even when a path precedes the query
        ("https://host/a/b.mp3?x=1&text=run", "run.mp3"),
    ],
)
def test_known_shapes(url, expected):
    assert url_to_filename(url) == expected


class TestBoundaries:
    def test_query_without_equals_keeps_whole_url(self):
        assert url_to_filename("https://host/sound?abc") == "https://host/sound?abc.mp3"

    def test_trailing_question_mark(self):
        assert url_to_filename("https://host?") == "https://host?.mp3"

    def test_empty_last_value(self):
        assert url_to_filename("https://host?a=1&text=") == ".mp3"

    def test_no_slash(self):
        assert url_to_filename("picture.png") == "picture.png"

    def test_trailing_slash(self):
        assert url_to_filename("https://host/dir/") == ""


def test_absolute_url():
    assert absolute_url("//cdn.skyeng.ru/a.png") == "https://cdn.skyeng.ru/a.png"
    assert absolute_url("https://cdn.skyeng.ru/a.png") == "https://cdn.skyeng.ru/a.png"
