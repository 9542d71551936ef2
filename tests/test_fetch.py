"""Tests for pipeline.fetch."""

from unittest.mock import Mock

import pytest
import requests

from errors import FeedError
from pipeline import fetch

RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Test feed</title>
    <link>https://example.lv/</link>
    <description>Test</description>
    <item>
      <title>Saeima pieņem budžetu</title>
      <link>https://example.lv/1</link>
      <description>Deputāti nobalsoja par budžetu.</description>
      <pubDate>Wed, 01 Jan 2025 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Bez datuma</title>
      <link>https://example.lv/2</link>
      <description>Nav pubDate.</description>
    </item>
  </channel>
</rss>
""".encode("utf-8")


def _response(content=RSS, status=200):
    resp = Mock()
    resp.content = content
    resp.status_code = status
    if status >= 400:
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError("HTTP {}".format(status))
    return resp


class TestFetchSingleFeed:
    def test_parses_items(self, monkeypatch):
        get = Mock(return_value=_response())
        monkeypatch.setattr(fetch.requests, "get", get)

        items, label = fetch.fetch_single_feed("LSM", "https://example.lv/rss")

        assert label == "LSM"
        assert len(items) == 2
        first = items[0]
        assert first.title == "Saeima pieņem budžetu"
        assert first.link == "https://example.lv/1"
        assert first.content == "Deputāti nobalsoja par budžetu."
        assert first.iso_date == "2025-01-01T10:00:00.000Z"
        assert items[1].iso_date == ""
        assert get.call_args[0][0] == "https://example.lv/rss"

    def test_network_error_raises_feed_error(self, monkeypatch):
        monkeypatch.setattr(fetch.requests, "get",
                            Mock(side_effect=requests.exceptions.ConnectionError("down")))
        with pytest.raises(FeedError) as exc:
            fetch.fetch_single_feed("DELFI", "https://example.lv/rss")
        assert exc.value.label == "DELFI"

    def test_http_error_raises_feed_error(self, monkeypatch):
        monkeypatch.setattr(fetch.requests, "get", Mock(return_value=_response(status=503)))
        with pytest.raises(FeedError):
            fetch.fetch_single_feed("TVNET", "https://example.lv/rss")

    def test_unparseable_feed_raises_feed_error(self, monkeypatch):
        monkeypatch.setattr(fetch.requests, "get",
                            Mock(return_value=_response(content=b"this is not a feed <<<")))
        with pytest.raises(FeedError):
            fetch.fetch_single_feed("JAUNS", "https://example.lv/rss")


class TestEntryToItem:
    def test_falls_back_to_content_block(self):
        entry = {"title": "T", "link": "https://x/1", "content": [{"value": "Body"}]}
        assert fetch.entry_to_item(entry).content == "Body"

    def test_missing_fields_are_empty(self):
        item = fetch.entry_to_item({})
        assert (item.title, item.content, item.link, item.iso_date) == ("", "", "", "")


class TestRun:
    def test_keeps_feed_order(self, monkeypatch):
        def fake_fetch(label, url, timeout):
            return [url], label

        monkeypatch.setattr(fetch, "fetch_single_feed", fake_fetch)
        feeds = [("LSM", "u1"), ("TVNET", "u2"), ("DELFI", "u3")]
        results, report = fetch.run(feeds)
        assert [label for _, label in results] == ["LSM", "TVNET", "DELFI"]
        assert report.items_out == 3

    def test_one_failing_feed_aborts(self, monkeypatch):
        def fake_fetch(label, url, timeout):
            if label == "TVNET":
                raise FeedError(label, url, "boom")
            return [], label

        monkeypatch.setattr(fetch, "fetch_single_feed", fake_fetch)
        with pytest.raises(FeedError):
            fetch.run([("LSM", "u1"), ("TVNET", "u2")])
