"""Tests for pipeline.normalize."""

import hashlib

from conftest import make_item
from pipeline.normalize import build_lookup, clean_text, make_article_id, normalize, run


class TestMakeArticleId:
    def test_matches_sha256_prefix(self):
        expected = hashlib.sha256(b"Foo-Bar-https://x/1").hexdigest()[:10]
        assert make_article_id("Foo", "Bar", "https://x/1") == expected

    def test_deterministic(self):
        assert make_article_id("a", "b", "c") == make_article_id("a", "b", "c")

    def test_any_field_change_changes_id(self):
        base = make_article_id("Foo", "Bar", "https://x/1")
        assert make_article_id("Foo.", "Bar", "https://x/1") != base
        assert make_article_id("Foo", "Bar.", "https://x/1") != base
        assert make_article_id("Foo", "Bar", "https://x/2") != base

    def test_is_ten_hex_chars(self):
        article_id = make_article_id("Ziņas", "Rīga", "https://x/ā")
        assert len(article_id) == 10
        assert all(c in "0123456789abcdef" for c in article_id)


class TestCleanText:
    def test_replaces_double_quotes_and_trims(self):
        assert clean_text('  Saeima "pieņem" budžetu \n') == "Saeima 'pieņem' budžetu"


class TestNormalize:
    def test_builds_article(self):
        [article] = normalize([make_item()], "LSM")
        assert article.id == make_article_id("Foo", "Bar", "https://x/1")
        assert article.title == "Foo"
        assert article.description == "Bar"
        assert article.url == "https://x/1"
        assert article.published_at == "2025-01-01T10:00:00Z"
        assert article.source == "LSM"

    def test_id_uses_raw_text_before_cleaning(self):
        [article] = normalize([make_item(title=' "Foo" ')], "LSM")
        assert article.id == make_article_id(' "Foo" ', "Bar", "https://x/1")
        assert article.title == "'Foo'"

    def test_drops_incomplete_items(self):
        items = [
            make_item(title=""),
            make_item(content=""),
            make_item(link=""),
            make_item(iso_date=""),
            make_item(title="Kept"),
        ]
        articles = normalize(items, "TVNET")
        assert [a.title for a in articles] == ["Kept"]

    def test_identical_items_share_id(self):
        a, b = normalize([make_item(), make_item()], "LSM")
        assert a.id == b.id


class TestBuildLookup:
    def test_later_duplicate_overwrites(self):
        first = normalize([make_item()], "LSM")[0]
        second = normalize([make_item()], "DELFI")[0]
        lookup = build_lookup([first, second])
        assert len(lookup) == 1
        assert lookup[first.id].source == "DELFI"


class TestRun:
    def test_flattens_in_feed_order_and_reports(self):
        feed_results = [
            ([make_item(title="A", link="https://x/a"), make_item(title="")], "LSM"),
            ([make_item(title="B", link="https://x/b")], "DELFI"),
        ]
        (articles, lookup), report = run(feed_results)
        assert [a.title for a in articles] == ["A", "B"]
        assert set(lookup) == {a.id for a in articles}
        assert all(lookup[a.id] is a for a in articles)
        assert report.items_in == 3
        assert report.items_out == 2
        assert "1 incomplete items dropped" in report.notes
