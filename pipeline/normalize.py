"""
Step 2: Normalize feed items and build the id -> article lookup.
Ids are content hashes, so an unchanged story keeps its id across runs.
"""

import hashlib

from models import NormalizedArticle, StepReport

ID_LENGTH = 10


def make_article_id(title, content, link):
    digest = hashlib.sha256("{}-{}-{}".format(title, content, link).encode("utf-8")).hexdigest()
    return digest[:ID_LENGTH]


def clean_text(text):
    return text.replace('"', "'").strip()


def normalize(items, source):
    """Drop incomplete items and convert the rest to NormalizedArticles."""
    articles = []
    for item in items:
        if not item.is_complete():
            continue
        articles.append(NormalizedArticle(
            id=make_article_id(item.title, item.content, item.link),
            title=clean_text(item.title),
            description=clean_text(item.content),
            url=item.link,
            published_at=item.iso_date,
            source=source,
        ))
    return articles


def build_lookup(articles):
    """Map id -> article. A repeated id replaces the earlier entry."""
    lookup = {}
    for article in articles:
        lookup[article.id] = article
    return lookup


def run(feed_results):
    """Normalize every feed's items. Returns ((articles, lookup), report)."""
    print("\n>>> NORMALIZE...")
    total_in = sum(len(items) for items, _ in feed_results)
    report = StepReport("normalize", items_in=total_in)

    articles = []
    for items, source in feed_results:
        articles.extend(normalize(items, source))
    lookup = build_lookup(articles)

    dropped = total_in - len(articles)
    if dropped:
        report.notes.append("{} incomplete items dropped".format(dropped))
    duplicates = len(articles) - len(lookup)
    if duplicates:
        report.notes.append("{} duplicate ids collapsed".format(duplicates))

    report.items_out = len(lookup)
    print("    {} articles, {} unique ids".format(len(articles), len(lookup)))
    return (articles, lookup), report
