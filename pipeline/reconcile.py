"""
Step 5: Expand the model's source ids back into full source records.
Unknown ids are skipped with a warning; the rest of the article is kept.
Category and article order is the model's order.
"""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from config import DISPLAY_TIMEZONE, MONTH_ABBREVIATIONS, SOURCE_TIME_OFFSETS
from models import Article, Category, Source, StepReport


def parse_iso(value):
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_published_at(iso_value, source, offsets=None, tz_name=DISPLAY_TIMEZONE):
    """e.g. '13:00, 1. jan. 2025' in the display timezone."""
    offsets = SOURCE_TIME_OFFSETS if offsets is None else offsets
    dt = parse_iso(iso_value) + timedelta(minutes=offsets.get(source, 0))
    local = dt.astimezone(ZoneInfo(tz_name))
    return "{:02d}:{:02d}, {}. {} {}".format(
        local.hour, local.minute, local.day, MONTH_ABBREVIATIONS[local.month], local.year)


def unique_ids(source_ids):
    """Drop repeats, keep first-occurrence order."""
    return list(dict.fromkeys(source_ids))


def reconcile(categories, lookup, report=None):
    """[ModelCategory] + lookup -> [Category]."""
    result = []
    for model_category in categories:
        category = Category(category_name=model_category.category_name)
        for model_article in model_category.articles:
            article = Article(headline=model_article.headline)
            for source_id in unique_ids(model_article.source_ids):
                original = lookup.get(source_id)
                if original is None:
                    print("    WARNING: no article for id {}, skipping source".format(source_id))
                    if report is not None:
                        report.notes.append("unknown id {}".format(source_id))
                    continue
                article.sources.append(Source(
                    name=original.source,
                    title=original.title,
                    url=original.url,
                    published_at=format_published_at(original.published_at, original.source),
                ))
            category.articles.append(article)
        result.append(category)
    return result


def run(categories, lookup):
    """Returns (categories, report)."""
    print("\n>>> RECONCILE...")
    report = StepReport("reconcile", items_in=sum(len(c.articles) for c in categories))
    result = reconcile(categories, lookup, report)
    report.items_out = sum(len(c.articles) for c in result)
    resolved = sum(len(a.sources) for c in result for a in c.articles)
    print("    {} categories, {} articles, {} sources".format(len(result), report.items_out, resolved))
    return result, report
