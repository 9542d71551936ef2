"""
Step 1: Fetch RSS feeds in parallel.
Any feed failure aborts the run; there is no per-feed fallback.
"""

import calendar
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import feedparser
import requests

from config import FEED_TIMEOUT, USER_AGENT
from errors import FeedError
from models import RawFeedItem, StepReport


def _iso_date(entry):
    """Render the entry's publish time as UTC ISO-8601 with milliseconds."""
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if not parsed:
        return ""
    dt = datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.000Z")


def _entry_content(entry):
    summary = entry.get("summary") or entry.get("description")
    if summary:
        return summary
    for block in entry.get("content") or []:
        value = block.get("value") if hasattr(block, "get") else None
        if value:
            return value
    return ""


def entry_to_item(entry):
    return RawFeedItem(
        title=entry.get("title", "") or "",
        content=_entry_content(entry),
        link=entry.get("link", "") or "",
        iso_date=_iso_date(entry),
    )


def fetch_single_feed(label, url, timeout=FEED_TIMEOUT):
    """Download and parse one feed. Returns (items, label)."""
    try:
        resp = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
        resp.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise FeedError(label, url, str(e)[:200]) from e

    feed = feedparser.parse(resp.content)
    if feed.bozo and not feed.entries:
        reason = getattr(feed, "bozo_exception", None) or "unparseable feed"
        raise FeedError(label, url, str(reason)[:200])

    return [entry_to_item(e) for e in feed.entries], label


def run(feeds, timeout=FEED_TIMEOUT, max_workers=8):
    """Fetch all feeds. Returns ([(items, label), ...] in feed order, report)."""
    print("\n>>> FETCH: {} feeds...".format(len(feeds)))
    report = StepReport("fetch", items_in=len(feeds))

    results = []
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(feeds) or 1))) as executor:
        futures = [executor.submit(fetch_single_feed, label, url, timeout) for label, url in feeds]
        for future in futures:
            items, label = future.result()
            print("    {}: {} items".format(label, len(items)))
            results.append((items, label))

    report.items_out = sum(len(items) for items, _ in results)
    print("    {} items total".format(report.items_out))
    return results, report
