#!/usr/bin/env python3
"""
Daily Briefing Runner
=====================
Orchestrates the pipeline: Fetch > Normalize > Prompt > Categorize >
Reconcile > Publish

Usage:
  python runner.py                            # Default feeds, write public/article-data.json
  python runner.py --feeds packs/lsm.json     # Specific feed pack
  python runner.py --dry-run --save-prompt prompt.txt  # Stop before the model call
"""

import argparse
import sys
import time
from datetime import datetime, timezone
from pathlib import Path

from config import RunSettings, get_active_feeds, load_env, load_feed_pack, LLM_CONFIG
from errors import BriefingError
from models import DailyBriefing
from pipeline import fetch, normalize, prompt, categorize, reconcile, publish


def utc_timestamp(now=None):
    """ISO-8601 UTC with milliseconds, e.g. 2025-01-01T10:00:00.000Z."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.") + \
        "{:03d}Z".format(now.microsecond // 1000)


def run_pipeline(settings, feeds, reports, notify=True, dry_run=False, save_prompt=None,
                 call=None, sleep=time.sleep, clock=None):
    """Run every step once. Returns the published DailyBriefing, or None on a dry run.
    Raises BriefingError subclasses on fatal failures; nothing is written in that case."""
    # Step 1: Fetch
    feed_results, fetch_report = fetch.run(feeds, timeout=settings.feed_timeout)
    reports.append(fetch_report)

    # Step 2: Normalize + lookup
    (articles, lookup), normalize_report = normalize.run(feed_results)
    reports.append(normalize_report)
    if not articles:
        print("    WARNING: no usable articles in any feed")

    # Step 3: Prompt
    full_prompt, prompt_report = prompt.run(articles, settings.prompt_path)
    reports.append(prompt_report)
    if save_prompt:
        Path(save_prompt).write_text(full_prompt, encoding="utf-8")
        print("    Prompt saved to {}".format(save_prompt))
    if dry_run:
        print("\nDry run: stopping before the model call")
        return None

    # Step 4: Categorize
    categories, categorize_report = categorize.run(full_prompt, settings, call=call, sleep=sleep)
    reports.append(categorize_report)
    last_updated_at = utc_timestamp(clock() if clock else None)

    # Step 5: Reconcile
    news_categories, reconcile_report = reconcile.run(categories, lookup)
    reports.append(reconcile_report)

    # Step 6: Publish
    briefing = DailyBriefing(last_updated_at=last_updated_at, news_categories=news_categories)
    _, publish_report = publish.run(briefing, settings, notify=notify)
    reports.append(publish_report)
    return briefing


def print_run_report(reports, run_time):
    print("\n" + "=" * 70)
    print("RUN REPORT")
    print("=" * 70)
    for r in reports:
        print("  " + r.summary())
    print("  Total runtime: {}s".format(run_time))
    print("=" * 70)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Daily news briefing")
    parser.add_argument("--feeds", help="Path to feed pack JSON", default=None)
    parser.add_argument("--output", help="Output JSON path", default=None)
    parser.add_argument("--prompt", help="Editorial prompt template path", default=None)
    parser.add_argument("--max-retries", type=int, default=None)
    parser.add_argument("--retry-delay", type=float, default=None)
    parser.add_argument("--no-revalidate", action="store_true",
                        help="Do not call the site's revalidation endpoint")
    parser.add_argument("--save-prompt", default=None, help="Write the assembled prompt here")
    parser.add_argument("--dry-run", action="store_true",
                        help="Fetch and build the prompt, skip the model call and publish")
    args = parser.parse_args(argv)
    if args.max_retries is not None and args.max_retries < 1:
        parser.error("--max-retries must be at least 1")
    if args.retry_delay is not None and args.retry_delay < 0:
        parser.error("--retry-delay must not be negative")
    return args


def main(argv=None):
    args = parse_args(argv)

    start_time = time.time()
    print("=" * 70)
    print("DAILY NEWS BRIEFING")
    print("=" * 70)

    reports = []
    try:
        load_env()
        settings = RunSettings.from_env()
        if args.output:
            settings.output_path = args.output
        if args.prompt:
            settings.prompt_path = args.prompt
        if args.max_retries is not None:
            settings.max_retries = args.max_retries
        if args.retry_delay is not None:
            settings.retry_delay = args.retry_delay

        pack = load_feed_pack(args.feeds)
        if pack:
            print("Feed pack: {}".format(pack.get("name", args.feeds)))
        feeds = get_active_feeds(pack)
        print("Model: {} {} | Feeds: {}".format(LLM_CONFIG["label"], settings.model, len(feeds)))

        run_pipeline(settings, feeds, reports,
                     notify=not args.no_revalidate,
                     dry_run=args.dry_run,
                     save_prompt=args.save_prompt)
    except BriefingError as e:
        print("\nERROR: {}".format(e))
        print_run_report(reports, int(time.time() - start_time))
        sys.exit(1)

    print_run_report(reports, int(time.time() - start_time))


if __name__ == "__main__":
    main()
