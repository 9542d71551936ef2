"""
Step 6: Write the briefing JSON and ask the site to revalidate its cache.
The write is fatal on failure; the revalidation call never is.
"""

import json
import os
from pathlib import Path

import requests

from config import USER_AGENT
from errors import PublishError
from models import StepReport

REVALIDATE_PATH = "/api/revalidate"
REVALIDATE_TIMEOUT = 15


def write_briefing(briefing, path):
    """Serialize and replace the file at `path` in one move."""
    target = Path(path)
    tmp = target.with_name(target.name + ".tmp")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text(json.dumps(briefing.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, target)
    except OSError as e:
        if tmp.exists():
            tmp.unlink()
        raise PublishError("could not write {}: {}".format(target, e)) from e
    return target


def revalidate(host, secret, timeout=REVALIDATE_TIMEOUT):
    """Best-effort cache invalidation. Returns True on HTTP 200."""
    if not host or not secret:
        print("    Revalidation not configured, skipping")
        return False
    url = host.rstrip("/") + REVALIDATE_PATH
    try:
        resp = requests.get(url, params={"secret": secret},
                            headers={"User-Agent": USER_AGENT}, timeout=timeout)
    except requests.exceptions.RequestException as e:
        print("    WARNING: revalidation request failed: {}".format(str(e)[:100]))
        return False
    if resp.status_code != 200:
        print("    WARNING: revalidation returned HTTP {}".format(resp.status_code))
        return False
    print("    Revalidated {}".format(url))
    return True


def run(briefing, settings, notify=True):
    """Returns (output_path, report)."""
    print("\n>>> PUBLISH...")
    report = StepReport("publish", items_in=len(briefing.news_categories))

    path = write_briefing(briefing, settings.output_path)
    report.items_out = 1
    print("    Briefing written to {}".format(path))

    if notify:
        if not revalidate(settings.revalidate_host, settings.revalidate_secret):
            report.notes.append("revalidation skipped or failed")
    else:
        report.notes.append("revalidation disabled")
    return path, report
