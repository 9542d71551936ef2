"""
Configuration: feeds, per-source quirks, LLM model, run settings.
A JSON feed pack passed to the runner can override which feeds are active.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from errors import ConfigError


ROOT = Path(__file__).resolve().parent

# (label, url) in the order articles are presented to the model
FEEDS = [
    ("LSM", "https://www.lsm.lv/rss/"),
    ("TVNET", "https://www.tvnet.lv/rss"),
    ("DELFI", "https://www.delfi.lv/rss/index.xml"),
    ("APOLLO", "https://www.apollo.lv/rss"),
    ("JAUNS", "https://jauns.lv/rss"),
]

# Minutes added to a source's published time before display.
# LSM publishes pubDate one hour behind the real time.
SOURCE_TIME_OFFSETS = {
    "LSM": 60,
}

DISPLAY_TIMEZONE = "Europe/Riga"

# lv-LV short month names as published on the site (January is "jan.")
MONTH_ABBREVIATIONS = {
    1: "jan.", 2: "febr.", 3: "marts", 4: "apr.", 5: "maijs", 6: "jūn.",
    7: "jūl.", 8: "aug.", 9: "sept.", 10: "okt.", 11: "nov.", 12: "dec.",
}

LLM_CONFIG = {
    "provider": "google", "model": "gemini-2.5-flash",
    "env_key": "GEMINI_API_KEY", "model_env_key": "GEMINI_MODEL",
    "label": "Gemini",
}

USER_AGENT = "ZinasBriefing/1.0"
FEED_TIMEOUT = 20
LLM_TIMEOUT = 300

DEFAULT_OUTPUT_PATH = "public/article-data.json"
DEFAULT_PROMPT_PATH = str(ROOT / "prompts" / "news_editor.txt")
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 5.0


def load_env():
    """Load .env.local then .env. Variables already set are not overridden."""
    for name in (".env.local", ".env"):
        path = Path(name)
        if path.exists():
            load_dotenv(path, override=False)


def _env_int(name, default):
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise ConfigError("{} must be an integer, got {!r}".format(name, value)) from None
    if parsed < 1:
        raise ConfigError("{} must be at least 1".format(name))
    return parsed


def _env_float(name, default):
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        raise ConfigError("{} must be a number, got {!r}".format(name, value)) from None
    if parsed < 0:
        raise ConfigError("{} must not be negative".format(name))
    return parsed


@dataclass
class RunSettings:
    """Everything one run needs that can differ between environments."""
    api_key: str = ""
    model: str = LLM_CONFIG["model"]
    output_path: str = DEFAULT_OUTPUT_PATH
    prompt_path: str = DEFAULT_PROMPT_PATH
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    revalidate_host: str = ""
    revalidate_secret: str = ""
    feed_timeout: int = FEED_TIMEOUT
    llm_timeout: int = LLM_TIMEOUT

    @classmethod
    def from_env(cls):
        return cls(
            api_key=os.environ.get(LLM_CONFIG["env_key"], ""),
            model=os.environ.get(LLM_CONFIG["model_env_key"]) or LLM_CONFIG["model"],
            output_path=os.environ.get("BRIEFING_OUTPUT_PATH") or DEFAULT_OUTPUT_PATH,
            prompt_path=os.environ.get("BRIEFING_PROMPT_PATH") or DEFAULT_PROMPT_PATH,
            max_retries=_env_int("LLM_MAX_RETRIES", DEFAULT_MAX_RETRIES),
            retry_delay=_env_float("LLM_RETRY_DELAY", DEFAULT_RETRY_DELAY),
            revalidate_host=os.environ.get("REVALIDATE_HOST", "").rstrip("/"),
            revalidate_secret=os.environ.get("MY_REVALIDATE_SECRET", ""),
        )


def load_feed_pack(path):
    """Load a JSON feed pack that overrides the default feeds."""
    if not path:
        return None
    p = Path(path)
    if not p.exists():
        raise ConfigError("Feed pack not found: {}".format(path))
    try:
        with open(p, encoding="utf-8") as f:
            pack = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError("Feed pack {} is not valid JSON: {}".format(path, e)) from e
    if not isinstance(pack, dict):
        raise ConfigError("Feed pack {} must be a JSON object, got {}".format(path, type(pack).__name__))
    return pack


def get_active_feeds(pack=None):
    """Return (label, url) pairs, optionally replaced or filtered by a feed pack."""
    if not pack:
        return list(FEEDS)
    if "feeds" in pack:
        feeds = []
        for entry in pack["feeds"]:
            if not isinstance(entry, (list, tuple)) or len(entry) != 2:
                raise ConfigError("Feed pack entries must be [label, url] pairs: {!r}".format(entry))
            feeds.append((str(entry[0]), str(entry[1])))
        return feeds
    if "sources" in pack and pack["sources"] != "all":
        allowed = set(pack["sources"])
        return [f for f in FEEDS if f[0] in allowed]
    return list(FEEDS)
