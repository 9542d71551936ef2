"""
Data models for the pipeline. Clean interfaces between steps.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass
class RawFeedItem:
    """A single entry as read from an RSS/Atom feed."""
    title: str = ""
    content: str = ""
    link: str = ""
    iso_date: str = ""  # e.g. 2025-01-01T10:00:00.000Z

    def is_complete(self):
        return bool(self.content and self.link and self.iso_date and self.title)


@dataclass(frozen=True)
class NormalizedArticle:
    """A cleaned feed item with a content-derived id."""
    id: str
    title: str
    description: str
    url: str
    published_at: str
    source: str


# === Model output (untrusted, shape-checked on parse) ===

@dataclass
class ModelHeadline:
    headline: str
    source_ids: List[str] = field(default_factory=list)


@dataclass
class ModelCategory:
    category_name: str
    articles: List[ModelHeadline] = field(default_factory=list)


# === Published document ===

@dataclass
class Source:
    name: str
    title: str
    url: str
    published_at: str

    def to_dict(self):
        return {"name": self.name, "title": self.title,
                "url": self.url, "published_at": self.published_at}


@dataclass
class Article:
    headline: str
    sources: List[Source] = field(default_factory=list)

    def to_dict(self):
        return {"headline": self.headline,
                "sources": [s.to_dict() for s in self.sources]}


@dataclass
class Category:
    category_name: str
    articles: List[Article] = field(default_factory=list)

    def to_dict(self):
        return {"category_name": self.category_name,
                "articles": [a.to_dict() for a in self.articles]}


@dataclass
class DailyBriefing:
    """The single JSON artifact the site reads."""
    last_updated_at: str
    news_categories: List[Category] = field(default_factory=list)

    def to_dict(self):
        """Convert to dict for JSON serialization. Keys match the site's types."""
        return {
            "lastUpdatedAt": self.last_updated_at,
            "newsCategories": [c.to_dict() for c in self.news_categories],
        }


@dataclass
class StepReport:
    """Observability for each pipeline step."""
    step_name: str
    items_in: int = 0
    items_out: int = 0
    llm_calls: int = 0
    llm_successes: int = 0
    llm_failures: int = 0
    notes: List[str] = field(default_factory=list)

    def summary(self):
        success_rate = ""
        if self.llm_calls > 0:
            pct = int(100 * self.llm_successes / self.llm_calls)
            success_rate = " ({}% success)".format(pct)
        return "{}: {} in -> {} out | {} LLM calls{}{}".format(
            self.step_name, self.items_in, self.items_out,
            self.llm_calls, success_rate,
            " | " + "; ".join(self.notes) if self.notes else "")
