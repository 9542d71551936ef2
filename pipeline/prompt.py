"""
Step 3: Build the categorization prompt.
Editorial template + one labeled block per article, separated by ---.
"""

from pathlib import Path

from errors import ConfigError
from models import StepReport

BLOCK_SEPARATOR = "---"

ARTICLE_BLOCK = """
ID: {id}
Source: {source}
Title: {title}
Description: {description}
"""


def load_template(path):
    p = Path(path)
    if not p.exists():
        raise ConfigError("Prompt template not found: {}".format(path))
    return p.read_text(encoding="utf-8")


def format_article(article):
    return ARTICLE_BLOCK.format(
        id=article.id, source=article.source,
        title=article.title, description=article.description)


def build_prompt(template, articles):
    return template + BLOCK_SEPARATOR.join(format_article(a) for a in articles)


def run(articles, template_path):
    """Returns (prompt, report)."""
    print("\n>>> PROMPT...")
    report = StepReport("prompt", items_in=len(articles))
    template = load_template(template_path)
    prompt = build_prompt(template, articles)
    report.items_out = 1
    report.notes.append("{} chars".format(len(prompt)))
    print("    {} articles, {} chars".format(len(articles), len(prompt)))
    return prompt, report
