import pytest

from config import RunSettings
from models import RawFeedItem

TEMPLATE = "Group these articles.\n"


def make_item(title="Foo", content="Bar", link="https://x/1", iso_date="2025-01-01T10:00:00Z"):
    return RawFeedItem(title=title, content=content, link=link, iso_date=iso_date)


@pytest.fixture
def settings(tmp_path):
    template = tmp_path / "prompt.txt"
    template.write_text(TEMPLATE, encoding="utf-8")
    return RunSettings(
        api_key="test-key",
        output_path=str(tmp_path / "public" / "article-data.json"),
        prompt_path=str(template),
        max_retries=3,
        retry_delay=5,
    )


@pytest.fixture
def sleeps():
    """Recorded retry delays; pass `sleep=sleeps.append`."""
    return []
