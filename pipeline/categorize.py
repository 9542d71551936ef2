"""
Step 4: Ask the model to group articles into categories.

Bounded retry: empty text, unparseable/misshapen JSON and request errors are
retried with a fixed delay, resending the same prompt. Credential errors stop
immediately. Running out of attempts is fatal for the run.
"""

import json
import re
import time

import llm as llm_caller
from errors import CategorizationFailed, FailureKind, LLMError
from models import ModelCategory, ModelHeadline, StepReport

_FENCE_START = re.compile(r"^```(?:json)?\s*")
_FENCE_END = re.compile(r"\s*```$")


def strip_code_fence(text):
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_START.sub("", cleaned)
        cleaned = _FENCE_END.sub("", cleaned)
    return cleaned.strip()


def _malformed(message):
    return LLMError(FailureKind.MALFORMED, message)


def _parse_headline(raw, where):
    if not isinstance(raw, dict):
        raise _malformed("{} is not an object".format(where))
    headline = raw.get("headline")
    source_ids = raw.get("source_ids")
    if not isinstance(headline, str):
        raise _malformed("{}.headline is not a string".format(where))
    if not isinstance(source_ids, list) or not all(isinstance(s, str) for s in source_ids):
        raise _malformed("{}.source_ids is not a list of strings".format(where))
    return ModelHeadline(headline=headline, source_ids=list(source_ids))


def parse_categorization(text):
    """Parse model text into ModelCategory objects. Raises LLMError(MALFORMED)."""
    try:
        data = json.loads(strip_code_fence(text))
    except json.JSONDecodeError as e:
        raise _malformed("invalid JSON: {}".format(e)) from e

    if not isinstance(data, list):
        raise _malformed("top level is not a list")

    categories = []
    for i, raw in enumerate(data):
        where = "category[{}]".format(i)
        if not isinstance(raw, dict):
            raise _malformed("{} is not an object".format(where))
        name = raw.get("category_name")
        articles = raw.get("articles")
        if not isinstance(name, str):
            raise _malformed("{}.category_name is not a string".format(where))
        if not isinstance(articles, list):
            raise _malformed("{}.articles is not a list".format(where))
        categories.append(ModelCategory(
            category_name=name,
            articles=[_parse_headline(a, "{}.articles[{}]".format(where, j))
                      for j, a in enumerate(articles)]))
    return categories


def categorize(prompt, call, max_retries, retry_delay, sleep=time.sleep, report=None):
    """Run the retry loop around `call(prompt) -> text`. Returns [ModelCategory]."""
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")
    last_error = None
    for attempt in range(1, max_retries + 1):
        if report is not None:
            report.llm_calls += 1
        try:
            result = parse_categorization(call(prompt))
        except LLMError as e:
            last_error = e
            if report is not None:
                report.llm_failures += 1
        else:
            if report is not None:
                report.llm_successes += 1
            print("    Parsed {} categories (attempt {}/{})".format(len(result), attempt, max_retries))
            return result

        if last_error.kind is FailureKind.AUTH:
            print("    ERROR: credential failure, not retrying: {}".format(last_error.message[:100]))
            raise CategorizationFailed(last_error.kind, attempt, last_error)
        # EMPTY, MALFORMED and REQUEST are transient
        print("    X attempt {}/{} failed: {}".format(attempt, max_retries, str(last_error)[:100]))
        if attempt < max_retries:
            print("    ... retrying in {}s".format(retry_delay))
            sleep(retry_delay)

    raise CategorizationFailed(last_error.kind, max_retries, last_error)


def run(prompt, settings, call=None, sleep=time.sleep):
    """Categorize with the configured model. Returns (categories, report)."""
    print("\n>>> CATEGORIZE: {} (max {} attempts)...".format(settings.model, settings.max_retries))
    report = StepReport("categorize", items_in=1)
    call = call or llm_caller.make_caller(settings)
    categories = categorize(prompt, call, settings.max_retries, settings.retry_delay,
                            sleep=sleep, report=report)
    report.items_out = len(categories)
    return categories, report
