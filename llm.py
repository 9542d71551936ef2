"""
Gemini caller. The single model request of a run goes through here.
Retry policy lives in pipeline/categorize.py; this module only classifies
what went wrong with one request.
"""

import requests

from config import LLM_CONFIG, LLM_TIMEOUT
from errors import FailureKind, LLMError

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{}:generateContent"

_AUTH_STATUS_CODES = (401, 403)
_AUTH_REASONS = ("API_KEY_INVALID",)


def _error_reasons(resp):
    """Pull the `reason` fields out of a Google API error payload."""
    try:
        data = resp.json()
    except ValueError:
        return []
    error = data.get("error", {}) if isinstance(data, dict) else {}
    if not isinstance(error, dict):
        return []
    reasons = []
    for detail in error.get("details", []) or []:
        if isinstance(detail, dict) and detail.get("reason"):
            reasons.append(detail["reason"])
    return reasons


def classify_http_error(resp):
    """Map a failed Gemini response to a FailureKind."""
    if resp.status_code in _AUTH_STATUS_CODES:
        return FailureKind.AUTH
    if any(r in _AUTH_REASONS for r in _error_reasons(resp)):
        return FailureKind.AUTH
    return FailureKind.REQUEST


def _redact(text, api_key):
    """Strip the API key from text that ends up in error messages."""
    return text.replace(api_key, "***") if api_key else text


def call_gemini(model, prompt, api_key, max_tokens=65536, timeout=LLM_TIMEOUT):
    """Send one prompt, return the response text. Raises LLMError."""
    if not api_key:
        raise LLMError(FailureKind.AUTH, "{} is not set".format(LLM_CONFIG["env_key"]))

    url = GEMINI_URL.format(model)
    # key goes in a header so it never appears in the request URL
    headers = {"x-goog-api-key": api_key}
    payload = {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {"maxOutputTokens": max_tokens},
    }
    try:
        resp = requests.post(url, headers=headers, json=payload, timeout=timeout)
    except requests.exceptions.RequestException as e:
        raise LLMError(FailureKind.REQUEST, _redact(str(e), api_key)[:200]) from None

    if resp.status_code >= 400:
        kind = classify_http_error(resp)
        raise LLMError(kind, "HTTP {}: {}".format(resp.status_code, _redact(resp.text, api_key)[:200]))

    try:
        data = resp.json()
        candidate = data["candidates"][0]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise LLMError(FailureKind.REQUEST, "unexpected response shape: {}".format(e)) from e

    if candidate.get("finishReason", "") == "MAX_TOKENS":
        print("    WARNING: {} hit max tokens ({})".format(LLM_CONFIG["label"], max_tokens))

    parts = (candidate.get("content") or {}).get("parts") or []
    text = "\n".join(p["text"] for p in parts if isinstance(p, dict) and "text" in p)
    if not text.strip():
        raise LLMError(FailureKind.EMPTY, "response text is empty")
    return text


def make_caller(settings):
    """Bind model, key and timeout from RunSettings into a prompt -> text callable."""
    def _call(prompt):
        return call_gemini(settings.model, prompt, settings.api_key, timeout=settings.llm_timeout)
    return _call
